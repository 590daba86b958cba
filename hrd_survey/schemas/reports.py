# hrd_survey/schemas/reports.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel


# ---------- Survey analysis ----------

class QuestionStatsOut(BaseModel):
    question_id: UUID
    question_text: str
    question_type: str
    category: Optional[str] = None
    category_label: Optional[str] = None
    order_num: int
    is_required: bool
    response_count: int
    average: Optional[float] = None
    median: Optional[float] = None
    mode: Optional[int] = None
    std_deviation: Optional[float] = None
    distribution: Optional[Dict[int, int]] = None
    percentages: Optional[Dict[int, int]] = None
    text_responses: Optional[List[str]] = None


class CategoryStatsOut(BaseModel):
    category: str
    label: str
    question_count: int
    response_count: int
    average: float
    std_deviation: float


class SurveySummaryOut(BaseModel):
    respondent_count: int
    target_participants: int
    response_rate: int
    overall_average: float
    overall_std_deviation: float
    answer_count: int
    question_count: int


class AnalysisSurveyInfo(BaseModel):
    id: UUID
    title: str
    status: str
    scale_type: int
    is_anonymous: bool
    course_id: Optional[UUID] = None
    course_title: str = ""


class SurveyStatsOut(BaseModel):
    survey: AnalysisSurveyInfo
    summary: SurveySummaryOut
    categories: List[CategoryStatsOut]
    questions: List[QuestionStatsOut]


class SurveyAnalysisOut(SurveyStatsOut):
    ai_summary: Optional[str] = None
    ai_insights: Optional[List[str]] = None
    ai_recommendations: Optional[List[str]] = None
    ai_analyzed_at: Optional[datetime] = None


# ---------- Report document ----------

class ReportHeaderOut(BaseModel):
    survey_id: UUID
    survey_title: str
    course_title: str
    instructor: Optional[str] = None
    training_start_date: Optional[str] = None
    training_end_date: Optional[str] = None
    survey_start_date: Optional[str] = None
    survey_end_date: Optional[str] = None
    scale_type: int
    is_anonymous: bool
    generated_at: str


class NarrativeOut(BaseModel):
    summary: str
    insights: List[str] = []
    recommendations: List[str] = []
    analyzed_at: Optional[str] = None


class RespondentTextOut(BaseModel):
    question_id: UUID
    question_text: str
    text: str


class RespondentOut(BaseModel):
    respondent_name: Optional[str] = None
    submitted_at: Optional[str] = None
    text_answers: List[RespondentTextOut] = []


class ReportOut(BaseModel):
    header: ReportHeaderOut
    summary: SurveySummaryOut
    narrative: Optional[NarrativeOut] = None
    categories: List[CategoryStatsOut]
    questions: List[QuestionStatsOut]
    respondents: Optional[List[RespondentOut]] = None


# ---------- Course analysis ----------

class CourseInfoOut(BaseModel):
    id: UUID
    title: str
    instructor: Optional[str] = None


class CourseSurveyRowOut(BaseModel):
    id: UUID
    title: str
    status: str
    respondent_count: int
    average: float
    std_deviation: float


class CourseSummaryOut(BaseModel):
    survey_count: int
    total_respondents: int
    target_participants: int
    response_rate: int
    overall_average: float
    overall_std_deviation: float


class CourseAnalysisOut(BaseModel):
    course: CourseInfoOut
    summary: CourseSummaryOut
    surveys: List[CourseSurveyRowOut]
    categories: List[CategoryStatsOut]
    ai_summary: Optional[str] = None
    ai_strengths: Optional[List[str]] = None
    ai_weaknesses: Optional[List[str]] = None
    ai_insights: Optional[List[str]] = None
    ai_recommendations: Optional[List[str]] = None


# ---------- Dashboard ----------

class DashboardTotals(BaseModel):
    courses: int
    surveys: int
    active_surveys: int
    responses: int


class DashboardSurveyRow(BaseModel):
    id: UUID
    title: str
    status: str
    course_title: Optional[str] = None
    response_count: int
    created_at: datetime


class DashboardResponseRow(BaseModel):
    id: UUID
    survey_id: UUID
    survey_title: Optional[str] = None
    respondent_name: Optional[str] = None
    answer_count: int
    submitted_at: datetime


class DashboardOut(BaseModel):
    totals: DashboardTotals
    surveys_by_status: Dict[str, int]
    recent_surveys: List[DashboardSurveyRow]
    recent_responses: List[DashboardResponseRow]
