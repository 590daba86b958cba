# hrd_survey/schemas/responses.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from hrd_survey.schemas.common import PageMeta


# ---------- Public submission ----------

class AnswerIn(BaseModel):
    question_id: UUID
    score_value: Optional[int] = None
    text_value: Optional[str] = None


class ResponseSubmitIn(BaseModel):
    answers: List[AnswerIn] = Field(default_factory=list)
    session_id: Optional[str] = Field(None, max_length=64)
    respondent_name: Optional[str] = Field(None, max_length=100)
    device_info: Optional[dict[str, Any]] = None


class ResponseSubmitOut(BaseModel):
    session_id: str
    answer_count: int


class PublicQuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    category: Optional[str] = None
    content: str
    order_num: int
    is_required: bool


class PublicSurveyOut(BaseModel):
    id: UUID
    title: str
    description: Optional[str] = None
    scale_type: int
    is_anonymous: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    course_title: Optional[str] = None
    instructor: Optional[str] = None
    questions: List[PublicQuestionOut]


# ---------- Admin listing ----------

class AnswerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_id: UUID
    score_value: Optional[int] = None
    text_value: Optional[str] = None


class ResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    survey_id: UUID
    session_id: str
    respondent_name: Optional[str] = None
    submitted_at: datetime
    answers: List[AnswerOut] = []


class ResponseListOut(BaseModel):
    items: List[ResponseOut]
    pagination: PageMeta
