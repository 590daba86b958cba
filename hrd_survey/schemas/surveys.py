# hrd_survey/schemas/surveys.py
from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, List, Optional
from uuid import UUID

from pydantic import (
    AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator,
)

from hrd_survey.models.enums import SCALE_TYPES, QuestionCategory, QuestionType, SurveyStatus
from hrd_survey.schemas.common import PageMeta, required_text


def _scale(v: Optional[int]) -> Optional[int]:
    if v is not None and v not in SCALE_TYPES:
        raise ValueError("척도는 5, 7, 9, 10점 중 하나여야 합니다")
    return v


def _question_type(v: Any) -> Any:
    if v is not None and v not in {t.value for t in QuestionType}:
        raise ValueError("문항 유형은 choice 또는 text 여야 합니다")
    return v


def _question_category(v: Any) -> Any:
    if v not in (None, "") and v not in {c.value for c in QuestionCategory}:
        raise ValueError("지원하지 않는 문항 카테고리입니다")
    return v or None


ScaleType = Annotated[int, AfterValidator(_scale)]
OptionalScaleType = Annotated[Optional[int], AfterValidator(_scale)]
QuestionTypeField = Annotated[QuestionType, BeforeValidator(_question_type)]
OptionalQuestionType = Annotated[Optional[QuestionType], BeforeValidator(_question_type)]
CategoryField = Annotated[Optional[QuestionCategory], BeforeValidator(_question_category)]


# ---------- Questions ----------

class QuestionIn(BaseModel):
    type: QuestionTypeField
    category: CategoryField = None
    content: str = ""
    is_required: bool = True
    order_num: Optional[int] = Field(None, ge=1)

    @field_validator("content")
    @classmethod
    def content_not_empty(cls, v: str) -> str:
        return required_text(v, "문항 내용을 입력해주세요")


class QuestionUpdateIn(BaseModel):
    type: OptionalQuestionType = None
    category: CategoryField = None
    content: Optional[str] = None
    is_required: Optional[bool] = None
    order_num: Optional[int] = Field(None, ge=1)

    @field_validator("content")
    @classmethod
    def content_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else required_text(v, "문항 내용을 입력해주세요")


class QuestionBulkIn(BaseModel):
    questions: List[QuestionIn] = Field(default_factory=list)


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    survey_id: UUID
    type: str
    category: Optional[str] = None
    content: str
    order_num: int
    is_required: bool


class GenerateQuestionsIn(BaseModel):
    categories: Optional[List[QuestionCategory]] = None
    scale_question_count: int = Field(10, ge=3, le=20)
    text_question_count: int = Field(2, ge=0, le=10)

    @field_validator("categories", mode="before")
    @classmethod
    def check_categories(cls, v):
        if v is not None:
            for item in v:
                _question_category(item)
        return v or None


class GenerateQuestionsOut(BaseModel):
    message: str
    questions: List[QuestionOut]


# ---------- Surveys ----------

class SurveyCreateIn(BaseModel):
    course_id: Optional[UUID] = None
    title: str = ""
    description: Optional[str] = None
    scale_type: ScaleType = 5
    is_anonymous: bool = True
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        return required_text(v, "설문 제목을 입력해주세요")

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("설문 종료일은 시작일 이후여야 합니다")
        return self


class SurveyUpdateIn(BaseModel):
    course_id: Optional[UUID] = None
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[SurveyStatus] = None
    scale_type: OptionalScaleType = None
    is_anonymous: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else required_text(v, "설문 제목을 입력해주세요")


class SurveyStatusIn(BaseModel):
    status: SurveyStatus


class SurveyCourseBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    instructor: Optional[str] = None
    target_participants: int = 0


class SurveyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    course_id: Optional[UUID] = None
    admin_id: str
    title: str
    description: Optional[str] = None
    status: str
    unique_code: str
    scale_type: int
    is_anonymous: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    created_at: datetime
    closed_at: Optional[datetime] = None
    ai_analyzed_at: Optional[datetime] = None


class SurveyListItem(SurveyOut):
    course_title: Optional[str] = None
    question_count: int = 0
    response_count: int = 0


class SurveyListOut(BaseModel):
    items: List[SurveyListItem]
    pagination: PageMeta


class SurveyDetailOut(SurveyOut):
    course: Optional[SurveyCourseBrief] = None
    questions: List[QuestionOut] = []
    response_count: int = 0
    public_url: str


class SurveyLinkOut(BaseModel):
    survey_id: UUID
    unique_code: str
    url: str
