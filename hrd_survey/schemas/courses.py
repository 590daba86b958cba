# hrd_survey/schemas/courses.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hrd_survey.schemas.common import PageMeta, required_text


# ---------- Inputs ----------

class CourseCreateIn(BaseModel):
    title: str = ""
    objectives: Optional[str] = None
    content: Optional[str] = None
    instructor: Optional[str] = None
    training_start_date: Optional[date] = None
    training_end_date: Optional[date] = None
    target_participants: int = Field(0, ge=0)

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        return required_text(v, "과정명을 입력해주세요")

    @model_validator(mode="after")
    def check_dates(self):
        if self.training_start_date and self.training_end_date \
                and self.training_end_date < self.training_start_date:
            raise ValueError("교육 종료일은 시작일 이후여야 합니다")
        return self


class CourseUpdateIn(BaseModel):
    title: Optional[str] = None
    objectives: Optional[str] = None
    content: Optional[str] = None
    instructor: Optional[str] = None
    training_start_date: Optional[date] = None
    training_end_date: Optional[date] = None
    target_participants: Optional[int] = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else required_text(v, "과정명을 입력해주세요")


# ---------- Outputs ----------

class CourseSurveyBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: str
    unique_code: str


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    admin_id: str
    title: str
    objectives: Optional[str] = None
    content: Optional[str] = None
    instructor: Optional[str] = None
    training_start_date: Optional[date] = None
    training_end_date: Optional[date] = None
    target_participants: int
    created_at: datetime
    updated_at: datetime


class CourseListItem(CourseOut):
    survey_count: int = 0
    surveys: List[CourseSurveyBrief] = []


class CourseListOut(BaseModel):
    items: List[CourseListItem]
    pagination: PageMeta
