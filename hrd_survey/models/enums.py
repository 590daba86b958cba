# hrd_survey/models/enums.py
from enum import Enum


class SurveyStatus(str, Enum):
    draft = "draft"
    active = "active"
    closed = "closed"


class QuestionType(str, Enum):
    choice = "choice"
    text = "text"


class QuestionCategory(str, Enum):
    overall = "overall"
    content = "content"
    instructor = "instructor"
    facility = "facility"
    other = "other"


CATEGORY_LABELS = {
    QuestionCategory.overall: "종합만족도",
    QuestionCategory.content: "교육내용",
    QuestionCategory.instructor: "강사만족도",
    QuestionCategory.facility: "교육환경",
    QuestionCategory.other: "기타",
}

SCALE_TYPES = (5, 7, 9, 10)
DEFAULT_SCALE = 5
