# hrd_survey/api/deps/store.py
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from hrd_survey.core.errors import NotFoundError
from hrd_survey.db.session import get_db
from hrd_survey.models.course import Course
from hrd_survey.models.survey import Survey
from hrd_survey.services.gemini import GeminiClient
from hrd_survey.services.store import SurveyStore


def get_store(db: Session = Depends(get_db)) -> SurveyStore:
    return SurveyStore(db)


def get_ai_client() -> GeminiClient:
    """Raises UnconfiguredError (503) when GEMINI_API_KEY is not set."""
    return GeminiClient.from_settings()


def ensure_course(store: SurveyStore, course_id: UUID) -> Course:
    course = store.get_course(course_id)
    if not course:
        raise NotFoundError("교육과정을 찾을 수 없습니다")
    return course


def ensure_survey(store: SurveyStore, survey_id: UUID) -> Survey:
    survey = store.get_survey(survey_id)
    if not survey:
        raise NotFoundError("설문을 찾을 수 없습니다")
    return survey
