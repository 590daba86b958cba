# hrd_survey/services/lifecycle.py
"""Survey status transitions and the public availability window."""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from http import HTTPStatus

from hrd_survey.core.errors import InvalidStateError
from hrd_survey.models.enums import SurveyStatus
from hrd_survey.models.survey import Survey
from hrd_survey.services.store import SurveyStore

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    SurveyStatus.draft: "설문이 임시저장 상태로 변경되었습니다",
    SurveyStatus.active: "설문이 활성화되었습니다",
    SurveyStatus.closed: "설문이 종료되었습니다",
}


def change_status(store: SurveyStore, survey: Survey, status: SurveyStatus) -> Survey:
    status = SurveyStatus(status)
    if status is SurveyStatus.active and store.count_questions(survey.id) == 0:
        raise InvalidStateError("설문을 활성화하려면 최소 1개 이상의 문항이 필요합니다")

    patch: dict = {"status": status.value}
    if status is SurveyStatus.closed:
        patch["closed_at"] = datetime.now(timezone.utc)

    previous = survey.status
    survey = store.update_survey(survey, patch)
    logger.info("[SURVEY] %s status %s -> %s", survey.id, previous, status.value)
    return survey


def ensure_open(survey: Survey, today: date | None = None, submitting: bool = False) -> None:
    """
    Raises InvalidStateError (403) unless the survey is active and today lies
    inside its optional [start_date, end_date] window (both inclusive).
    """
    today = today or date.today()
    if survey.status != SurveyStatus.active.value:
        if submitting:
            message = "응답을 받지 않는 설문입니다"
        elif survey.status == SurveyStatus.draft.value:
            message = "아직 공개되지 않은 설문입니다"
        else:
            message = "종료된 설문입니다"
        raise InvalidStateError(message, status_code=HTTPStatus.FORBIDDEN)
    if survey.start_date and survey.start_date > today:
        raise InvalidStateError("아직 시작되지 않은 설문입니다", status_code=HTTPStatus.FORBIDDEN)
    if survey.end_date and survey.end_date < today:
        raise InvalidStateError("종료된 설문입니다", status_code=HTTPStatus.FORBIDDEN)
