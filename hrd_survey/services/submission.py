# hrd_survey/services/submission.py
"""Validation and storage of one public survey submission."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.exc import IntegrityError

from hrd_survey.core.errors import InvalidStateError, ValidationError
from hrd_survey.models.enums import DEFAULT_SCALE, QuestionType
from hrd_survey.models.response import Response
from hrd_survey.models.survey import Survey
from hrd_survey.schemas.responses import AnswerIn, ResponseSubmitIn
from hrd_survey.services.lifecycle import ensure_open
from hrd_survey.services.store import SurveyStore

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "이미 응답을 제출하셨습니다"


def new_session_id() -> str:
    return uuid.uuid4().hex


def _has_value(answer: AnswerIn) -> bool:
    return answer.score_value is not None or bool((answer.text_value or "").strip())


def clean_answers(questions: list, answers: list[AnswerIn], scale_max: int) -> list[dict[str, Any]]:
    """
    Applies the answer rules in order and returns rows ready to store:
    required questions answered, unknown questions dropped, shape matches
    the question type, scores inside [1, scale_max], empty text dropped.
    """
    answered = {a.question_id for a in answers if _has_value(a)}
    if any(q.is_required and q.id not in answered for q in questions):
        raise ValidationError("필수 문항에 응답해주세요")

    by_id = {q.id: q for q in questions}
    rows: list[dict[str, Any]] = []
    seen = set()
    for a in answers:
        q = by_id.get(a.question_id)
        if q is None or a.question_id in seen:
            continue

        qtype = QuestionType(q.type)
        if qtype is QuestionType.choice:
            if (a.text_value or "").strip():
                raise ValidationError("응답 형식이 문항 유형과 맞지 않습니다")
            if a.score_value is None:
                continue
            if not 1 <= a.score_value <= scale_max:
                raise ValidationError(f"점수는 1점에서 {scale_max}점 사이여야 합니다")
            rows.append({"question_id": q.id, "score_value": a.score_value, "text_value": None})
        elif qtype is QuestionType.text:
            if a.score_value is not None:
                raise ValidationError("응답 형식이 문항 유형과 맞지 않습니다")
            text = (a.text_value or "").strip()
            if not text:
                continue
            rows.append({"question_id": q.id, "score_value": None, "text_value": text})
        seen.add(a.question_id)

    if not rows:
        raise ValidationError("유효한 응답이 없습니다")
    return rows


def submit_response(store: SurveyStore, survey: Survey, payload: ResponseSubmitIn) -> Response:
    ensure_open(survey, submitting=True)

    session_id = (payload.session_id or "").strip() or new_session_id()
    if store.has_response(survey.id, session_id):
        logger.info("[SUBMIT] Duplicate session for survey %s rejected", survey.id)
        raise InvalidStateError(DUPLICATE_MESSAGE)

    questions = store.get_questions(survey.id)
    rows = clean_answers(questions, payload.answers, survey.scale_type or DEFAULT_SCALE)

    respondent_name = None
    if not survey.is_anonymous:
        respondent_name = (payload.respondent_name or "").strip() or None

    try:
        response = store.create_response(
            survey.id, session_id, rows,
            respondent_name=respondent_name,
            device_info=payload.device_info,
        )
    except IntegrityError as e:
        # lost the race against a concurrent submission with the same session
        logger.info("[SUBMIT] Concurrent duplicate for survey %s rejected", survey.id)
        raise InvalidStateError(DUPLICATE_MESSAGE) from e

    logger.info("[SUBMIT] Survey %s received a response (%d answers)", survey.id, len(rows))
    return response
