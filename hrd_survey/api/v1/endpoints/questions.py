# hrd_survey/api/v1/endpoints/questions.py
from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from hrd_survey.api.deps.admin import require_admin
from hrd_survey.api.deps.store import ensure_survey, get_ai_client, get_store
from hrd_survey.core.errors import NotFoundError
from hrd_survey.schemas.common import MessageOut, plain_values
from hrd_survey.schemas.surveys import (
    GenerateQuestionsIn, GenerateQuestionsOut, QuestionBulkIn, QuestionIn, QuestionOut, QuestionUpdateIn,
)
from hrd_survey.services.gemini import GeminiClient
from hrd_survey.services.question_generator import generate_questions
from hrd_survey.services.store import SurveyStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/surveys/{survey_id}", tags=["questions"])


def _ensure_question(store: SurveyStore, survey_id: UUID, question_id: UUID):
    q = store.get_question(survey_id, question_id)
    if not q:
        raise NotFoundError("문항을 찾을 수 없습니다")
    return q


@router.get("/questions", response_model=List[QuestionOut])
def list_questions(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    ensure_survey(store, survey_id)
    return store.get_questions(survey_id)


@router.post("/questions", response_model=QuestionOut, status_code=201)
def add_question(
    payload: QuestionIn,
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    ensure_survey(store, survey_id)
    return store.create_question(survey_id, plain_values(payload.model_dump()))


@router.put("/questions", response_model=List[QuestionOut])
def replace_questions(
    payload: QuestionBulkIn,
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    ensure_survey(store, survey_id)
    return store.replace_questions(survey_id, [plain_values(q.model_dump()) for q in payload.questions])


@router.delete("/questions", response_model=MessageOut)
def delete_all_questions(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    ensure_survey(store, survey_id)
    n = store.delete_questions(survey_id)
    return MessageOut(message=f"{n}개의 문항이 삭제되었습니다")


@router.put("/questions/{question_id}", response_model=QuestionOut)
def update_question(
    payload: QuestionUpdateIn,
    survey_id: UUID = Path(...),
    question_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    ensure_survey(store, survey_id)
    question = _ensure_question(store, survey_id, question_id)
    return store.update_question(question, plain_values(payload.model_dump(exclude_unset=True)))


@router.delete("/questions/{question_id}", response_model=MessageOut)
def delete_question(
    survey_id: UUID = Path(...),
    question_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    ensure_survey(store, survey_id)
    store.delete_question(_ensure_question(store, survey_id, question_id))
    return MessageOut(message="문항이 삭제되었습니다")


@router.post("/generate", response_model=GenerateQuestionsOut)
def generate(
    payload: GenerateQuestionsIn,
    survey_id: UUID = Path(...),
    _admin=Depends(require_admin),
    store: SurveyStore = Depends(get_store),
    client: GeminiClient = Depends(get_ai_client),
):
    survey = ensure_survey(store, survey_id)
    course = store.get_course(survey.course_id) if survey.course_id else None
    if course is None:
        raise NotFoundError("교육과정 정보를 찾을 수 없습니다")

    rows = generate_questions(
        client, course,
        categories=payload.categories,
        scale_type=survey.scale_type,
        scale_question_count=payload.scale_question_count,
        text_question_count=payload.text_question_count,
    )
    questions = store.replace_questions(survey.id, rows)
    return GenerateQuestionsOut(
        message=f"AI가 {len(questions)}개의 문항을 생성했습니다",
        questions=[QuestionOut.model_validate(q) for q in questions],
    )
