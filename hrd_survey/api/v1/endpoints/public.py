# hrd_survey/api/v1/endpoints/public.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Path

from hrd_survey.api.deps.store import get_store
from hrd_survey.core.errors import NotFoundError
from hrd_survey.schemas.responses import (
    PublicQuestionOut, PublicSurveyOut, ResponseSubmitIn, ResponseSubmitOut,
)
from hrd_survey.services.lifecycle import ensure_open
from hrd_survey.services.store import SurveyStore
from hrd_survey.services.submission import submit_response

# No auth: respondents only know the survey code
router = APIRouter(prefix="/public/surveys", tags=["public"])


def _survey_by_code(store: SurveyStore, code: str):
    survey = store.get_survey_by_code(code)
    if not survey:
        raise NotFoundError("설문을 찾을 수 없습니다")
    return survey


@router.get("/{code}", response_model=PublicSurveyOut)
def get_public_survey(
    code: str = Path(..., min_length=1, max_length=16),
    store: SurveyStore = Depends(get_store),
):
    survey = _survey_by_code(store, code)
    ensure_open(survey)
    course = survey.course
    return PublicSurveyOut(
        id=survey.id,
        title=survey.title,
        description=survey.description,
        scale_type=survey.scale_type,
        is_anonymous=survey.is_anonymous,
        start_date=survey.start_date,
        end_date=survey.end_date,
        course_title=course.title if course else None,
        instructor=course.instructor if course else None,
        questions=[PublicQuestionOut.model_validate(q) for q in store.get_questions(survey.id)],
    )


@router.post("/{code}/responses", response_model=ResponseSubmitOut, status_code=201)
def submit(
    payload: ResponseSubmitIn,
    code: str = Path(..., min_length=1, max_length=16),
    store: SurveyStore = Depends(get_store),
):
    survey = _survey_by_code(store, code)
    response = submit_response(store, survey, payload)
    return ResponseSubmitOut(session_id=response.session_id, answer_count=len(response.answers))
