# hrd_survey/api/v1/endpoints/surveys.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from hrd_survey.api.deps.admin import require_admin
from hrd_survey.api.deps.store import ensure_course, ensure_survey, get_store
from hrd_survey.core.config import settings
from hrd_survey.core.errors import InvalidStateError, ValidationError
from hrd_survey.models.enums import SurveyStatus
from hrd_survey.models.survey import Survey
from hrd_survey.schemas.common import MessageOut, PageMeta, plain_values
from hrd_survey.schemas.responses import ResponseListOut, ResponseOut
from hrd_survey.schemas.surveys import (
    QuestionOut, SurveyCourseBrief, SurveyCreateIn, SurveyDetailOut, SurveyLinkOut,
    SurveyListItem, SurveyListOut, SurveyOut, SurveyStatusIn, SurveyUpdateIn,
)
from hrd_survey.services.lifecycle import STATUS_MESSAGES, change_status
from hrd_survey.services.store import SurveyStore

router = APIRouter(prefix="/surveys", tags=["surveys"])


def public_url(code: str) -> str:
    return f"{settings.PUBLIC_SURVEY_BASE_URL.rstrip('/')}/{code}"


def _detail(store: SurveyStore, survey: Survey) -> SurveyDetailOut:
    return SurveyDetailOut(
        **SurveyOut.model_validate(survey).model_dump(),
        course=SurveyCourseBrief.model_validate(survey.course) if survey.course else None,
        questions=[QuestionOut.model_validate(q) for q in store.get_questions(survey.id)],
        response_count=store.count_responses(survey.id),
        public_url=public_url(survey.unique_code),
    )


@router.get("", response_model=SurveyListOut)
def list_surveys(
    search: Optional[str] = Query(None),
    status: Optional[SurveyStatus] = Query(None),
    course_id: Optional[UUID] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    surveys = store.list_surveys(
        course_id=course_id, status=status.value if status else None, search=search,
    )
    page_rows = surveys[(page - 1) * limit: page * limit]
    items = [
        SurveyListItem(
            **SurveyOut.model_validate(s).model_dump(),
            course_title=s.course.title if s.course else None,
            question_count=store.count_questions(s.id),
            response_count=store.count_responses(s.id),
        )
        for s in page_rows
    ]
    return SurveyListOut(items=items, pagination=PageMeta.build(len(surveys), page, limit))


@router.post("", response_model=SurveyDetailOut, status_code=201)
def create_survey(
    payload: SurveyCreateIn,
    store: SurveyStore = Depends(get_store),
    admin: dict = Depends(require_admin),
):
    if payload.course_id is None:
        raise ValidationError("유효한 교육과정을 선택해주세요")
    ensure_course(store, payload.course_id)
    survey = store.create_survey(admin["sub"], payload.model_dump())
    return _detail(store, survey)


@router.get("/{survey_id}", response_model=SurveyDetailOut)
def get_survey(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    return _detail(store, ensure_survey(store, survey_id))


@router.put("/{survey_id}", response_model=SurveyDetailOut)
def update_survey(
    payload: SurveyUpdateIn,
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    survey = ensure_survey(store, survey_id)
    patch = plain_values(payload.model_dump(exclude_unset=True))

    if patch.get("course_id") is not None:
        ensure_course(store, patch["course_id"])
    scale = patch.get("scale_type")
    # stored scores must stay inside 1..scale_type
    if scale is not None and scale != survey.scale_type and store.count_responses(survey.id) > 0:
        raise InvalidStateError("응답이 있는 설문은 척도를 변경할 수 없습니다")
    status = patch.pop("status", None)
    if status and status != survey.status:
        survey = change_status(store, survey, SurveyStatus(status))
    if patch:
        survey = store.update_survey(survey, patch)
    return _detail(store, survey)


@router.delete("/{survey_id}", response_model=MessageOut)
def delete_survey(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    store.delete_survey(ensure_survey(store, survey_id))
    return MessageOut(message="설문이 삭제되었습니다")


@router.patch("/{survey_id}/status", response_model=MessageOut)
def update_status(
    payload: SurveyStatusIn,
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    change_status(store, ensure_survey(store, survey_id), payload.status)
    return MessageOut(message=STATUS_MESSAGES[payload.status])


@router.get("/{survey_id}/responses", response_model=ResponseListOut)
def list_responses(
    survey_id: UUID = Path(...),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    survey = ensure_survey(store, survey_id)
    rows = store.get_responses(survey.id, offset=(page - 1) * limit, limit=limit)
    total = store.count_responses(survey.id)
    return ResponseListOut(
        items=[ResponseOut.model_validate(r) for r in rows],
        pagination=PageMeta.build(total, page, limit),
    )


@router.get("/{survey_id}/link", response_model=SurveyLinkOut)
def survey_link(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    survey = ensure_survey(store, survey_id)
    return SurveyLinkOut(survey_id=survey.id, unique_code=survey.unique_code, url=public_url(survey.unique_code))
