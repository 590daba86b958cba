# hrd_survey/api/v1/endpoints/courses.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from hrd_survey.api.deps.admin import require_admin
from hrd_survey.api.deps.store import ensure_course, get_ai_client, get_store
from hrd_survey.schemas.common import MessageOut, PageMeta
from hrd_survey.schemas.courses import (
    CourseCreateIn, CourseListItem, CourseListOut, CourseOut, CourseUpdateIn,
)
from hrd_survey.schemas.reports import CourseAnalysisOut
from hrd_survey.services.analysis import course_analysis, run_course_narrative
from hrd_survey.services.gemini import GeminiClient
from hrd_survey.services.store import SurveyStore

router = APIRouter(prefix="/courses", tags=["courses"])

# Surveys shown inline per course in the list view
SURVEY_PREVIEW = 5


@router.get("", response_model=CourseListOut)
def list_courses(
    search: Optional[str] = Query(None, description="Title or instructor substring"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    courses, total = store.list_courses(search=search, offset=(page - 1) * limit, limit=limit)
    items = []
    for c in courses:
        item = CourseListItem.model_validate(c)
        item.survey_count = len(item.surveys)
        item.surveys = item.surveys[:SURVEY_PREVIEW]
        items.append(item)
    return CourseListOut(items=items, pagination=PageMeta.build(total, page, limit))


@router.post("", response_model=CourseOut, status_code=201)
def create_course(
    payload: CourseCreateIn,
    store: SurveyStore = Depends(get_store),
    admin: dict = Depends(require_admin),
):
    return store.create_course(admin["sub"], payload.model_dump())


@router.get("/{course_id}", response_model=CourseListItem)
def get_course(
    course_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    item = CourseListItem.model_validate(ensure_course(store, course_id))
    item.survey_count = len(item.surveys)
    return item


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    payload: CourseUpdateIn,
    course_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    course = ensure_course(store, course_id)
    return store.update_course(course, payload.model_dump(exclude_unset=True))


@router.delete("/{course_id}", response_model=MessageOut)
def delete_course(
    course_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    store.delete_course(ensure_course(store, course_id))
    return MessageOut(message="교육과정이 삭제되었습니다")


@router.get("/{course_id}/analysis", response_model=CourseAnalysisOut)
def get_course_analysis(
    course_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    return course_analysis(store, ensure_course(store, course_id))


@router.post("/{course_id}/analysis", response_model=CourseAnalysisOut)
def run_course_analysis(
    course_id: UUID = Path(...),
    _admin=Depends(require_admin),
    store: SurveyStore = Depends(get_store),
    client: GeminiClient = Depends(get_ai_client),
):
    return run_course_narrative(store, client, ensure_course(store, course_id))
