# hrd_survey/api/v1/endpoints/dashboard.py
from fastapi import APIRouter, Depends

from hrd_survey.api.deps.admin import require_admin
from hrd_survey.api.deps.store import get_store
from hrd_survey.models.enums import SurveyStatus
from hrd_survey.schemas.reports import (
    DashboardOut, DashboardResponseRow, DashboardSurveyRow, DashboardTotals,
)
from hrd_survey.services.store import SurveyStore

router = APIRouter(tags=["dashboard"])


@router.get("/dashboard", response_model=DashboardOut)
def dashboard(
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    by_status = store.count_surveys_by_status()

    recent_surveys = [
        DashboardSurveyRow(
            id=s.id,
            title=s.title,
            status=s.status,
            course_title=s.course.title if s.course else None,
            response_count=store.count_responses(s.id),
            created_at=s.created_at,
        )
        for s in store.recent_surveys(5)
    ]

    titles: dict = {}
    recent_responses = []
    for r in store.recent_responses(10):
        if r.survey_id not in titles:
            survey = store.get_survey(r.survey_id)
            titles[r.survey_id] = survey.title if survey else None
        recent_responses.append(DashboardResponseRow(
            id=r.id,
            survey_id=r.survey_id,
            survey_title=titles[r.survey_id],
            respondent_name=r.respondent_name,
            answer_count=len(r.answers),
            submitted_at=r.submitted_at,
        ))

    return DashboardOut(
        totals=DashboardTotals(
            courses=store.count_courses(),
            surveys=sum(by_status.values()),
            active_surveys=by_status.get(SurveyStatus.active.value, 0),
            responses=store.count_responses(),
        ),
        surveys_by_status=by_status,
        recent_surveys=recent_surveys,
        recent_responses=recent_responses,
    )
