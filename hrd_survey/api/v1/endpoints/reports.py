# hrd_survey/api/v1/endpoints/reports.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Path
from fastapi.responses import StreamingResponse

from hrd_survey.api.deps.admin import require_admin
from hrd_survey.api.deps.store import ensure_survey, get_ai_client, get_store
from hrd_survey.schemas.reports import ReportOut, SurveyAnalysisOut, SurveyStatsOut
from hrd_survey.services.analysis import cached_narrative, run_survey_narrative, survey_analysis, survey_report
from hrd_survey.services.gemini import GeminiClient
from hrd_survey.services.store import SurveyStore
from hrd_survey.services.xlsx_export import XLSX_MEDIA_TYPE, report_to_xlsx

router = APIRouter(prefix="/surveys/{survey_id}", tags=["reports"])


@router.get("/stats", response_model=SurveyStatsOut)
def survey_stats(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    return survey_analysis(store, ensure_survey(store, survey_id))


@router.get("/analysis", response_model=SurveyAnalysisOut)
def get_analysis(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    survey = ensure_survey(store, survey_id)
    return {**survey_analysis(store, survey), **cached_narrative(survey)}


@router.post("/analysis", response_model=SurveyAnalysisOut)
def run_analysis(
    survey_id: UUID = Path(...),
    _admin=Depends(require_admin),
    store: SurveyStore = Depends(get_store),
    client: GeminiClient = Depends(get_ai_client),
):
    return run_survey_narrative(store, client, ensure_survey(store, survey_id))


@router.get("/report", response_model=ReportOut)
def get_report(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    return survey_report(store, ensure_survey(store, survey_id))


@router.get("/report.xlsx")
def export_report_xlsx(
    survey_id: UUID = Path(...),
    store: SurveyStore = Depends(get_store),
    _admin=Depends(require_admin),
):
    survey = ensure_survey(store, survey_id)
    content = report_to_xlsx(survey_report(store, survey))
    filename = f"survey_{survey.unique_code}.xlsx"
    return StreamingResponse(
        iter([content]),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
