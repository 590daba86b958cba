# hrd_survey/api/v1/endpoints/health.py
from fastapi import APIRouter

from hrd_survey.db.session import check_db_connection

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    return {"status": "ok"}


@router.get("/health/db")
def health_db():
    return {"db": "ok" if check_db_connection() else "unavailable"}
