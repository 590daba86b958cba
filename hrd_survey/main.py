# hrd_survey/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hrd_survey.api.v1.endpoints import courses, dashboard, health, public, questions, reports, surveys
from hrd_survey.core.config import settings
from hrd_survey.core.errors import AppError
from hrd_survey.core.logging import setup_logging

API_V1_PREFIX = "/api/v1"

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="교육과정 만족도 설문 관리 API",
    version="1.0.0",
)

# CORS (prod: set CORS_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
def handle_app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s -> %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=int(exc.status_code), content={"detail": exc.message})


def first_validation_message(exc: RequestValidationError) -> str:
    for err in exc.errors():
        cause = (err.get("ctx") or {}).get("error")
        if cause is not None:
            return str(cause)
        if err.get("msg"):
            loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
            return f"{loc}: {err['msg']}" if loc else err["msg"]
    return "입력값이 올바르지 않습니다"


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": first_validation_message(exc)})


# Versioned routers
app.include_router(health.router,    prefix=API_V1_PREFIX)
app.include_router(courses.router,   prefix=API_V1_PREFIX)
app.include_router(surveys.router,   prefix=API_V1_PREFIX)
app.include_router(questions.router, prefix=API_V1_PREFIX)
app.include_router(reports.router,   prefix=API_V1_PREFIX)
app.include_router(dashboard.router, prefix=API_V1_PREFIX)
app.include_router(public.router,    prefix=API_V1_PREFIX)


@app.get("/")
def root():
    return {
        "message": "HRD Survey API",
        "version": "1.0.0",
        "docs": "/docs",
        "api_v1": API_V1_PREFIX,
    }
