# hrd_survey/core/errors.py
"""
Domain errors raised by services and endpoints.

Each error carries the HTTP status it maps to; the handlers registered in
``hrd_survey.main`` render them as ``{"detail": message}``, the same shape
FastAPI uses for ``HTTPException``.
"""
from __future__ import annotations

from http import HTTPStatus


class AppError(Exception):
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: str = "서버 오류가 발생했습니다"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"{self.__class__.__name__}: {self.message}"


class NotFoundError(AppError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "요청한 항목을 찾을 수 없습니다"


class InvalidStateError(AppError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "현재 상태에서 수행할 수 없는 작업입니다"


class ValidationError(AppError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "입력값이 올바르지 않습니다"


class ExternalServiceError(AppError):
    status_code = HTTPStatus.BAD_GATEWAY
    default_message = "AI 분석에 실패했습니다"


class AIResponseParseError(ExternalServiceError):
    default_message = "AI 응답 파싱에 실패했습니다"


class UnconfiguredError(AppError):
    status_code = HTTPStatus.SERVICE_UNAVAILABLE
    default_message = "AI 서비스가 설정되지 않았습니다 (GEMINI_API_KEY)"
