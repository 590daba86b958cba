# hrd_survey/schemas/common.py
from __future__ import annotations

import math
from enum import Enum

from pydantic import BaseModel


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        return cls(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit) if limit else 0)


class MessageOut(BaseModel):
    message: str


def required_text(value: str | None, message: str) -> str:
    """Strips and rejects empty strings with the given message."""
    value = (value or "").strip()
    if not value:
        raise ValueError(message)
    return value


def plain_values(data: dict) -> dict:
    """Enum members -> their values, for writing into String columns."""
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in data.items()}
