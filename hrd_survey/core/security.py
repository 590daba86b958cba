# hrd_survey/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from hrd_survey.core.config import settings

# Docs/Swagger only; tokens are issued by the external identity provider
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)
ADMIN_ROLE_NAMES = {"admin", "administrator", "superadmin", "hrd_admin"}


def create_access_token(subject: dict[str, Any], expires_minutes: int | None = None) -> str:
    """
    Builds a JWT with 'exp' and 'iat'.
    - 'sub' is normalised to str.
    - 'iat' is epoch seconds (int).
    """
    if expires_minutes is None:
        expires_minutes = settings.JWT_EXPIRE_MINUTES

    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes)

    claims = dict(subject)
    if "sub" in claims and not isinstance(claims["sub"], str):
        claims["sub"] = str(claims["sub"])

    to_encode = {
        **claims,
        "iat": int(now.timestamp()),
        "exp": exp,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decodes requiring 'exp' and 'iat' and checking expiry.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "iat"], "verify_exp": True},
            leeway=5,  # clock skew
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="토큰이 만료되었습니다")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="유효하지 않은 토큰입니다")


def roles_from_claims(claims: dict | None) -> set[str]:
    if not claims:
        return set()
    raw = claims.get("roles") or claims.get("role") or []
    if isinstance(raw, str):
        return {raw}
    if isinstance(raw, Iterable):
        return {str(x) for x in raw}
    return set()


def claims_are_admin(claims: dict | None) -> bool:
    return any(r.lower() in ADMIN_ROLE_NAMES for r in roles_from_claims(claims))


def get_current_claims(token: str | None = Depends(oauth2_scheme)) -> dict[str, Any]:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="인증이 필요합니다",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_token(token)
    if not payload.get("sub"):
        raise HTTPException(status_code=401, detail="토큰에 사용자 정보가 없습니다")
    return payload
