# hrd_survey/api/deps/admin.py
from fastapi import Depends, HTTPException

from hrd_survey.core.security import claims_are_admin, get_current_claims


def require_admin(claims: dict = Depends(get_current_claims)) -> dict:
    """
    Requires an admin role in the token claims. Returns the claims so
    endpoints can read 'sub' as the acting admin id.
    """
    if not claims_are_admin(claims):
        raise HTTPException(status_code=403, detail="관리자만 접근할 수 있습니다")
    return claims
