"""
Admin key dependency for write routes
"""
import hmac
from typing import Optional

from fastapi import Header, HTTPException, status

from folio.core.config import get_settings


async def require_admin(x_admin_key: Optional[str] = Header(default=None)) -> None:
    """
    Require X-Admin-Key to match ADMIN_API_KEY.

    When ADMIN_API_KEY is unset the API is open (local development).
    """
    expected = get_settings().admin_api_key
    if not expected:
        return
    if not x_admin_key or not hmac.compare_digest(x_admin_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing admin key"
        )
