import logging
from typing import Optional

from fastapi import Cookie, Header, HTTPException, Request

from closerdesk.core.security import TokenError, decode_token, strip_bearer

logger = logging.getLogger(__name__)


def _decode(token: Optional[str]) -> Optional[dict]:
    if not token:
        return None
    try:
        return decode_token(token)
    except TokenError as e:
        logger.warning(f"Token verification failed: {e}")
        return None
    except RuntimeError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Authentication configuration error")


# ---------------------------------------------------------
# ADMIN (header first, then httpOnly cookie)
# ---------------------------------------------------------
def require_admin(
    authorization: Optional[str] = Header(None),
    admin_token: Optional[str] = Cookie(None),
):
    for token in (strip_bearer(authorization), strip_bearer(admin_token)):
        payload = _decode(token)
        if payload and payload.get("isAdmin") is True:
            return payload
    raise HTTPException(status_code=401, detail="Unauthorized - Admin authentication required")


# ---------------------------------------------------------
# CLOSER (httpOnly cookie first, then header)
# ---------------------------------------------------------
def current_closer_id(
    authorization: Optional[str] = Header(None),
    closerToken: Optional[str] = Cookie(None),
) -> str:
    for token in (strip_bearer(closerToken), strip_bearer(authorization)):
        payload = _decode(token)
        if payload and payload.get("role") == "closer" and payload.get("closerId"):
            return payload["closerId"]
    raise HTTPException(status_code=401, detail="Authorization token required")


def audit_context(request: Request) -> dict:
    """Caller details stored alongside closer audit rows."""
    ip = (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or (request.client.host if request.client else None)
    )
    return {
        "ip_address": ip or "unknown",
        "user_agent": request.headers.get("user-agent") or "unknown",
    }
