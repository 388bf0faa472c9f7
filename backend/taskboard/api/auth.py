# backend/taskboard/api/auth.py
import logging
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from taskboard.core.config import settings
from taskboard.core.deps import get_cookie_secret, get_session_store, require_user_id
from taskboard.core.errors import StoreUnavailable
from taskboard.core.security import SECURE_PREFIX, extract_session_token, session_cookie_names
from taskboard.services.auth.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/session")
async def get_session_info(
    user_id: str = Depends(require_user_id),
) -> dict[str, str]:
    """Get the authenticated user's id."""
    return {"user_id": user_id}


@router.post("/sign-out")
async def sign_out(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_session_store),
) -> dict[str, str]:
    """Revoke the presented session and clear the session cookie."""
    token = extract_session_token(request.cookies, settings.session_cookie_name, get_cookie_secret())
    if token:
        try:
            await store.revoke_session(token)
        except StoreUnavailable as e:
            logger.error(f"Session store unavailable during sign-out: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Service temporarily unavailable",
            )

    for name in session_cookie_names(settings.session_cookie_name):
        # Browsers drop __Secure- cookies that are set without Secure
        response.delete_cookie(name, secure=name.startswith(SECURE_PREFIX), httponly=True)
    return {"message": "Signed out"}
