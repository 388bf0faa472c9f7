# backend/taskboard/core/deps.py
import logging
from fastapi import Depends, HTTPException, Request, status

from taskboard.core.config import settings
from taskboard.core.database import async_session_maker
from taskboard.core.errors import StoreUnavailable
from taskboard.services.auth.resolver import Accepted, SessionResolver
from taskboard.services.auth.store import SessionStore, SqlAlchemySessionStore

logger = logging.getLogger(__name__)

# Lazy instantiation so tests can override before first use
_session_store: SessionStore | None = None
_session_resolver: SessionResolver | None = None


def get_session_store() -> SessionStore:
    """Get or create the session store singleton."""
    global _session_store
    if _session_store is None:
        _session_store = SqlAlchemySessionStore(async_session_maker)
    return _session_store


def get_cookie_secret() -> str | None:
    """Secret used to verify cookie signatures, None when they are not checked."""
    return settings.secret_key if settings.verify_cookie_signature else None


def get_session_resolver() -> SessionResolver:
    """Get or create the session resolver singleton."""
    global _session_resolver
    if _session_resolver is None:
        _session_resolver = SessionResolver(
            store=get_session_store(),
            cookie_name=settings.session_cookie_name,
            cookie_secret=get_cookie_secret(),
            store_timeout=settings.session_store_timeout_seconds,
        )
    return _session_resolver


async def get_current_user_id(
    request: Request,
    resolver: SessionResolver = Depends(get_session_resolver),
) -> str | None:
    """Get the user id owning the request's session, or None."""
    try:
        resolution = await resolver.resolve(request.cookies)
    except StoreUnavailable as e:
        logger.error(f"Session store unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable",
        )

    if isinstance(resolution, Accepted):
        return resolution.user_id
    return None


async def require_user_id(
    user_id: str | None = Depends(get_current_user_id),
) -> str:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing authentication",
            headers={"WWW-Authenticate": "Session"},
        )
    return user_id
