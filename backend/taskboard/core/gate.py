# backend/taskboard/core/gate.py
"""Edge gate: redirect to sign-in when a protected path carries no session cookie.

Presence check only. Whether the cookie names a live session is decided
later by the session resolver; this middleware never touches the store.
"""
import logging
from typing import Iterable, Sequence
from urllib.parse import quote

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.types import ASGIApp

from taskboard.core.security import extract_session_token

logger = logging.getLogger(__name__)


def is_protected(path: str, prefixes: Iterable[str]) -> bool:
    """True if ``path`` is a prefix itself or lies below one."""
    for prefix in prefixes:
        prefix = prefix.rstrip("/")
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def sign_in_redirect_url(sign_in_path: str, callback_param: str, path: str) -> str:
    return f"{sign_in_path}?{callback_param}={quote(path, safe='/')}"


class EdgeGateMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        protected_prefixes: Sequence[str],
        cookie_name: str,
        sign_in_path: str = "/auth/sign-in",
        callback_param: str = "callbackUrl",
    ):
        super().__init__(app)
        self.protected_prefixes = tuple(protected_prefixes)
        self.cookie_name = cookie_name
        self.sign_in_path = sign_in_path
        self.callback_param = callback_param

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not is_protected(path, self.protected_prefixes):
            return await call_next(request)

        if extract_session_token(request.cookies, self.cookie_name) is None:
            logger.debug(f"Edge gate: no session cookie for {path}, redirecting to sign-in")
            return RedirectResponse(
                url=sign_in_redirect_url(self.sign_in_path, self.callback_param, path),
                status_code=307,
            )

        return await call_next(request)
