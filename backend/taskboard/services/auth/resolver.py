# backend/taskboard/services/auth/resolver.py
"""Authoritative session resolution.

Maps the request cookies to the id of the user owning a live session. This
is the single place that decides "authenticated or not"; route handlers get
the user id from here and nowhere else.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping

from taskboard.core.errors import RejectionReason, StoreUnavailable, Unauthenticated
from taskboard.core.security import extract_session_token, read_session_cookie
from taskboard.services.auth.store import SessionRecord, SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Accepted:
    user_id: str


@dataclass(frozen=True)
class Rejected:
    reason: RejectionReason


Resolution = Accepted | Rejected


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def is_expired(record: SessionRecord, now: datetime) -> bool:
    expires_at = record.expires_at
    # Some backends hand timestamps back without tzinfo; they are stored as UTC
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return now > expires_at


class SessionResolver:
    """Validates session cookies against the session store.

    Holds no per-request state: every call reads the store once and
    nothing is cached, so a revoked session is rejected on the next call.
    """

    def __init__(
        self,
        store: SessionStore,
        cookie_name: str,
        cookie_secret: str | None = None,
        store_timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.cookie_name = cookie_name
        self.cookie_secret = cookie_secret
        self.store_timeout = store_timeout
        self.clock = clock

    async def resolve(self, cookies: Mapping[str, str]) -> Resolution:
        """Resolve cookies to Accepted(user_id) or Rejected(reason).

        Raises StoreUnavailable if the store fails or does not answer
        within ``store_timeout`` seconds.
        """
        token = extract_session_token(cookies, self.cookie_name, self.cookie_secret)
        if token is None:
            if self.cookie_secret is not None and read_session_cookie(cookies, self.cookie_name):
                logger.debug("Session rejected: cookie signature mismatch")
                return Rejected(RejectionReason.BAD_SIGNATURE)
            logger.debug("Session rejected: no session cookie")
            return Rejected(RejectionReason.NO_COOKIE)

        record = await self._lookup(token)

        if record is None:
            logger.debug("Session rejected: token not found")
            return Rejected(RejectionReason.NOT_FOUND)

        if is_expired(record, self.clock()):
            logger.debug(f"Session rejected: session {record.id} expired at {record.expires_at.isoformat()}")
            return Rejected(RejectionReason.EXPIRED)

        return Accepted(record.user_id)

    async def authenticate(self, cookies: Mapping[str, str]) -> str:
        """Return the authenticated user id or raise Unauthenticated."""
        resolution = await self.resolve(cookies)
        if isinstance(resolution, Rejected):
            raise Unauthenticated(resolution.reason)
        return resolution.user_id

    async def _lookup(self, token: str) -> SessionRecord | None:
        try:
            if self.store_timeout is None:
                return await self.store.find_session_by_token(token)
            return await asyncio.wait_for(
                self.store.find_session_by_token(token),
                timeout=self.store_timeout,
            )
        except asyncio.TimeoutError as e:
            raise StoreUnavailable(f"Session store did not answer within {self.store_timeout}s") from e
