# backend/taskboard/services/auth/store.py
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from taskboard.core.config import settings
from taskboard.core.errors import StoreUnavailable
from taskboard.core.security import generate_session_token
from taskboard.models.session import Session


@dataclass(frozen=True)
class SessionRecord:
    """Read-only snapshot of a persisted session."""
    id: str
    user_id: str
    expires_at: datetime


class SessionStore(ABC):
    """Abstract interface for session persistence."""

    @abstractmethod
    async def find_session_by_token(self, token: str) -> SessionRecord | None:
        """Get the session whose token equals ``token`` exactly."""
        pass

    @abstractmethod
    async def create_session(
        self,
        user_id: str,
        expires_at: datetime | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> str:
        """Persist a new session and return its token.

        Without ``expires_at`` the session lives for the store's default lifetime.
        """
        pass

    @abstractmethod
    async def revoke_session(self, token: str) -> bool:
        """Delete a session by token.

        Returns True if a session was deleted, False otherwise.
        """
        pass

    @abstractmethod
    async def delete_expired_sessions(self, now: datetime | None = None) -> int:
        """Delete sessions that expired before ``now``. Returns the count."""
        pass


class SqlAlchemySessionStore(SessionStore):
    """Session store backed by the ``sessions`` table.

    Every call runs in its own AsyncSession, so the pooled connection goes
    back to the pool on every exit path, cancellation included.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        session_lifetime: timedelta | None = None,
    ):
        self.session_factory = session_factory
        self.session_lifetime = session_lifetime or timedelta(days=settings.session_expire_days)

    async def find_session_by_token(self, token: str) -> SessionRecord | None:
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(Session.id, Session.user_id, Session.expires_at).where(Session.token == token)
                )
                row = result.one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"Session lookup failed: {e}") from e

        if row is None:
            return None
        return SessionRecord(id=row.id, user_id=row.user_id, expires_at=row.expires_at)

    async def create_session(
        self,
        user_id: str,
        expires_at: datetime | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> str:
        token = generate_session_token()
        if expires_at is None:
            expires_at = datetime.now(timezone.utc) + self.session_lifetime
        try:
            async with self.session_factory() as db:
                db.add(Session(
                    user_id=user_id,
                    token=token,
                    expires_at=expires_at,
                    ip_address=ip_address,
                    user_agent=user_agent,
                ))
                await db.commit()
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"Session creation failed: {e}") from e
        return token

    async def revoke_session(self, token: str) -> bool:
        try:
            async with self.session_factory() as db:
                result = await db.execute(delete(Session).where(Session.token == token))
                await db.commit()
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"Session revocation failed: {e}") from e
        return result.rowcount > 0

    async def delete_expired_sessions(self, now: datetime | None = None) -> int:
        cutoff = now or datetime.now(timezone.utc)
        try:
            async with self.session_factory() as db:
                result = await db.execute(delete(Session).where(Session.expires_at < cutoff))
                await db.commit()
        except (SQLAlchemyError, OSError) as e:
            raise StoreUnavailable(f"Expired session cleanup failed: {e}") from e
        return result.rowcount
