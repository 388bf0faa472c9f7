"""Session store and resolver for cookie-based authentication."""
from taskboard.services.auth.store import SessionRecord, SessionStore, SqlAlchemySessionStore
from taskboard.services.auth.resolver import Accepted, Rejected, Resolution, SessionResolver

__all__ = [
    "SessionRecord", "SessionStore", "SqlAlchemySessionStore",
    "Accepted", "Rejected", "Resolution", "SessionResolver",
]
