from taskboard.models.base import Base, TimestampMixin
from taskboard.models.user import User
from taskboard.models.session import Session

__all__ = [
    "Base", "TimestampMixin",
    "User",
    "Session",
]
