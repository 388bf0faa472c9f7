# backend/taskboard/core/errors.py
import enum


class RejectionReason(str, enum.Enum):
    """Why a session resolution was rejected. Internal diagnostics only."""
    NO_COOKIE = "no_cookie"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"


class AuthError(Exception):
    """Base session-authentication error."""
    pass


class Unauthenticated(AuthError):
    """No valid session was presented.

    The message is identical for every reason so that callers cannot tell an
    expired token from one that never existed.
    """

    def __init__(self, reason: RejectionReason):
        super().__init__("Not authenticated")
        self.reason = reason


class StoreUnavailable(AuthError):
    """The session store could not be reached or did not answer in time."""
    pass
