# backend/taskboard/core/security.py
"""Session cookie codec.

The session credential travels in a single cookie whose value is either a
bare opaque token or ``<token>.<signature>``. Everything here is pure
computation: no store access, and malformed input degrades to ``None``
(no cookie) instead of raising.
"""
import base64
import hashlib
import hmac
import secrets
from typing import Mapping, NewType
from urllib.parse import unquote

RawToken = NewType("RawToken", str)

SEPARATOR = "."
SECURE_PREFIX = "__Secure-"


def session_cookie_names(name: str) -> tuple[str, ...]:
    """Cookie names that may carry the session, HTTPS variant included."""
    return (name, f"{SECURE_PREFIX}{name}")


def read_session_cookie(cookies: Mapping[str, str], name: str) -> str | None:
    for candidate in session_cookie_names(name):
        value = cookies.get(candidate)
        if value:
            return unquote(value)
    return None


def sign_token(token: str, secret: str) -> str:
    """HMAC-SHA256 signature of a token, base64 encoded."""
    digest = hmac.new(secret.encode(), token.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def encode_session_cookie(token: str, secret: str | None = None) -> str:
    """Serialize a token into the session cookie value."""
    if secret is None:
        return token
    return f"{token}{SEPARATOR}{sign_token(token, secret)}"


def extract_session_token(
    cookies: Mapping[str, str],
    name: str,
    secret: str | None = None,
) -> RawToken | None:
    """Return the lookup token carried by the session cookie, or None.

    Only the part before the first separator is the token. When ``secret``
    is given the remainder must be the token's signature.
    """
    value = read_session_cookie(cookies, name)
    if value is None:
        return None

    token, sep, suffix = value.partition(SEPARATOR)
    if not token:
        return None

    if secret is not None:
        if not sep or not secrets.compare_digest(suffix.encode(), sign_token(token, secret).encode()):
            return None

    return RawToken(token)


def generate_session_token() -> str:
    """Generate a secure random session token."""
    return secrets.token_urlsafe(32)
