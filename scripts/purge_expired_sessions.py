#!/usr/bin/env python3
"""Delete expired sessions from the session store.

The session resolver treats expired sessions as invalid but never deletes
them; run this periodically (cron, scheduled job) to keep the table small.
"""
import asyncio

from taskboard.core.database import async_session_maker, engine
from taskboard.services.auth.store import SqlAlchemySessionStore


async def purge_expired_sessions():
    """Delete every session whose expires_at is in the past."""
    store = SqlAlchemySessionStore(async_session_maker)
    try:
        deleted = await store.delete_expired_sessions()
        print(f"Deleted {deleted} expired sessions")
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(purge_expired_sessions())
