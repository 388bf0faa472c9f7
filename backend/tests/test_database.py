import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from taskboard.core.database import async_session_maker, engine


@pytest.mark.asyncio
async def test_engine_created():
    assert engine is not None


@pytest.mark.asyncio
async def test_session_maker_yields_async_session():
    async with async_session_maker() as session:
        assert isinstance(session, AsyncSession)


def test_session_maker_keeps_objects_after_commit():
    assert async_session_maker.kw["expire_on_commit"] is False
