# backend/tests/test_session_resolver.py
import asyncio
import logging
import pytest
from datetime import datetime, timezone, timedelta

from taskboard.core.errors import RejectionReason, StoreUnavailable, Unauthenticated
from taskboard.core.security import encode_session_cookie
from taskboard.services.auth.resolver import Accepted, Rejected, SessionResolver, is_expired
from taskboard.services.auth.store import SessionRecord

from tests.fakes import COOKIE_NAME, InMemorySessionStore

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_resolver(store, now=NOW, **kwargs) -> SessionResolver:
    return SessionResolver(store=store, cookie_name=COOKIE_NAME, clock=lambda: now, **kwargs)


@pytest.mark.asyncio
async def test_valid_session_resolves_to_user_id(store):
    store.add("tok-1", "u-42", NOW + timedelta(seconds=3600))
    resolver = make_resolver(store)

    result = await resolver.resolve({COOKIE_NAME: "tok-1"})

    assert result == Accepted("u-42")


@pytest.mark.asyncio
async def test_expired_session_is_rejected(store):
    store.add("tok-1", "u-42", NOW + timedelta(seconds=3600))
    resolver = make_resolver(store, now=NOW + timedelta(seconds=3601))

    result = await resolver.resolve({COOKIE_NAME: "tok-1"})

    assert result == Rejected(RejectionReason.EXPIRED)
    # Expired records are left for out-of-band cleanup
    assert "tok-1" in store.sessions


@pytest.mark.asyncio
async def test_session_valid_at_exact_expiry(store):
    store.add("tok-1", "u-42", NOW)
    resolver = make_resolver(store, now=NOW)

    assert await resolver.resolve({COOKIE_NAME: "tok-1"}) == Accepted("u-42")


@pytest.mark.asyncio
async def test_unknown_token_is_rejected(store):
    store.add("tok-1", "u-42", NOW + timedelta(hours=1))
    resolver = make_resolver(store)

    result = await resolver.resolve({COOKIE_NAME: "tok-999"})

    assert result == Rejected(RejectionReason.NOT_FOUND)


@pytest.mark.asyncio
async def test_missing_cookie_skips_store(store):
    resolver = make_resolver(store)

    result = await resolver.resolve({})

    assert result == Rejected(RejectionReason.NO_COOKIE)
    assert store.lookups == []


@pytest.mark.asyncio
async def test_composite_cookie_looks_up_token_prefix(store):
    store.add("abc123", "u-7", NOW + timedelta(hours=1))
    resolver = make_resolver(store)

    result = await resolver.resolve({COOKIE_NAME: "abc123.xyz"})

    assert result == Accepted("u-7")
    assert store.lookups == ["abc123"]


@pytest.mark.asyncio
async def test_no_prefix_matching(store):
    store.add("abc123", "u-7", NOW + timedelta(hours=1))
    resolver = make_resolver(store)

    assert await resolver.resolve({COOKIE_NAME: "abc12"}) == Rejected(RejectionReason.NOT_FOUND)
    assert await resolver.resolve({COOKIE_NAME: "abc1234"}) == Rejected(RejectionReason.NOT_FOUND)


@pytest.mark.asyncio
async def test_one_store_read_per_call_and_idempotent(store):
    store.add("tok-1", "u-42", NOW + timedelta(hours=1))
    before = dict(store.sessions)
    resolver = make_resolver(store)

    results = [await resolver.resolve({COOKIE_NAME: "tok-1"}) for _ in range(3)]

    assert results == [Accepted("u-42")] * 3
    assert store.lookups == ["tok-1"] * 3
    assert store.sessions == before


@pytest.mark.asyncio
async def test_revocation_takes_effect_on_next_call(store):
    store.add("tok-1", "u-42", NOW + timedelta(hours=1))
    resolver = make_resolver(store)

    assert await resolver.resolve({COOKIE_NAME: "tok-1"}) == Accepted("u-42")
    await store.revoke_session("tok-1")
    assert await resolver.resolve({COOKIE_NAME: "tok-1"}) == Rejected(RejectionReason.NOT_FOUND)


@pytest.mark.asyncio
async def test_created_session_round_trips(store):
    token = await store.create_session("u-42", datetime.now(timezone.utc) + timedelta(days=7))
    resolver = SessionResolver(store=store, cookie_name=COOKIE_NAME)

    assert await resolver.authenticate({COOKIE_NAME: token}) == "u-42"


@pytest.mark.asyncio
async def test_signed_cookie_verified_before_lookup(store):
    store.add("tok-1", "u-42", NOW + timedelta(hours=1))
    resolver = make_resolver(store, cookie_secret="secret")

    signed = encode_session_cookie("tok-1", "secret")
    forged = encode_session_cookie("tok-1", "wrong")

    assert await resolver.resolve({COOKIE_NAME: signed}) == Accepted("u-42")
    assert await resolver.resolve({COOKIE_NAME: forged}) == Rejected(RejectionReason.BAD_SIGNATURE)
    assert await resolver.resolve({COOKIE_NAME: "tok-1"}) == Rejected(RejectionReason.BAD_SIGNATURE)
    assert await resolver.resolve({}) == Rejected(RejectionReason.NO_COOKIE)
    assert store.lookups == ["tok-1"]


@pytest.mark.asyncio
async def test_bad_signature_logged_separately_but_rejected_uniformly(store, caplog):
    store.add("tok-1", "u-42", NOW + timedelta(hours=1))
    resolver = make_resolver(store, cookie_secret="secret")
    forged = encode_session_cookie("tok-1", "wrong")

    with caplog.at_level(logging.DEBUG, logger="taskboard.services.auth.resolver"):
        with pytest.raises(Unauthenticated) as forged_exc:
            await resolver.authenticate({COOKIE_NAME: forged})
    with pytest.raises(Unauthenticated) as missing_exc:
        await resolver.authenticate({})

    assert "signature mismatch" in caplog.text
    assert forged_exc.value.reason == RejectionReason.BAD_SIGNATURE
    assert str(forged_exc.value) == str(missing_exc.value)


@pytest.mark.asyncio
async def test_authenticate_raises_uniform_error(store):
    store.add("tok-old", "u-42", NOW - timedelta(seconds=1))
    resolver = make_resolver(store)

    with pytest.raises(Unauthenticated) as expired:
        await resolver.authenticate({COOKIE_NAME: "tok-old"})
    with pytest.raises(Unauthenticated) as unknown:
        await resolver.authenticate({COOKIE_NAME: "tok-999"})
    with pytest.raises(Unauthenticated) as missing:
        await resolver.authenticate({})

    assert expired.value.reason == RejectionReason.EXPIRED
    assert unknown.value.reason == RejectionReason.NOT_FOUND
    assert missing.value.reason == RejectionReason.NO_COOKIE
    assert str(expired.value) == str(unknown.value) == str(missing.value)


@pytest.mark.asyncio
async def test_store_failure_is_not_unauthenticated():
    class BrokenStore(InMemorySessionStore):
        async def find_session_by_token(self, token):
            raise StoreUnavailable("database is down")

    resolver = make_resolver(BrokenStore())

    with pytest.raises(StoreUnavailable):
        await resolver.resolve({COOKIE_NAME: "tok-1"})


@pytest.mark.asyncio
async def test_slow_store_times_out_as_unavailable():
    class SlowStore(InMemorySessionStore):
        async def find_session_by_token(self, token):
            await asyncio.sleep(5)

    resolver = make_resolver(SlowStore(), store_timeout=0.01)

    with pytest.raises(StoreUnavailable):
        await resolver.resolve({COOKIE_NAME: "tok-1"})


def test_is_expired_treats_naive_timestamps_as_utc():
    record = SessionRecord(id="s-1", user_id="u-42", expires_at=datetime(2026, 10, 19, 12, 0))

    assert is_expired(record, NOW) is False
    assert is_expired(record, NOW + timedelta(microseconds=1)) is True
