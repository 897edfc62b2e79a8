"""Session creation, active-session lookup with lazy re-arm, and key-sync."""
import pytest

from rollcall.config import settings
from rollcall.errors import ClassNotFound, SessionEnded, SessionNotFound
from rollcall.models.session import AttendanceSession
from rollcall.services import sessions as sessions_service
from rollcall.services.rotation import rotation, shift_secret
from rollcall.services.sessions import (
    SyncOutcome,
    create_session,
    find_active_session,
    sync_key,
)

from tests.conftest import CLASS_ID

T0 = 1_700_000_000_000


async def test_create_session_fixes_window_and_arms_rotation(school_class):
    session = await create_session(CLASS_ID, now=T0)

    assert session.start_ts == T0
    assert session.end_ts == T0 + settings.session_duration_ms
    assert session.current_secret_ts == T0
    assert session.previous_secret is None and session.previous_secret_ts is None
    assert rotation.armed(session.id)


async def test_create_session_for_unknown_class():
    with pytest.raises(ClassNotFound):
        await create_session("nope", now=T0)


async def test_find_active_picks_latest_started_session(school_class):
    await create_session(CLASS_ID, now=T0)
    later = await create_session(CLASS_ID, now=T0 + 60_000)

    found = await find_active_session(CLASS_ID, now=T0 + 120_000)

    assert found.id == later.id


async def test_find_active_ignores_ended_sessions(school_class):
    session = await create_session(CLASS_ID, now=T0)

    assert await find_active_session(CLASS_ID, now=session.end_ts + 1) is None
    assert await find_active_session("other-class", now=T0) is None


async def test_find_active_rearms_rotation_after_restart(school_class):
    session = await create_session(CLASS_ID, now=T0)
    rotation.disarm(session.id)
    assert not rotation.armed(session.id)

    await find_active_session(CLASS_ID, now=T0 + 1_000)

    assert rotation.armed(session.id)


async def test_key_sync_installs_newer_secret_as_a_rotation(school_class):
    session = await create_session(CLASS_ID, now=T0)

    outcome = await sync_key(session.id, "from-instructor", T0 + 5_000, now=T0 + 6_000)

    stored = await AttendanceSession.get(session.id)
    assert outcome is SyncOutcome.APPLIED
    assert stored.current_secret == "from-instructor"
    assert stored.current_secret_ts == T0 + 5_000
    assert stored.previous_secret == session.current_secret
    assert stored.previous_secret_ts == T0


async def test_key_sync_replay_is_noop_both_times(school_class):
    session = await create_session(CLASS_ID, now=T0)
    await sync_key(session.id, "k1", T0 + 5_000, now=T0 + 6_000)
    before = await AttendanceSession.get(session.id)

    first = await sync_key(session.id, "k1", T0 + 5_000, now=T0 + 7_000)
    second = await sync_key(session.id, "k1", T0 + 5_000, now=T0 + 8_000)

    after = await AttendanceSession.get(session.id)
    assert first is SyncOutcome.NOOP and second is SyncOutcome.NOOP
    assert after.model_dump() == before.model_dump()


async def test_key_sync_with_older_observation_is_noop(school_class):
    session = await create_session(CLASS_ID, now=T0)

    outcome = await sync_key(session.id, "different", T0 - 1, now=T0 + 1_000)

    assert outcome is SyncOutcome.NOOP
    assert (await AttendanceSession.get(session.id)).current_secret == session.current_secret


async def test_key_sync_refuses_ended_and_unknown_sessions(school_class):
    session = await create_session(CLASS_ID, now=T0)

    with pytest.raises(SessionEnded):
        await sync_key(session.id, "k", session.end_ts + 5, now=session.end_ts + 10)
    with pytest.raises(SessionNotFound):
        await sync_key("missing", "k", T0, now=T0)


def _tick_before_first_shift(monkeypatch, session_id, tick_at):
    """Make sync_key's first write race a rotation tick that lands just before it."""
    calls = {"n": 0}

    async def racing_shift(session, new_secret, new_ts):
        calls["n"] += 1
        if calls["n"] == 1:
            await rotation.tick(session_id, now=tick_at)
            calls["tick_secret"] = (await AttendanceSession.get(session_id)).current_secret
        return await shift_secret(session, new_secret, new_ts)

    monkeypatch.setattr(sessions_service, "shift_secret", racing_shift)
    return calls


async def test_key_sync_retries_after_losing_to_a_tick(school_class, monkeypatch):
    session = await create_session(CLASS_ID, now=T0)
    calls = _tick_before_first_shift(monkeypatch, session.id, T0 + 5_000)

    outcome = await sync_key(session.id, "k", T0 + 6_000, now=T0 + 6_000)

    stored = await AttendanceSession.get(session.id)
    assert outcome is SyncOutcome.APPLIED
    assert calls["n"] == 2
    assert stored.current_secret == "k"
    assert stored.previous_secret == calls["tick_secret"]
    assert stored.previous_secret_ts == T0 + 5_000


async def test_key_sync_older_than_racing_tick_becomes_noop(school_class, monkeypatch):
    session = await create_session(CLASS_ID, now=T0)
    _tick_before_first_shift(monkeypatch, session.id, T0 + 5_000)

    outcome = await sync_key(session.id, "k", T0 + 4_000, now=T0 + 6_000)

    stored = await AttendanceSession.get(session.id)
    assert outcome is SyncOutcome.NOOP
    assert stored.current_secret_ts == T0 + 5_000
    assert stored.previous_secret == session.current_secret
