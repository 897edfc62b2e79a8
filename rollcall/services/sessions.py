"""Session store, active-session lookup and key-sync override."""
import logging
from enum import Enum
from typing import Optional

from rollcall.config import settings
from rollcall.errors import ClassNotFound, SessionEnded, SessionNotFound
from rollcall.models.school_class import SchoolClass
from rollcall.models.session import AttendanceSession
from rollcall.services.rotation import generate_secret, now_ms, rotation, shift_secret

logger = logging.getLogger(__name__)

SYNC_ATTEMPTS = 3


class SyncOutcome(str, Enum):
    APPLIED = "applied"
    NOOP = "noop"


async def get_session(session_id: str) -> Optional[AttendanceSession]:
    return await AttendanceSession.get(session_id)


async def create_session(class_id: str, now: Optional[int] = None) -> AttendanceSession:
    """Open a fixed-length session for ``class_id`` starting now and arm its rotation."""
    if not await SchoolClass.get(class_id):
        raise ClassNotFound()
    now = now_ms() if now is None else now
    session = AttendanceSession(
        class_id=class_id,
        start_ts=now,
        end_ts=now + settings.session_duration_ms,
        current_secret=generate_secret(),
        current_secret_ts=now,
    )
    await session.insert()
    rotation.arm(session.id)
    logger.info(f"Started session {session.id} for class {class_id} until {session.end_ts}")
    return session


async def find_active_session(class_id: str, now: Optional[int] = None) -> Optional[AttendanceSession]:
    """Most recently started session of ``class_id`` whose window contains now.

    Re-arms rotation for the session found, which is how rotation recovers
    after the process lost its in-memory timers.
    """
    now = now_ms() if now is None else now
    session = await AttendanceSession.find(
        AttendanceSession.class_id == class_id,
        AttendanceSession.start_ts <= now,
        AttendanceSession.end_ts >= now,
    ).sort(-AttendanceSession.start_ts).first_or_none()
    if session:
        rotation.arm(session.id)
    return session


async def sync_key(
    session_id: str, observed_secret: str, observed_ts: int, now: Optional[int] = None
) -> SyncOutcome:
    """Install a secret observed on the instructor's client as the current generation.

    Only a strictly newer observation changes anything; the change is the same
    current-to-previous shift a rotation tick performs.
    """
    now = now_ms() if now is None else now
    for _ in range(SYNC_ATTEMPTS):
        session = await get_session(session_id)
        if not session:
            raise SessionNotFound()
        if session.has_ended(now):
            raise SessionEnded()
        if observed_ts <= session.current_secret_ts:
            return SyncOutcome.NOOP
        if await shift_secret(session, observed_secret, observed_ts):
            logger.info(f"Key-sync installed a new secret for session {session_id} at {observed_ts}")
            return SyncOutcome.APPLIED
    # Lost the race on every attempt; the stored secret kept moving ahead of us.
    logger.warning(f"Key-sync for session {session_id} gave up after {SYNC_ATTEMPTS} contended attempts")
    return SyncOutcome.NOOP
