"""Rotating-secret scheduler.

Each active session gets one asyncio task that advances its secret every
``rotation_interval_seconds`` until the session ends. The interval doubles as
the grace window: a superseded secret stays acceptable for one more tick.

The task registry lives only in memory. After a restart, sessions are re-armed
lazily by whoever next loads them (session start, the active-session lookup).
"""
import asyncio
import logging
import secrets
import time
from enum import Enum
from typing import Optional

from pymongo.errors import PyMongoError

from rollcall.config import settings
from rollcall.models.session import AttendanceSession

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_secret() -> str:
    return secrets.token_urlsafe(16)


async def shift_secret(session: AttendanceSession, new_secret: str, new_ts: int) -> bool:
    """Move the current secret to previous and install ``new_secret`` as current.

    Applied only if the stored current generation is still the one ``session``
    was read with, so a rotation tick and a key-sync never overwrite each
    other's history. Returns False when the stored row had already moved on.
    """
    result = await AttendanceSession.get_motor_collection().update_one(
        {
            "_id": session.id,
            "current_secret": session.current_secret,
            "current_secret_ts": session.current_secret_ts,
        },
        {
            "$set": {
                "previous_secret": session.current_secret,
                "previous_secret_ts": session.current_secret_ts,
                "current_secret": new_secret,
                "current_secret_ts": new_ts,
            }
        },
    )
    return result.modified_count == 1


class TickOutcome(str, Enum):
    ROTATED = "rotated"
    DISARMED = "disarmed"  # session gone or ended; the task stops
    CONTENDED = "contended"  # another writer replaced the secret first
    RETRYABLE_FAULT = "retryable_fault"


class RotationSupervisor:
    def __init__(self, interval_ms: int):
        self.interval_ms = interval_ms
        self._tasks: dict[str, asyncio.Task] = {}

    def armed(self, session_id: str) -> bool:
        task = self._tasks.get(session_id)
        return task is not None and not task.done()

    def arm(self, session_id: str) -> bool:
        """Start rotating ``session_id`` unless a task already does. Returns True if a task was started."""
        # No await between the lookup and the insert: atomic on the event loop.
        if self.armed(session_id):
            return False
        self._tasks[session_id] = asyncio.create_task(
            self._run(session_id), name=f"rotate:{session_id}"
        )
        logger.debug("Armed rotation for session %s", session_id)
        return True

    def disarm(self, session_id: str) -> None:
        task = self._tasks.pop(session_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def tick(self, session_id: str, now: Optional[int] = None) -> TickOutcome:
        """Advance the secret once. Storage faults are logged and left for the next tick."""
        try:
            session = await AttendanceSession.get(session_id)
            now = now_ms() if now is None else now
            if session is None or session.has_ended(now):
                return TickOutcome.DISARMED
            if not await shift_secret(session, generate_secret(), now):
                return TickOutcome.CONTENDED
            return TickOutcome.ROTATED
        except PyMongoError:
            logger.exception("Rotation tick failed for session %s; retrying next tick", session_id)
            return TickOutcome.RETRYABLE_FAULT

    async def _run(self, session_id: str) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval_ms / 1000)
                outcome = await self.tick(session_id)
                logger.debug("Rotation tick for session %s: %s", session_id, outcome.value)
                if outcome is TickOutcome.DISARMED:
                    logger.info("Session %s ended; rotation disarmed", session_id)
                    return
        except Exception:
            logger.exception("Rotation task for session %s stopped unexpectedly; it re-arms on next lookup", session_id)
        finally:
            if self._tasks.get(session_id) is asyncio.current_task():
                del self._tasks[session_id]


rotation = RotationSupervisor(settings.grace_window_ms)
