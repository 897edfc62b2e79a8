"""Submission validation: deciding whether a reported capture proves presence.

A report ``(student, token, scan time)`` may arrive long after the capture if
the device was offline. It is accepted only if the secret it carries is one of
the session's two live generations and both the claimed capture and the report
itself fall within one rotation interval of that generation becoming current.
Rejections are returned as results, not raised.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pymongo.errors import DuplicateKeyError

from rollcall.config import settings
from rollcall.errors import InvalidCodeToken
from rollcall.models.attendance import AttendanceRecord
from rollcall.models.session import AttendanceSession
from rollcall.models.student import Student
from rollcall.services.codes import TokenFormat, decode_code_token
from rollcall.services.rotation import now_ms

logger = logging.getLogger(__name__)


class SubmissionOutcome(str, Enum):
    ACCEPTED = "accepted"
    DUPLICATE = "duplicate"
    REJECTED = "rejected"


class RejectReason(str, Enum):
    INVALID_TOKEN = "invalid_token"
    STUDENT_NOT_FOUND = "student_not_found"
    SESSION_NOT_SYNCED = "session_not_synced"
    STALE_TOKEN = "stale_token"
    OUTSIDE_WINDOW = "outside_window"


@dataclass
class SubmissionResult:
    outcome: SubmissionOutcome
    reason: Optional[RejectReason] = None
    token_format: Optional[TokenFormat] = None
    session_id: Optional[str] = None

    @classmethod
    def rejected(cls, reason: RejectReason, **kwargs) -> "SubmissionResult":
        return cls(SubmissionOutcome.REJECTED, reason=reason, **kwargs)


async def submit_attendance(
    student_id: str, token: str, scan_ts: int, now: Optional[int] = None
) -> SubmissionResult:
    now = now_ms() if now is None else now
    try:
        payload, token_format = decode_code_token(token)
    except InvalidCodeToken:
        return SubmissionResult.rejected(RejectReason.INVALID_TOKEN)
    context = {"token_format": token_format, "session_id": payload.session_id}

    student = await Student.get(student_id)
    if not student or not student.is_active:
        return SubmissionResult.rejected(RejectReason.STUDENT_NOT_FOUND, **context)

    session = await AttendanceSession.get(payload.session_id)
    if not session:
        return SubmissionResult.rejected(RejectReason.SESSION_NOT_SYNCED, **context)

    secret_ts = session.secret_time(payload.secret)
    if secret_ts is None:
        return SubmissionResult.rejected(RejectReason.STALE_TOKEN, **context)

    grace = settings.grace_window_ms
    # The report bound holds even if the client clock (scan_ts) is wrong.
    if scan_ts - secret_ts > grace or now - secret_ts > grace:
        return SubmissionResult.rejected(RejectReason.STALE_TOKEN, **context)

    if not session.start_ts <= scan_ts <= session.end_ts:
        return SubmissionResult.rejected(RejectReason.OUTSIDE_WINDOW, **context)

    record = AttendanceRecord(session_id=session.id, student_id=student_id, scan_ts=scan_ts)
    try:
        await record.insert()
    except DuplicateKeyError:
        return SubmissionResult(SubmissionOutcome.DUPLICATE, **context)
    logger.info(f"Recorded attendance of student {student_id} in session {session.id} ({token_format.value} token)")
    return SubmissionResult(SubmissionOutcome.ACCEPTED, **context)
