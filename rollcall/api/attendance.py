"""Student attendance submission (possibly delayed by offline capture)."""
import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from rollcall.models.attendance import AttendanceSubmit
from rollcall.services.submissions import RejectReason, SubmissionOutcome, submit_attendance

logger = logging.getLogger(__name__)

router = APIRouter()

REJECTION_RESPONSES = {
    RejectReason.INVALID_TOKEN: (400, "invalid token"),
    RejectReason.STUDENT_NOT_FOUND: (404, "student not found"),
    RejectReason.SESSION_NOT_SYNCED: (409, "session not yet synced"),
    RejectReason.STALE_TOKEN: (400, "stale token"),
    RejectReason.OUTSIDE_WINDOW: (400, "outside session window"),
}


@router.post("")
async def submit(data: AttendanceSubmit):
    result = await submit_attendance(data.studentId, data.token, data.scanTime)
    if result.outcome is SubmissionOutcome.ACCEPTED:
        return {"ok": True}
    if result.outcome is SubmissionOutcome.DUPLICATE:
        return {"ok": True, "duplicate": True}
    status_code, message = REJECTION_RESPONSES[result.reason]
    logger.warning(
        "Rejected attendance from student %s for session %s: %s",
        data.studentId, result.session_id, result.reason.value,
    )
    return JSONResponse(
        status_code=status_code,
        content={"ok": False, "reason": result.reason.value, "error": message},
    )
