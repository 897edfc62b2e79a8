"""Instructor-facing session endpoints: start, code issuance, key-sync."""
from fastapi import APIRouter, HTTPException

from rollcall.api.deps import Instructor, InstructorOnly, ensure_class_access
from rollcall.models.session import KeySync, SessionOut, SessionRef, SessionStart
from rollcall.services.codes import issue_code
from rollcall.services.qr import render_data_url
from rollcall.services.sessions import SyncOutcome, create_session, get_session, sync_key

router = APIRouter()


async def _ensure_session_access(session_id: str, instructor: Instructor) -> None:
    session = await get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    ensure_class_access(instructor, session.class_id)


@router.post("/start", response_model=SessionOut)
async def start_session(data: SessionStart, instructor: InstructorOnly):
    ensure_class_access(instructor, data.classId)
    session = await create_session(data.classId)
    return SessionOut(sessionId=session.id, classId=session.class_id, start=session.start_ts, end=session.end_ts)


@router.post("/qr")
async def get_session_code(data: SessionRef, instructor: InstructorOnly):
    """Current code for display. Does not rotate the secret."""
    await _ensure_session_access(data.sessionId, instructor)
    code = await issue_code(data.sessionId)
    return {
        "token": code.token,
        "dataUrl": render_data_url(code.token),
        "issuedAt": code.issued_at,
        "payloadExpSec": code.expires_in,
        "secretPreview": code.secret_preview,
        "refreshedAt": code.secret_updated_at,
    }


@router.post("/key-sync")
async def key_sync(data: KeySync, instructor: InstructorOnly):
    await _ensure_session_access(data.sessionId, instructor)
    outcome = await sync_key(data.sessionId, data.observedSecret, data.observed_ts())
    if outcome is SyncOutcome.NOOP:
        return {"ok": True, "noop": True}
    return {"ok": True}
