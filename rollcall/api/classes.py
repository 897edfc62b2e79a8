from typing import List
from uuid import uuid4

from fastapi import APIRouter, HTTPException

from rollcall.api.deps import InstructorOnly, ensure_class_access, get_password_hash
from rollcall.models.attendance import AttendanceOut, AttendanceRecord
from rollcall.models.school_class import SchoolClass, SchoolClassCreate
from rollcall.models.student import Student, StudentCreate, StudentOut
from rollcall.services.sessions import find_active_session, get_session

router = APIRouter()


@router.post("")
async def create_class(data: SchoolClassCreate):
    """Create a class; the instructor code becomes its login secret."""
    class_id = data.id or str(uuid4())
    if await SchoolClass.get(class_id):
        raise HTTPException(status_code=400, detail="Class already exists")
    cls = SchoolClass(
        id=class_id,
        name=data.name,
        hashed_instructor_code=get_password_hash(data.instructorCode),
    )
    await cls.insert()
    return {"id": cls.id, "name": cls.name}


@router.post("/{class_id}/students", response_model=StudentOut)
async def enrol_student(class_id: str, data: StudentCreate, instructor: InstructorOnly):
    """Add (or re-enrol) a single student in the class."""
    ensure_class_access(instructor, class_id)
    student = Student(id=data.id.strip(), full_name=data.name.strip(), class_id=class_id)
    await student.save()
    return StudentOut(studentId=student.id, name=student.full_name, classId=student.class_id)


@router.get("/{class_id}/active-session")
async def get_active_session(class_id: str):
    """Which session is running for the class, without its rotating secret."""
    session = await find_active_session(class_id)
    if not session:
        return {"active": False}
    return {"active": True, "sessionId": session.id, "start": session.start_ts, "end": session.end_ts}


@router.get("/{class_id}/attendance/{session_id}", response_model=List[AttendanceOut])
async def list_session_attendance(class_id: str, session_id: str, instructor: InstructorOnly):
    """Attendance facts of one session, ordered by claimed scan time."""
    ensure_class_access(instructor, class_id)
    session = await get_session(session_id)
    if not session or session.class_id != class_id:
        raise HTTPException(status_code=404, detail="Session not found")
    records = await AttendanceRecord.find(AttendanceRecord.session_id == session_id).sort("scan_ts").to_list()
    students = await Student.find({"_id": {"$in": [r.student_id for r in records]}}).to_list()
    names = {s.id: s.full_name for s in students}
    return [
        AttendanceOut(studentId=r.student_id, name=names.get(r.student_id, ""), scanTime=r.scan_ts)
        for r in records
    ]
