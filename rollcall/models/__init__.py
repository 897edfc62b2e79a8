"""Beanie document models and Pydantic schemas."""
from rollcall.models.school_class import SchoolClass, SchoolClassCreate
from rollcall.models.student import Student, StudentCreate, StudentOut
from rollcall.models.session import AttendanceSession, SessionStart, SessionRef, SessionOut, KeySync
from rollcall.models.attendance import AttendanceRecord, AttendanceSubmit, AttendanceOut

DOCUMENT_MODELS = [
    SchoolClass,
    Student,
    AttendanceSession,
    AttendanceRecord,
]

__all__ = [
    "SchoolClass",
    "SchoolClassCreate",
    "Student",
    "StudentCreate",
    "StudentOut",
    "AttendanceSession",
    "SessionStart",
    "SessionRef",
    "SessionOut",
    "KeySync",
    "AttendanceRecord",
    "AttendanceSubmit",
    "AttendanceOut",
    "DOCUMENT_MODELS",
]
