"""Instructor login (class id + instructor code) and student lookup."""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from rollcall.api.deps import create_access_token, verify_password
from rollcall.models.school_class import SchoolClass
from rollcall.models.student import Student, StudentOut

router = APIRouter()


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class InstructorLoginRequest(BaseModel):
    classId: str
    instructorCode: str


class StudentLoginRequest(BaseModel):
    studentId: str


@router.post("/instructor/login", response_model=TokenResponse)
async def instructor_login(req: InstructorLoginRequest):
    cls = await SchoolClass.get(req.classId)
    if not cls or not verify_password(req.instructorCode, cls.hashed_instructor_code):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenResponse(access_token=create_access_token(cls.id))


@router.post("/student/login", response_model=StudentOut)
async def student_login(req: StudentLoginRequest):
    student = await Student.get(req.studentId)
    if not student or not student.is_active:
        raise HTTPException(status_code=404, detail="Student not found")
    return StudentOut(studentId=student.id, name=student.full_name, classId=student.class_id)
