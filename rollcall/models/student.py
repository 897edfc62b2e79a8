"""Roster entries. Identity is owned elsewhere; the core only needs to resolve an opaque id."""
from datetime import datetime

from beanie import Document, Indexed
from pydantic import BaseModel, Field


class Student(Document):
    id: str
    full_name: str
    class_id: Indexed(str)
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "students"


class StudentCreate(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)


class StudentOut(BaseModel):
    studentId: str
    name: str
    classId: str
