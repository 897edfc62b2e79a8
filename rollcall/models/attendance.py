from datetime import datetime
from uuid import uuid4

import pymongo
from beanie import Document
from pydantic import BaseModel, Field, AliasChoices
from pymongo import IndexModel


class AttendanceRecord(Document):
    """One confirmed presence. At most one per (session_id, student_id), enforced by a unique index."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    session_id: str
    student_id: str
    scan_ts: int  # client-claimed capture instant, epoch ms
    recorded_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendance"
        indexes = [
            IndexModel(
                [("session_id", pymongo.ASCENDING), ("student_id", pymongo.ASCENDING)],
                name="uq_session_student",
                unique=True,
            ),
        ]


class AttendanceSubmit(BaseModel):
    studentId: str = Field(min_length=1)
    token: str = Field(min_length=1)
    scanTime: int = Field(validation_alias=AliasChoices("scanTime", "scanTs"))


class AttendanceOut(BaseModel):
    studentId: str
    name: str
    scanTime: int
