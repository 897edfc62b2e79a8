"""Attendance session with its two-generation rotating secret history."""
from datetime import datetime
from typing import Optional
from uuid import uuid4

import pymongo
from beanie import Document, Indexed
from pydantic import BaseModel, Field, AliasChoices
from pymongo import IndexModel


class AttendanceSession(Document):
    """One attendance window for one class.

    All instants are epoch milliseconds. ``previous_secret`` holds exactly the
    immediately preceding generation and is ``None`` until the first rotation.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    class_id: Indexed(str)
    start_ts: int
    end_ts: int

    current_secret: str
    current_secret_ts: int
    previous_secret: Optional[str] = None
    previous_secret_ts: Optional[int] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "sessions"
        indexes = [
            IndexModel(
                [("class_id", pymongo.ASCENDING), ("start_ts", pymongo.DESCENDING)],
                name="class_start",
            ),
        ]

    def has_ended(self, now: int) -> bool:
        return now > self.end_ts

    def secret_time(self, secret: str) -> Optional[int]:
        """Timestamp of the live generation matching ``secret``, or None for any other value."""
        if secret == self.current_secret:
            return self.current_secret_ts
        if self.previous_secret is not None and secret == self.previous_secret:
            return self.previous_secret_ts or 0
        return None


class SessionStart(BaseModel):
    classId: str = Field(min_length=1)


class SessionRef(BaseModel):
    sessionId: str = Field(min_length=1)


class SessionOut(BaseModel):
    sessionId: str
    classId: str
    start: int
    end: int


class KeySync(BaseModel):
    sessionId: str = Field(min_length=1)
    observedSecret: str = Field(min_length=1, validation_alias=AliasChoices("observedSecret", "currentKey"))
    # epoch ms, or an ISO-8601 string from clients that send wall-clock text
    observedTime: int | datetime = Field(validation_alias=AliasChoices("observedTime", "currentKeyTimestamp"))

    def observed_ts(self) -> int:
        if isinstance(self.observedTime, datetime):
            return int(self.observedTime.timestamp() * 1000)
        return self.observedTime
