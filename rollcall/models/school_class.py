from datetime import datetime
from typing import Optional
from uuid import uuid4

from beanie import Document
from pydantic import BaseModel, Field


class SchoolClass(Document):
    """A class that attendance sessions are run for. The instructor code is the class login secret."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    hashed_instructor_code: str
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "classes"


class SchoolClassCreate(BaseModel):
    name: str = Field(min_length=1)
    instructorCode: str = Field(min_length=1)
    id: Optional[str] = None
