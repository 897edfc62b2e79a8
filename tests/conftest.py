"""
Test configuration and fixtures.

Beanie is initialised against an in-memory mongomock database per test, so
the unique index on attendance is enforced exactly as in MongoDB.
"""
import os

os.environ.setdefault("DEBUG", "true")

import httpx
import pytest
import pytest_asyncio
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient

from rollcall.api.deps import create_access_token, get_password_hash
from rollcall.main import app
from rollcall.models import DOCUMENT_MODELS, SchoolClass, Student
from rollcall.services.rotation import rotation


CLASS_ID = "cs101"
INSTRUCTOR_CODE = "teach123"
STUDENT_ID = "s-001"


@pytest_asyncio.fixture(autouse=True)
async def database():
    """Fresh database per test; stops any rotation tasks the test armed."""
    client = AsyncMongoMockClient()
    await init_beanie(database=client["rollcall_test"], document_models=DOCUMENT_MODELS)
    yield client
    await rotation.shutdown()


@pytest_asyncio.fixture
async def school_class():
    cls = SchoolClass(id=CLASS_ID, name="CS101", hashed_instructor_code=get_password_hash(INSTRUCTOR_CODE))
    await cls.insert()
    return cls


@pytest_asyncio.fixture
async def student(school_class):
    s = Student(id=STUDENT_ID, full_name="Ada Lovelace", class_id=school_class.id)
    await s.insert()
    return s


@pytest.fixture
def instructor_headers():
    return {"Authorization": f"Bearer {create_access_token(CLASS_ID)}"}


@pytest_asyncio.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
