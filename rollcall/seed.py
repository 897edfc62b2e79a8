"""Seed a demo class when SEED_DEMO_CLASS is enabled."""
import logging

from rollcall.api.deps import get_password_hash
from rollcall.models.school_class import SchoolClass

logger = logging.getLogger(__name__)

DEMO_CLASS_ID = "demo-class"
DEMO_CLASS_NAME = "CS101 Demo"
DEMO_INSTRUCTOR_CODE = "teach123"


async def seed_demo_class():
    existing = await SchoolClass.get(DEMO_CLASS_ID)
    if existing:
        return
    await SchoolClass(
        id=DEMO_CLASS_ID,
        name=DEMO_CLASS_NAME,
        hashed_instructor_code=get_password_hash(DEMO_INSTRUCTOR_CODE),
    ).insert()
    logger.info(f"Seeded demo class {DEMO_CLASS_ID}; enrol students before starting a session")
