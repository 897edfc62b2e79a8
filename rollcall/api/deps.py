"""Shared dependencies: instructor JWT auth and class ownership checks."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Annotated, Optional

import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt

from rollcall.config import settings

security = HTTPBearer(auto_error=False)

INSTRUCTOR_ROLE = "instructor"


@dataclass
class Instructor:
    class_id: str


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def create_access_token(class_id: str) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode = {"sub": class_id, "role": INSTRUCTOR_ROLE, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


async def get_current_instructor(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Instructor:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = jwt.decode(credentials.credentials, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    class_id = payload.get("sub")
    if payload.get("type") != "access" or payload.get("role") != INSTRUCTOR_ROLE or not class_id:
        raise HTTPException(status_code=401, detail="Invalid token")
    return Instructor(class_id=class_id)


def ensure_class_access(instructor: Instructor, class_id: str) -> None:
    if instructor.class_id != class_id:
        raise HTTPException(status_code=403, detail="Not the instructor of this class")


# Type alias for route injection
InstructorOnly = Annotated[Instructor, Depends(get_current_instructor)]
