"""Code issuance: packaging the current secret into a scannable token, and decoding it back."""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from jose import JWTError, jwt
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from rollcall.config import settings
from rollcall.errors import InvalidCodeToken, SessionEnded, SessionNotFound
from rollcall.models.session import AttendanceSession
from rollcall.services.rotation import now_ms

logger = logging.getLogger(__name__)

SECRET_PREVIEW_LENGTH = 8


class TokenFormat(str, Enum):
    SIGNED = "signed"
    PLAIN = "plain"  # unsigned JSON payload; accepted only while allow_plain_code_tokens is on


class CodePayload(BaseModel):
    """Wire payload ``{sessionId, secret, issuedAt}`` carried by a displayed code."""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId", min_length=1)
    secret: str = Field(validation_alias=AliasChoices("secret", "key"), min_length=1)
    issued_at: Optional[int] = Field(default=None, validation_alias=AliasChoices("issuedAt", "ts"))

    def claims(self) -> dict:
        return {"sessionId": self.session_id, "secret": self.secret, "issuedAt": self.issued_at}


@dataclass
class IssuedCode:
    token: str
    issued_at: int
    secret_preview: str
    secret_updated_at: int
    expires_in: int  # seconds the token itself stays decodable


def encode_code_token(payload: CodePayload) -> str:
    issued = datetime.fromtimestamp(payload.issued_at / 1000, tz=timezone.utc)
    to_encode = payload.claims()
    to_encode["exp"] = issued + timedelta(hours=settings.code_token_expire_hours)
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_code_token(token: str) -> tuple[CodePayload, TokenFormat]:
    """Decode a captured token.

    The token's own expiry is ignored: a capture may be reported hours later
    by a device that was offline, and freshness is judged from the secret.
    """
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": False},
        )
        return CodePayload.model_validate(claims), TokenFormat.SIGNED
    except (JWTError, ValidationError):
        pass
    if not settings.allow_plain_code_tokens:
        raise InvalidCodeToken()
    try:
        payload = CodePayload.model_validate_json(token)
    except ValidationError:
        raise InvalidCodeToken()
    logger.warning(f"Accepted unsigned code token for session {payload.session_id}")
    return payload, TokenFormat.PLAIN


async def issue_code(session_id: str, now: Optional[int] = None) -> IssuedCode:
    """Package the session's current secret. Reading the secret never advances it."""
    session = await AttendanceSession.get(session_id)
    if not session:
        raise SessionNotFound()
    now = now_ms() if now is None else now
    if session.has_ended(now):
        raise SessionEnded()
    payload = CodePayload(session_id=session.id, secret=session.current_secret, issued_at=now)
    return IssuedCode(
        token=encode_code_token(payload),
        issued_at=now,
        secret_preview=session.current_secret[:SECRET_PREVIEW_LENGTH],
        secret_updated_at=session.current_secret_ts,
        expires_in=settings.code_token_expire_hours * 3600,
    )
