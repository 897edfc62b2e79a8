"""Application configuration using Pydantic Settings."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "Rollcall"
    debug: bool = False

    # MongoDB
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db_name: str = "rollcall"

    # JWT (instructor login + signed code tokens)
    jwt_secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 480

    # Sessions / rotating codes
    session_duration_minutes: int = 90
    rotation_interval_seconds: int = 40  # also the grace window for the previous secret
    code_token_expire_hours: int = 3
    allow_plain_code_tokens: bool = True  # accept unsigned {sessionId, secret, issuedAt} JSON

    # Dev
    seed_demo_class: bool = False

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173"

    @property
    def grace_window_ms(self) -> int:
        return self.rotation_interval_seconds * 1000

    @property
    def session_duration_ms(self) -> int:
        return self.session_duration_minutes * 60 * 1000

    @model_validator(mode="after")
    def _validate_production_secrets(self):
        if not self.debug:
            if self.jwt_secret_key in ("change-me-in-production", ""):
                raise ValueError(
                    "JWT_SECRET_KEY must be set to a strong secret when DEBUG is not enabled. "
                    "Generate one with: python -c \"import secrets; print(secrets.token_hex(32))\""
                )
        if self.rotation_interval_seconds <= 0:
            raise ValueError("ROTATION_INTERVAL_SECONDS must be positive")
        if self.session_duration_minutes <= 0:
            raise ValueError("SESSION_DURATION_MINUTES must be positive")
        return self


settings = Settings()
