"""
Application settings loaded from environment variables.

``JWT_SECRET`` and ``DATABASE_URL`` have no defaults: constructing
``Settings`` without them raises, so the server refuses to boot.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str                                     # HMAC secret for session tokens
    jwt_expiry_seconds: int = Field(604800, gt=0)       # 7 days
    bcrypt_rounds: int = Field(12, ge=4, le=31)         # bcrypt work factor

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str

    # ── Server ───────────────────────────────────────────────────────────
    port: int = 4000
    host: str = "0.0.0.0"
    debug: bool = False
    cors_origins: list = ["*"]

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    @field_validator("jwt_secret", "database_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be set to a non-empty value")
        return value


config = Settings()
