"""
SQLAlchemy ORM models for the credential store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


USERNAME_MAX_LENGTH = 64
EMAIL_MAX_LENGTH = 255


class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(USERNAME_MAX_LENGTH), unique=True, nullable=False)
    email = Column(String(EMAIL_MAX_LENGTH), unique=True, nullable=False)  # stored lowercase
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.user_id})>"
