"""SQLAlchemy models for user accounts and pending email verifications."""
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Float,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    func,
)

from .session import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=_new_id)
    name = Column(String(100), nullable=False)
    # uniqueness enforced here, not only by the pre-insert lookup
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    verified = Column(Boolean, default=False, nullable=False)
    dob = Column(String(32), nullable=True)
    location = Column(String(255), nullable=True)
    weight = Column(Float, nullable=True)
    gender = Column(String(16), nullable=True)
    blood = Column(String(8), nullable=True)
    phone = Column(String(32), nullable=True)
    token = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class VerifyToken(Base):
    __tablename__ = "verify_tokens"

    unique_string = Column(String(255), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
