"""Typed request bodies and the outward-facing user view."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str
    # client-supplied label stored on the user record (e.g. a push token)
    token: Optional[str] = None


class ProfileRequest(BaseModel):
    user_id: str
    dob: str
    location: str
    weight: float
    gender: str
    blood: str
    phone: str


class EditProfileRequest(BaseModel):
    user_id: str
    location: Optional[str] = None
    weight: Optional[float] = None
    phone: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    user_id: str
    old_password: str
    new_password: str


class UserView(BaseModel):
    """User record as exposed to clients: never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    verified: bool
    dob: Optional[str] = None
    location: Optional[str] = None
    weight: Optional[float] = None
    gender: Optional[str] = None
    blood: Optional[str] = None
    phone: Optional[str] = None
    token: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    status: int
    message: str


class RegisterResponse(MessageResponse):
    user: UserView


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserView
