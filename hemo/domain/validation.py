"""Input validation rules for account operations.

Each validator takes a request object and returns an error message, or None
when the input is acceptable. The account service receives them as plain
callables so deployments can swap the rule set.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Optional

from hemo.schemas import ChangePasswordRequest, EditProfileRequest, LoginRequest, ProfileRequest, RegisterRequest

Validator = Callable[[Any], Optional[str]]

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
PHONE_PATTERN = re.compile(r"\+?[0-9][0-9 \-]{5,19}")
DOB_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
BLOOD_TYPES = {"A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"}
GENDERS = {"male", "female", "other"}
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_LENGTH = 128


def is_valid_email(value: str | None) -> bool:
    if not value or len(value) > 255:
        return False
    return bool(EMAIL_PATTERN.fullmatch(value.strip()))


def password_error(value: str | None) -> Optional[str]:
    if not value or len(value) < MIN_PASSWORD_LENGTH:
        return f"password must be at least {MIN_PASSWORD_LENGTH} characters"
    if len(value) > MAX_PASSWORD_LENGTH:
        return f"password must be at most {MAX_PASSWORD_LENGTH} characters"
    return None


def validate_registration(data: RegisterRequest) -> Optional[str]:
    name = (data.name or "").strip()
    if not name or len(name) > 100:
        return "name must be between 1 and 100 characters"
    if not is_valid_email(data.email):
        return "email is invalid"
    return password_error(data.password)


def validate_login(data: LoginRequest) -> Optional[str]:
    if not is_valid_email(data.email):
        return "email is invalid"
    if not data.password:
        return "password is required"
    return None


def validate_profile(data: ProfileRequest) -> Optional[str]:
    if not DOB_PATTERN.fullmatch((data.dob or "").strip()):
        return "dob must be formatted YYYY-MM-DD"
    if not (data.location or "").strip():
        return "location is required"
    if not 0 < data.weight < 500:
        return "weight is out of range"
    if (data.gender or "").strip().lower() not in GENDERS:
        return "gender must be one of: female, male, other"
    if (data.blood or "").strip().upper() not in BLOOD_TYPES:
        return "blood type is invalid"
    if not PHONE_PATTERN.fullmatch((data.phone or "").strip()):
        return "phone is invalid"
    return None


def validate_profile_edit(data: EditProfileRequest) -> Optional[str]:
    if data.location is not None and not data.location.strip():
        return "location cannot be empty"
    if data.weight is not None and not 0 < data.weight < 500:
        return "weight is out of range"
    if data.phone is not None and not PHONE_PATTERN.fullmatch(data.phone.strip()):
        return "phone is invalid"
    return None


def validate_password_change(data: ChangePasswordRequest) -> Optional[str]:
    if not data.old_password:
        return "old password is required"
    return password_error(data.new_password)
