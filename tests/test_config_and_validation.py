from __future__ import annotations

import pytest

from hemo.core import config as core_config
from hemo.domain.validation import (
    is_valid_email,
    validate_login,
    validate_profile_edit,
    validate_registration,
)
from hemo.schemas import EditProfileRequest, LoginRequest, RegisterRequest


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", "PROD")
    monkeypatch.setenv("JWT_SECRET", "prod-secret")
    monkeypatch.delenv("MAIL_BACKEND", raising=False)
    monkeypatch.setenv("SMTP_PORT", "not-a-number")
    monkeypatch.setenv("CORS_ORIGINS", "https://app.example.com/, https://admin.example.com")
    core_config.get_settings.cache_clear()
    try:
        settings = core_config.get_settings()
        assert settings.app_env == "prod"
        assert settings.mail_backend == "smtp"
        assert settings.smtp_port == 465
        assert settings.cors_origins == ("https://app.example.com", "https://admin.example.com")
    finally:
        core_config.get_settings.cache_clear()


def test_prod_requires_jwt_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "prod")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    core_config.get_settings.cache_clear()
    try:
        with pytest.raises(RuntimeError):
            core_config.get_settings()
        monkeypatch.setenv("JWT_SECRET", core_config.DEV_JWT_SECRET)
        core_config.get_settings.cache_clear()
        with pytest.raises(RuntimeError):
            core_config.get_settings()
    finally:
        core_config.get_settings.cache_clear()


def test_dev_uses_fallback_jwt_secret(monkeypatch):
    monkeypatch.setenv("APP_ENV", "dev")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    core_config.get_settings.cache_clear()
    try:
        assert core_config.get_settings().jwt_secret == core_config.DEV_JWT_SECRET
    finally:
        core_config.get_settings.cache_clear()


def test_dev_defaults_to_console_mail(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("MAIL_BACKEND", raising=False)
    core_config.get_settings.cache_clear()
    try:
        assert core_config.get_settings().mail_backend == "console"
    finally:
        core_config.get_settings.cache_clear()


def test_email_shape():
    assert is_valid_email("a@x.com")
    assert not is_valid_email("a@x")
    assert not is_valid_email("a x@y.com")
    assert not is_valid_email(None)


def test_registration_rules():
    assert validate_registration(RegisterRequest(name="  ", email="a@x.com", password="secret123")) == (
        "name must be between 1 and 100 characters"
    )
    assert validate_registration(RegisterRequest(name="A", email="a@x.com", password="secret123")) is None
    assert validate_registration(RegisterRequest(name="Ann", email="a@x.com", password="12345")) is not None
    assert validate_registration(RegisterRequest(name="Ann", email="a@x.com", password="secret123")) is None


def test_login_and_edit_rules():
    assert validate_login(LoginRequest(email="a@x.com", password="")) == "password is required"
    assert validate_profile_edit(EditProfileRequest(user_id="u", weight=0)) == "weight is out of range"
    assert validate_profile_edit(EditProfileRequest(user_id="u")) is None
