from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the hemo package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hemo.core import config as core_config  # noqa: E402
from hemo.core.mailer import Mailer, MailerError  # noqa: E402
from hemo.db import create_all, drop_all  # noqa: E402
from hemo.db import session as db_session  # noqa: E402
from hemo.repositories.sql_repository import SQLRepository  # noqa: E402
from hemo.schemas import RegisterRequest  # noqa: E402
from hemo.services.account_service import VERIFY_PATH_PREFIX, AccountService  # noqa: E402


class RecordingMailer(Mailer):
    """Keeps every message in memory instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send(self, to_email, subject, html_body, text_body=None):
        self.sent.append({"to": to_email, "subject": subject, "html": html_body, "text": text_body})

    def check_connection(self) -> bool:
        return True

    def last_token(self) -> str:
        text = self.sent[-1]["text"]
        return text.split(VERIFY_PATH_PREFIX, 1)[1].split()[0]


class FailingMailer(Mailer):
    def send(self, to_email, subject, html_body, text_body=None):
        raise MailerError("relay down: 421 smtp.internal.example refused")

    def check_connection(self) -> bool:
        return False


@pytest.fixture()
def db_env(tmp_path, monkeypatch):
    """Point the app at a temporary SQLite file and reset settings/engine caches."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("MAIL_BACKEND", "console")
    monkeypatch.setenv("PUBLIC_BASE_URL", "http://testserver")
    monkeypatch.setenv("APP_ENV", "test")
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]

    engine = db_session.get_engine()
    drop_all(engine)
    create_all(engine)

    yield db_file

    drop_all(engine)
    engine.dispose()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]
    core_config.get_settings.cache_clear()


@pytest.fixture()
def repo(db_env) -> SQLRepository:
    return SQLRepository()


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def service(db_env, mailer) -> AccountService:
    return AccountService(mailer=mailer)


@pytest.fixture()
def verified_user(service, mailer):
    """Register and verify an account, returning its public view."""

    def _make(name: str = "Alice", email: str = "a@x.com", password: str = "secret123"):
        result = service.register(RegisterRequest(name=name, email=email, password=password))
        service.verify(mailer.last_token())
        return service.find_one(result.user.id)

    return _make
