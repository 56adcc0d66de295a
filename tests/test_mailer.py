from __future__ import annotations

import dataclasses
import smtplib

import pytest

from hemo.core import mailer as mailer_module
from hemo.core.config import get_settings
from hemo.core.mailer import ConsoleMailer, MailerError, SMTPMailer, build_mailer
from hemo.core.templates import EmailRenderer


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, context=None, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        pass

    def starttls(self, context=None):
        pass

    def login(self, user, password):
        self.user = user

    def sendmail(self, sender, recipients, message):
        self.sent.append((sender, recipients, message))

    def noop(self):
        return (250, b"OK")


class BrokenSMTP(FakeSMTP):
    def login(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad auth")


@pytest.fixture()
def smtp_settings(db_env):
    return dataclasses.replace(
        get_settings(),
        mail_backend="smtp",
        smtp_host="smtp.example.com",
        smtp_port=465,
        smtp_user="mailer@example.com",
        smtp_password="pw",
        smtp_from="Hemo <mailer@example.com>",
        smtp_timeout_seconds=3,
    )


def test_smtp_send_over_ssl(smtp_settings, monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", FakeSMTP)

    SMTPMailer(smtp_settings).send("a@x.com", "Hello", "<p>hi</p>", "hi")

    server = FakeSMTP.instances[-1]
    assert server.port == 465
    assert server.timeout == 3
    sender, recipients, message = server.sent[0]
    assert recipients == ["a@x.com"]
    assert "Subject: Hello" in message


def test_smtp_send_failure_raises(smtp_settings, monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP_SSL", BrokenSMTP)
    with pytest.raises(MailerError):
        SMTPMailer(smtp_settings).send("a@x.com", "Hello", "<p>hi</p>")
    assert SMTPMailer(smtp_settings).check_connection() is False


def test_smtp_starttls_port(smtp_settings, monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    settings = dataclasses.replace(smtp_settings, smtp_port=587)

    assert SMTPMailer(settings).check_connection() is True
    assert FakeSMTP.instances[-1].port == 587


def test_smtp_unconfigured(db_env):
    settings = dataclasses.replace(get_settings(), smtp_host="")
    with pytest.raises(MailerError):
        SMTPMailer(settings).send("a@x.com", "Hello", "<p>hi</p>")
    assert SMTPMailer(settings).check_connection() is False


def test_build_mailer_selects_backend(smtp_settings):
    assert isinstance(build_mailer(smtp_settings), SMTPMailer)
    assert isinstance(build_mailer(dataclasses.replace(smtp_settings, mail_backend="console")), ConsoleMailer)
    with pytest.raises(ValueError):
        build_mailer(dataclasses.replace(smtp_settings, mail_backend="pigeon"))


def test_console_mailer_keeps_body_out_of_info_logs(db_env, caplog):
    caplog.set_level("INFO", logger="hemo.core.mailer")
    ConsoleMailer().send("a@x.com", "Hello", "<p>hi</p>", "open http://t/api/user/verify/secret-token")
    assert "a@x.com" in caplog.text
    assert "secret-token" not in caplog.text


def test_console_mailer_logs_body_at_debug(db_env, caplog):
    caplog.set_level("DEBUG", logger="hemo.core.mailer")
    ConsoleMailer().send("a@x.com", "Hello", "<p>hi</p>", "hi there")
    assert "hi there" in caplog.text


def test_verification_template_escapes_name():
    html = EmailRenderer("verify_email.html").render({"name": "<b>A</b>", "verify_url": "http://t/api/user/verify/abc"})
    assert "&lt;b&gt;A&lt;/b&gt;" in html
    assert 'href="http://t/api/user/verify/abc"' in html
    text = EmailRenderer("verify_email.txt").render({"name": "A", "verify_url": "http://t/x"})
    assert "http://t/x" in text
