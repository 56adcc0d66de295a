"""
Email adapter for the Hemo backend.

``SMTPMailer`` talks to the relay configured in Settings; ``ConsoleMailer``
only logs the message and is the default outside production. ``SMTPMailer``
raises ``MailerError`` when a message cannot be handed over to the relay.
"""

from __future__ import annotations

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import logging
import smtplib
import ssl

from .config import Settings, get_settings

logger = logging.getLogger(__name__)


class MailerError(Exception):
    """Raised when a message could not be delivered to the relay."""


class Mailer:
    """Interface consumed by the account service."""

    def send(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
        raise NotImplementedError

    def check_connection(self) -> bool:
        raise NotImplementedError


def _build_message(sender: str, to_email: str, subject: str, html_body: str, text_body: str | None) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_email
    plain = text_body or html_body
    msg.attach(MIMEText(plain, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


class SMTPMailer(Mailer):
    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    def _configured(self) -> bool:
        s = self.settings
        return bool(s.smtp_host and s.smtp_user and s.smtp_password and s.smtp_from and s.smtp_port)

    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        port = s.smtp_port or 465
        if port == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(s.smtp_host, port, context=context, timeout=s.smtp_timeout_seconds)
        else:
            server = smtplib.SMTP(s.smtp_host, port, timeout=s.smtp_timeout_seconds)
            server.ehlo()
            server.starttls(context=ssl.create_default_context())
        server.login(s.smtp_user, s.smtp_password)
        return server

    def send(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
        if not self._configured():
            raise MailerError("SMTP configuration missing")
        msg = _build_message(self.settings.smtp_from, to_email, subject, html_body, text_body)
        try:
            with self._connect() as server:
                server.sendmail(self.settings.smtp_from, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send email to %s: %s", to_email, exc)
            raise MailerError(str(exc)) from exc
        logger.info("Email sent to %s", to_email)

    def check_connection(self) -> bool:
        """Open and close an authenticated session with the relay."""
        if not self._configured():
            logger.warning("SMTP configuration missing; mailer not ready")
            return False
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP health check failed: %s", exc)
            return False
        return True


class ConsoleMailer(Mailer):
    """Logs outgoing messages instead of sending them."""

    def send(self, to_email: str, subject: str, html_body: str, text_body: str | None = None) -> None:
        logger.info("[console mail] to=%s subject=%r", to_email, subject)
        # The body carries the one-time verification link.
        logger.debug("[console mail] body:\n%s", text_body or html_body)

    def check_connection(self) -> bool:
        return True


def build_mailer(settings: Settings | None = None) -> Mailer:
    """Return the mailer selected by MAIL_BACKEND."""
    settings = settings or get_settings()
    if settings.mail_backend == "smtp":
        return SMTPMailer(settings)
    if settings.mail_backend == "console":
        return ConsoleMailer()
    raise ValueError(f"Unknown MAIL_BACKEND: {settings.mail_backend}")
