"""
Account use cases: registration with email verification, login, profile
management, password change and deletion.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import logging
import uuid

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from hemo.core.config import get_settings
from hemo.core.logging import log_account_event
from hemo.core.mailer import Mailer, MailerError
from hemo.core.security import create_access_token, hash_password, verify_password
from hemo.core.templates import EmailRenderer
from hemo.core.utils import absolute_url, normalize_email
from hemo.domain import validation
from hemo.domain.validation import Validator
from hemo.repositories.sql_repository import SQLRepository
from hemo.schemas import (
    ChangePasswordRequest,
    EditProfileRequest,
    LoginRequest,
    ProfileRequest,
    RegisterRequest,
    UserView,
)

logger = logging.getLogger(__name__)

VERIFY_PATH_PREFIX = "/api/user/verify/"


class AccountError(Exception):
    """Base class for account errors. ``message`` is safe to show to clients."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AccountError):
    status_code = 400


class ConflictError(AccountError):
    status_code = 409


class NotFoundError(AccountError):
    status_code = 404


class UnauthorizedError(AccountError):
    status_code = 401


class StorageError(AccountError):
    status_code = 500


class MailError(AccountError):
    status_code = 502


@dataclass
class RegisterResult:
    user: UserView
    verify_path: str
    verify_url: str
    email_sent: bool


@dataclass
class LoginResult:
    access_token: str
    user: UserView
    token_type: str = "bearer"


@dataclass
class VerifyResult:
    user_id: str
    status: str  # "verified" or "already_verified"


@dataclass
class AccountService:
    """Handles registration, verification, login and profile flows.

    The mailer is injected; the repository and renderers default to the SQL
    store and the packaged Jinja2 templates.
    """

    mailer: Mailer
    repository: SQLRepository = field(default_factory=SQLRepository)
    html_renderer: EmailRenderer = field(default_factory=lambda: EmailRenderer("verify_email.html"))
    text_renderer: EmailRenderer = field(default_factory=lambda: EmailRenderer("verify_email.txt"))
    register_validator: Validator = validation.validate_registration
    login_validator: Validator = validation.validate_login
    profile_validator: Validator = validation.validate_profile
    profile_edit_validator: Validator = validation.validate_profile_edit
    password_validator: Validator = validation.validate_password_change

    def __post_init__(self):
        self.settings = get_settings()

    # -------------------------------------- helpers --------------------------------------
    @staticmethod
    def _validate(validator: Validator, data) -> None:
        error = validator(data)
        if error:
            raise ValidationError(error)

    @contextmanager
    def _storage(self, action: str):
        try:
            yield
        except SQLAlchemyError:
            logger.exception("Storage failure during %s", action)
            raise StorageError("Storage failure")

    def _new_verify_token(self, user_id: str) -> str:
        return uuid.uuid4().hex + user_id

    # -------------------------------------- registration --------------------------------------
    def register(self, data: RegisterRequest) -> RegisterResult:
        self._validate(self.register_validator, data)
        email = normalize_email(data.email)
        name = data.name.strip()

        with self._storage("register"):
            if self.repository.find_user_by_email(email):
                raise ConflictError("email exists")
            password_hash = hash_password(data.password)
            try:
                user = self.repository.create_user(name, email, password_hash)
            except IntegrityError as exc:
                # lost the race against a concurrent registration
                raise ConflictError("email exists") from exc

        token = self._new_verify_token(user.id)
        verify_path = f"{VERIFY_PATH_PREFIX}{token}"
        verify_url = absolute_url(verify_path)
        variables = {"name": user.name, "verify_url": verify_url}
        try:
            self.mailer.send(
                email,
                self.settings.verify_email_subject,
                self.html_renderer.render(variables),
                self.text_renderer.render(variables),
            )
        except MailerError as exc:
            # The user row stays in place, unverified and without a token.
            logger.warning("Verification email failed; user %s left unverified: %s", user.id, exc)
            log_account_event("register", user.id, status="mail_failed")
            raise MailError("Could not send verification email") from exc

        with self._storage("register"):
            self.repository.create_verify_token(user.id, token)
        log_account_event("register", user.id)
        return RegisterResult(
            user=UserView.model_validate(user),
            verify_path=verify_path,
            verify_url=verify_url,
            email_sent=True,
        )

    # -------------------------------------- verification --------------------------------------
    def verify(self, token: str) -> VerifyResult:
        token_value = (token or "").strip()
        if not token_value:
            raise NotFoundError("verification token not found")
        with self._storage("verify"):
            redeemed = self.repository.redeem_verify_token(token_value)
        if redeemed is None:
            raise NotFoundError("verification token not found")
        user_id, newly_verified = redeemed
        status = "verified" if newly_verified else "already_verified"
        log_account_event("verify", user_id, extra={"result": status})
        return VerifyResult(user_id=user_id, status=status)

    # -------------------------------------- login --------------------------------------
    def login(self, data: LoginRequest) -> LoginResult:
        self._validate(self.login_validator, data)
        email = normalize_email(data.email)
        with self._storage("login"):
            user = self.repository.find_user_by_email(email)
        if not user:
            raise NotFoundError("user not found")
        if not user.verified:
            log_account_event("login", user.id, status="not_verified")
            raise UnauthorizedError("not verified")
        if not verify_password(data.password, user.password_hash):
            log_account_event("login", user.id, status="bad_credentials")
            raise UnauthorizedError("bad credentials")

        if data.token is not None:
            try:
                user = self.repository.update_user(user.id, token=data.token) or user
            except SQLAlchemyError:
                logger.warning("Could not store login token label for user %s", user.id, exc_info=True)

        access_token = create_access_token(user.id)
        log_account_event("login", user.id)
        return LoginResult(access_token=access_token, user=UserView.model_validate(user))

    # -------------------------------------- profile --------------------------------------
    def create_profile(self, user_id: str, data: ProfileRequest) -> UserView:
        self._validate(self.profile_validator, data)
        with self._storage("create_profile"):
            user = self.repository.update_user(
                user_id,
                dob=data.dob.strip(),
                location=data.location.strip(),
                weight=data.weight,
                gender=data.gender.strip().lower(),
                blood=data.blood.strip().upper(),
                phone=data.phone.strip(),
            )
        if not user:
            raise NotFoundError("user not found")
        return UserView.model_validate(user)

    def edit_profile(self, user_id: str, data: EditProfileRequest) -> UserView:
        self._validate(self.profile_edit_validator, data)
        fields = {
            key: value
            for key, value in (("location", data.location), ("weight", data.weight), ("phone", data.phone))
            if value is not None
        }
        with self._storage("edit_profile"):
            if fields:
                user = self.repository.update_user(user_id, **fields)
            else:
                user = self.repository.get_user(user_id)
        if not user:
            raise NotFoundError("user not found")
        return UserView.model_validate(user)

    # -------------------------------------- password --------------------------------------
    def change_password(self, user_id: str, data: ChangePasswordRequest) -> None:
        self._validate(self.password_validator, data)
        with self._storage("change_password"):
            user = self.repository.get_user(user_id)
            if not user:
                raise NotFoundError("user not found")
            if not verify_password(data.old_password, user.password_hash):
                log_account_event("change_password", user_id, status="bad_credentials")
                raise UnauthorizedError("bad credentials")
            updated = self.repository.update_user(user_id, password_hash=hash_password(data.new_password))
        if not updated:
            raise NotFoundError("user not found")
        log_account_event("change_password", user_id)

    # -------------------------------------- lookups / delete --------------------------------------
    def delete_account(self, user_id: str) -> None:
        with self._storage("delete_account"):
            user = self.repository.delete_user(user_id)
        if not user:
            raise NotFoundError("user not found")
        log_account_event("delete_account", user_id)

    def find_one(self, user_id: str) -> UserView:
        with self._storage("find_one"):
            user = self.repository.get_user(user_id)
        if not user:
            raise NotFoundError("user not found")
        return UserView.model_validate(user)

    def find_all(self) -> list[UserView]:
        with self._storage("find_all"):
            users = self.repository.list_users()
        return [UserView.model_validate(user) for user in users]

    # -------------------------------------- health --------------------------------------
    def check_health(self) -> dict:
        """Probe the store and the mail relay without touching any record."""
        try:
            database = self.repository.ping()
        except SQLAlchemyError:
            logger.exception("Database health check failed")
            database = False
        mailer = self.mailer.check_connection()
        return {"database": database, "mailer": mailer}
