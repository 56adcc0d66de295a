from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from hemo import __version__
from hemo.core.config import Settings, get_settings
from hemo.core.logging import configure_logging
from hemo.core.mailer import Mailer, build_mailer
from hemo.routers import health as health_router
from hemo.routers import users as users_router
from hemo.services.account_service import AccountError, AccountService

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, nosniff, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _error_body(status_code: int, error: str, message: str) -> dict:
    return {"status": status_code, "error": error, "message": message}


async def account_error_handler(request: Request, exc: AccountError):
    return JSONResponse(_error_body(exc.status_code, type(exc).__name__, exc.message), status_code=exc.status_code)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(_error_body(500, "InternalError", "Internal server error"), status_code=500)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = (exc.errors() or [{}])[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'invalid input')}" if location else "invalid input"
    return JSONResponse(_error_body(400, "ValidationError", message), status_code=400)


def create_app(settings: Settings | None = None, mailer: Mailer | None = None, account_service: AccountService | None = None) -> FastAPI:
    """Build the API. Collaborators default to what Settings selects."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Hemo Account API", version=__version__)
    if account_service is None:
        account_service = AccountService(mailer=mailer or build_mailer(settings))
    app.state.account_service = account_service

    allowed_cors = set(settings.cors_origins)
    if settings.app_env != "prod":
        allowed_cors.update({"http://localhost:3000", "http://127.0.0.1:3000"})
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
            expose_headers=["auth_token"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(health_router.router)
    app.include_router(users_router.router)
    logger.info("Hemo API configured (env=%s, mail=%s)", settings.app_env, settings.mail_backend)
    return app
