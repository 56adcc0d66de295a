"""Bearer token helpers (extraction from headers, identity checks)."""
from __future__ import annotations

from fastapi import Request

from hemo.core.security import decode_access_token
from hemo.services.account_service import UnauthorizedError

AUTH_HEADER_NAME = "auth_token"


def bearer_token(request: Request) -> str | None:
    """Return the raw token from ``Authorization: Bearer`` or the ``auth_token`` header."""
    auth_header = request.headers.get("authorization") or ""
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    token = request.headers.get(AUTH_HEADER_NAME)
    return token.strip() if token else None


def current_user_id(request: Request) -> str | None:
    """Return the user id carried by the request's token, if any and valid."""
    return decode_access_token(bearer_token(request))


def require_account_owner(request: Request, user_id: str) -> str:
    """Ensure the caller is authenticated as ``user_id``."""
    caller = current_user_id(request)
    if not caller:
        raise UnauthorizedError("not authenticated")
    if caller != user_id:
        raise UnauthorizedError("token does not match account")
    return caller
