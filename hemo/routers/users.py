from __future__ import annotations

from fastapi import APIRouter, Request, Response

from hemo.schemas import (
    ChangePasswordRequest,
    EditProfileRequest,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfileRequest,
    RegisterRequest,
    RegisterResponse,
    UserView,
)
from hemo.services.account_service import AccountService
from hemo.services.session_service import AUTH_HEADER_NAME, require_account_owner

router = APIRouter(prefix="/api/user", tags=["users"])


def _get_account_service(request: Request) -> AccountService:
    svc = getattr(getattr(request.app, "state", None), "account_service", None)
    if not svc:
        raise RuntimeError("AccountService not configured")
    return svc


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(payload: RegisterRequest, request: Request):
    result = _get_account_service(request).register(payload)
    return {"status": 201, "message": "Email sent", "user": result.user}


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, request: Request, response: Response):
    result = _get_account_service(request).login(payload)
    response.headers[AUTH_HEADER_NAME] = result.access_token
    return {"access_token": result.access_token, "token_type": result.token_type, "user": result.user}


@router.get("/verify/{token}", response_model=MessageResponse)
def verify(token: str, request: Request):
    result = _get_account_service(request).verify(token)
    if result.status == "already_verified":
        return {"status": 200, "message": "Already verified"}
    return {"status": 200, "message": "Verified"}


@router.post("/profile", response_model=MessageResponse)
def create_profile(payload: ProfileRequest, request: Request):
    require_account_owner(request, payload.user_id)
    _get_account_service(request).create_profile(payload.user_id, payload)
    return {"status": 200, "message": "Profile created"}


@router.put("/profile", response_model=MessageResponse)
def edit_profile(payload: EditProfileRequest, request: Request):
    require_account_owner(request, payload.user_id)
    _get_account_service(request).edit_profile(payload.user_id, payload)
    return {"status": 200, "message": "Profile updated"}


@router.put("/password", response_model=MessageResponse)
def change_password(payload: ChangePasswordRequest, request: Request):
    require_account_owner(request, payload.user_id)
    _get_account_service(request).change_password(payload.user_id, payload)
    return {"status": 200, "message": "Password changed"}


@router.delete("", response_model=MessageResponse)
def delete_account(user_id: str, request: Request):
    require_account_owner(request, user_id)
    _get_account_service(request).delete_account(user_id)
    return {"status": 200, "message": "Account deleted"}


@router.get("", response_model=list[UserView])
def find_all(request: Request):
    return _get_account_service(request).find_all()


@router.get("/{user_id}", response_model=UserView)
def find_one(user_id: str, request: Request):
    return _get_account_service(request).find_one(user_id)
