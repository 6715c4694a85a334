from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from vcards.domain.accounts import AdminOtpPayload
from vcards.domain.validation import validate_payload
from vcards.services.admin_auth_service import (
    AdminAuthService,
    AdminNotAllowedError,
    OtpDeliveryError,
    OtpError,
)
from vcards.services.auth_service import (
    AccountExistsError,
    AuthService,
    InvalidCredentialsError,
    UserView,
)
from vcards.services.session_service import get_admin_auth_service, get_auth_service, require_user

router = APIRouter(prefix="/auth", tags=["auth"])

ADMIN_ACTIONS = ("send-otp", "verify-otp", "resend-otp")


@router.post("/signup", status_code=201)
def signup(payload: Any = Body(None), auth: AuthService = Depends(get_auth_service)):
    try:
        auth.signup(payload)
    except AccountExistsError as exc:
        raise HTTPException(400, str(exc))
    return {"message": "Signup successful"}


@router.post("/login")
def login(payload: Any = Body(None), auth: AuthService = Depends(get_auth_service)):
    try:
        result = auth.login(payload)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, str(exc), headers={"WWW-Authenticate": "Bearer"})
    return {"token": result.token, "user": result.user.to_json()}


@router.get("/me")
def me(user: UserView = Depends(require_user)):
    return user.to_json()


def _otp_status(exc: OtpError) -> int:
    if isinstance(exc, AdminNotAllowedError):
        return 403
    if isinstance(exc, OtpDeliveryError):
        return 500
    return 401


@router.post("/admin")
def admin_auth(payload: Any = Body(None), service: AdminAuthService = Depends(get_admin_auth_service)):
    body = payload if isinstance(payload, dict) else {}
    action = body.get("action")
    if not action:
        raise HTTPException(400, "Action is required")
    if action not in ADMIN_ACTIONS:
        raise HTTPException(400, "Invalid action")
    if not str(body.get("email") or "").strip():
        raise HTTPException(400, "Email is required")
    if action == "verify-otp" and not str(body.get("otp") or "").strip():
        raise HTTPException(400, "Email and OTP are required")
    data = validate_payload(AdminOtpPayload, body)

    try:
        if data.action == "send-otp":
            service.send_otp(data.email)
            return {"message": "OTP sent to admin email"}
        if data.action == "resend-otp":
            service.resend_otp(data.email)
            return {"message": "OTP resent successfully"}
        result = service.verify_otp(data.email, data.otp or "")
    except OtpError as exc:
        raise HTTPException(_otp_status(exc), str(exc))
    return {
        "message": "Admin authenticated successfully",
        "token": result.token,
        "admin": result.admin.to_json(),
    }
