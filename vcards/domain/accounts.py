"""Signup, login and admin OTP payloads."""
from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

PASSWORD_MIN_LENGTH = 8


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


def _otp_text(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _strip(value)


Email = Annotated[EmailStr, BeforeValidator(_normalize_email)]
Password = Annotated[str, BeforeValidator(_strip), Field(min_length=PASSWORD_MIN_LENGTH)]


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class LoginPayload(_Payload):
    email: Email
    password: Password


class SignupPayload(LoginPayload):
    name: Annotated[str, BeforeValidator(_strip), Field(min_length=2)]
    confirm_password: Optional[Annotated[str, BeforeValidator(_strip)]] = None

    @field_validator("confirm_password")
    @classmethod
    def _passwords_match(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if value is not None and value != info.data.get("password"):
            raise ValueError("Passwords do not match")
        return value


class AdminOtpPayload(_Payload):
    action: Literal["send-otp", "verify-otp", "resend-otp"]
    email: Annotated[str, BeforeValidator(_normalize_email), Field(min_length=1)]
    otp: Optional[Annotated[str, BeforeValidator(_otp_text)]] = None
