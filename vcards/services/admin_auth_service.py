"""
Admin authentication by emailed one-time passcode.

Per email: ``send_otp`` stores a fresh code (idle -> pending), ``resend_otp``
replaces it and restarts the TTL, ``verify_otp`` consumes it and issues an
admin JWT. There is no resend limit.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from vcards.core.config import get_settings
from vcards.core.mailer import send_email
from vcards.core.security import TokenError, create_access_token, decode_token
from vcards.repositories.sql_repository import SQLRepository
from vcards.services.otp_store import InMemoryOtpStore, OtpCheck, OtpStore, generate_otp

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class OtpError(Exception):
    """Base class for admin OTP failures."""


class AdminNotAllowedError(OtpError):
    pass


class OtpNotFoundError(OtpError):
    pass


class OtpExpiredError(OtpError):
    pass


class OtpMismatchError(OtpError):
    pass


class OtpDeliveryError(OtpError):
    pass


class AdminTokenInvalidError(OtpError):
    pass


@dataclass
class AdminView:
    admin_id: int
    email: str
    admin_name: Optional[str]

    def to_json(self) -> dict:
        return {"admin_id": self.admin_id, "email": self.email, "admin_name": self.admin_name}


@dataclass
class AdminLogin:
    token: str
    admin: AdminView


def _normalize(email: str | None) -> str:
    return (email or "").strip().lower()


class AdminAuthService:
    def __init__(
        self,
        repository: SQLRepository | None = None,
        store: OtpStore | None = None,
        sender: Callable[..., bool] | None = None,
    ) -> None:
        self.repository = repository or SQLRepository()
        self.store = store or InMemoryOtpStore()
        self._sender = sender

    def _send(self, *args) -> bool:
        return (self._sender or send_email)(*args)

    def _require_admin(self, email: str):
        admin = self.repository.get_admin_by_email(email)
        if not admin:
            logger.warning("OTP requested for non-admin email %s", email)
            raise AdminNotAllowedError("Unauthorized email. Admin access only.")
        return admin

    def _issue(self, email: str, subject: str) -> None:
        admin = self._require_admin(email)
        otp = generate_otp()
        ttl = get_settings().otp_ttl_seconds
        self.store.put(email, otp, ttl)
        if not self._send(subject, email, *self._otp_bodies(admin.admin_name or "", otp, ttl)):
            raise OtpDeliveryError("Failed to send OTP email")
        logger.info("OTP sent to admin %s", email)

    def send_otp(self, email: str) -> None:
        self._issue(_normalize(email), "Your Admin Login Verification Code")

    def resend_otp(self, email: str) -> None:
        self._issue(_normalize(email), "Admin Login New Verification Code")

    def verify_otp(self, email: str, otp: str) -> AdminLogin:
        email = _normalize(email)
        result = self.store.consume(email, (otp or "").strip())
        if result is OtpCheck.MISSING:
            raise OtpNotFoundError("OTP not found or expired")
        if result is OtpCheck.EXPIRED:
            raise OtpExpiredError("OTP expired")
        if result is OtpCheck.MISMATCH:
            logger.warning("Invalid OTP for %s", email)
            raise OtpMismatchError("Invalid OTP")
        admin = self.repository.get_admin_by_email(email)
        if not admin:
            raise AdminNotAllowedError("Admin not found")
        token = create_access_token(
            {"sub": admin.admin_id, "admin_id": admin.admin_id, "email": admin.email, "role": ADMIN_ROLE},
            get_settings().admin_token_ttl_seconds,
        )
        logger.info("Admin authenticated: %s", email)
        return AdminLogin(token=token, admin=AdminView(admin.admin_id, admin.email, admin.admin_name))

    def resolve(self, token: str | None) -> AdminView:
        if not token:
            raise AdminTokenInvalidError("Unauthorized")
        try:
            claims = decode_token(token)
        except TokenError as exc:
            raise AdminTokenInvalidError("Unauthorized") from exc
        if claims.get("role") != ADMIN_ROLE or not claims.get("admin_id"):
            raise AdminTokenInvalidError("Unauthorized")
        return AdminView(int(claims["admin_id"]), claims.get("email") or "", None)

    @staticmethod
    def _otp_bodies(name: str, otp: str, ttl_seconds: int) -> tuple[str, str]:
        minutes = max(1, ttl_seconds // 60)
        greeting = f"Hello {name}" if name else "Hello"
        html_body = f"""
        <h2>{html.escape(greeting)}</h2>
        <p>Your verification code:</p>
        <h1 style="letter-spacing:6px">{otp}</h1>
        <p>This code expires in <b>{minutes} minutes</b>.</p>
        <p>If you didn't request this, ignore this email.</p>
        """
        text_body = f"{greeting},\nYour verification code is: {otp}\nExpires in {minutes} minutes.\n"
        return html_body, text_body
