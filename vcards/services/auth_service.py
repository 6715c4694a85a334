"""
End-user authentication: signup, password login and session checks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError

from vcards.core.config import get_settings
from vcards.core.security import TokenError, create_access_token, decode_token, hash_password, verify_password
from vcards.domain.accounts import LoginPayload, SignupPayload
from vcards.domain.validation import validate_payload
from vcards.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

USER_ROLE = "user"


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class TokenInvalidError(AuthError):
    pass


@dataclass
class UserView:
    id: int
    name: str
    email: str

    def to_json(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass
class LoginSuccess:
    token: str
    user: UserView


class AuthService:
    """Handles signup, login and bearer-token resolution for end users."""

    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def signup(self, raw: Mapping[str, Any]) -> UserView:
        payload = validate_payload(SignupPayload, raw)
        if self.repository.get_user_by_email(payload.email):
            raise AccountExistsError("User already exists")
        try:
            user = self.repository.create_user(payload.name, payload.email, hash_password(payload.password))
        except IntegrityError as exc:
            raise AccountExistsError("User already exists") from exc
        logger.info("User signed up: %s", user.email)
        return UserView(id=user.id, name=user.name, email=user.email)

    def login(self, raw: Mapping[str, Any]) -> LoginSuccess:
        payload = validate_payload(LoginPayload, raw)
        user = self.repository.get_user_by_email(payload.email)
        if not user or not verify_password(payload.password, user.password):
            logger.warning("Login failed for %s", payload.email)
            raise InvalidCredentialsError("Invalid credentials")
        token = create_access_token(
            {"sub": user.id, "email": user.email, "name": user.name, "role": USER_ROLE},
            get_settings().user_token_ttl_seconds,
        )
        return LoginSuccess(token=token, user=UserView(id=user.id, name=user.name, email=user.email))

    def resolve(self, token: str | None) -> UserView:
        """Re-resolve the user behind a bearer token; fails closed."""
        if not token:
            raise TokenInvalidError("Unauthorized")
        try:
            claims = decode_token(token)
        except TokenError as exc:
            raise TokenInvalidError("Unauthorized") from exc
        email = claims.get("email")
        if claims.get("role") != USER_ROLE or not email:
            raise TokenInvalidError("Unauthorized")
        user = self.repository.get_user_by_email(email)
        if not user:
            raise TokenInvalidError("Unauthorized")
        return UserView(id=user.id, name=user.name, email=user.email)

    def list_users(self) -> list:
        """Every account, newest first."""
        return self.repository.list_users()
