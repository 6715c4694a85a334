"""
Request-scoped dependencies: services stored on ``app.state`` and the
principals resolved from the ``Authorization: Bearer`` header.

Routers declare ``Depends(require_user)`` / ``Depends(require_admin)``; the
resolved principal is passed explicitly instead of living in global state.
"""
from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from vcards.core.security import ConfigurationError
from vcards.services.admin_auth_service import AdminAuthService, AdminTokenInvalidError, AdminView
from vcards.services.auth_service import AuthService, TokenInvalidError, UserView
from vcards.services.card_service import CardService
from vcards.services.slug_service import SlugService

bearer_scheme = HTTPBearer(auto_error=False)

_UNAUTHORIZED_HEADERS = {"WWW-Authenticate": "Bearer"}


def _state_service(request: Request, name: str):
    svc = getattr(getattr(request.app, "state", None), name, None)
    if not svc:
        raise RuntimeError(f"{name} is not configured")
    return svc


def get_auth_service(request: Request) -> AuthService:
    return _state_service(request, "auth_service")


def get_admin_auth_service(request: Request) -> AdminAuthService:
    return _state_service(request, "admin_auth_service")


def get_card_service(request: Request) -> CardService:
    return _state_service(request, "card_service")


def get_slug_service(request: Request) -> SlugService:
    return _state_service(request, "slug_service")


def bearer_token(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> str | None:
    if not credentials or (credentials.scheme or "").lower() != "bearer":
        return None
    return credentials.credentials or None


def require_user(request: Request, token: str | None = Depends(bearer_token)) -> UserView:
    if not token:
        raise HTTPException(401, "Unauthorized", headers=_UNAUTHORIZED_HEADERS)
    try:
        return get_auth_service(request).resolve(token)
    except ConfigurationError:
        raise HTTPException(500, "Server misconfigured")
    except TokenInvalidError:
        raise HTTPException(401, "Unauthorized", headers=_UNAUTHORIZED_HEADERS)


def require_admin(request: Request, token: str | None = Depends(bearer_token)) -> AdminView:
    if not token:
        raise HTTPException(401, "Unauthorized", headers=_UNAUTHORIZED_HEADERS)
    try:
        return get_admin_auth_service(request).resolve(token)
    except ConfigurationError:
        raise HTTPException(500, "Server misconfigured")
    except AdminTokenInvalidError:
        raise HTTPException(401, "Unauthorized", headers=_UNAUTHORIZED_HEADERS)
