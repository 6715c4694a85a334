import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from vcards.core.config import get_settings
from vcards.core.logging_config import generate_request_id, set_request_id, setup_logging
from vcards.core.security import ConfigurationError
from vcards.domain.validation import PayloadValidationError
from vcards.repositories.sql_repository import SQLRepository
from vcards.routers import admin as admin_router
from vcards.routers import auth as auth_router
from vcards.routers import cards as cards_router
from vcards.routers import share as share_router
from vcards.routers import slug as slug_router
from vcards.services.admin_auth_service import AdminAuthService
from vcards.services.auth_service import AuthService
from vcards.services.card_render import TEMPLATES_DIR
from vcards.services.card_service import CardService
from vcards.services.slug_service import SlugService

logger = logging.getLogger(__name__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data: http: https:; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id that shows up in logs and in ``X-Request-ID``."""

    async def dispatch(self, request, call_next):
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def _validation_errors(exc: RequestValidationError) -> list:
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors.append({"path": ".".join(loc) or "__root__", "message": err.get("msg", "Invalid value")})
    return errors


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PayloadValidationError)
    async def payload_validation_handler(request: Request, exc: PayloadValidationError):
        return JSONResponse({"detail": exc.as_detail()}, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        detail = {"message": "Validation failed", "errors": _validation_errors(exc)}
        return JSONResponse({"detail": detail}, status_code=400)

    @app.exception_handler(ConfigurationError)
    async def configuration_handler(request: Request, exc: ConfigurationError):
        logger.error("Configuration error: %s", exc)
        return JSONResponse({"detail": "Server misconfigured"}, status_code=500)

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"detail": "Internal server error"}, status_code=500)


def create_app() -> FastAPI:
    """Build the application with its services wired on ``app.state``."""
    settings = get_settings()
    setup_logging()

    app = FastAPI(title="V-Cards API")

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update(
            {
                "http://localhost:8000",
                "http://127.0.0.1:8000",
                "http://localhost:3000",
                "http://127.0.0.1:3000",
            }
        )
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_middleware(RequestIdMiddleware)

    repository = SQLRepository()
    slug_service = SlugService(repository)
    app.state.templates = Jinja2Templates(directory=TEMPLATES_DIR)
    app.state.auth_service = AuthService(repository)
    app.state.admin_auth_service = AdminAuthService(repository)
    app.state.slug_service = slug_service
    app.state.card_service = CardService(repository, slug_service)

    _install_exception_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(cards_router.router)
    app.include_router(admin_router.router)
    app.include_router(share_router.router)
    app.include_router(slug_router.router)

    return app
