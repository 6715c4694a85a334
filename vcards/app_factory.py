"""ASGI entry point: ``uvicorn vcards.app_factory:app``."""
from vcards.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
