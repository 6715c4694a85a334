"""
Shared fixtures: a temporary SQLite database, a wired FastAPI app and a
captured mail outbox.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# make the vcards package importable when running from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vcards.core import config as core_config
from vcards.db import models
from vcards.db import session as db_session


def _clear_caches() -> None:
    core_config.get_settings.cache_clear()
    db_session.get_engine.cache_clear()
    db_session._get_sessionmaker.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture()
def temp_db(tmp_path, monkeypatch):
    """Point the app at a fresh SQLite file and create the schema."""
    db_file = tmp_path / "test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{db_file}")
    monkeypatch.setenv("JWT_SECRET", "test-secret")
    monkeypatch.setenv("PUBLIC_BASE_URL", "https://cards.example.com")
    monkeypatch.setenv("APP_ENV", "dev")
    for name in ("SMTP_HOST", "SMTP_USER", "SMTP_PASSWORD", "SMTP_FROM"):
        monkeypatch.delenv(name, raising=False)
    _clear_caches()

    engine = db_session.get_engine()
    models.Base.metadata.create_all(bind=engine)

    yield db_file

    models.Base.metadata.drop_all(bind=engine)
    engine.dispose()
    _clear_caches()


@pytest.fixture()
def outbox(monkeypatch):
    """Replace SMTP delivery; every sent message is appended here."""
    sent = []

    def fake_send(subject, to_email, html_body, text_body=None):
        sent.append({"subject": subject, "to": to_email, "html": html_body, "text": text_body})
        return True

    monkeypatch.setattr("vcards.services.admin_auth_service.send_email", fake_send)
    return sent


@pytest.fixture()
def client(temp_db, outbox):
    from fastapi.testclient import TestClient

    from vcards.app import create_app

    with TestClient(create_app()) as test_client:
        yield test_client

