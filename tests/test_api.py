from __future__ import annotations

import pytest

from vcards.repositories.sql_repository import SQLRepository

ALEX = {"cardType": "personal", "fullName": "Alex Doe", "email": "alex@x.com"}


def _login(client, name: str, email: str, password: str = "correct-horse") -> dict:
    resp = client.post("/auth/signup", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    assert resp.json() == {"message": "Signup successful"}
    resp = client.post("/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


@pytest.fixture()
def owner(client):
    return _login(client, "Owner", "owner@example.com")


@pytest.fixture()
def admin_headers(client):
    SQLRepository().create_admin("root@example.com", "Root")
    assert client.post("/auth/admin", json={"action": "send-otp", "email": "root@example.com"}).status_code == 200
    otp = client.app.state.admin_auth_service.store.get("root@example.com").otp
    resp = client.post("/auth/admin", json={"action": "verify-otp", "email": "root@example.com", "otp": otp})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['token']}"}


def test_signup_login_and_me(client):
    headers = _login(client, "Alice", "alice@example.com")
    resp = client.get("/auth/me", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@example.com"
    assert resp.headers["X-Request-ID"]
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_signup_errors(client):
    _login(client, "Alice", "alice@example.com")
    dup = client.post("/auth/signup", json={"name": "Alice", "email": "alice@example.com", "password": "correct-horse"})
    assert dup.status_code == 400
    assert dup.json()["detail"] == "User already exists"

    bad = client.post("/auth/signup", json={"name": "Bob", "email": "bob@example.com", "password": "short"})
    assert bad.status_code == 400
    assert bad.json()["detail"]["errors"][0]["path"] == "password"


def test_login_and_me_failures(client):
    _login(client, "Alice", "alice@example.com")
    resp = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong-password"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid credentials"

    assert client.get("/auth/me").status_code == 401
    resp = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_example_card_renders_under_all_templates(client, owner):
    resp = client.post("/cards", json=ALEX, headers=owner)
    assert resp.status_code == 201, resp.text
    card = resp.json()
    slug = card["slug"]
    assert slug.startswith("alex-doe-")
    assert card["ownerEmail"] == "owner@example.com"
    assert card["template"] == "modern"

    for template in ("modern", "classic", "creative"):
        preview = client.get(f"/cards/{slug}/preview", params={"template": template})
        assert preview.status_code == 200
        assert "Alex Doe" in preview.text

    second = client.post("/cards", json=ALEX, headers=owner).json()
    assert second["slug"] != slug


def test_create_requires_auth_and_valid_payload(client, owner):
    assert client.post("/cards", json=ALEX).status_code == 401

    resp = client.post("/cards", json={"cardType": "personal", "email": "alex@x.com"}, headers=owner)
    assert resp.status_code == 400
    detail = resp.json()["detail"]
    assert detail["message"] == "Validation failed"
    assert {err["path"] for err in detail["errors"]} == {"fullName"}

    resp = client.post("/cards", json={**ALEX, "socials": {"linkedin": "nope"}}, headers=owner)
    assert resp.status_code == 400
    assert resp.json()["detail"]["errors"][0]["path"] == "socials.linkedin"


def test_requested_slug_conflicts(client, owner):
    assert client.post("/cards", json={**ALEX, "slug": "alex"}, headers=owner).status_code == 201
    assert client.post("/cards", json={**ALEX, "slug": "alex"}, headers=owner).status_code == 409
    assert client.post("/cards", json={**ALEX, "slug": "share"}, headers=owner).status_code == 400

    check = client.get("/slug/check", params={"value": "Alex"}).json()
    assert check == {"value": "alex", "valid": True, "available": False}
    assert client.get("/slug/check", params={"value": "free-slug"}).json()["available"] is True


def test_list_and_public_read(client, owner):
    other = _login(client, "Other", "other@example.com")
    mine = client.post("/cards", json=ALEX, headers=owner).json()
    client.post("/cards", json={**ALEX, "fullName": "Other Person"}, headers=other)

    listed = client.get("/cards", headers=owner).json()
    assert [card["slug"] for card in listed] == [mine["slug"]]

    public = client.get(f"/cards/{mine['slug']}")
    assert public.status_code == 200
    assert public.json()["fullName"] == "Alex Doe"
    assert client.get("/cards/does-not-exist").status_code == 404


def test_non_owner_cannot_update_or_delete(client, owner):
    card = client.post("/cards", json={**ALEX, "bio": "Original"}, headers=owner).json()
    intruder = _login(client, "Mallory", "mallory@example.com")

    resp = client.put(f"/cards/{card['slug']}", json={"bio": "Defaced"}, headers=intruder)
    assert resp.status_code == 403
    assert client.get(f"/cards/{card['slug']}").json()["bio"] == "Original"

    assert client.put(f"/cards/{card['slug']}", json={"bio": "Defaced"}).status_code == 401
    assert client.delete(f"/cards/{card['slug']}", headers=intruder).status_code == 403
    assert client.get(f"/cards/{card['slug']}").status_code == 200


def test_owner_update_and_delete(client, owner):
    card = client.post(
        "/cards", json={**ALEX, "phone": "+1 555 0100", "social": {"github": "https://github.com/alex"}}, headers=owner
    ).json()
    assert card["socials"] == {"github": "https://github.com/alex"}

    resp = client.put(f"/cards/{card['slug']}", json={"template": "creative", "jobTitle": "CTO"}, headers=owner)
    assert resp.status_code == 200, resp.text
    updated = resp.json()
    assert updated["template"] == "creative"
    assert updated["role"] == "CTO"
    assert updated["phone"] == "+1 555 0100"
    assert updated["socials"] == {"github": "https://github.com/alex"}

    assert client.put(f"/cards/{card['slug']}", json={"template": "retro"}, headers=owner).status_code == 400

    resp = client.delete(f"/cards/{card['slug']}", headers=owner)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get(f"/cards/{card['slug']}").status_code == 404


def test_share_page_and_downloads(client, owner):
    card = client.post("/cards", json={**ALEX, "bio": "Hello\nWorld"}, headers=owner).json()
    slug = card["slug"]

    page = client.get(f"/share/{slug}")
    assert page.status_code == 200
    assert "text/html" in page.headers["content-type"]
    assert "Alex Doe" in page.text
    assert f"/cards/{slug}/vcard" in page.text

    missing = client.get("/share/nobody-here")
    assert missing.status_code == 404
    assert "Card not found" in missing.text

    vcf = client.get(f"/cards/{slug}/vcard")
    assert vcf.status_code == 200
    assert vcf.headers["content-type"].startswith("text/vcard")
    assert vcf.headers["content-disposition"] == f'attachment; filename="{slug}.vcf"'
    assert "NOTE:Hello\\nWorld\r\n" in vcf.text

    qr = client.get(f"/cards/{slug}/qr.png")
    assert qr.status_code == 200
    assert qr.headers["content-type"] == "image/png"
    assert qr.content.startswith(b"\x89PNG")


def test_admin_otp_flow_messages(client, outbox):
    SQLRepository().create_admin("root@example.com", "Root")

    assert client.post("/auth/admin", json={"email": "root@example.com"}).json()["detail"] == "Action is required"
    assert client.post("/auth/admin", json={"action": "dance", "email": "root@example.com"}).json()["detail"] == "Invalid action"
    assert client.post("/auth/admin", json={"action": "send-otp"}).json()["detail"] == "Email is required"

    denied = client.post("/auth/admin", json={"action": "send-otp", "email": "intruder@example.com"})
    assert denied.status_code == 403

    sent = client.post("/auth/admin", json={"action": "send-otp", "email": "root@example.com"})
    assert sent.json() == {"message": "OTP sent to admin email"}
    resent = client.post("/auth/admin", json={"action": "resend-otp", "email": "root@example.com"})
    assert resent.json() == {"message": "OTP resent successfully"}
    assert len(outbox) == 2

    wrong = client.post("/auth/admin", json={"action": "verify-otp", "email": "root@example.com", "otp": "12345"})
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == "Invalid OTP"

    otp = client.app.state.admin_auth_service.store.get("root@example.com").otp
    ok = client.post("/auth/admin", json={"action": "verify-otp", "email": "root@example.com", "otp": int(otp)})
    assert ok.status_code == 200
    body = ok.json()
    assert body["admin"]["email"] == "root@example.com"
    assert body["admin"]["admin_name"] == "Root"

    again = client.post("/auth/admin", json={"action": "verify-otp", "email": "root@example.com", "otp": otp})
    assert again.status_code == 401
    assert again.json()["detail"] == "OTP not found or expired"


def test_admin_dashboard(client, owner, admin_headers):
    card = client.post("/cards", json=ALEX, headers=owner).json()
    other = _login(client, "Other", "other@example.com")
    client.post("/cards", json={**ALEX, "fullName": "Other Person"}, headers=other)

    assert client.get("/admin/dashboard", params={"type": "users"}).status_code == 401
    assert client.get("/admin/dashboard", params={"type": "users"}, headers=owner).status_code == 401

    users = client.get("/admin/dashboard", params={"type": "users"}, headers=admin_headers).json()["users"]
    assert {user["email"] for user in users} == {"owner@example.com", "other@example.com"}
    assert all("password" not in user for user in users)

    cards = client.get("/admin/dashboard", params={"type": "cards"}, headers=admin_headers).json()["cards"]
    assert len(cards) == 2
    scoped = client.get("/admin/dashboard", params={"userEmail": "owner@example.com"}, headers=admin_headers).json()
    assert [c["slug"] for c in scoped["cards"]] == [card["slug"]]
    assert client.get("/admin/dashboard", headers=admin_headers).status_code == 400

    resp = client.delete("/admin/dashboard", params={"slug": card["slug"]}, headers=admin_headers)
    assert resp.json() == {"success": True, "message": "Card deleted"}

    resp = client.delete("/admin/dashboard", params={"userEmail": "other@example.com"}, headers=admin_headers)
    assert resp.json() == {"success": True, "message": "User and all cards deleted"}
    assert client.get("/admin/dashboard", params={"type": "cards"}, headers=admin_headers).json()["cards"] == []
    assert client.delete("/admin/dashboard", headers=admin_headers).status_code == 400


def test_missing_jwt_secret_fails_closed(client, owner, monkeypatch):
    from vcards.core import config as core_config

    monkeypatch.setenv("JWT_SECRET", "")
    core_config.get_settings.cache_clear()
    resp = client.get("/auth/me", headers=owner)
    assert resp.status_code == 500
    assert resp.json()["detail"] == "Server misconfigured"
    resp = client.post("/auth/login", json={"email": "owner@example.com", "password": "correct-horse"})
    assert resp.status_code == 500


@pytest.mark.parametrize("card_type", [{"x": 1}, ["personal"]])
def test_malformed_card_type_is_a_validation_error(client, owner, card_type):
    resp = client.post("/cards", json={**ALEX, "cardType": card_type}, headers=owner)
    assert resp.status_code == 400
    assert [err["path"] for err in resp.json()["detail"]["errors"]] == ["cardType"]


def test_share_page_allows_http_images(client):
    csp = client.get("/share/missing").headers["Content-Security-Policy"]
    assert "img-src 'self' data: http: https:" in csp
