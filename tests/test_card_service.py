from __future__ import annotations

import pytest

from vcards.domain.validation import PayloadValidationError
from vcards.repositories.sql_repository import SQLRepository
from vcards.services import card_service as card_service_module
from vcards.services.card_service import CardNotFoundError, CardService, NotCardOwnerError
from vcards.services.slug_service import InvalidSlugError, SlugExhaustedError, SlugUnavailableError

ALEX = {"cardType": "personal", "fullName": "Alex Doe", "email": "alex@example.com"}


@pytest.fixture()
def service(temp_db):
    return CardService(SQLRepository())


def test_create_generates_slug_from_display_name(service):
    card = service.create("owner@example.com", ALEX)
    assert card.slug.startswith("alex-doe-")
    assert card.owner_email == "owner@example.com"
    assert card.template == "modern"
    assert service.get(card.slug).full_name == "Alex Doe"


def test_each_create_gets_a_unique_slug(service):
    slugs = {service.create("owner@example.com", ALEX).slug for _ in range(5)}
    assert len(slugs) == 5


def test_generated_slug_collision_retries(service, monkeypatch):
    service.create("owner@example.com", {**ALEX, "slug": "alex-doe-aaaa"})
    suffixes = iter(["aaaa", "aaaa", "bbbb"])
    monkeypatch.setattr("vcards.domain.slugs.random_suffix", lambda length=4: next(suffixes))

    card = service.create("owner@example.com", ALEX)
    assert card.slug == "alex-doe-bbbb"


def test_insert_race_is_retried(service, monkeypatch):
    calls = []
    real_exists = service.repository.slug_exists

    def stale_exists(slug):
        calls.append(slug)
        # first probe misses a row that already exists
        return False if len(calls) == 1 else real_exists(slug)

    service.create("owner@example.com", {**ALEX, "slug": "alex-doe-aaaa"})
    suffixes = iter(["aaaa", "cccc"])
    monkeypatch.setattr("vcards.domain.slugs.random_suffix", lambda length=4: next(suffixes))
    monkeypatch.setattr(service.repository, "slug_exists", stale_exists)

    card = service.create("owner@example.com", ALEX)
    assert card.slug == "alex-doe-cccc"


def test_slug_generation_gives_up(service, monkeypatch):
    monkeypatch.setenv("SLUG_MAX_ATTEMPTS", "3")
    card_service_module.get_settings.cache_clear()
    service.create("owner@example.com", {**ALEX, "slug": "alex-doe-aaaa"})
    monkeypatch.setattr("vcards.domain.slugs.random_suffix", lambda length=4: "aaaa")

    with pytest.raises(SlugExhaustedError):
        service.create("owner@example.com", ALEX)


def test_requested_slug_rules(service):
    card = service.create("owner@example.com", {**ALEX, "slug": "Alex-Card"})
    assert card.slug == "alex-card"
    with pytest.raises(SlugUnavailableError):
        service.create("owner@example.com", {**ALEX, "slug": "alex-card"})
    with pytest.raises(InvalidSlugError):
        service.create("owner@example.com", {**ALEX, "slug": "admin"})
    with pytest.raises(InvalidSlugError):
        service.create("owner@example.com", {**ALEX, "slug": "no spaces"})


def test_update_preserves_omitted_fields(service):
    card = service.create(
        "owner@example.com",
        {**ALEX, "phone": "+1 555 0100", "bio": "Hello", "services": [{"name": "Design"}]},
    )
    updated = service.update(card.slug, "owner@example.com", {"bio": "Updated", "phone": "  "})
    assert updated.bio == "Updated"
    assert updated.phone == "+1 555 0100"
    assert [s.name for s in updated.services] == ["Design"]

    cleared = service.update(card.slug, "owner@example.com", {"services": []})
    assert cleared.services == []


def test_update_by_non_owner_is_refused_without_change(service):
    card = service.create("owner@example.com", {**ALEX, "bio": "Original"})
    with pytest.raises(NotCardOwnerError):
        service.update(card.slug, "mallory@example.com", {"bio": "Defaced"})
    assert service.get(card.slug).bio == "Original"


def test_update_type_switch_requires_business_name(service):
    card = service.create("owner@example.com", ALEX)
    with pytest.raises(PayloadValidationError):
        service.update(card.slug, "owner@example.com", {"cardType": "business"})
    switched = service.update(card.slug, "owner@example.com", {"cardType": "business", "businessName": "Doe Co"})
    assert switched.card_type == "business"
    assert switched.display_name == "Doe Co"


def test_missing_card(service):
    with pytest.raises(CardNotFoundError):
        service.get("nope-0000")
    with pytest.raises(CardNotFoundError):
        service.update("nope-0000", "owner@example.com", {"bio": "x"})


def test_delete_is_owner_only(service):
    card = service.create("owner@example.com", ALEX)
    with pytest.raises(NotCardOwnerError):
        service.delete(card.slug, "mallory@example.com")
    service.delete(card.slug, "owner@example.com")
    with pytest.raises(CardNotFoundError):
        service.get(card.slug)


def test_admin_delete_user_removes_cards_first(service):
    service.repository.create_user("Owner", "owner@example.com", "hash")
    service.create("owner@example.com", ALEX)
    service.create("owner@example.com", ALEX)
    other = service.create("other@example.com", ALEX)

    assert service.admin_delete_user("owner@example.com") == (2, 1)
    assert [card.slug for card in service.list_all()] == [other.slug]
    assert service.repository.get_user_by_email("owner@example.com") is None
