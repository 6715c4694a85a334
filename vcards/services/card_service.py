"""
Card use cases: create, read, owner-checked update/delete and admin cleanup.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping

from sqlalchemy.exc import IntegrityError

from vcards.core.config import get_settings
from vcards.domain.cards import (
    Card,
    build_card,
    check_display_name,
    create_to_record,
    validate_card_create,
    validate_card_update,
)
from vcards.repositories.sql_repository import SQLRepository, card_to_values
from vcards.services.slug_service import SlugExhaustedError, SlugService, SlugUnavailableError

logger = logging.getLogger(__name__)


class CardError(Exception):
    """Base class for card workflow errors."""


class CardNotFoundError(CardError):
    pass


class NotCardOwnerError(CardError):
    pass


def entity_to_card(entity) -> Card:
    return build_card(card_to_values(entity))


class CardService:
    def __init__(self, repository: SQLRepository | None = None, slugs: SlugService | None = None) -> None:
        self.repository = repository or SQLRepository()
        self.slugs = slugs or SlugService(self.repository)

    # -------------------------------------- reads --------------------------------------
    def get(self, slug: str) -> Card:
        entity = self.repository.get_card((slug or "").strip())
        if not entity:
            raise CardNotFoundError("Card not found")
        return entity_to_card(entity)

    def list_for_owner(self, owner_email: str) -> List[Card]:
        return [entity_to_card(entity) for entity in self.repository.list_cards_by_owner(owner_email)]

    def list_all(self) -> List[Card]:
        return [entity_to_card(entity) for entity in self.repository.list_cards()]

    # -------------------------------------- create --------------------------------------
    def create(self, owner_email: str, raw: Mapping[str, Any]) -> Card:
        data = validate_card_create(raw)
        record = create_to_record(data)
        record["owner_email"] = owner_email
        display_name = record.get("business_name") if data.card_type == "business" else record.get("full_name")

        if data.slug:
            slug = self.slugs.requested(data.slug)
            try:
                entity = self.repository.insert_card(slug, record)
            except IntegrityError as exc:
                raise SlugUnavailableError("Slug is already taken") from exc
            logger.info("Card %s created by %s", slug, owner_email)
            return entity_to_card(entity)

        attempts = get_settings().slug_max_attempts
        for slug in self.slugs.candidates(display_name or "", attempts):
            try:
                entity = self.repository.insert_card(slug, record)
            except IntegrityError:
                logger.warning("Slug collision on insert for %s; retrying", slug)
                continue
            logger.info("Card %s created by %s", slug, owner_email)
            return entity_to_card(entity)
        raise SlugExhaustedError(f"Could not allocate a unique slug after {attempts} attempts")

    # -------------------------------------- owner writes --------------------------------------
    def _owned_entity(self, slug: str, requester_email: str):
        entity = self.repository.get_card((slug or "").strip())
        if not entity:
            raise CardNotFoundError("Card not found")
        if not requester_email or entity.owner_email != requester_email:
            logger.warning("Ownership check failed on %s for %s", slug, requester_email)
            raise NotCardOwnerError("Only the card owner can change this card")
        return entity

    def update(self, slug: str, requester_email: str, raw: Mapping[str, Any]) -> Card:
        entity = self._owned_entity(slug, requester_email)
        changes = validate_card_update(raw).changes()
        merged = {**card_to_values(entity), **changes}
        check_display_name(merged)
        updated = self.repository.update_card(entity.slug, changes)
        if not updated:
            raise CardNotFoundError("Card not found")
        return entity_to_card(updated)

    def delete(self, slug: str, requester_email: str) -> None:
        entity = self._owned_entity(slug, requester_email)
        self.repository.delete_card(entity.slug)
        logger.info("Card %s deleted by owner", entity.slug)

    # -------------------------------------- admin --------------------------------------
    def admin_delete(self, slug: str) -> int:
        return self.repository.delete_card((slug or "").strip())

    def admin_delete_user(self, email: str) -> tuple[int, int]:
        """Remove the user's cards, then the user. Returns (cards, users) removed."""
        cards = self.repository.delete_cards_by_owner(email)
        users = self.repository.delete_user(email)
        logger.info("Admin removed user %s and %d cards", email, cards)
        return cards, users
