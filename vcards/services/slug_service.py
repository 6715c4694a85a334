"""Slug-related use cases (validation, availability, generation)."""

from __future__ import annotations

from vcards.domain.slugs import generate_slug, is_valid_slug
from vcards.repositories.sql_repository import SQLRepository


class SlugError(Exception):
    """Base exception for slug workflow."""


class InvalidSlugError(SlugError):
    """Raised when value does not satisfy format/rules."""


class SlugUnavailableError(SlugError):
    """Raised when slug is already taken by another card."""


class SlugExhaustedError(SlugError):
    """Raised when every generated candidate collided."""


class SlugService:
    """Provides slug availability checks and candidate generation."""

    def __init__(self, repository: SQLRepository | None = None) -> None:
        self.repository = repository or SQLRepository()

    def normalize(self, value: str | None) -> str:
        return (value or "").strip().lower()

    def is_available(self, value: str | None) -> bool:
        candidate = self.normalize(value)
        if not is_valid_slug(candidate):
            return False
        return not self.repository.slug_exists(candidate)

    def requested(self, value: str) -> str:
        """Validate a client-chosen slug; raises when invalid or taken."""
        candidate = self.normalize(value)
        if not is_valid_slug(candidate):
            raise InvalidSlugError("Invalid slug. Use 3-60 characters [a-z0-9-]")
        if self.repository.slug_exists(candidate):
            raise SlugUnavailableError("Slug is already taken")
        return candidate

    def candidates(self, display_name: str, attempts: int):
        """Yield up to ``attempts`` generated slugs that are free right now."""
        for _ in range(attempts):
            candidate = generate_slug(display_name)
            if not self.repository.slug_exists(candidate):
                yield candidate
