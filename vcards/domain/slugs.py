"""Domain helpers for slug generation and validation."""
from __future__ import annotations

import re
import secrets
import string
import unicodedata

SLUG_PATTERN = re.compile(r"[a-z0-9](?:[a-z0-9-]{1,58})[a-z0-9]")
SLUG_BASE_MAX = 40
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SUFFIX_LENGTH = 4
RESERVED_SLUGS = {
    "admin",
    "auth",
    "cards",
    "dashboard",
    "login",
    "new",
    "share",
    "signup",
    "static",
}


def is_valid_slug(value: str | None) -> bool:
    """Return True when slug matches allowed pattern and is not reserved."""
    if not value:
        return False
    return bool(SLUG_PATTERN.fullmatch(value)) and value not in RESERVED_SLUGS


def slugify(value: str | None) -> str:
    """Lowercase, drop non-word characters and collapse whitespace/underscores to hyphens."""
    text = unicodedata.normalize("NFKD", value or "").encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def random_suffix(length: int = SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def generate_slug(display_name: str | None) -> str:
    """Build ``<slugified-name>-<random>``; falls back to ``card`` for empty names."""
    base = slugify(display_name)[:SLUG_BASE_MAX].strip("-") or "card"
    return f"{base}-{random_suffix()}"
