"""
Card rendering.

``render(card, template)`` turns a card into an HTML fragment. It is pure: the
same card and template always give the same markup, and no optional field is
ever required. Layout is picked from ``TEMPLATE_FILES``; any unknown or missing
template name renders as ``modern``.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from vcards.domain.cards import DEFAULT_TEMPLATE, Card

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates")

TEMPLATE_FILES = {
    "modern": "cards/modern.html",
    "classic": "cards/classic.html",
    "creative": "cards/creative.html",
}

# platform key -> (label, chip text)
SOCIAL_LINKS = {
    "linkedin": ("LinkedIn", "in"),
    "instagram": ("Instagram", "ig"),
    "youtube": ("YouTube", "yt"),
    "github": ("GitHub", "gh"),
    "twitter": ("Twitter", "x"),
    "facebook": ("Facebook", "fb"),
}


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def resolve_template(name: Optional[str]) -> str:
    key = (name or "").strip().lower()
    return key if key in TEMPLATE_FILES else DEFAULT_TEMPLATE


def avatar_initial(card: Card) -> str:
    name = (card.display_name or "").strip()
    if name:
        return name[0].upper()
    return "B" if card.card_type == "business" else "V"


def _contacts(card: Card) -> List[Dict[str, Optional[str]]]:
    items = []
    if card.email:
        items.append({"label": "Email", "value": card.email, "href": f"mailto:{card.email}"})
    if card.phone:
        items.append({"label": "Phone", "value": card.phone, "href": f"tel:{card.phone.replace(' ', '')}"})
    if card.website:
        items.append({"label": "Website", "value": card.website, "href": card.website})
    if card.address:
        items.append({"label": "Address", "value": card.address, "href": None})
    return items


def _socials(card: Card) -> List[Dict[str, str]]:
    socials = card.socials or {}
    chips = []
    for key, (label, short) in SOCIAL_LINKS.items():
        url = socials.get(key)
        if url:
            chips.append({"key": key, "label": label, "short": short, "url": url})
    return chips


def build_context(card: Card) -> Dict[str, Any]:
    if card.card_type == "business":
        subtitle = [card.tagline] if card.tagline else []
    else:
        subtitle = [value for value in (card.role, card.company) if value]
    return {
        "card_type": card.card_type,
        "slug": card.slug,
        "display_name": card.display_name,
        "subtitle": subtitle,
        "avatar_url": card.avatar,
        "avatar_initial": avatar_initial(card),
        "bio": card.bio,
        "contacts": _contacts(card),
        "services": [{"name": s.name, "description": s.description} for s in card.services or []],
        "products": [{"name": p.name, "link": p.link} for p in card.products or []],
        "socials": _socials(card),
        "created": card.created_at.strftime("%b %d, %Y") if card.created_at else None,
    }


def render(card: Card, template: Optional[str] = None) -> str:
    """Render ``card`` with ``template`` (defaults to the card's own template)."""
    name = resolve_template(template if template is not None else card.template)
    return _environment().get_template(TEMPLATE_FILES[name]).render(**build_context(card))
