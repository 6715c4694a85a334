"""vCard 3.0 text and share-URL QR codes for a card."""

from __future__ import annotations

import io

import qrcode

from vcards.core.utils import absolute_url
from vcards.domain.cards import Card


def _sanitize(value) -> str:
    text = "" if value is None else str(value)
    return text.replace("\r\n", "\\n").replace("\r", "\\n").replace("\n", "\\n").strip()


def _escape(value) -> str:
    """Escape a vCard TEXT value."""
    text = "" if value is None else str(value).strip()
    text = text.replace("\\", "\\\\")
    return _sanitize(text).replace(";", "\\;").replace(",", "\\,")


def share_url(slug: str, base: str | None = None) -> str:
    return absolute_url(f"/share/{slug}", base)


def _split_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split()
    if len(parts) < 2:
        return full_name, ""
    return parts[-1], " ".join(parts[:-1])


def build_vcard(card: Card) -> str:
    """Only present fields are emitted; free text is kept on one line."""
    lines = ["BEGIN:VCARD", "VERSION:3.0"]
    if card.card_type == "business":
        name = _escape(card.business_name)
        lines.append(f"FN:{name}")
        lines.append(f"N:{name};;;;")
        lines.append(f"ORG:{name}")
    else:
        name = _escape(card.full_name)
        last, first = _split_name(name)
        lines.append(f"FN:{name}")
        lines.append(f"N:{last};{first};;;")
        if card.company:
            lines.append(f"ORG:{_escape(card.company)}")
        if card.role:
            lines.append(f"TITLE:{_escape(card.role)}")
    if card.phone:
        lines.append(f"TEL;TYPE=CELL:{_sanitize(card.phone)}")
    if card.email:
        lines.append(f"EMAIL;TYPE=INTERNET:{_sanitize(card.email)}")
    if card.website:
        lines.append(f"URL:{_sanitize(card.website)}")
    if card.address:
        lines.append(f"ADR;TYPE=HOME:;;{_escape(card.address)};;;;")
    if card.bio:
        lines.append(f"NOTE:{_escape(card.bio)}")
    lines.append("END:VCARD")
    return "\r\n".join(lines) + "\r\n"


def qr_png(payload: str) -> bytes:
    img = qrcode.make(payload)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
