"""
Serialization of the JSON text columns (services, products, socials).

Reads never raise: a missing, already-decoded-to-the-wrong-shape or corrupt
value resolves to an empty container.
"""

from __future__ import annotations

import json
from typing import Any


def dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _loads(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8", errors="replace")
    if not isinstance(value, str):
        return None
    try:
        return json.loads(value)
    except ValueError:
        return None


def loads_list(value: Any) -> list:
    """Decode a JSON array column; anything else becomes ``[]``."""
    decoded = _loads(value)
    return decoded if isinstance(decoded, list) else []


def loads_dict(value: Any) -> dict:
    """Decode a JSON object column; anything else becomes ``{}``."""
    decoded = _loads(value)
    return decoded if isinstance(decoded, dict) else {}
