"""Structured validation failures shared by card and account payloads."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Type, TypeVar

from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

_PREFIXES = ("Value error, ", "Assertion failed, ")


class PayloadValidationError(Exception):
    """Validation failure carrying one entry per offending field path."""

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__("Validation failed")
        self.errors = errors

    @classmethod
    def single(cls, path: str, message: str) -> "PayloadValidationError":
        return cls([{"path": path, "message": message}])

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "PayloadValidationError":
        errors = []
        for err in exc.errors():
            path = ".".join(str(part) for part in err.get("loc", ()))
            message = err.get("msg", "Invalid value")
            for prefix in _PREFIXES:
                if message.startswith(prefix):
                    message = message[len(prefix):]
            errors.append({"path": path or "__root__", "message": message})
        return cls(errors)

    def as_detail(self) -> dict:
        return {"message": "Validation failed", "errors": self.errors}


def validate_payload(model: Type[M], raw: Any) -> M:
    """Validate ``raw`` against ``model`` or raise ``PayloadValidationError``."""
    if not isinstance(raw, Mapping):
        raise PayloadValidationError.single("__root__", "Expected a JSON object")
    try:
        return model.model_validate(dict(raw))
    except ValidationError as exc:
        raise PayloadValidationError.from_pydantic(exc) from exc
