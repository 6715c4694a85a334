"""
Card data model and input validation.

A card is either a ``PersonalCard`` or a ``BusinessCard``; ``card_type`` is
the tag. Input goes through ``validate_card_create`` / ``validate_card_update``
which normalize raw form/API payloads (blank strings become absent, legacy
field names are folded into canonical ones) and report every offending field
path at once through ``PayloadValidationError``.

JSON uses camelCase (``cardType``, ``fullName``...), Python uses snake_case.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Union
from urllib.parse import urlparse

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .validation import PayloadValidationError, validate_payload

CardType = Literal["personal", "business"]
CardTemplate = Literal["modern", "classic", "creative"]

DEFAULT_TEMPLATE = "modern"
BIO_MAX_LENGTH = 200
IMAGE_SUBTYPES = frozenset({"png", "jpeg", "jpg", "gif", "webp", "svg+xml"})
IMAGE_MAX_BYTES = 2 * 1024 * 1024

PHONE_RE = re.compile(r"^[+\d][\d\s-]{6,}$")
DATA_IMAGE_RE = re.compile(r"^data:image/([a-zA-Z0-9.+-]+);base64,(.*)$", re.IGNORECASE | re.DOTALL)
HTTP_URL_RE = re.compile(r"^https?://.+", re.IGNORECASE)

# legacy name -> canonical name
LEGACY_ALIASES = {
    "social": "socials",
    "jobTitle": "role",
    "location": "address",
    "profilePhoto": "profileImage",
}


# ---------------------------------------------------------------- field types
def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc or " " in value:
        raise ValueError("Invalid URL")
    return value


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not PHONE_RE.match(value):
        raise ValueError("Use a valid phone number")
    return value


def _decoded_size(b64: str) -> int:
    body = "".join(b64.split())
    return len(body) * 3 // 4 - (len(body) - len(body.rstrip("=")))


def _check_image(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    match = DATA_IMAGE_RE.match(value)
    if match:
        if match.group(1).lower() not in IMAGE_SUBTYPES:
            raise ValueError("Only PNG, JPEG, GIF, WebP or SVG images are allowed")
        if _decoded_size(match.group(2)) > IMAGE_MAX_BYTES:
            raise ValueError("Image must be under 2MB")
        return value
    if HTTP_URL_RE.match(value) and urlparse(value).netloc:
        return value
    raise ValueError("Provide a valid image URL or base64 data URL")


def _check_bio(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > BIO_MAX_LENGTH:
        raise ValueError(f"Keep bio under {BIO_MAX_LENGTH} characters")
    return value


OptionalStr = Annotated[Optional[str], BeforeValidator(_blank_to_none)]
RequiredStr = Annotated[str, BeforeValidator(_blank_to_none)]
OptionalUrl = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_url)]
OptionalPhone = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_phone)]
OptionalImage = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_image)]
OptionalBio = Annotated[Optional[str], BeforeValidator(_blank_to_none), AfterValidator(_check_bio)]
RequiredEmail = Annotated[EmailStr, BeforeValidator(_blank_to_none)]
OptionalEmail = Annotated[Optional[EmailStr], BeforeValidator(_blank_to_none)]
OptionalTemplate = Annotated[Optional[CardTemplate], BeforeValidator(_blank_to_none)]


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------- sub-objects
class Service(_Model):
    name: RequiredStr
    description: OptionalStr = None


class Product(_Model):
    name: RequiredStr
    link: OptionalUrl = None


class Socials(_Model):
    """Known platform links; unknown keys are dropped."""

    linkedin: OptionalUrl = None
    instagram: OptionalUrl = None
    youtube: OptionalUrl = None
    github: OptionalUrl = None
    twitter: OptionalUrl = None
    facebook: OptionalUrl = None

    def as_dict(self) -> Dict[str, str]:
        return {key: value for key, value in self.model_dump().items() if value}


# ---------------------------------------------------------------- read models
class CardBase(_Model):
    slug: str
    owner_email: str
    template: str = DEFAULT_TEMPLATE
    email: str = ""
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    bio: Optional[str] = None
    services: List[Service] = Field(default_factory=list)
    products: List[Product] = Field(default_factory=list)
    socials: Dict[str, str] = Field(default_factory=dict)
    profile_image: Optional[str] = None
    logo: Optional[str] = None
    created_at: Optional[datetime] = None

    # business-only / personal-only fields may still be stored on the other variant
    full_name: Optional[str] = None
    role: Optional[str] = None
    company: Optional[str] = None
    business_name: Optional[str] = None
    tagline: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class PersonalCard(CardBase):
    card_type: Literal["personal"] = "personal"
    full_name: str = ""

    @property
    def display_name(self) -> str:
        return self.full_name or ""

    @property
    def avatar(self) -> Optional[str]:
        return self.profile_image


class BusinessCard(CardBase):
    card_type: Literal["business"] = "business"
    business_name: str = ""

    @property
    def display_name(self) -> str:
        return self.business_name or ""

    @property
    def avatar(self) -> Optional[str]:
        return self.logo


Card = Union[PersonalCard, BusinessCard]


# ---------------------------------------------------------------- input schemas
def _fold_legacy_keys(data: Any) -> Any:
    if not isinstance(data, Mapping):
        return data
    folded = dict(data)
    for legacy, canonical in LEGACY_ALIASES.items():
        if legacy not in folded:
            continue
        legacy_value = folded.pop(legacy)
        snake = _to_snake(canonical)
        if _is_blank(folded.get(canonical)) and _is_blank(folded.get(snake)):
            folded[canonical] = legacy_value
    return folded


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


class _CardInput(_Model):
    template: OptionalTemplate = None
    email: RequiredEmail
    phone: OptionalPhone = None
    website: OptionalUrl = None
    address: OptionalStr = None
    bio: OptionalBio = None
    services: Optional[List[Service]] = None
    products: Optional[List[Product]] = None
    socials: Optional[Socials] = None
    profile_image: OptionalImage = None
    logo: OptionalImage = None
    slug: OptionalStr = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_names(cls, data: Any) -> Any:
        return _fold_legacy_keys(data)


class PersonalCardCreate(_CardInput):
    card_type: Literal["personal"]
    full_name: RequiredStr
    role: OptionalStr = None
    company: OptionalStr = None
    business_name: OptionalStr = None
    tagline: OptionalStr = None


class BusinessCardCreate(_CardInput):
    card_type: Literal["business"]
    business_name: RequiredStr
    tagline: OptionalStr = None
    full_name: OptionalStr = None
    role: OptionalStr = None
    company: OptionalStr = None


CardCreate = Union[PersonalCardCreate, BusinessCardCreate]

_CREATE_SCHEMAS = {
    "personal": PersonalCardCreate,
    "business": BusinessCardCreate,
}


class CardUpdate(_Model):
    """Partial update: every field is optional, omitted fields are preserved."""

    card_type: Optional[CardType] = None
    template: OptionalTemplate = None
    full_name: OptionalStr = None
    business_name: OptionalStr = None
    role: OptionalStr = None
    company: OptionalStr = None
    tagline: OptionalStr = None
    email: OptionalEmail = None
    phone: OptionalPhone = None
    website: OptionalUrl = None
    address: OptionalStr = None
    bio: OptionalBio = None
    services: Optional[List[Service]] = None
    products: Optional[List[Product]] = None
    socials: Optional[Socials] = None
    profile_image: OptionalImage = None
    logo: OptionalImage = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_names(cls, data: Any) -> Any:
        return _fold_legacy_keys(data)

    def changes(self) -> Dict[str, Any]:
        """Fields that carry a value, in storage-ready shape."""
        values: Dict[str, Any] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is None:
                continue
            if name in ("services", "products"):
                values[name] = [item.model_dump(exclude_none=True) for item in value]
            elif name == "socials":
                values[name] = value.as_dict()
            else:
                values[name] = value
        return values


# ---------------------------------------------------------------- entry points
def _card_type_of(raw: Mapping[str, Any]) -> Optional[str]:
    value = raw.get("cardType", raw.get("card_type"))
    return value.strip().lower() if isinstance(value, str) else None


def validate_card_create(raw: Any) -> CardCreate:
    """Validate a create payload, dispatching on ``cardType``."""
    if not isinstance(raw, Mapping):
        raise PayloadValidationError.single("__root__", "Expected a JSON object")
    card_type = _card_type_of(raw)
    schema = _CREATE_SCHEMAS.get(card_type) if card_type else None
    if schema is None:
        raise PayloadValidationError.single("cardType", "cardType must be 'personal' or 'business'")
    payload = dict(raw)
    payload.pop("card_type", None)
    payload["cardType"] = card_type
    return validate_payload(schema, payload)


def validate_card_update(raw: Any) -> CardUpdate:
    return validate_payload(CardUpdate, raw)


def check_display_name(values: Mapping[str, Any]) -> None:
    """The name matching ``card_type`` must be present after an update is merged."""
    if values.get("card_type") == "business":
        if _is_blank(values.get("business_name")):
            raise PayloadValidationError.single("businessName", "Business name is required")
    elif _is_blank(values.get("full_name")):
        raise PayloadValidationError.single("fullName", "Full name is required")


def create_to_record(data: CardCreate) -> Dict[str, Any]:
    """Flatten a validated create payload into storage-ready column values."""
    record = data.model_dump(exclude={"services", "products", "socials", "slug"})
    record["template"] = data.template or DEFAULT_TEMPLATE
    record["services"] = [item.model_dump(exclude_none=True) for item in data.services or []]
    record["products"] = [item.model_dump(exclude_none=True) for item in data.products or []]
    record["socials"] = data.socials.as_dict() if data.socials else {}
    return record


# ---------------------------------------------------------------- read mapping
def _coerce_services(items: Any) -> List[Service]:
    result = []
    for item in items or []:
        if isinstance(item, Mapping) and isinstance(item.get("name"), str) and item["name"].strip():
            description = item.get("description")
            result.append(Service.model_construct(
                name=item["name"],
                description=description if isinstance(description, str) and description else None,
            ))
    return result


def _coerce_products(items: Any) -> List[Product]:
    result = []
    for item in items or []:
        if isinstance(item, Mapping) and isinstance(item.get("name"), str) and item["name"].strip():
            link = item.get("link")
            result.append(Product.model_construct(
                name=item["name"],
                link=link if isinstance(link, str) and link else None,
            ))
    return result


def _coerce_socials(value: Any) -> Dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {key: url for key, url in value.items() if isinstance(key, str) and isinstance(url, str) and url}


def build_card(values: Mapping[str, Any]) -> Card:
    """
    Build a read model from stored values without re-running input validation,
    so legacy rows never fail to load.
    """
    card_type = values.get("card_type")
    model = BusinessCard if card_type == "business" else PersonalCard
    fields: Dict[str, Any] = {}
    for name in CardBase.model_fields:
        if name in ("services", "products", "socials"):
            continue
        value = values.get(name)
        fields[name] = value if value not in ("",) else None
    fields["services"] = _coerce_services(values.get("services"))
    fields["products"] = _coerce_products(values.get("products"))
    fields["socials"] = _coerce_socials(values.get("socials"))
    fields["slug"] = values.get("slug") or ""
    fields["owner_email"] = values.get("owner_email") or ""
    fields["email"] = values.get("email") or ""
    fields["template"] = values.get("template") or DEFAULT_TEMPLATE
    if model is PersonalCard:
        fields["full_name"] = values.get("full_name") or ""
    else:
        fields["business_name"] = values.get("business_name") or ""
    fields["card_type"] = "business" if model is BusinessCard else "personal"
    return model.model_construct(**fields)
