"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import delete, select, update

from vcards.db.models import Admin, Card, User
from vcards.db.session import get_session
from vcards.domain import json_columns

CARD_SCALAR_COLUMNS = (
    "card_type",
    "template",
    "owner_email",
    "full_name",
    "role",
    "company",
    "business_name",
    "tagline",
    "email",
    "phone",
    "website",
    "address",
    "bio",
    "profile_image",
    "logo",
)
CARD_JSON_COLUMNS = {
    "services": json_columns.loads_list,
    "products": json_columns.loads_list,
    "socials": json_columns.loads_dict,
}


def card_to_values(entity: Card) -> dict:
    """Row -> plain dict; JSON text columns are decoded defensively."""
    values: dict[str, Any] = {"slug": entity.slug, "created_at": entity.created_at}
    for column in CARD_SCALAR_COLUMNS:
        values[column] = getattr(entity, column)
    for column, loader in CARD_JSON_COLUMNS.items():
        values[column] = loader(getattr(entity, column))
    return values


def _column_values(values: Mapping[str, Any]) -> dict:
    row: dict[str, Any] = {}
    for column in CARD_SCALAR_COLUMNS:
        if column in values:
            row[column] = values[column]
    for column in CARD_JSON_COLUMNS:
        if column in values:
            row[column] = json_columns.dumps(values[column])
    return row


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- users --------------------------
    def get_user(self, user_id: int) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def create_user(self, name: str, email: str, password_hash: str) -> User:
        entity = User(name=name, email=email, password=password_hash, created_at=datetime.now(timezone.utc))
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def list_users(self) -> list[User]:
        with get_session() as session:
            stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
            return session.execute(stmt).scalars().all()

    def delete_user(self, email: str) -> int:
        with get_session() as session:
            result = session.execute(delete(User).where(User.email == email))
            session.commit()
            return result.rowcount or 0

    # -------------------------- admins --------------------------
    def get_admin_by_email(self, email: str) -> Optional[Admin]:
        with get_session() as session:
            stmt = select(Admin).where(Admin.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def create_admin(self, email: str, admin_name: str | None = None) -> Admin:
        entity = Admin(email=email, admin_name=admin_name)
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    # -------------------------- cards --------------------------
    def get_card(self, slug: str) -> Optional[Card]:
        with get_session() as session:
            return session.get(Card, slug)

    def slug_exists(self, slug: str) -> bool:
        slug_value = (slug or "").strip()
        if not slug_value:
            return False
        with get_session() as session:
            stmt = select(Card.slug).where(Card.slug == slug_value).limit(1)
            return session.execute(stmt).first() is not None

    def list_cards(self) -> list[Card]:
        with get_session() as session:
            stmt = select(Card).order_by(Card.created_at.desc())
            return session.execute(stmt).scalars().all()

    def list_cards_by_owner(self, email: str) -> list[Card]:
        with get_session() as session:
            stmt = select(Card).where(Card.owner_email == email).order_by(Card.created_at.desc())
            return session.execute(stmt).scalars().all()

    def insert_card(self, slug: str, values: Mapping[str, Any]) -> Card:
        """Insert a card; raises ``IntegrityError`` when the slug is taken."""
        entity = Card(slug=slug, created_at=datetime.now(timezone.utc), **_column_values(values))
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def update_card(self, slug: str, values: Mapping[str, Any]) -> Optional[Card]:
        row = _column_values(values)
        with get_session() as session:
            if row:
                session.execute(update(Card).where(Card.slug == slug).values(**row))
                session.commit()
            return session.get(Card, slug)

    def delete_card(self, slug: str) -> int:
        with get_session() as session:
            result = session.execute(delete(Card).where(Card.slug == slug))
            session.commit()
            return result.rowcount or 0

    def delete_cards_by_owner(self, email: str) -> int:
        with get_session() as session:
            result = session.execute(delete(Card).where(Card.owner_email == email))
            session.commit()
            return result.rowcount or 0
