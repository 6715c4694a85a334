"""SQLAlchemy models for users, admins and cards."""
from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    String,
    Text,
    func,
)

from .session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Admin(Base):
    __tablename__ = "admin"

    admin_id = Column(Integer, primary_key=True, autoincrement=True)
    admin_name = Column(String(255), nullable=True)
    email = Column(String(255), unique=True, nullable=False, index=True)


class Card(Base):
    __tablename__ = "cards"

    slug = Column(String(96), primary_key=True)
    card_type = Column(String(16), nullable=False, default="personal")
    template = Column(String(16), nullable=False, default="modern")
    owner_email = Column(String(255), nullable=False, index=True)

    full_name = Column(String(255), nullable=True)
    role = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    business_name = Column(String(255), nullable=True)
    tagline = Column(String(255), nullable=True)

    email = Column(String(255), nullable=False)
    phone = Column(String(64), nullable=True)
    website = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)

    # JSON text columns; read them through vcards.domain.json_columns
    services = Column(Text, nullable=True)
    products = Column(Text, nullable=True)
    socials = Column(Text, nullable=True)

    profile_image = Column(Text, nullable=True)
    logo = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
