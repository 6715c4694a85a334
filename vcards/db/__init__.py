"""Database layer: declarative base, pooled engine and session scope."""

from .session import Base, get_engine, get_session

__all__ = ["Base", "get_engine", "get_session"]
