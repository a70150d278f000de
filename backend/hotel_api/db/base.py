"""Declarative base shared by all ORM models."""

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import JSON

JSONB_TYPE = JSONB().with_variant(JSON(), "sqlite")


class Base(DeclarativeBase):
    """Base class for ORM models."""
