"""
SQLAlchemy declarative base.

All models inherit from this Base class so that metadata.create_all
and Alembic autogenerate see every table.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass
