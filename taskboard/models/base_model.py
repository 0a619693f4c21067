"""
Base model with common fields.

Every table inherits from this to get:
- id (UUID primary key)
- created_at (when the record was created)
- updated_at (when the record was last modified)
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.db.base import Base
from taskboard.utils.time import utc_now


class TimestampedModel(Base):
    """
    Abstract base class for all models.
    
    This is not a real table - it's a template that other models inherit from.
    """
    
    __abstract__ = True  # This means: don't create a table for this class
    
    # Primary key - assigned once at creation and never reused
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    
    # Timestamps are system managed; clients never set them
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )
