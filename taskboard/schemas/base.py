"""
Base Pydantic schemas with common fields.

These are templates that other schemas inherit from.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class RecordRead(BaseModel):
    """
    Base schema for reading persisted records.
    
    Includes the auto-generated fields (id, timestamps). Responses use
    camelCase keys (createdAt, updatedAt) to match the board client.
    """
    
    id: UUID
    created_at: datetime
    updated_at: datetime
    
    # This tells Pydantic to work with SQLAlchemy models
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )
