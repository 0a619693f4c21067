"""
Task Pydantic schemas.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from taskboard.schemas.base import RecordRead


TaskStatus = Literal["todo", "in-progress", "done"]
TaskPriority = Literal["high", "medium", "low"]

TASK_STATUSES: tuple[str, ...] = ("todo", "in-progress", "done")
TASK_PRIORITIES: tuple[str, ...] = ("high", "medium", "low")

DEFAULT_STATUS = "todo"
DEFAULT_PRIORITY = "medium"


def _clean_optional_text(value):
    """Trim a string; blank strings become None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class TaskCreate(BaseModel):
    """Schema for inserting a task (always built from a validated draft)."""
    
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    status: TaskStatus = DEFAULT_STATUS
    priority: TaskPriority = DEFAULT_PRIORITY
    assignee: Optional[str] = Field(None, max_length=255)


class TaskUpdate(BaseModel):
    """
    Schema for a partial task update.

    Only keys present in the request body are applied (see
    ``model_dump(exclude_unset=True)``). An explicit null clears
    description/assignee; title, status and priority cannot be null.
    """
    
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee: Optional[str] = Field(None, max_length=255)

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        if v is None:
            raise ValueError("title cannot be null")
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("title must not be empty")
        return v

    @field_validator("status", "priority")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("description", "assignee", mode="before")
    @classmethod
    def clean_optional_text(cls, v):
        return _clean_optional_text(v)


class TaskRead(RecordRead):
    """Schema for reading task data (API response)."""
    
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    assignee: Optional[str] = None


class DeleteResponse(BaseModel):
    """Acknowledgement returned by DELETE."""

    success: bool = True
