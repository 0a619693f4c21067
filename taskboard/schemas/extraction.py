"""
Task extraction schemas.

Defines the strict JSON contract for model-generated task drafts and the
request/response bodies of POST /tasks/extract.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, field_validator

from taskboard.schemas.task import (
    DEFAULT_PRIORITY,
    DEFAULT_STATUS,
    TaskCreate,
    TaskPriority,
    TaskRead,
    TaskStatus,
)


class TaskDraft(BaseModel):
    """
    One unvalidated candidate task as returned by the model.

    Strings are trimmed; blank optional strings become None; missing
    status/priority fall back to todo/medium. Unknown keys are ignored.
    """

    title: str = Field(..., max_length=500)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assignee: Optional[str] = Field(None, max_length=255)

    @field_validator("title", mode="before")
    @classmethod
    def validate_title(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Each task must have a valid title")
        return v.strip()

    @field_validator("description", "assignee", mode="before")
    @classmethod
    def clean_text(cls, v):
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("status", "priority", mode="before")
    @classmethod
    def normalize_choice(cls, v):
        # Models sometimes answer "High" or " medium "
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    def to_create(self) -> TaskCreate:
        return TaskCreate(
            title=self.title,
            description=self.description,
            status=self.status or DEFAULT_STATUS,
            priority=self.priority or DEFAULT_PRIORITY,
            assignee=self.assignee,
        )


@dataclass(frozen=True)
class ValidDraft:
    """A draft that passed validation and may be persisted."""

    index: int
    draft: TaskDraft


@dataclass(frozen=True)
class RejectedDraft:
    """A draft that failed validation; fails the whole batch."""

    index: int
    reason: str


DraftCheck = Union[ValidDraft, RejectedDraft]


class ExtractRequest(BaseModel):
    """Request body for task extraction. `transcript` is accepted as an alias."""

    # Typed loosely so the service can answer non-text input with InvalidInput
    text: Any = Field(None, validation_alias=AliasChoices("text", "transcript"))


class ExtractResponse(BaseModel):
    """Response body for a successful extraction."""

    success: bool = True
    tasks: List[TaskRead]
    count: int
