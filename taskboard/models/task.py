"""
Task model.

The only persisted entity: one card on the board.
"""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskboard.models.base_model import TimestampedModel


class Task(TimestampedModel):
    """
    Task table - one row per accepted task draft.
    """
    
    __tablename__ = "task"
    
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    
    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    # One of: todo, in-progress, done
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="todo",
        index=True,
    )
    
    # One of: high, medium, low
    priority: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        default="medium",
    )
    
    assignee: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Task {self.id} [{self.status}] {self.title!r}>"
