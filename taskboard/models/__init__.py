"""
Models package.

Import all models here so they are registered with SQLAlchemy.
"""

from taskboard.models.task import Task

# Export all models
__all__ = [
    "Task",
]
