"""
Task business logic service.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.errors import NotFound
from taskboard.models.task import Task
from taskboard.schemas.task import TaskCreate, TaskUpdate
from taskboard.repositories.task_repository import TaskRepository

logger = logging.getLogger(__name__)


def parse_task_id(task_id: str | UUID) -> Optional[UUID]:
    """Ids are opaque to clients; anything that is not a UUID matches no task."""
    if isinstance(task_id, UUID):
        return task_id
    try:
        return UUID(str(task_id))
    except ValueError:
        return None


class TaskService:
    """Service for task business logic."""
    
    def __init__(self, db: AsyncSession):
        self.repository = TaskRepository(db)
    
    async def list_tasks(self) -> List[Task]:
        """List all tasks in board source order."""
        return await self.repository.list()
    
    async def get_task(self, task_id: str | UUID) -> Task:
        """Get a task by ID or raise NotFound."""
        parsed = parse_task_id(task_id)
        task = await self.repository.get_by_id(parsed) if parsed else None
        if task is None:
            raise NotFound()
        return task
    
    async def create_task(self, data: TaskCreate) -> Task:
        """Insert one task (single-row commit)."""
        return await self.repository.create(data)
    
    async def update_task(self, task_id: str | UUID, data: TaskUpdate) -> Task:
        """Apply only the fields present in the update; bump updated_at."""
        task = await self.get_task(task_id)
        fields = data.model_dump(exclude_unset=True)
        task = await self.repository.update(task, fields)
        logger.info("Updated task %s fields=%s", task.id, sorted(fields))
        return task

    async def delete_task(self, task_id: str | UUID) -> None:
        """Permanently delete a task."""
        task = await self.get_task(task_id)
        await self.repository.delete(task)
        logger.info("Deleted task %s", task_id)
