"""
Task repository - database operations for Task.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.task import Task
from taskboard.schemas.task import TaskCreate
from taskboard.utils.time import utc_now


class TaskRepository:
    """Repository for Task database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list(self) -> List[Task]:
        """List all tasks in insertion order."""
        query = select(Task).order_by(Task.created_at.asc(), Task.id.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def get_by_id(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        result = await self.db.execute(
            select(Task).where(Task.id == task_id)
        )
        return result.scalar_one_or_none()
    
    async def create(self, data: TaskCreate) -> Task:
        """Insert a single task and commit it on its own."""
        task = Task(
            id=uuid.uuid4(),
            **data.model_dump()
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task
    
    async def update(self, task: Task, fields: Dict[str, Any]) -> Task:
        """Apply the given fields to a task and bump updated_at."""
        for field, value in fields.items():
            setattr(task, field, value)
        
        # Set explicitly so an empty update still counts as a mutation
        task.updated_at = utc_now()
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def delete(self, task: Task) -> None:
        """Permanently remove a task."""
        await self.db.delete(task)
        await self.db.commit()
