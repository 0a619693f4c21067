"""
Task router - API endpoints for tasks.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.dependencies import get_db, get_llm_client
from taskboard.errors import internal_error
from taskboard.schemas.extraction import ExtractRequest, ExtractResponse
from taskboard.schemas.task import DeleteResponse, TaskRead, TaskUpdate
from taskboard.services.llm_client import LLMClient
from taskboard.services.task_extraction_service import TaskExtractionService
from taskboard.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskRead])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
):
    """List every task on the board."""
    service = TaskService(db)
    try:
        return await service.list_tasks()
    except SQLAlchemyError as exc:
        return internal_error("fetch tasks", exc)


@router.post("/extract", response_model=ExtractResponse)
async def extract_tasks(
    data: ExtractRequest,
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
):
    """
    Extract tasks from free text with the language model and store them.

    Returns the created tasks and their count.
    """
    service = TaskExtractionService(db, llm)
    try:
        result = await service.extract(data.text)
    except SQLAlchemyError as exc:
        return internal_error("process input and generate tasks", exc)
    return ExtractResponse(
        success=True,
        tasks=[TaskRead.model_validate(t) for t in result.tasks],
        count=result.count,
    )


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a task by ID."""
    service = TaskService(db)
    return await service.get_task(task_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Partially update a task; absent fields are left untouched."""
    service = TaskService(db)
    try:
        return await service.update_task(task_id, data)
    except SQLAlchemyError as exc:
        return internal_error("update task", exc)


@router.delete("/{task_id}", response_model=DeleteResponse)
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete a task permanently."""
    service = TaskService(db)
    try:
        await service.delete_task(task_id)
    except SQLAlchemyError as exc:
        return internal_error("delete task", exc)
    return DeleteResponse(success=True)
