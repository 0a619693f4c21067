"""Board UI routes (server-rendered Kanban page)."""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ValidationError, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.board.drop import COLUMNS, group_by_status, resolve_drop
from taskboard.core.config import settings
from taskboard.core.dependencies import get_db, get_llm_client
from taskboard.errors import AppError, InvalidInput, internal_error
from taskboard.schemas.task import TASK_PRIORITIES, TASK_STATUSES, TaskRead, TaskUpdate
from taskboard.services.llm_client import LLMClient
from taskboard.services.task_extraction_service import TaskExtractionService
from taskboard.services.task_service import TaskService

logger = logging.getLogger(__name__)

router = APIRouter()
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))


class DropRequest(BaseModel):
    task_id: str
    over_id: Optional[str] = None

    @field_validator("over_id", mode="before")
    @classmethod
    def blank_is_no_target(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


def _error_message(exc: AppError) -> str:
    return f"{exc.message}: {exc.details}" if exc.details else exc.message


def _redirect(success: Optional[str] = None, error: Optional[str] = None) -> RedirectResponse:
    url = "/ui/board"
    if success:
        url += f"?success_message={quote(success)}"
    elif error:
        url += f"?error_message={quote(error)}"
    return RedirectResponse(url=url, status_code=303)


@router.get("/", response_class=HTMLResponse)
async def root() -> RedirectResponse:
    return RedirectResponse(url="/ui/board", status_code=303)


@router.get("/ui/board", response_class=HTMLResponse)
async def board_page(
    request: Request,
    success_message: Optional[str] = None,
    error_message: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Three-column board with extraction form"""
    tasks = await TaskService(db).list_tasks()
    grouped = group_by_status(tasks)
    return templates.TemplateResponse(
        request,
        "board.html",
        {
            "app_name": settings.APP_NAME,
            "columns": [(col_id, title, grouped[col_id]) for col_id, title in COLUMNS],
            "statuses": TASK_STATUSES,
            "priorities": TASK_PRIORITIES,
            "success_message": success_message,
            "error_message": error_message,
        },
    )


async def _read_drop_request(request: Request) -> DropRequest:
    """Accept the drop fields as a JSON body or as form data."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            raw = await request.json()
        except ValueError as exc:
            raise InvalidInput("Invalid request body", details=str(exc)) from exc
    else:
        raw = dict(await request.form())
    if not isinstance(raw, dict):
        raise InvalidInput("Invalid request body", details="expected an object with task_id and over_id")
    try:
        return DropRequest.model_validate(raw)
    except ValidationError as exc:
        raise InvalidInput("Invalid request body", details=str(exc)) from exc


@router.post("/ui/board/drop")
async def board_drop(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Resolve a drag release against the current store.

    Takes task_id and over_id as JSON or form fields. Issues at most one
    status update; returns {changed, task}.
    """
    data = await _read_drop_request(request)
    service = TaskService(db)
    try:
        tasks = await service.list_tasks()
        new_status = resolve_drop(data.task_id, data.over_id, tasks)
        if new_status is None:
            return {"changed": False, "task": None}
        task = await service.update_task(data.task_id, TaskUpdate(status=new_status))
    except SQLAlchemyError as exc:
        return internal_error("move task", exc)
    logger.info("Moved task %s to %s", task.id, new_status)
    return {"changed": True, "task": TaskRead.model_validate(task).model_dump(mode="json", by_alias=True)}


@router.post("/ui/board/extract")
async def board_extract(
    text: str = Form(""),
    db: AsyncSession = Depends(get_db),
    llm: LLMClient = Depends(get_llm_client),
):
    """Extract tasks from pasted text"""
    try:
        result = await TaskExtractionService(db, llm).extract(text)
    except AppError as exc:
        return _redirect(error=_error_message(exc))
    plural = "" if result.count == 1 else "s"
    return _redirect(success=f"Successfully extracted {result.count} task{plural}!")


@router.post("/ui/board/tasks/{task_id}/edit")
async def board_edit(
    task_id: str,
    title: str = Form(...),
    description: Optional[str] = Form(None),
    status: str = Form(...),
    priority: str = Form(...),
    assignee: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    """Save the edit form"""
    try:
        updates = TaskUpdate(
            title=title,
            description=description,
            status=status,
            priority=priority,
            assignee=assignee,
        )
    except ValueError as exc:
        return _redirect(error=f"Invalid task: {exc}")
    try:
        await TaskService(db).update_task(task_id, updates)
    except AppError as exc:
        return _redirect(error=_error_message(exc))
    return _redirect(success="Task updated")


@router.post("/ui/board/tasks/{task_id}/delete")
async def board_delete(
    task_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete from the edit form"""
    try:
        await TaskService(db).delete_task(task_id)
    except AppError as exc:
        return _redirect(error=_error_message(exc))
    return _redirect(success="Task deleted")
