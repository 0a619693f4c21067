"""
Board state controller.

Holds the cached task list for one board and mutates it only through
refresh/move_task/edit_task/remove_task. Each operation returns a
BoardResult instead of raising; on failure the cache is left as it was.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from taskboard.board.api_client import ApiError, TaskApiClient
from taskboard.board.drop import group_by_status, resolve_drop
from taskboard.schemas.task import TASK_STATUSES

logger = logging.getLogger(__name__)


@dataclass
class BoardResult:
    """Outcome of a board operation."""

    ok: bool
    task: Optional[Dict[str, Any]] = None
    tasks: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None
    details: Optional[str] = None
    status_code: Optional[int] = None
    # True when the operation decided nothing needed to change
    noop: bool = False

    @classmethod
    def failure(cls, exc: Exception) -> "BoardResult":
        if isinstance(exc, ApiError):
            return cls(ok=False, error=exc.error, details=exc.details, status_code=exc.status_code)
        return cls(ok=False, error=str(exc) or exc.__class__.__name__)

    @property
    def message(self) -> str:
        """One-line text suitable for an inline UI message."""
        if self.ok:
            return "ok"
        if self.details:
            return f"{self.error}: {self.details}"
        return self.error or "Unknown error"


class BoardState:
    """Explicit, client-side state for the board."""

    def __init__(self, client: TaskApiClient):
        self.client = client
        self.tasks: List[Dict[str, Any]] = []

    def _index(self, task_id: str) -> Optional[int]:
        for i, task in enumerate(self.tasks):
            if str(task.get("id")) == str(task_id):
                return i
        return None

    def get(self, task_id: str) -> Optional[Dict[str, Any]]:
        idx = self._index(task_id)
        return self.tasks[idx] if idx is not None else None

    def _replace(self, updated: Dict[str, Any]) -> None:
        idx = self._index(updated["id"])
        if idx is None:
            self.tasks.append(updated)
        else:
            self.tasks[idx] = updated

    def columns(self) -> Dict[str, List[Dict[str, Any]]]:
        """Tasks grouped into todo / in-progress / done, in source order."""
        return group_by_status(self.tasks)

    async def refresh(self) -> BoardResult:
        """Reload the full task list."""
        try:
            tasks = await self.client.list_tasks()
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Board refresh failed: %s", exc)
            return BoardResult.failure(exc)
        self.tasks = list(tasks)
        return BoardResult(ok=True, tasks=list(self.tasks))

    async def load(self) -> BoardResult:
        """Initial load; same as refresh."""
        return await self.refresh()

    async def edit_task(self, task_id: str, updates: Dict[str, Any]) -> BoardResult:
        """Send a partial update and swap in the server's record on success."""
        try:
            updated = await self.client.update_task(task_id, updates)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Updating task %s failed: %s", task_id, exc)
            return BoardResult.failure(exc)
        self._replace(updated)
        return BoardResult(ok=True, task=updated)

    async def move_task(self, task_id: str, new_status: str) -> BoardResult:
        """Move a task to another column."""
        if new_status not in TASK_STATUSES:
            return BoardResult(ok=False, error=f"Unknown column: {new_status}")
        return await self.edit_task(task_id, {"status": new_status})

    async def remove_task(self, task_id: str) -> BoardResult:
        """Delete a task; the cache drops it only after the server confirms."""
        try:
            await self.client.delete_task(task_id)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Deleting task %s failed: %s", task_id, exc)
            return BoardResult.failure(exc)
        idx = self._index(task_id)
        if idx is not None:
            del self.tasks[idx]
        return BoardResult(ok=True)

    async def drop(self, task_id: str, over_id: Optional[str]) -> BoardResult:
        """Handle a drag release: at most one move_task call."""
        new_status = resolve_drop(task_id, over_id, self.tasks)
        if new_status is None:
            return BoardResult(ok=True, task=self.get(task_id), noop=True)
        return await self.move_task(task_id, new_status)

    async def extract(self, text: str) -> BoardResult:
        """Run extraction, then reload the board."""
        try:
            payload = await self.client.extract(text)
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning("Extraction failed: %s", exc)
            return BoardResult.failure(exc)
        created = list(payload.get("tasks") or [])
        refreshed = await self.refresh()
        if not refreshed.ok:
            return refreshed
        return BoardResult(ok=True, tasks=created)
