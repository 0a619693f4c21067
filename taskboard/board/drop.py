"""Column grouping and drag-and-drop target resolution."""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from taskboard.schemas.task import TASK_STATUSES

# (column id, heading) in board order
COLUMNS: tuple[tuple[str, str], ...] = (
    ("todo", "To Do"),
    ("in-progress", "In Progress"),
    ("done", "Done"),
)


def _field(task: Any, name: str) -> Any:
    if isinstance(task, Mapping):
        return task.get(name)
    return getattr(task, name, None)


def group_by_status(tasks: Iterable[Any]) -> Dict[str, List[Any]]:
    """
    Bucket tasks by status, in column order.

    Within a bucket tasks keep the order of the source list.
    Works on dicts (API payloads) and objects (ORM rows) alike.
    """
    grouped: Dict[str, List[Any]] = {status: [] for status in TASK_STATUSES}
    for task in tasks:
        status = _field(task, "status")
        if status in grouped:
            grouped[status].append(task)
    return grouped


def resolve_drop(task_id: str, over_id: Optional[str], tasks: Sequence[Any]) -> Optional[str]:
    """
    Work out the new status for a dragged task, or None when nothing changes.

    Dropping on a column gives that column's status. Dropping on a card gives
    the card's current status. No target, an unknown task or target, or the
    task's own status all resolve to None.
    """
    if not over_id:
        return None

    by_id = {str(_field(t, "id")): t for t in tasks}
    task = by_id.get(str(task_id))
    if task is None:
        return None

    if over_id in TASK_STATUSES:
        new_status = over_id
    else:
        target = by_id.get(str(over_id))
        if target is None:
            return None
        new_status = _field(target, "status")

    if new_status == _field(task, "status"):
        return None
    return new_status
