"""
Board state and drop handling.

The board keeps an explicit in-memory copy of all tasks and changes it
only through BoardState operations, after the API confirms.
"""

from taskboard.board.api_client import ApiError, TaskApiClient
from taskboard.board.drop import COLUMNS, group_by_status, resolve_drop
from taskboard.board.state import BoardResult, BoardState

__all__ = [
    "ApiError",
    "BoardResult",
    "BoardState",
    "COLUMNS",
    "TaskApiClient",
    "group_by_status",
    "resolve_drop",
]
