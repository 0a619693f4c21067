#!/usr/bin/env python3
"""
Taskboard command line client.

Drives the board through the HTTP API using BoardState, so every command
goes through the same refresh/move/edit/remove operations as the UI.

Examples:
    taskboard board
    taskboard extract --file notes.txt
    taskboard move <task-id> done
    taskboard drop <task-id> <column-or-task-id>
    taskboard edit <task-id> --title "New title" --assignee ""
    taskboard delete <task-id>
"""

import argparse
import asyncio
import sys
from typing import Any, Dict, List, Optional

import httpx

from taskboard.board.api_client import TaskApiClient
from taskboard.board.drop import COLUMNS
from taskboard.board.state import BoardResult, BoardState
from taskboard.core.config import settings
from taskboard.schemas.task import TASK_PRIORITIES, TASK_STATUSES


def format_task(task: Dict[str, Any]) -> str:
    line = f"  [{task.get('priority', '?')}] {task.get('title')}  ({task.get('id')})"
    if task.get("assignee"):
        line += f"  @{task['assignee']}"
    return line


def print_board(board: BoardState) -> None:
    grouped = board.columns()
    for col_id, title in COLUMNS:
        tasks = grouped[col_id]
        plural = "" if len(tasks) == 1 else "s"
        print(f"{title} ({len(tasks)} task{plural})")
        if not tasks:
            print("  No tasks")
        for task in tasks:
            print(format_task(task))


def _fail(result: BoardResult) -> int:
    print(f"ERROR: {result.message}", file=sys.stderr)
    return 1


def _edit_updates(args: argparse.Namespace) -> Dict[str, Any]:
    """Only flags that were given become update fields; '' clears optional text."""
    updates: Dict[str, Any] = {}
    for name in ("title", "status", "priority"):
        value = getattr(args, name)
        if value is not None:
            updates[name] = value
    for name in ("description", "assignee"):
        value = getattr(args, name)
        if value is not None:
            updates[name] = value or None
    return updates


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taskboard", description="Kanban board client for the taskboard API")
    parser.add_argument("--base-url", default=settings.TASKBOARD_API_URL, help="API base URL")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("board", help="Show the board")

    extract = sub.add_parser("extract", help="Extract tasks from free text")
    extract.add_argument("text", nargs="?", help="Text to extract from (default: stdin)")
    extract.add_argument("--file", help="Read the text from a file")

    move = sub.add_parser("move", help="Move a task to a column")
    move.add_argument("task_id")
    move.add_argument("status", choices=TASK_STATUSES)

    drop = sub.add_parser("drop", help="Drop a task onto a column or another task")
    drop.add_argument("task_id")
    drop.add_argument("over_id", help="Column id or task id of the drop target")

    edit = sub.add_parser("edit", help="Change task fields")
    edit.add_argument("task_id")
    edit.add_argument("--title")
    edit.add_argument("--description", help="Empty string clears it")
    edit.add_argument("--status", choices=TASK_STATUSES)
    edit.add_argument("--priority", choices=TASK_PRIORITIES)
    edit.add_argument("--assignee", help="Empty string clears it")

    delete = sub.add_parser("delete", help="Delete a task")
    delete.add_argument("task_id")

    return parser


def _read_text(args: argparse.Namespace) -> str:
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            return f.read()
    if args.text is not None:
        return args.text
    return sys.stdin.read()


async def run(args: argparse.Namespace, transport: Optional[httpx.AsyncBaseTransport] = None) -> int:
    """Execute one command; returns the process exit code."""
    async with TaskApiClient(args.base_url, transport=transport) as client:
        board = BoardState(client)

        if args.command == "extract":
            result = await board.extract(_read_text(args))
            if not result.ok:
                return _fail(result)
            plural = "" if len(result.tasks) == 1 else "s"
            print(f"Successfully extracted {len(result.tasks)} task{plural}!")
            print_board(board)
            return 0

        loaded = await board.load()
        if not loaded.ok:
            return _fail(loaded)

        if args.command == "board":
            print_board(board)
            return 0

        if args.command == "move":
            result = await board.move_task(args.task_id, args.status)
        elif args.command == "drop":
            result = await board.drop(args.task_id, args.over_id)
            if result.ok and result.noop:
                print("Nothing to do")
                return 0
        elif args.command == "edit":
            updates = _edit_updates(args)
            if not updates:
                print("ERROR: nothing to change", file=sys.stderr)
                return 2
            result = await board.edit_task(args.task_id, updates)
        elif args.command == "delete":
            result = await board.remove_task(args.task_id)
            if result.ok:
                print(f"Deleted {args.task_id}")
                return 0
        else:
            raise ValueError(f"Unknown command: {args.command}")

        if not result.ok:
            return _fail(result)
        print(format_task(result.task).strip())
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
