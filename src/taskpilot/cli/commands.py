"""Subcommand handlers.

Each handler receives an initialized provider, the resolved board id (if
any) and the parsed arguments, and returns an exit code. Vendor errors
propagate to the caller in ``__main__``.
"""

import argparse
import logging

from ..models import CreateTaskParams, TaskFilter
from ..providers.protocol import TaskProvider
from ..services.batch import BatchService
from .output import error, format_task, header, info, success

logger = logging.getLogger(__name__)


def _require_board(board_id: str | None) -> str | None:
    if not board_id:
        error("No board selected. Pass --board or set 'board' in taskpilot.yml")
    return board_id


async def cmd_boards(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    boards = await provider.list_boards()
    if not boards:
        info("No boards found")
        return 0
    header(f"{provider.display_name} boards:")
    for board in boards:
        marker = " (closed)" if board.closed else ""
        print(f"  {board.id}  {board.name}{marker}")
    return 0


async def cmd_columns(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    if not _require_board(board_id):
        return 1
    for column in await provider.get_board_columns(board_id):
        print(f"  {column.id}  {column.name}")
    return 0


async def cmd_list(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    if not _require_board(board_id):
        return 1
    task_filter = TaskFilter(
        column_name=args.column,
        assignee=args.assignee,
        label=args.label,
        status=args.status,
        archived=True if args.archived else None,
    )
    tasks = await provider.list_tasks(board_id, task_filter)
    if not tasks:
        info("No tasks found")
        return 0
    for task in tasks:
        print(f"  {format_task(task)}")
    return 0


async def cmd_show(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    task = await provider.get_task(args.task_id)
    header(format_task(task))
    if task.url:
        print(f"  {task.url}")
    if task.due_date:
        done = " (complete)" if task.due_complete else ""
        print(f"  Due: {task.due_date:%Y-%m-%d}{done}")
    if task.description:
        print()
        print(task.description)
    if args.comments:
        comments = await provider.list_comments(task.id)
        print()
        header(f"Comments ({len(comments)}):")
        for comment in comments:
            print(f"  {comment.author.username} {comment.created_at:%Y-%m-%d %H:%M}: {comment.text}")
    return 0


async def cmd_create(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    if not _require_board(board_id):
        return 1
    params = CreateTaskParams(
        title=args.title,
        description=args.description,
        labels=args.label or None,
        assignees=args.assignee or None,
    )
    task = await provider.create_task(board_id, args.column or "", params)
    success(f"Created {format_task(task)}")
    return 0


async def cmd_move(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    task = await provider.move_task(args.task_id, args.column)
    success(f"Moved {format_task(task)}")
    return 0


async def cmd_archive(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    task = await provider.archive_task(args.task_id)
    success(f"Archived {format_task(task)}")
    return 0


async def cmd_unarchive(
    provider: TaskProvider, board_id: str | None, args: argparse.Namespace
) -> int:
    task = await provider.unarchive_task(args.task_id)
    success(f"Restored {format_task(task)}")
    return 0


async def cmd_comment(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    comment = await provider.add_comment(args.task_id, args.text)
    success(f"Comment {comment.id} added")
    return 0


async def cmd_labels(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    if not _require_board(board_id):
        return 1
    for label in await provider.list_labels(board_id):
        color = f" {label.color}" if label.color else ""
        print(f"  {label.id}  {label.name}{color}")
    return 0


async def cmd_members(provider: TaskProvider, board_id: str | None, args: argparse.Namespace) -> int:
    if not _require_board(board_id):
        return 1
    for member in await provider.list_members(board_id):
        print(f"  {member.id}  {member.username} ({member.display_name})")
    return 0


async def cmd_batch_move(
    provider: TaskProvider, board_id: str | None, args: argparse.Namespace
) -> int:
    service = BatchService(provider, parallel=args.parallel, limit=args.limit)
    result = await service.batch_move(args.task_ids, args.column)
    for task in result.success:
        success(f"Moved {format_task(task)}")
    for task_id, exc in result.failed:
        error(f"{task_id}: {exc}")
    return 0 if result.ok else 1


COMMANDS = {
    "boards": cmd_boards,
    "columns": cmd_columns,
    "list": cmd_list,
    "show": cmd_show,
    "create": cmd_create,
    "move": cmd_move,
    "archive": cmd_archive,
    "unarchive": cmd_unarchive,
    "comment": cmd_comment,
    "labels": cmd_labels,
    "members": cmd_members,
    "batch-move": cmd_batch_move,
}
