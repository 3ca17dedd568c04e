"""
task-tracker init/add/list/update/done/remove - Task lifecycle commands.
"""

import json
import sys
from pathlib import Path

from task_tracker.lib.config import TrackerConfig
from task_tracker.lib.format import format_task, format_task_table, get_console
from task_tracker.lib.storage import ensure_storage_dir
from task_tracker.lib.tasks import (
    auto_purge_tasks,
    create_task,
    list_tasks,
    remove_task,
    update_task,
)
from task_tracker.lib.types import InvalidStageError, Stage, Task, parse_stage


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _parse_stage_arg(value: str | None) -> Stage | None:
    """Parse --stage, printing the error. Raises InvalidStageError."""
    if value is None:
        return None
    try:
        return parse_stage(value)
    except InvalidStageError as e:
        print(str(e), file=sys.stderr)
        raise


def _not_found(task_id: str) -> int:
    print(f"Task not found: {task_id}", file=sys.stderr)
    return 1


def _print_task(prefix: str, task: Task) -> None:
    get_console().print(f"{prefix}: {format_task(task)}")


def cmd_init(args, storage_path: Path, config: TrackerConfig) -> int:
    """Create the storage directory."""
    ensure_storage_dir(storage_path)
    print(f"Storage initialized at: {storage_path}")
    return 0


def cmd_add(args, storage_path: Path, config: TrackerConfig) -> int:
    """Add a new task."""
    try:
        stage = _parse_stage_arg(args.stage)
    except InvalidStageError:
        return 1

    task = create_task(storage_path, args.description, stage=stage, repo=args.repo)
    if args.json:
        print_json(task.to_dict())
    else:
        _print_task("Created", task)
    return 0


def cmd_list(args, storage_path: Path, config: TrackerConfig) -> int:
    """List tasks (active only unless --all)."""
    try:
        stage = _parse_stage_arg(args.stage)
    except InvalidStageError:
        return 1

    tasks = list_tasks(storage_path, all=args.all, stage=stage, repo=args.repo)
    if args.json:
        print_json([t.to_dict() for t in tasks])
    else:
        get_console().print(format_task_table(tasks))
    return 0


def cmd_update(args, storage_path: Path, config: TrackerConfig) -> int:
    """Update stage, description or repo of a task."""
    try:
        stage = _parse_stage_arg(args.stage)
    except InvalidStageError:
        return 1

    # Empty strings mean "not given", as for an omitted flag
    task = update_task(
        storage_path,
        args.id,
        stage=stage,
        description=args.description or None,
        repo=args.repo or None,
    )
    if task is None:
        return _not_found(args.id)

    if args.json:
        print_json(task.to_dict())
    else:
        _print_task("Updated", task)
    return 0


def cmd_done(args, storage_path: Path, config: TrackerConfig) -> int:
    """Mark a task done, then auto-purge old done tasks."""
    task = update_task(storage_path, args.id, stage=Stage.DONE)
    if task is None:
        return _not_found(args.id)

    purged = auto_purge_tasks(storage_path, keep=config.auto_purge_keep)

    if args.json:
        print_json({"task": task.to_dict(), "autoPurged": purged.ids})
        return 0

    _print_task("Done", task)
    if purged.count:
        print(f"Auto-purged {purged.count} task(s) (keeping {config.auto_purge_keep} most recent done)")
    return 0


def cmd_remove(args, storage_path: Path, config: TrackerConfig) -> int:
    """Remove a task permanently."""
    if not remove_task(storage_path, args.id):
        return _not_found(args.id)

    if args.json:
        print_json({"removed": True, "id": args.id})
    else:
        print(f"Removed task: {args.id}")
    return 0
