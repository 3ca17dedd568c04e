"""
Task service: identity, listing, mutation and purge on top of a TaskStore.

Every call is a fresh read-modify-write against the store. Nothing is
cached between calls.

Not-found is a return value (None / False), not an exception, so callers
choose how to present it.
"""

import logging
import secrets
import string
from datetime import datetime, timezone
from pathlib import Path

from task_tracker.lib.storage import JsonlTaskStore, TaskStore
from task_tracker.lib.types import PurgeResult, Stage, Task, is_terminal, parse_stage

logger = logging.getLogger(__name__)

ID_LENGTH = 8
ID_ALPHABET = string.ascii_letters + string.digits + "_-"

# Done tasks kept by auto-purge when no keep is given. 0 disables auto-purge.
DEFAULT_AUTO_PURGE_KEEP = 20


def generate_id(length: int = ID_LENGTH) -> str:
    """Random URL-safe identifier."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def now_iso() -> str:
    """Current UTC time as a sortable ISO-8601 string, e.g. 2024-01-01T00:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TaskService:
    """Task operations against a single store."""

    def __init__(self, store: TaskStore):
        self.store = store

    def create(
        self,
        description: str,
        stage: Stage | str | None = None,
        repo: str | None = None,
    ) -> Task:
        now = now_iso()
        task = Task(
            id=generate_id(),
            description=description,
            stage=parse_stage(stage) if stage is not None else Stage.PENDING,
            created_at=now,
            updated_at=now,
            repo=repo or None,
        )
        self.store.append(task)
        logger.debug(f"Created task {task.id} in {self.store}")
        return task

    def get(self, task_id: str) -> Task | None:
        for task in self.store.read():
            if task.id == task_id:
                return task
        return None

    def list(
        self,
        all: bool = False,
        stage: Stage | str | None = None,
        repo: str | None = None,
    ) -> list[Task]:
        """List tasks in storage order.

        Closed tasks are hidden unless `all` is set. `stage` and `repo` are
        exact-match filters and combine with AND.
        """
        tasks = self.store.read()
        if not all:
            tasks = [t for t in tasks if not is_terminal(t.stage)]
        if repo:
            tasks = [t for t in tasks if t.repo == repo]
        if stage is not None:
            wanted = parse_stage(stage)
            tasks = [t for t in tasks if t.stage == wanted]
        return tasks

    def update(
        self,
        task_id: str,
        stage: Stage | str | None = None,
        description: str | None = None,
        repo: str | None = None,
    ) -> Task | None:
        """Apply the given fields to one task and rewrite the store.

        Fields left as None are untouched. Returns None if no task has `task_id`.
        """
        new_stage = parse_stage(stage) if stage is not None else None
        tasks = self.store.read()
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            return None

        if new_stage is not None:
            task.stage = new_stage
        if description is not None:
            task.description = description
        if repo is not None:
            task.repo = repo
        task.updated_at = now_iso()
        self.store.write(tasks)
        logger.debug(f"Updated task {task_id} in {self.store}")
        return task

    def remove(self, task_id: str) -> bool:
        tasks = self.store.read()
        remaining = [t for t in tasks if t.id != task_id]
        if len(remaining) == len(tasks):
            return False
        self.store.write(remaining)
        logger.debug(f"Removed task {task_id} from {self.store}")
        return True

    def purge(self, dry_run: bool = False, keep: int | None = None) -> PurgeResult:
        """Remove closed tasks.

        With `keep`, the `keep` most recently updated closed tasks survive
        (keep=0 keeps none). Without it, every closed task is purged.
        Surviving tasks keep their original relative order.
        """
        if keep is not None and keep < 0:
            raise ValueError(f"keep must be >= 0, got {keep}")

        tasks = self.store.read()
        done = [t for t in tasks if is_terminal(t.stage)]
        if keep is not None:
            # sorted() is stable, so updatedAt ties keep storage order
            by_recent = sorted(done, key=lambda t: t.updated_at, reverse=True)
            to_purge = by_recent[keep:]
        else:
            to_purge = done

        if not dry_run and to_purge:
            purge_ids = {t.id for t in to_purge}
            self.store.write([t for t in tasks if t.id not in purge_ids])
            logger.debug(f"Purged {len(to_purge)} task(s) from {self.store}")

        return PurgeResult(purged=to_purge, count=len(to_purge))

    def auto_purge(self, keep: int | None = None) -> PurgeResult:
        """Purge closed tasks beyond the retention count.

        keep defaults to DEFAULT_AUTO_PURGE_KEEP. keep=0 means auto-purge is
        disabled: nothing is read and nothing is purged. Use purge() with no
        keep to remove every closed task.
        """
        if keep is None:
            keep = DEFAULT_AUTO_PURGE_KEEP
        if keep == 0:
            return PurgeResult()
        return self.purge(keep=keep)


def _service(storage_path: Path | str) -> TaskService:
    return TaskService(JsonlTaskStore(storage_path))


def create_task(
    storage_path: Path | str,
    description: str,
    stage: Stage | str | None = None,
    repo: str | None = None,
) -> Task:
    return _service(storage_path).create(description, stage=stage, repo=repo)


def list_tasks(
    storage_path: Path | str,
    all: bool = False,
    stage: Stage | str | None = None,
    repo: str | None = None,
) -> list[Task]:
    return _service(storage_path).list(all=all, stage=stage, repo=repo)


def update_task(
    storage_path: Path | str,
    task_id: str,
    stage: Stage | str | None = None,
    description: str | None = None,
    repo: str | None = None,
) -> Task | None:
    return _service(storage_path).update(task_id, stage=stage, description=description, repo=repo)


def remove_task(storage_path: Path | str, task_id: str) -> bool:
    return _service(storage_path).remove(task_id)


def purge_tasks(storage_path: Path | str, dry_run: bool = False, keep: int | None = None) -> PurgeResult:
    return _service(storage_path).purge(dry_run=dry_run, keep=keep)


def auto_purge_tasks(storage_path: Path | str, keep: int | None = None) -> PurgeResult:
    return _service(storage_path).auto_purge(keep=keep)
