"""
Record store for tasks.

A store is a UTF-8 text file holding one JSON object per line. Reads skip
lines that are not valid task records; writes replace the whole file;
creation appends a single line.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from task_tracker.lib.types import Task
from task_tracker.lib.validate import ValidationError, validate_task

logger = logging.getLogger(__name__)


class TaskStore(Protocol):
    """Backend contract used by the task service."""

    def read(self) -> list[Task]: ...

    def write(self, tasks: list[Task]) -> None: ...

    def append(self, task: Task) -> None: ...


def _encode(task: Task) -> str:
    return json.dumps(task.to_dict(), ensure_ascii=False) + "\n"


class JsonlTaskStore:
    """TaskStore backed by a line-delimited JSON file.

    No locking: concurrent writers race at whole-file granularity. Lines
    skipped on read are not carried into the next write.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"JsonlTaskStore({str(self.path)!r})"

    def ensure(self) -> None:
        """Create the parent directory if needed. Safe to call repeatedly."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def read(self) -> list[Task]:
        """Load all valid tasks in file order. Skips malformed lines."""
        if not self.path.exists():
            return []

        tasks = []
        # Decoded per line so one bad byte only costs its own line
        for line_num, raw in enumerate(self.path.read_bytes().splitlines(), 1):
            if not raw.strip():
                continue
            try:
                data = json.loads(raw.decode("utf-8"))
                validate_task(data)
                tasks.append(Task.from_dict(data))
            except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
                logger.warning(f"Skipping malformed line {line_num} in {self.path}: {e}")
        return tasks

    def write(self, tasks: list[Task]) -> None:
        """Replace the store with `tasks`, one line each, in the given order."""
        self.ensure()
        content = "".join(_encode(t) for t in tasks)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            tmp_path.replace(self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        logger.debug(f"Wrote {len(tasks)} task(s) to {self.path}")

    def append(self, task: Task) -> None:
        """Add one task at the end without touching existing lines."""
        self.ensure()
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(_encode(task))
            f.flush()


def ensure_storage_dir(storage_path: Path | str) -> None:
    JsonlTaskStore(storage_path).ensure()


def read_tasks(storage_path: Path | str) -> list[Task]:
    return JsonlTaskStore(storage_path).read()


def write_tasks(storage_path: Path | str, tasks: list[Task]) -> None:
    JsonlTaskStore(storage_path).write(tasks)


def append_task(storage_path: Path | str, task: Task) -> None:
    JsonlTaskStore(storage_path).append(task)
