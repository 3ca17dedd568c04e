"""
Store discovery.

Finds task stores in a directory and its immediate, non-hidden
subdirectories. Does not recurse further.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from task_tracker.lib.constants import STORAGE_FILENAME

logger = logging.getLogger(__name__)


@dataclass
class TaskFileInfo:
    """A discovered store."""
    path: Path  # The store file itself
    dir: Path  # Directory holding it
    name: str  # Directory name, used as the display label


@dataclass
class ScanResult:
    root: TaskFileInfo | None = None
    repos: list[TaskFileInfo] = field(default_factory=list)


def scan_task_files(directory: Path | str, filename: str = STORAGE_FILENAME) -> ScanResult:
    """Find `filename` in `directory` and in each immediate subdirectory."""
    directory = Path(directory)
    result = ScanResult()

    root_file = directory / filename
    if root_file.is_file():
        result.root = TaskFileInfo(path=root_file, dir=directory, name=directory.name)

    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return result

    for sub in entries:
        if sub.name.startswith("."):
            continue
        try:
            if sub.is_dir() and (sub / filename).is_file():
                result.repos.append(TaskFileInfo(path=sub / filename, dir=sub, name=sub.name))
        except OSError as e:
            logger.debug(f"Skipping inaccessible {sub}: {e}")

    return result
