"""
Persistent task lifecycle tracker.

Tasks live in a line-delimited JSON file per repository and move through a
fixed vocabulary of stages until they are done and purged.
"""

__version__ = "0.1.0"

from task_tracker.lib.storage import JsonlTaskStore, TaskStore, append_task, read_tasks, write_tasks
from task_tracker.lib.tasks import (
    DEFAULT_AUTO_PURGE_KEEP,
    TaskService,
    auto_purge_tasks,
    create_task,
    list_tasks,
    purge_tasks,
    remove_task,
    update_task,
)
from task_tracker.lib.types import DONE_STAGES, STAGES, PurgeResult, Stage, Task, is_terminal

__all__ = [
    "__version__",
    # storage
    "JsonlTaskStore",
    "TaskStore",
    "append_task",
    "read_tasks",
    "write_tasks",
    # service
    "DEFAULT_AUTO_PURGE_KEEP",
    "TaskService",
    "auto_purge_tasks",
    "create_task",
    "list_tasks",
    "purge_tasks",
    "remove_task",
    "update_task",
    # types
    "DONE_STAGES",
    "STAGES",
    "PurgeResult",
    "Stage",
    "Task",
    "is_terminal",
]
