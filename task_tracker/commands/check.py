"""
task-tracker check - Stale work check.

Shows active tasks and every repo in the workspace with uncommitted
changes or unpushed commits.
"""

from pathlib import Path

from task_tracker.commands.tasks import print_json
from task_tracker.git.status import scan_workspace
from task_tracker.lib.config import TrackerConfig
from task_tracker.lib.format import format_check_report, get_console
from task_tracker.lib.tasks import list_tasks


def cmd_check(args, storage_path: Path, config: TrackerConfig) -> int:
    """Report active tasks and workspace git status."""
    workspace = Path(args.workspace) if args.workspace else Path.cwd()

    active_tasks = list_tasks(storage_path, all=False)
    repo_statuses = scan_workspace(workspace)

    if args.json:
        print_json({
            "activeTasks": [t.to_dict() for t in active_tasks],
            "repoStatuses": [r.to_dict() for r in repo_statuses],
        })
    else:
        get_console().print(format_check_report(active_tasks, repo_statuses, config.check_max_items))
    return 0
