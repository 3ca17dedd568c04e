"""
task-tracker purge - Remove done tasks.
"""

from pathlib import Path

from task_tracker.commands.tasks import print_json
from task_tracker.lib.config import TrackerConfig
from task_tracker.lib.tasks import purge_tasks


def cmd_purge(args, storage_path: Path, config: TrackerConfig) -> int:
    """Purge done tasks, optionally keeping the N most recently updated."""
    result = purge_tasks(storage_path, dry_run=args.dry_run, keep=args.keep)

    if args.json:
        print_json({"count": result.count, "ids": result.ids, "dryRun": args.dry_run})
        return 0

    if result.count == 0:
        print("No done tasks to purge.")
        return 0

    verb = "Would purge" if args.dry_run else "Purged"
    print(f"{verb} {result.count} task(s): {', '.join(result.ids)}")
    return 0
