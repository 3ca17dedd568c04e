#!/usr/bin/env python3
"""task-tracker CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from task_tracker import __version__
from task_tracker.commands import check as cmd_check_module
from task_tracker.commands import gui as cmd_gui_module
from task_tracker.commands import purge as cmd_purge_module
from task_tracker.commands import tasks as cmd_tasks_module
from task_tracker.git.status import NotAGitRepository
from task_tracker.lib.config import TrackerConfig, load_config, resolve_storage_path
from task_tracker.lib.types import STAGES


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[task-tracker] %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def get_storage(args) -> tuple[Path, TrackerConfig]:
    """Load config and resolve the store path from --storage or the git repo root."""
    config = load_config(args.config)
    try:
        storage_path = resolve_storage_path(args.storage, config)
    except NotAGitRepository as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(2)
    return storage_path, config


def cmd_init(args):
    storage_path, config = get_storage(args)
    return cmd_tasks_module.cmd_init(args, storage_path, config)


def cmd_add(args):
    storage_path, config = get_storage(args)
    return cmd_tasks_module.cmd_add(args, storage_path, config)


def cmd_list(args):
    storage_path, config = get_storage(args)
    return cmd_tasks_module.cmd_list(args, storage_path, config)


def cmd_update(args):
    storage_path, config = get_storage(args)
    return cmd_tasks_module.cmd_update(args, storage_path, config)


def cmd_done(args):
    storage_path, config = get_storage(args)
    return cmd_tasks_module.cmd_done(args, storage_path, config)


def cmd_remove(args):
    storage_path, config = get_storage(args)
    return cmd_tasks_module.cmd_remove(args, storage_path, config)


def cmd_purge(args):
    storage_path, config = get_storage(args)
    return cmd_purge_module.cmd_purge(args, storage_path, config)


def cmd_check(args):
    storage_path, config = get_storage(args)
    return cmd_check_module.cmd_check(args, storage_path, config)


def cmd_gui(args):
    return cmd_gui_module.cmd_gui(args, load_config(args.config))


def cmd_watch(args):
    # Imported lazily: textual is only needed for the board
    from task_tracker.commands import watch as cmd_watch_module

    storage_path, config = get_storage(args)
    return cmd_watch_module.cmd_watch(args, storage_path, config)


def non_negative_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if n < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {n}")
    return n


def build_parser() -> argparse.ArgumentParser:
    stage_help = f"Lifecycle stage ({', '.join(s.value for s in STAGES)})"

    parser = argparse.ArgumentParser(
        prog='task-tracker',
        description='Persistent task lifecycle tracker for AI agent sessions',
    )
    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--storage', help='Override storage location (default: <repo root>/.tasks.jsonl)')
    parser.add_argument('--config', help='Config file (default: ~/.config/task-tracker/config.yaml)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging on stderr')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # task-tracker init
    p_init = subparsers.add_parser('init', help='Initialize storage directory')
    p_init.set_defaults(func=cmd_init)

    # task-tracker add
    p_add = subparsers.add_parser('add', help='Add a new task')
    p_add.add_argument('description', help='Task description')
    p_add.add_argument('--stage', default='pending', help=f'Initial stage. {stage_help}')
    p_add.add_argument('--repo', help='Associate with a repository')
    p_add.add_argument('--json', action='store_true', help='Output created task as JSON')
    p_add.set_defaults(func=cmd_add)

    # task-tracker list
    p_list = subparsers.add_parser('list', help='List tasks')
    p_list.add_argument('--all', '-a', action='store_true', help='Include done tasks')
    p_list.add_argument('--stage', help=f'Filter by stage. {stage_help}')
    p_list.add_argument('--repo', help='Filter by repository')
    p_list.add_argument('--json', action='store_true', help='JSON output')
    p_list.set_defaults(func=cmd_list)

    # task-tracker update
    p_update = subparsers.add_parser('update', help='Update a task')
    p_update.add_argument('id', help='Task ID')
    p_update.add_argument('--stage', help=f'Set stage. {stage_help}')
    p_update.add_argument('--description', '-d', help='Update description')
    p_update.add_argument('--repo', help='Update repo association')
    p_update.add_argument('--json', action='store_true', help='JSON output')
    p_update.set_defaults(func=cmd_update)

    # task-tracker done
    p_done = subparsers.add_parser('done', help='Mark task as done')
    p_done.add_argument('id', help='Task ID')
    p_done.add_argument('--json', action='store_true', help='JSON output')
    p_done.set_defaults(func=cmd_done)

    # task-tracker remove
    p_remove = subparsers.add_parser('remove', help='Remove a task permanently')
    p_remove.add_argument('id', help='Task ID')
    p_remove.add_argument('--json', action='store_true', help='JSON output')
    p_remove.set_defaults(func=cmd_remove)

    # task-tracker purge
    p_purge = subparsers.add_parser('purge', help='Remove done tasks')
    p_purge.add_argument('--dry-run', action='store_true', help='Show what would be purged')
    p_purge.add_argument('--keep', type=non_negative_int, help='Keep the N most recently updated done tasks')
    p_purge.add_argument('--json', action='store_true', help='JSON output')
    p_purge.set_defaults(func=cmd_purge)

    # task-tracker check
    p_check = subparsers.add_parser('check', help='Active tasks and uncommitted/unpushed work')
    p_check.add_argument('--workspace', '-w', help='Workspace directory to scan (default: cwd)')
    p_check.add_argument('--json', action='store_true', help='JSON output')
    p_check.set_defaults(func=cmd_check)

    # task-tracker gui
    p_gui = subparsers.add_parser('gui', help='Open the browser task viewer')
    p_gui.add_argument('--dir', help='Workspace directory to serve (default: cwd)')
    p_gui.add_argument('--port', type=int, help='First port to try (default: 3333)')
    p_gui.add_argument('--no-open', action='store_true', help="Don't open a browser")
    p_gui.set_defaults(func=cmd_gui)

    # task-tracker watch
    p_watch = subparsers.add_parser('watch', help='Interactive task board')
    p_watch.set_defaults(func=cmd_watch)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except OSError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
