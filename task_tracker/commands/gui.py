"""
task-tracker gui - Browser viewer for the tasks in a workspace.
"""

import sys
from pathlib import Path

from task_tracker.gui.server import start_gui
from task_tracker.lib.config import TrackerConfig


def cmd_gui(args, config: TrackerConfig) -> int:
    """Serve the viewer for --dir (default: cwd) until interrupted."""
    root_dir = Path(args.dir) if args.dir else Path.cwd()
    if not root_dir.is_dir():
        print(f"ERROR: Not a directory: {root_dir}", file=sys.stderr)
        return 2

    try:
        start_gui(
            root_dir,
            host=config.gui_host,
            port=args.port or config.gui_port,
            port_attempts=config.gui_port_attempts,
            storage_file=config.storage_file,
            open_browser=not args.no_open,
        )
    except OSError as e:
        print(f"Failed to start GUI server: {e}", file=sys.stderr)
        return 1
    return 0
