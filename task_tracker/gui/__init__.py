"""Local browser viewer for task stores."""

from task_tracker.gui.server import create_app, start_gui

__all__ = ["create_app", "start_gui"]
