"""
task-tracker watch - Interactive task board.

Polls the store and lets you move tasks through their stages from the
terminal. All changes go through the task service.
"""

from pathlib import Path

from rich.markup import escape
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.reactive import reactive
from textual.widgets import Footer, Header, Static

from task_tracker.lib.config import TrackerConfig
from task_tracker.lib.format import format_task
from task_tracker.lib.storage import JsonlTaskStore
from task_tracker.lib.tasks import TaskService
from task_tracker.lib.tui import ConfirmModal
from task_tracker.lib.types import Stage, Task, next_stage

POLL_INTERVAL_SECONDS = 2.0


def render_board(tasks: list[Task], selected: int, show_all: bool) -> str:
    """Task lines with a cursor on the selected row."""
    if not tasks:
        return "[dim]No tasks.[/dim]" if show_all else "[dim]No active tasks. Press a to show done.[/dim]"
    lines = []
    for i, task in enumerate(tasks):
        marker = "[reverse]>[/reverse]" if i == selected else " "
        lines.append(f"{marker} {format_task(task)}")
    return "\n".join(lines)


class TaskListWidget(Static):
    """Renders the current task list."""

    tasks: reactive[list] = reactive(list, always_update=True)
    selected: reactive[int] = reactive(0)
    show_all: reactive[bool] = reactive(False)

    def render(self) -> str:
        return render_board(self.tasks, self.selected, self.show_all)


class WatchApp(App):
    """Task board TUI."""

    CSS = """
    #board {
        border: solid green;
        padding: 0 1;
        height: 1fr;
    }

    TaskListWidget {
        height: auto;
    }
    """

    BINDINGS = [
        Binding("j,down", "move(1)", "Down", show=False),
        Binding("k,up", "move(-1)", "Up", show=False),
        Binding("n", "advance", "Next stage"),
        Binding("d", "done", "Done"),
        Binding("x", "remove", "Remove"),
        Binding("p", "purge", "Purge done"),
        Binding("a", "toggle_all", "All/active"),
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, storage_path: Path, config: TrackerConfig) -> None:
        super().__init__()
        self.storage_path = storage_path
        self.tracker_config = config
        self.service = TaskService(JsonlTaskStore(storage_path))
        self.show_all = False
        self.tasks: list[Task] = []
        self.selected = 0

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(TaskListWidget(id="tasks"), id="board")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "task-tracker"
        self.sub_title = str(self.storage_path)
        self.refresh_data()
        self.set_interval(POLL_INTERVAL_SECONDS, self.refresh_data)

    def refresh_data(self) -> None:
        """Reload tasks from the store."""
        try:
            self.tasks = self.service.list(all=self.show_all)
        except OSError as e:
            self.notify(f"Failed to read tasks: {e}", severity="error")
            return
        self.selected = min(self.selected, max(len(self.tasks) - 1, 0))
        widget = self.query_one("#tasks", TaskListWidget)
        widget.show_all = self.show_all
        widget.selected = self.selected
        widget.tasks = self.tasks

    @property
    def current(self) -> Task | None:
        if 0 <= self.selected < len(self.tasks):
            return self.tasks[self.selected]
        return None

    def action_move(self, delta: int) -> None:
        if not self.tasks:
            return
        self.selected = max(0, min(self.selected + delta, len(self.tasks) - 1))
        self.query_one("#tasks", TaskListWidget).selected = self.selected

    def action_toggle_all(self) -> None:
        self.show_all = not self.show_all
        self.refresh_data()

    def action_refresh(self) -> None:
        self.refresh_data()

    def action_advance(self) -> None:
        """Move the selected task to the next stage."""
        task = self.current
        if task is None:
            self.notify("No task selected", severity="warning")
            return
        if task.stage == Stage.DONE:
            self.notify("Task is already done", severity="warning")
            return
        self._set_stage(task, next_stage(task.stage))

    def action_done(self) -> None:
        task = self.current
        if task is None:
            self.notify("No task selected", severity="warning")
            return
        if self._set_stage(task, Stage.DONE):
            purged = self.service.auto_purge(keep=self.tracker_config.auto_purge_keep)
            if purged.count:
                self.notify(f"Auto-purged {purged.count} task(s)")
            self.refresh_data()

    def _set_stage(self, task: Task, stage: Stage) -> bool:
        updated = self.service.update(task.id, stage=stage)
        if updated is None:
            self.notify(f"Task not found: {task.id}", severity="error")
            self.refresh_data()
            return False
        self.notify(f"{task.id} -> {stage.value}")
        self.refresh_data()
        return True

    def action_remove(self) -> None:
        task = self.current
        if task is None:
            self.notify("No task selected", severity="warning")
            return
        task_id = task.id

        def handle_confirm(confirmed: bool) -> None:
            if not confirmed:
                return
            if self.service.remove(task_id):
                self.notify(f"Removed {task_id}")
            else:
                self.notify(f"Task not found: {task_id}", severity="error")
            self.refresh_data()

        self.push_screen(
            ConfirmModal(f"Remove {escape(task_id)}: {escape(task.description)}?", title="Remove task"),
            handle_confirm,
        )

    def action_purge(self) -> None:
        preview = self.service.purge(dry_run=True)
        if not preview.count:
            self.notify("No done tasks to purge", severity="warning")
            return

        def handle_confirm(confirmed: bool) -> None:
            if not confirmed:
                return
            result = self.service.purge()
            self.notify(f"Purged {result.count} task(s)")
            self.refresh_data()

        self.push_screen(
            ConfirmModal(f"Purge {preview.count} done task(s)?", title="Purge"),
            handle_confirm,
        )


def cmd_watch(args, storage_path: Path, config: TrackerConfig) -> int:
    """Open the interactive task board."""
    app = WatchApp(storage_path, config)
    app.run()
    return 0
