"""
Text rendering for tasks and the check report.

Produces Rich markup, shared by the CLI (printed through a rich Console)
and the watch TUI. User-supplied text is escaped before it is embedded.
"""

import sys

from rich.console import Console
from rich.markup import escape

from task_tracker.git.status import RepoStatus
from task_tracker.lib.constants import DEFAULT_CHECK_MAX_ITEMS
from task_tracker.lib.types import Stage, Task

STAGE_COLORS = {
    Stage.PENDING: "bright_black",
    Stage.IN_PROGRESS: "blue",
    Stage.IMPLEMENTED: "cyan",
    Stage.VERIFIED: "yellow",
    Stage.COMMITTED: "magenta",
    Stage.PUSHED: "green",
    Stage.PR_CREATED: "bright_green",
    Stage.MERGED: "green",
    Stage.RELEASED: "bright_blue",
    Stage.PUBLISHED: "bright_green",
    Stage.DONE: "dim",
}


def stage_style(stage: Stage) -> str:
    """Stage name wrapped in its color markup."""
    color = STAGE_COLORS.get(stage, "white")
    return f"[{color}]{stage.value}[/{color}]"


def format_task(task: Task) -> str:
    """One line: id, stage, optional [repo], description."""
    repo = f" [dim]\\[{escape(task.repo)}][/dim]" if task.repo else ""
    return f"[bold]{escape(task.id)}[/bold]  {stage_style(task.stage)}{repo}  {escape(task.description)}"


def format_task_table(tasks: list[Task]) -> str:
    if not tasks:
        return "[dim]No tasks found.[/dim]"
    return "\n".join(format_task(t) for t in tasks)


def _format_repo_status(r: RepoStatus, max_items: int) -> list[str]:
    lines = [f"[yellow]  {escape(r.name)} ({escape(str(r.path))}):[/yellow]"]
    if r.error:
        lines.append(f"[red]    Error: {escape(r.error)}[/red]")
    if r.dirty:
        lines.append(f"[red]    Uncommitted changes ({len(r.dirty_files)} files)[/red]")
        for f in r.dirty_files[:max_items]:
            lines.append(f"[dim]      {escape(f)}[/dim]")
        if len(r.dirty_files) > max_items:
            lines.append(f"[dim]      ... and {len(r.dirty_files) - max_items} more[/dim]")
    if r.unpushed:
        lines.append(f"[blue]    Unpushed commits ({len(r.unpushed_commits)}):[/blue]")
        for c in r.unpushed_commits[:max_items]:
            lines.append(f"[dim]      {escape(c)}[/dim]")
        if len(r.unpushed_commits) > max_items:
            lines.append(f"[dim]      ... and {len(r.unpushed_commits) - max_items} more[/dim]")
    return lines


def format_check_report(
    active_tasks: list[Task],
    repo_statuses: list[RepoStatus],
    max_items: int = DEFAULT_CHECK_MAX_ITEMS,
) -> str:
    """Active tasks plus any repos with uncommitted or unpushed work."""
    lines = ["[bold]=== Task Tracker Check ===[/bold]", ""]

    lines.append(f"[bold]Active Tasks ({len(active_tasks)}):[/bold]")
    if not active_tasks:
        lines.append("[dim]  No active tasks.[/dim]")
    else:
        lines.extend("  " + format_task(t) for t in active_tasks)
    lines.append("")

    lines.append(f"[bold]Workspace Git Status ({len(repo_statuses)} repos scanned):[/bold]")
    flagged = [r for r in repo_statuses if r.needs_attention]
    if not flagged:
        lines.append("[green]  All repos clean.[/green]")
    else:
        for r in flagged:
            lines.extend(_format_repo_status(r, max_items))

    return "\n".join(lines)


def get_console(stderr: bool = False) -> Console:
    """Console bound to the current sys.stdout/sys.stderr.

    Built per call so redirected streams (tests, pipes) are honoured.
    Rich drops styling when the stream is not a terminal or NO_COLOR is set.
    """
    return Console(file=sys.stderr if stderr else sys.stdout, highlight=False, emoji=False, soft_wrap=True)
