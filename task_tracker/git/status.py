"""Repository status: uncommitted changes and unpushed commits."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from task_tracker.git.runner import run_git

logger = logging.getLogger(__name__)


class NotAGitRepository(Exception):
    """Raised when a directory is not inside a git work tree."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Not in a git repository: {path}. task-tracker needs a git repository or --storage.")


@dataclass
class RepoStatus:
    """Dirty/unpushed summary for one repository."""
    path: Path
    name: str
    dirty: bool = False
    dirty_files: list[str] = field(default_factory=list)
    unpushed: bool = False
    unpushed_commits: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def needs_attention(self) -> bool:
        return self.dirty or self.unpushed or self.error is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": str(self.path),
            "name": self.name,
            "dirty": self.dirty,
            "dirtyFiles": list(self.dirty_files),
            "unpushed": self.unpushed,
            "unpushedCommits": list(self.unpushed_commits),
            "error": self.error,
        }


def get_repo_root(cwd: Path) -> Path:
    """Top-level directory of the repository containing cwd.

    Raises:
        NotAGitRepository: if cwd is not inside a work tree
    """
    result = run_git(["rev-parse", "--show-toplevel"], cwd)
    if not result.success or not result.stdout.strip():
        raise NotAGitRepository(cwd)
    return Path(result.stdout.strip())


def is_git_repo(path: Path) -> bool:
    """Check if path is inside a git work tree."""
    result = run_git(["rev-parse", "--is-inside-work-tree"], path, timeout=10)
    return result.success and result.stdout.strip() == "true"


def get_dirty_files(path: Path) -> list[str] | None:
    """Porcelain status lines (staged, unstaged, untracked), or None if git fails."""
    result = run_git(["status", "--porcelain"], path)
    if not result.success:
        return None
    return result.lines()


def get_unpushed_commits(path: Path) -> list[str]:
    """One-line log of commits ahead of the upstream.

    Returns an empty list when there is no upstream or git fails.
    """
    result = run_git(["log", "@{u}..HEAD", "--oneline"], path, timeout=10)
    if not result.success:
        return []
    return result.lines()


def get_repo_status(path: Path) -> RepoStatus:
    """Collect dirty and unpushed state for one repository."""
    path = Path(path)
    status = RepoStatus(path=path, name=path.name or str(path))

    dirty_files = get_dirty_files(path)
    if dirty_files is None:
        status.error = "git status failed"
        return status
    if dirty_files:
        status.dirty = True
        status.dirty_files = dirty_files

    unpushed = get_unpushed_commits(path)
    if unpushed:
        status.unpushed = True
        status.unpushed_commits = unpushed

    return status


def _has_git_dir(path: Path) -> bool:
    # .git is a file in worktrees and submodules
    return (path / ".git").exists()


def scan_workspace(workspace: Path) -> list[RepoStatus]:
    """Status of the workspace itself (if a repo) and each immediate child repo.

    Hidden directories are skipped and the scan does not recurse.
    """
    workspace = Path(workspace)
    repos: list[Path] = []
    if _has_git_dir(workspace) or is_git_repo(workspace):
        repos.append(workspace)

    try:
        entries = sorted(workspace.iterdir())
    except OSError as e:
        logger.warning(f"Cannot scan workspace {workspace}: {e}")
        entries = []

    for sub in entries:
        if sub.name.startswith("."):
            continue
        try:
            if sub.is_dir() and _has_git_dir(sub):
                repos.append(sub)
        except OSError as e:
            logger.debug(f"Skipping inaccessible {sub}: {e}")

    return [get_repo_status(r) for r in repos]
