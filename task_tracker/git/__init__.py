"""Git helpers for the task tracker.

Functions returning GitResult leave it to the caller to check .success.
Functions returning parsed values return empty results on failure, except
get_repo_root(), which raises NotAGitRepository.
"""

from task_tracker.git.runner import GitResult, run_git
from task_tracker.git.status import (
    NotAGitRepository,
    RepoStatus,
    get_dirty_files,
    get_repo_root,
    get_repo_status,
    get_unpushed_commits,
    is_git_repo,
    scan_workspace,
)

__all__ = [
    # runner
    "GitResult",
    "run_git",
    # status
    "NotAGitRepository",
    "RepoStatus",
    "get_dirty_files",
    "get_repo_root",
    "get_repo_status",
    "get_unpushed_commits",
    "is_git_repo",
    "scan_workspace",
]
