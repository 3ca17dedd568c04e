"""Run git subprocesses without raising on failure."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


@dataclass
class GitResult:
    """Outcome of one git invocation."""
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    def lines(self) -> list[str]:
        """Non-empty stdout lines, trailing whitespace stripped."""
        return [line.rstrip() for line in self.stdout.splitlines() if line.strip()]


def run_git(
    args: list[str],
    cwd: Path,
    timeout: int = DEFAULT_TIMEOUT,
) -> GitResult:
    """
    Run `git -C <cwd> <args>` and capture its output.

    Args:
        args: Git arguments (e.g., ["status", "--porcelain"])
        cwd: Directory git should operate in
        timeout: Timeout in seconds

    Returns:
        GitResult. A timeout sets timed_out; a missing git binary gives
        returncode 127. Neither raises.
    """
    cmd = ["git", "-C", str(cwd)] + args
    logger.debug(f"Running {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return GitResult(
            returncode=-1,
            stdout="",
            stderr=f"Command timed out after {timeout}s",
            timed_out=True,
        )
    except FileNotFoundError:
        return GitResult(returncode=127, stdout="", stderr="git executable not found")
    return GitResult(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )
