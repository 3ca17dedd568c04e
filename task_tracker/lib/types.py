"""
Shared data types for the task tracker.

This module holds the Task record, the stage vocabulary and the purge
result so storage, service and CLI layers can share them without
circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Stage(str, Enum):
    """Lifecycle stages, in their conventional order.

    Order is informational only: any stage may be set from any other.
    """

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    IMPLEMENTED = "implemented"
    VERIFIED = "verified"
    COMMITTED = "committed"
    PUSHED = "pushed"
    PR_CREATED = "pr-created"
    MERGED = "merged"
    RELEASED = "released"
    PUBLISHED = "published"
    DONE = "done"


STAGES: tuple[Stage, ...] = tuple(Stage)

# Closed stages: hidden from default listings and eligible for purge.
DONE_STAGES: frozenset[Stage] = frozenset({Stage.DONE})


class InvalidStageError(ValueError):
    """Raised when a string does not name a known stage."""

    def __init__(self, value: str):
        self.value = value
        valid = ", ".join(s.value for s in STAGES)
        super().__init__(f"Invalid stage: {value}\nValid stages: {valid}")


def parse_stage(value: str | Stage) -> Stage:
    """Parse a stage string into the Stage enum.

    Raises:
        InvalidStageError: if value is not a known stage
    """
    if isinstance(value, Stage):
        return value
    try:
        return Stage(value)
    except ValueError:
        raise InvalidStageError(value) from None


def is_terminal(stage: str | Stage) -> bool:
    """Check whether a stage is closed (membership, not ordering)."""
    try:
        return parse_stage(stage) in DONE_STAGES
    except InvalidStageError:
        return False


def next_stage(stage: Stage) -> Stage:
    """Return the stage after `stage` in STAGES, or `stage` itself if last."""
    idx = STAGES.index(stage)
    return STAGES[min(idx + 1, len(STAGES) - 1)]


# On-disk keys handled by Task itself; anything else lands in Task.extra.
_KNOWN_KEYS = {"id", "description", "stage", "createdAt", "updatedAt", "repo"}


@dataclass
class Task:
    """A single tracked task.

    Serialized as one JSON object per line with camelCase timestamp keys.
    Unknown keys read from disk are kept in `extra` and written back.
    """
    id: str
    description: str
    stage: Stage
    created_at: str
    updated_at: str
    repo: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "stage": self.stage.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if self.repo:
            data["repo"] = self.repo
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        return cls(
            id=data["id"],
            description=data["description"],
            stage=parse_stage(data["stage"]),
            created_at=data["createdAt"],
            updated_at=data["updatedAt"],
            repo=data.get("repo"),
            extra={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
        )


@dataclass
class PurgeResult:
    """Tasks selected for purge and how many there were."""
    purged: list[Task] = field(default_factory=list)
    count: int = 0

    @property
    def ids(self) -> list[str]:
        return [t.id for t in self.purged]
