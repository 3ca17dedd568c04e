"""Shared fixtures for task-tracker tests."""

import pytest

from task_tracker.lib.types import Stage, Task


@pytest.fixture
def storage_path(tmp_path):
    """Path to a store that does not exist yet."""
    return tmp_path / "tasks.jsonl"


@pytest.fixture
def make_task():
    """Factory for Task records with fixed timestamps."""
    def _make(id="test1234", description="Test task", stage=Stage.PENDING,
              created_at="2024-01-01T00:00:00.000Z", updated_at=None, repo=None):
        return Task(
            id=id,
            description=description,
            stage=stage,
            created_at=created_at,
            updated_at=updated_at or created_at,
            repo=repo,
        )
    return _make
