"""Tests for the task service: create, list, update, remove."""

import re

import pytest

from task_tracker.lib.storage import JsonlTaskStore, read_tasks, write_tasks
from task_tracker.lib.tasks import (
    ID_ALPHABET,
    TaskService,
    create_task,
    generate_id,
    list_tasks,
    now_iso,
    remove_task,
    update_task,
)
from task_tracker.lib.types import InvalidStageError, Stage


class TestHelpers:
    def test_generate_id(self):
        task_id = generate_id()
        assert len(task_id) == 8
        assert all(c in ID_ALPHABET for c in task_id)

    def test_ids_differ(self):
        assert len({generate_id() for _ in range(50)}) == 50

    def test_now_iso_format(self):
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", now_iso())


class TestCreateTask:
    """Tests for create_task()."""

    def test_defaults(self, storage_path):
        task = create_task(storage_path, "Write docs")
        assert len(task.id) == 8
        assert task.description == "Write docs"
        assert task.stage == Stage.PENDING
        assert task.created_at == task.updated_at
        assert task.repo is None

    def test_persists(self, storage_path):
        task = create_task(storage_path, "Persist me")
        assert read_tasks(storage_path) == [task]

    def test_stage_and_repo(self, storage_path):
        task = create_task(storage_path, "Tagged", stage="in-progress", repo="api")
        assert task.stage == Stage.IN_PROGRESS
        assert task.repo == "api"
        assert read_tasks(storage_path)[0].repo == "api"

    def test_invalid_stage_writes_nothing(self, storage_path):
        with pytest.raises(InvalidStageError):
            create_task(storage_path, "Bad", stage="finished")
        assert not storage_path.exists()

    def test_append_failure_propagates(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        with pytest.raises(OSError):
            create_task(blocker / "tasks.jsonl", "Nowhere to go")


class TestListTasks:
    """Tests for list_tasks() filtering."""

    @pytest.fixture
    def populated(self, storage_path, make_task):
        write_tasks(storage_path, [
            make_task(id="t1", stage=Stage.PENDING, repo="api"),
            make_task(id="t2", stage=Stage.DONE, repo="api"),
            make_task(id="t3", stage=Stage.MERGED, repo="web"),
            make_task(id="t4", stage=Stage.PENDING),
            make_task(id="t5", stage=Stage.DONE, repo="web"),
        ])
        return storage_path

    def test_excludes_done_by_default(self, populated):
        ids = [t.id for t in list_tasks(populated)]
        assert ids == ["t1", "t3", "t4"]

    def test_all_returns_everything_in_storage_order(self, populated):
        ids = [t.id for t in list_tasks(populated, all=True)]
        assert ids == ["t1", "t2", "t3", "t4", "t5"]

    def test_stage_filter(self, populated):
        assert [t.id for t in list_tasks(populated, stage="pending")] == ["t1", "t4"]

    def test_done_stage_filter_needs_all(self, populated):
        assert list_tasks(populated, stage=Stage.DONE) == []
        assert [t.id for t in list_tasks(populated, all=True, stage=Stage.DONE)] == ["t2", "t5"]

    def test_repo_filter(self, populated):
        assert [t.id for t in list_tasks(populated, repo="web")] == ["t3"]

    def test_filters_are_anded(self, populated):
        assert [t.id for t in list_tasks(populated, all=True, stage="done", repo="api")] == ["t2"]
        assert list_tasks(populated, stage="merged", repo="api") == []

    def test_empty_store(self, storage_path):
        assert list_tasks(storage_path, all=True) == []

    def test_invalid_stage_filter(self, populated):
        with pytest.raises(InvalidStageError):
            list_tasks(populated, stage="nope")


class TestUpdateTask:
    """Tests for update_task()."""

    def test_updates_stage(self, storage_path):
        task = create_task(storage_path, "Work")
        updated = update_task(storage_path, task.id, stage="verified")
        assert updated.stage == Stage.VERIFIED
        assert read_tasks(storage_path)[0].stage == Stage.VERIFIED

    def test_only_given_fields_change(self, storage_path, make_task):
        original = make_task(id="abc", description="Keep", repo="api")
        write_tasks(storage_path, [original])

        updated = update_task(storage_path, "abc", stage=Stage.COMMITTED)

        assert updated.description == "Keep"
        assert updated.repo == "api"
        assert updated.created_at == original.created_at
        assert updated.updated_at > original.updated_at

    def test_updated_at_never_decreases(self, storage_path):
        task = create_task(storage_path, "Tick")
        first = update_task(storage_path, task.id, description="One")
        second = update_task(storage_path, task.id, description="Two")
        assert task.updated_at <= first.updated_at <= second.updated_at
        assert second.created_at == task.created_at

    def test_updates_description_and_repo(self, storage_path):
        task = create_task(storage_path, "Old")
        updated = update_task(storage_path, task.id, description="New", repo="cli")
        assert updated.description == "New"
        assert updated.repo == "cli"
        assert updated.stage == Stage.PENDING

    def test_keeps_position(self, storage_path):
        ids = [create_task(storage_path, f"Task {i}").id for i in range(3)]
        update_task(storage_path, ids[0], stage="done")
        assert [t.id for t in read_tasks(storage_path)] == ids

    def test_missing_id_returns_none_without_write(self, storage_path):
        create_task(storage_path, "Only")
        before = storage_path.read_text()
        assert update_task(storage_path, "missing1", stage="done") is None
        assert storage_path.read_text() == before

    def test_invalid_stage_leaves_store_untouched(self, storage_path):
        task = create_task(storage_path, "Safe")
        before = storage_path.read_text()
        with pytest.raises(InvalidStageError):
            update_task(storage_path, task.id, stage="bogus")
        assert storage_path.read_text() == before

    def test_any_stage_from_any_stage(self, storage_path):
        task = create_task(storage_path, "Jump", stage="done")
        assert update_task(storage_path, task.id, stage="pending").stage == Stage.PENDING


class TestRemoveTask:
    """Tests for remove_task()."""

    def test_removes(self, storage_path):
        keep = create_task(storage_path, "Keep")
        drop = create_task(storage_path, "Drop")
        assert remove_task(storage_path, drop.id) is True
        assert read_tasks(storage_path) == [keep]

    def test_second_remove_returns_false(self, storage_path):
        task = create_task(storage_path, "Once")
        create_task(storage_path, "Other")
        assert remove_task(storage_path, task.id) is True
        after_first = storage_path.read_text()
        assert remove_task(storage_path, task.id) is False
        assert storage_path.read_text() == after_first

    def test_missing_store(self, storage_path):
        assert remove_task(storage_path, "anything") is False
        assert not storage_path.exists()


class FakeStore:
    """In-memory TaskStore that records calls."""

    def __init__(self, tasks=None):
        self.tasks = list(tasks or [])
        self.calls = []

    def read(self):
        self.calls.append("read")
        return [t for t in self.tasks]

    def write(self, tasks):
        self.calls.append("write")
        self.tasks = list(tasks)

    def append(self, task):
        self.calls.append("append")
        self.tasks.append(task)


class TestTaskServiceWithOtherBackend:
    """The service only needs read/write/append."""

    def test_create_appends_without_reading(self):
        store = FakeStore()
        TaskService(store).create("In memory")
        assert store.calls == ["append"]

    def test_get(self, make_task):
        service = TaskService(FakeStore([make_task(id="a"), make_task(id="b")]))
        assert service.get("b").id == "b"
        assert service.get("zzz") is None

    def test_remove_missing_does_not_write(self, make_task):
        store = FakeStore([make_task(id="a")])
        assert TaskService(store).remove("b") is False
        assert store.calls == ["read"]

    def test_jsonl_store_satisfies_protocol(self, storage_path):
        service = TaskService(JsonlTaskStore(storage_path))
        task = service.create("Via class")
        assert service.list() == [task]
