"""Tests for the browser viewer API."""

import socket
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from task_tracker.gui.server import create_app, find_free_port, start_gui
from task_tracker.lib.storage import read_tasks, write_tasks
from task_tracker.lib.types import Stage

STORE = ".tasks.jsonl"


@pytest.fixture
def workspace(tmp_path):
    (tmp_path / "api").mkdir()
    return tmp_path


@pytest.fixture
def client(workspace):
    return TestClient(create_app(workspace))


class TestPage:
    def test_index_embeds_dir_and_stages(self, client, workspace):
        response = client.get("/")
        assert response.status_code == 200
        assert "Task Tracker" in response.text
        assert str(workspace) in response.text
        assert '"pr-created"' in response.text

    def test_unknown_route_is_json_404(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}


class TestListStores:
    """GET /api/tasks"""

    def test_empty_workspace(self, client):
        response = client.get("/api/tasks")
        assert response.status_code == 200
        assert response.json() == {"root": None, "repos": []}

    def test_root_and_repo_stores(self, client, workspace, make_task):
        write_tasks(workspace / STORE, [make_task(id="root1")])
        write_tasks(workspace / "api" / STORE, [make_task(id="api1", stage=Stage.DONE)])

        data = client.get("/api/tasks").json()

        assert data["root"]["path"] == str(workspace / STORE)
        assert [t["id"] for t in data["root"]["tasks"]] == ["root1"]
        assert data["repos"][0]["name"] == "api"
        assert data["repos"][0]["dir"] == str(workspace / "api")
        # Done tasks are included; the page filters them
        assert data["repos"][0]["tasks"][0]["stage"] == "done"

    def test_dir_query(self, client, workspace, make_task):
        write_tasks(workspace / "api" / STORE, [make_task(id="api1")])
        data = client.get("/api/tasks", params={"dir": str(workspace / "api")}).json()
        assert data["root"]["name"] == "api"
        assert data["repos"] == []


class TestCreate:
    """POST /api/tasks"""

    def test_creates_in_root_store(self, client, workspace):
        response = client.post("/api/tasks", json={"description": "From browser"})
        assert response.status_code == 201
        body = response.json()
        assert body["stage"] == "pending"
        assert [t.id for t in read_tasks(workspace / STORE)] == [body["id"]]

    def test_creates_in_named_dir(self, client, workspace):
        response = client.post(
            "/api/tasks",
            json={"description": "Repo task", "dir": str(workspace / "api"), "stage": "in-progress", "repo": "api"},
        )
        assert response.status_code == 201
        tasks = read_tasks(workspace / "api" / STORE)
        assert tasks[0].stage == Stage.IN_PROGRESS
        assert tasks[0].repo == "api"

    def test_description_required(self, client):
        response = client.post("/api/tasks", json={"stage": "pending"})
        assert response.status_code == 400
        assert response.json() == {"error": "description is required"}

    def test_invalid_stage(self, client, workspace):
        response = client.post("/api/tasks", json={"description": "x", "stage": "nope"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid stage: nope"
        assert not (workspace / STORE).exists()

    def test_invalid_json(self, client):
        response = client.post("/api/tasks", content=b"{not json", headers={"Content-Type": "application/json"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid JSON body"}

    def test_non_object_body(self, client):
        response = client.post("/api/tasks", json=["description"])
        assert response.status_code == 400


class TestUpdateAndDelete:
    """PUT and DELETE /api/tasks/{id}"""

    def test_update_stage(self, client, workspace, make_task):
        write_tasks(workspace / STORE, [make_task(id="abc")])
        response = client.put("/api/tasks/abc", json={"stage": "merged"})
        assert response.status_code == 200
        assert response.json()["stage"] == "merged"
        assert read_tasks(workspace / STORE)[0].stage == Stage.MERGED

    def test_update_missing(self, client, workspace, make_task):
        write_tasks(workspace / STORE, [make_task(id="abc")])
        response = client.put("/api/tasks/zzz", json={"stage": "merged"})
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}

    def test_update_wrong_type(self, client):
        response = client.put("/api/tasks/abc", json={"description": 5})
        assert response.status_code == 400
        assert response.json()["error"] == "description must be a string"

    def test_delete(self, client, workspace, make_task):
        write_tasks(workspace / "api" / STORE, [make_task(id="abc"), make_task(id="def")])
        response = client.delete("/api/tasks/abc", params={"dir": str(workspace / "api")})
        assert response.status_code == 200
        assert response.json() == {"removed": True}
        assert [t.id for t in read_tasks(workspace / "api" / STORE)] == ["def"]

    def test_delete_missing(self, client):
        response = client.delete("/api/tasks/abc")
        assert response.status_code == 404
        assert response.json() == {"error": "Task not found"}


class TestPurge:
    """POST /api/tasks/purge"""

    @pytest.fixture
    def done_store(self, workspace, make_task):
        write_tasks(workspace / STORE, [
            make_task(id="open"),
            make_task(id="d1", stage=Stage.DONE, created_at="2024-01-01T00:00:01.000Z"),
            make_task(id="d2", stage=Stage.DONE, created_at="2024-01-01T00:00:02.000Z"),
        ])
        return workspace / STORE

    def test_dry_run(self, client, done_store):
        response = client.post("/api/tasks/purge", json={"dryRun": True})
        assert response.json() == {"count": 2, "ids": ["d1", "d2"]}
        assert len(read_tasks(done_store)) == 3

    def test_purge_with_keep(self, client, done_store):
        response = client.post("/api/tasks/purge", json={"keep": 1})
        assert response.json() == {"count": 1, "ids": ["d1"]}
        assert [t.id for t in read_tasks(done_store)] == ["open", "d2"]

    def test_empty_body_purges_all(self, client, done_store):
        assert client.post("/api/tasks/purge").json()["count"] == 2

    @pytest.mark.parametrize("keep", [-1, "2", True, 1.5])
    def test_bad_keep(self, client, done_store, keep):
        response = client.post("/api/tasks/purge", json={"keep": keep})
        assert response.status_code == 400
        assert len(read_tasks(done_store)) == 3

    @pytest.mark.parametrize("dry_run", ["false", 0, "yes"])
    def test_dry_run_must_be_boolean(self, client, done_store, dry_run):
        response = client.post("/api/tasks/purge", json={"dryRun": dry_run})
        assert response.status_code == 400
        assert response.json() == {"error": "dryRun must be a boolean"}
        assert len(read_tasks(done_store)) == 3


class TestCors:
    """Cross-origin access to the local API."""

    def test_preflight(self, client):
        response = client.options(
            "/api/tasks",
            headers={
                "Origin": "http://example.test",
                "Access-Control-Request-Method": "PUT",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PUT" in response.headers["access-control-allow-methods"]

    def test_simple_request_carries_origin_header(self, client):
        response = client.get("/api/tasks", headers={"Origin": "http://example.test"})
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


class TestServe:
    def test_find_free_port_skips_nothing_when_free(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
            probe.bind(("127.0.0.1", 0))
            port = probe.getsockname()[1]
        assert find_free_port("127.0.0.1", port, 1) == port

    def test_find_free_port_raises_when_taken(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
            busy.bind(("127.0.0.1", 0))
            busy.listen()
            port = busy.getsockname()[1]
            with pytest.raises(OSError, match="No free port"):
                find_free_port("127.0.0.1", port, 1)

    def test_start_gui_runs_uvicorn(self, tmp_path, capsys):
        with patch("task_tracker.gui.server.find_free_port", return_value=4567), \
                patch("task_tracker.gui.server.uvicorn.run") as mock_run, \
                patch("task_tracker.gui.server.webbrowser.open") as mock_open:
            start_gui(tmp_path, open_browser=False)

        assert "http://localhost:4567" in capsys.readouterr().out
        assert mock_run.call_args.kwargs["port"] == 4567
        assert mock_run.call_args.kwargs["host"] == "127.0.0.1"
        mock_open.assert_not_called()
