"""HTTP API and page server for the browser task viewer.

Routes operate on stores discovered under one workspace directory. Each
request may name a different store directory through `dir`.
"""

from __future__ import annotations

import json
import logging
import socket
import threading
import webbrowser
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_tracker.gui.page import render_index
from task_tracker.lib.constants import (
    DEFAULT_GUI_HOST,
    DEFAULT_GUI_PORT,
    DEFAULT_GUI_PORT_ATTEMPTS,
    STORAGE_FILENAME,
)
from task_tracker.lib.scanner import TaskFileInfo, scan_task_files
from task_tracker.lib.storage import read_tasks
from task_tracker.lib.tasks import create_task, purge_tasks, remove_task, update_task
from task_tracker.lib.types import InvalidStageError, parse_stage

logger = logging.getLogger(__name__)


async def _parse_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Invalid JSON body") from None
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON body")
    return body


def _optional_str(body: dict[str, Any], key: str) -> str | None:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{key} must be a string")
    return value


def _optional_stage(body: dict[str, Any]):
    value = _optional_str(body, "stage")
    if not value:
        return None
    try:
        return parse_stage(value)
    except InvalidStageError:
        raise HTTPException(status_code=400, detail=f"Invalid stage: {value}") from None


def _store_info(info: TaskFileInfo) -> dict[str, Any]:
    return {
        "path": str(info.path),
        "dir": str(info.dir),
        "name": info.name,
        "tasks": [t.to_dict() for t in read_tasks(info.path)],
    }


def create_app(root_dir: Path | str, storage_file: str = STORAGE_FILENAME) -> FastAPI:
    """Application factory for the viewer rooted at `root_dir`."""
    root_dir = Path(root_dir).resolve()

    app = FastAPI(title="task-tracker", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.root_dir = root_dir
    app.state.storage_file = storage_file
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    def store_path(dir_value: str | None) -> Path:
        return Path(dir_value or root_dir) / storage_file

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Request error on {request.method} {request.url.path}")
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return render_index(root_dir)

    @app.get("/api/tasks")
    def get_tasks(dir: str | None = None) -> dict[str, Any]:
        scan = scan_task_files(dir or root_dir, storage_file)
        return {
            "root": _store_info(scan.root) if scan.root else None,
            "repos": [_store_info(r) for r in scan.repos],
        }

    # Registered before the /{task_id} routes
    @app.post("/api/tasks/purge")
    async def purge(request: Request) -> dict[str, Any]:
        body = await _parse_body(request)
        keep = body.get("keep")
        if keep is not None and (not isinstance(keep, int) or isinstance(keep, bool) or keep < 0):
            raise HTTPException(status_code=400, detail="keep must be a non-negative integer")
        dry_run = body.get("dryRun", False)
        if not isinstance(dry_run, bool):
            raise HTTPException(status_code=400, detail="dryRun must be a boolean")
        result = purge_tasks(
            store_path(_optional_str(body, "dir")),
            dry_run=dry_run,
            keep=keep,
        )
        return {"count": result.count, "ids": result.ids}

    @app.post("/api/tasks", status_code=201)
    async def add(request: Request) -> dict[str, Any]:
        body = await _parse_body(request)
        description = body.get("description")
        if not isinstance(description, str) or not description:
            raise HTTPException(status_code=400, detail="description is required")
        task = create_task(
            store_path(_optional_str(body, "dir")),
            description,
            stage=_optional_stage(body),
            repo=_optional_str(body, "repo") or None,
        )
        return task.to_dict()

    @app.put("/api/tasks/{task_id}")
    async def update(task_id: str, request: Request) -> dict[str, Any]:
        body = await _parse_body(request)
        task = update_task(
            store_path(_optional_str(body, "dir")),
            task_id,
            stage=_optional_stage(body),
            description=_optional_str(body, "description") or None,
            repo=_optional_str(body, "repo") or None,
        )
        if task is None:
            raise HTTPException(status_code=404, detail="Task not found")
        return task.to_dict()

    @app.delete("/api/tasks/{task_id}")
    def delete(task_id: str, dir: str | None = None) -> dict[str, Any]:
        if not remove_task(store_path(dir), task_id):
            raise HTTPException(status_code=404, detail="Task not found")
        return {"removed": True}

    return app


def find_free_port(host: str, port: int, attempts: int) -> int:
    """First port in [port, port + attempts) that can be bound on host.

    Raises:
        OSError: if none of them is free
    """
    last_error: OSError | None = None
    for candidate in range(port, port + attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((host, candidate))
                return candidate
            except OSError as e:
                logger.debug(f"Port {candidate} unavailable: {e}")
                last_error = e
    raise OSError(f"No free port in {port}-{port + attempts - 1} on {host}: {last_error}")


def start_gui(
    root_dir: Path | str,
    host: str = DEFAULT_GUI_HOST,
    port: int = DEFAULT_GUI_PORT,
    port_attempts: int = DEFAULT_GUI_PORT_ATTEMPTS,
    storage_file: str = STORAGE_FILENAME,
    open_browser: bool = True,
) -> None:
    """Serve the viewer until interrupted. Blocks."""
    app = create_app(root_dir, storage_file)
    actual_port = find_free_port(host, port, port_attempts)
    url = f"http://{'localhost' if host == '127.0.0.1' else host}:{actual_port}"

    print(f"Task Tracker GUI running at {url}")
    print(f"Watching: {app.state.root_dir}")
    print("Press Ctrl+C to stop.")

    if open_browser:
        def _open() -> None:
            if not webbrowser.open(url):
                print(f"Could not open browser automatically. Visit: {url}")
        threading.Timer(0.5, _open).start()

    uvicorn.run(app, host=host, port=actual_port, log_level="warning")
