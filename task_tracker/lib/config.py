"""
Configuration for the task tracker.

Loads an optional config.yaml. Missing files and missing keys fall back to
defaults. The store location is resolved here, once, and passed into the
task service explicitly.

Example config.yaml:

    storage_file: .tasks.jsonl
    auto_purge_keep: 20     # 0 disables auto-purge after `done`
    gui:
      host: 127.0.0.1
      port: 3333
      port_attempts: 10
    check:
      max_items: 5
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from task_tracker.git.status import get_repo_root
from task_tracker.lib.constants import (
    DEFAULT_CHECK_MAX_ITEMS,
    DEFAULT_GUI_HOST,
    DEFAULT_GUI_PORT,
    DEFAULT_GUI_PORT_ATTEMPTS,
    STORAGE_FILENAME,
)
from task_tracker.lib.tasks import DEFAULT_AUTO_PURGE_KEEP

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TASK_TRACKER_CONFIG"


@dataclass
class TrackerConfig:
    """Settings from config.yaml."""
    storage_file: str = STORAGE_FILENAME
    auto_purge_keep: int = DEFAULT_AUTO_PURGE_KEEP
    gui_host: str = DEFAULT_GUI_HOST
    gui_port: int = DEFAULT_GUI_PORT
    gui_port_attempts: int = DEFAULT_GUI_PORT_ATTEMPTS
    check_max_items: int = DEFAULT_CHECK_MAX_ITEMS


def default_config_path() -> Path:
    """~/.config/task-tracker/config.yaml, honouring XDG_CONFIG_HOME."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "task-tracker" / "config.yaml"


def find_config_path(explicit: Path | str | None = None) -> Path:
    """Pick the config file: explicit path, then $TASK_TRACKER_CONFIG, then the default."""
    if explicit:
        return Path(explicit)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    return default_config_path()


def _int_setting(data: dict, key: str, default: int, minimum: int = 0) -> int:
    value = data.get(key, default)
    try:
        value = int(value)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value for {key!r}: {value!r}, using {default}")
        return default
    if value < minimum:
        logger.warning(f"{key!r} must be >= {minimum}, using {default}")
        return default
    return value


def load_config(path: Path | str | None = None) -> TrackerConfig:
    """Load config.yaml and return TrackerConfig.

    If the file doesn't exist or can't be parsed, returns defaults.
    """
    config_path = find_config_path(path)
    if not config_path.exists():
        return TrackerConfig()

    try:
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (yaml.YAMLError, OSError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return TrackerConfig()
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {config_path}: expected a mapping at top level")
        return TrackerConfig()

    gui = data.get("gui") if isinstance(data.get("gui"), dict) else {}
    check = data.get("check") if isinstance(data.get("check"), dict) else {}
    return TrackerConfig(
        storage_file=str(data.get("storage_file") or STORAGE_FILENAME),
        auto_purge_keep=_int_setting(data, "auto_purge_keep", DEFAULT_AUTO_PURGE_KEEP),
        gui_host=str(gui.get("host") or DEFAULT_GUI_HOST),
        gui_port=_int_setting(gui, "port", DEFAULT_GUI_PORT, minimum=1),
        gui_port_attempts=_int_setting(gui, "port_attempts", DEFAULT_GUI_PORT_ATTEMPTS, minimum=1),
        check_max_items=_int_setting(check, "max_items", DEFAULT_CHECK_MAX_ITEMS, minimum=1),
    )


def resolve_storage_path(
    explicit: Path | str | None,
    config: TrackerConfig,
    cwd: Path | None = None,
) -> Path:
    """Store location: --storage if given, else <repo root>/<storage_file>.

    Raises:
        NotAGitRepository: if no explicit path is given and cwd is not in a repo
    """
    if explicit:
        return Path(explicit).expanduser()
    root = get_repo_root(cwd or Path.cwd())
    return root / config.storage_file
