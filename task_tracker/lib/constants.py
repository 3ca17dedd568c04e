"""Shared constants for the task tracker."""

# Conventional store file name, at a repository root or workspace directory
STORAGE_FILENAME = ".tasks.jsonl"

DEFAULT_GUI_HOST = "127.0.0.1"
DEFAULT_GUI_PORT = 3333
DEFAULT_GUI_PORT_ATTEMPTS = 10

# Dirty files / unpushed commits shown per repo in the check report
DEFAULT_CHECK_MAX_ITEMS = 5
