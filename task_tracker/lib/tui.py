"""Shared TUI components for the watch board."""

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static


class ConfirmModal(ModalScreen[bool]):
    """Yes/no prompt for destructive actions (remove, purge)."""

    CSS = """
    ConfirmModal {
        align: center middle;
    }

    #confirm-dialog {
        width: auto;
        max-width: 70;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: solid $error;
    }

    #confirm-title {
        text-style: bold;
        margin-bottom: 1;
    }

    #confirm-hint {
        margin-top: 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        Binding("y", "answer(True)", "Yes"),
        Binding("n", "answer(False)", "No"),
        Binding("escape", "answer(False)", "Cancel"),
    ]

    def __init__(self, message: str, title: str = "Confirm") -> None:
        super().__init__()
        self.message = message
        self.title_text = title

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self.title_text, id="confirm-title"),
            Static(self.message, id="confirm-message"),
            Static("[y]es / [n]o", id="confirm-hint", markup=False),
            id="confirm-dialog",
        )

    def action_answer(self, confirmed: bool) -> None:
        self.dismiss(confirmed)
