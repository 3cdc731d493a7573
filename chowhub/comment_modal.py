"""Order comment entry modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

MAX_COMMENT_CHARS = 280


class CommentModal(ModalScreen[str | None]):
    """Prompt for the free-text comment sent with the order."""

    CSS = """
    CommentModal {
        align: center middle;
        background: $background 60%;
    }

    #comment-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #comment-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #comment-value {
        border: heavy $secondary;
        padding: 0 1;
        color: white;
        margin-bottom: 1;
    }

    #comment-help {
        color: #dddddd;
    }
    """

    def __init__(self, initial: str = "") -> None:
        super().__init__()
        self.value = initial

    def compose(self) -> ComposeResult:
        with Container(id="comment-dialog"):
            yield Static("Comments", id="comment-title")
            yield Static(id="comment-value")
            yield Static("Enter confirm. Backspace delete. Esc/Ctrl+C cancel.", id="comment-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self.dismiss(None)
            event.stop()
            return

        if event.key == "enter":
            self.dismiss(self.value.strip())
            event.stop()
            return

        if event.key == "backspace":
            self.value = self.value[:-1]
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if len(self.value) < MAX_COMMENT_CHARS:
                self.value += event.character
            self._refresh_content()
            event.stop()

    def _refresh_content(self) -> None:
        self.query_one("#comment-value", Static).update(Text(f"{self.value}|"))
