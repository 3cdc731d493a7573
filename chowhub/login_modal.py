"""Login modal screen."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from chowhub.models import LoginForm


@dataclass(frozen=True)
class LoginRequest:
    form: LoginForm
    remember_me: bool


class LoginModal(ModalScreen[LoginRequest | None]):
    """Collect credentials; the app performs the actual login."""

    CSS = """
    LoginModal {
        align: center middle;
        background: $background 80%;
    }

    #login-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #login-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #login-fields {
        color: white;
        margin-bottom: 1;
    }

    #login-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #login-help {
        color: #dddddd;
    }
    """

    _FIELDS = ("username", "password")

    def __init__(self, error: str = "", username: str = "") -> None:
        super().__init__()
        self.form = LoginForm(username=username)
        self.remember_me = False
        self.active_field = "password" if username else "username"
        self.error = error

    def compose(self) -> ComposeResult:
        with Container(id="login-dialog"):
            yield Static("Welcome back to ChowHub", id="login-title")
            yield Static(id="login-fields")
            yield Static(id="login-error")
            yield Static("Tab switch field. Ctrl+R remember me. Enter log in. Esc quit.", id="login-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key == "escape":
            self.dismiss(None)
            event.stop()
            return

        if event.key in {"tab", "shift+tab"}:
            idx = self._FIELDS.index(self.active_field)
            self.active_field = self._FIELDS[(idx + 1) % len(self._FIELDS)]
            self._refresh_content()
            event.stop()
            return

        if event.key == "ctrl+r":
            self.remember_me = not self.remember_me
            self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key == "backspace":
            self._set_active_value(self._active_value()[:-1])
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            self._set_active_value(self._active_value() + event.character)
            self.error = ""
            self._refresh_content()
            event.stop()

    def _active_value(self) -> str:
        if self.active_field == "password":
            return self.form.password
        return self.form.username

    def _set_active_value(self, value: str) -> None:
        if self.active_field == "password":
            self.form.password = value
        else:
            self.form.username = value

    def _confirm(self) -> None:
        errors = self.form.validate()
        if errors:
            self.error = "\n".join(error.message for error in errors)
            self._refresh_content()
            return
        self.dismiss(LoginRequest(form=self.form, remember_me=self.remember_me))

    def _refresh_content(self) -> None:
        fields = Text()
        rows = (
            ("username", self.form.username),
            ("password", "*" * len(self.form.password)),
        )
        for name, shown in rows:
            pointer = "➤ " if name == self.active_field else "  "
            cursor = "|" if name == self.active_field else ""
            fields.append(f"{pointer}{name.title()}: ", style="bold")
            fields.append(f"{shown}{cursor}\n")
        fields.append(f"\n  [{'x' if self.remember_me else ' '}] Remember me")
        self.query_one("#login-fields", Static).update(fields)
        self.query_one("#login-error", Static).update(Text(self.error))
