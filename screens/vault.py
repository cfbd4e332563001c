import logging
from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.screen import Screen
from textual.containers import Horizontal, Vertical
from textual.widgets import Header, Static
from app.machine import Key, Signal, dispatch
from app.models import AppState, Mode
from app.session import Session
from modals.delete_confirm import DeleteConfirmModal

APP_KEYS_DESC = """\
L:           List
U:           On list, copy the Username
P:           On list, copy the Password
V:           On list, show/hide passwords
D:           On list, Delete
E:           On list, Edit
S:           Search
Insert / I:  Insert new Password
Tab:         Go to next field
Shift+Tab:   Go to previous field
Esc:         Leave the current mode
Q:           Quit
"""

MODE_HINTS = {
    Mode.RESTING: "L list | S search | Insert/I new password | Q quit",
    Mode.EDITING_TITLE: "Type the title | Tab next field | Esc cancel",
    Mode.EDITING_USERNAME: "Type the username | Tab next | Shift+Tab back | Esc cancel",
    Mode.EDITING_PASSWORD: "Type the password | Tab submit | Shift+Tab back | Esc cancel",
    Mode.CONFIRMING_SUBMIT: "Enter to save | Shift+Tab back | Esc cancel",
    Mode.SEARCHING: "Type to filter by title | Esc done",
    Mode.BROWSING: "Up/Down move | U/P copy | E edit | D delete | V show | Esc back",
    Mode.CONFIRMING_DELETE: "Y delete | N keep",
}

BORDER_TITLES = {
    "new-section": "New Password",
    "list-section": "List of passwords",
    "title-input": "Title",
    "username-input": "Username",
    "password-input": "Password",
    "search-input": "Search",
}

FIELD_WIDGETS = {
    "title-input": Mode.EDITING_TITLE,
    "username-input": Mode.EDITING_USERNAME,
    "password-input": Mode.EDITING_PASSWORD,
    "submit": Mode.CONFIRMING_SUBMIT,
}


def mask(password: str, reveal: bool) -> str:
    return password if reveal else "*" * len(password)


def render_list(state: AppState) -> Text:
    """Render the displayed records, marking the selected one with ``->``."""
    text = Text()
    if not state.displayed:
        text.append("No passwords saved yet", style="dim")
        return text
    for index, record in enumerate(state.displayed):
        if state.mode is Mode.BROWSING:
            line = f"{record.title}: {record.username} - {mask(record.password, state.reveal_passwords)}"
        else:
            line = record.title
        if index == state.selection:
            text.append(f"->{line}\n", style="bold")
        else:
            text.append(f"  {line}\n")
    return text


def render_status(state: AppState) -> Text:
    if state.message:
        return Text(state.message, style="bold")
    return Text(MODE_HINTS[state.mode], style="dim")


class VaultScreen(Screen):
    CSS = """
    #main-content {
        layout: horizontal;
        height: 1fr;
    }
    #new-section, #list-section {
        width: 50%;
        border: round $primary;
        padding: 0 1;
    }
    #keys {
        height: 1fr;
    }
    .field {
        height: 3;
        border: round $secondary;
    }
    .field.active {
        border: round yellow;
        color: yellow;
    }
    #submit {
        text-align: center;
    }
    #record-list {
        height: 1fr;
    }
    #status {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    def __init__(self, session: Session, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.session = session
        self._confirming = False

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-content"):
            with Vertical(id="new-section"):
                yield Static(APP_KEYS_DESC, id="keys")
                yield Static("", id="title-input", classes="field")
                yield Static("", id="username-input", classes="field")
                yield Static("", id="password-input", classes="field")
                yield Static("Submit", id="submit", classes="field")
            with Vertical(id="list-section"):
                yield Static("", id="search-input", classes="field")
                yield Static("", id="record-list")
        yield Static("", id="status")

    def on_mount(self) -> None:
        for widget_id, title in BORDER_TITLES.items():
            self.query_one(f"#{widget_id}").border_title = title
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        if dispatch(self.session, Key.from_event(event)) is Signal.QUIT:
            logging.info("Session ended by user")
            self.app.exit()
            return
        self.refresh_view()

    def refresh_view(self) -> None:
        state = self.session.state
        buffers = state.buffers
        self.query_one("#title-input", Static).update(Text(buffers.title))
        self.query_one("#username-input", Static).update(Text(buffers.username))
        self.query_one("#password-input", Static).update(Text(mask(buffers.password, state.reveal_passwords)))
        for widget_id, mode in FIELD_WIDGETS.items():
            self.query_one(f"#{widget_id}").set_class(state.mode is mode, "active")

        search = self.query_one("#search-input", Static)
        search.update(Text(state.search_text))
        search.set_class(state.mode is Mode.SEARCHING, "active")

        self.query_one("#record-list", Static).update(render_list(state))
        self.query_one("#status", Static).update(render_status(state))

        if state.pending_delete and not self._confirming:
            self._confirming = True
            self.app.push_screen(DeleteConfirmModal(self.session), callback=self._on_confirm_closed)

    def _on_confirm_closed(self, deleted: bool | None) -> None:
        self._confirming = False
        self.refresh_view()
