from rich.text import Text
from textual import events, on
from textual.app import ComposeResult
from textual.screen import ModalScreen
from textual.containers import Container, Horizontal
from textual.widgets import Button, Label
from app.machine import ESCAPE, Key, dispatch
from app.session import Session


class DeleteConfirmModal(ModalScreen[bool]):
    """Popup shown while the session waits for a yes/no on deleting the selected record."""

    CSS = """
    DeleteConfirmModal {
        align: center middle;
    }
    #dialog {
        layout: vertical;
        padding: 2;
        width: 60;
        height: 24;
        border: thick $error 80%;
        background: $boost;
    }
    #dialog Label {
        width: 100%;
        text-align: center;
        margin: 1 0;
    }
    #warning-text, #error-label {
        color: $error;
    }
    #button-container {
        layout: horizontal;
        height: auto;
        margin: 1 0 0 0;
    }
    Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    def __init__(self, session: Session, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.session = session

    def compose(self) -> ComposeResult:
        record = self.session.state.selected_record
        title = record.title if record else "Unknown"

        with Container(id="dialog"):
            yield Label("DELETE", id="title")
            yield Label("Are you sure?", id="warning-text")
            yield Label(Text(f"'{title}' will be removed permanently."), id="record-name")
            yield Label("Press (Y) for Yes and (N) for No", id="keys")
            yield Label("", id="error-label")
            with Horizontal(id="button-container"):
                yield Button("No", variant="primary", id="cancel")
                yield Button("Yes", variant="error", id="confirm")

    def answer(self, key: Key) -> None:
        dispatch(self.session, key)
        state = self.session.state
        if state.pending_delete:
            # The store refused the delete, keep asking
            self.query_one("#error-label", Label).update(Text(state.message or ""))
            return
        self.dismiss(key.char == "y")

    def on_key(self, event: events.Key) -> None:
        key = Key.from_event(event)
        if key.char in ("y", "n") or key.name == ESCAPE:
            event.prevent_default()
            event.stop()
            self.answer(key)

    @on(Button.Pressed)
    def handle_button(self, event: Button.Pressed) -> None:
        self.answer(Key.of("y") if event.button.id == "confirm" else Key.of("n"))
