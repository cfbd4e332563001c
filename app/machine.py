"""Mode state machine: one key press in, one state transition out.

The machine only knows about ``Key`` values, so it can be driven without a
terminal. ``screens.vault`` translates Textual key events into ``Key``.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
from app.errors import ClipboardError, PreconditionViolation, StoreIOError
from app.models import BUFFER_FOR_MODE, Mode
from app.session import Session

ESCAPE = "escape"
ENTER = "enter"
TAB = "tab"
BACKTAB = "shift+tab"
BACKSPACE = "backspace"
UP = "up"
DOWN = "down"
INSERT = "insert"


@dataclass(frozen=True)
class Key:
    name: str
    char: Optional[str] = None

    @classmethod
    def of(cls, char: str) -> "Key":
        return cls(char, char)

    @classmethod
    def from_event(cls, event) -> "Key":
        """Translate a Textual ``events.Key``."""
        return cls(event.key, event.character if event.is_printable else None)


class Signal(Enum):
    CONTINUE = "continue"
    QUIT = "quit"


def _resting(session: Session, key: Key) -> Signal:
    state = session.state
    if key.char == "q":
        return Signal.QUIT
    if key.char == "s":
        state.mode = Mode.SEARCHING
    elif key.char == "l":
        state.mode = Mode.BROWSING
    elif key.name == INSERT or key.char == "i":
        state.begin_insert()
    return Signal.CONTINUE


def _editing_field(session: Session, key: Key) -> Signal:
    state = session.state
    if key.name == ESCAPE:
        state.cancel_edit()
    elif key.name == TAB:
        state.next_field()
    elif key.name == BACKTAB:
        state.previous_field()
    elif key.name == BACKSPACE:
        state.delete_char()
    elif key.char:
        state.append_char(key.char)
    return Signal.CONTINUE


def _confirming_submit(session: Session, key: Key) -> Signal:
    state = session.state
    if key.name == ESCAPE:
        state.cancel_edit()
    elif key.name == BACKTAB:
        state.mode = Mode.EDITING_PASSWORD
    elif key.name == ENTER:
        if state.editing:
            session.commit_edit()
            state.message = "Record updated"
        else:
            session.insert_from_buffers()
            state.message = "Record saved"
    return Signal.CONTINUE


def _searching(session: Session, key: Key) -> Signal:
    state = session.state
    if key.name == ESCAPE:
        # The search text stays until it is edited again
        state.mode = Mode.RESTING
    elif key.name == BACKSPACE:
        state.update_search(state.search_text[:-1])
    elif key.char:
        state.update_search(state.search_text + key.char)
    return Signal.CONTINUE


def _browsing(session: Session, key: Key) -> Signal:
    state = session.state
    if key.name == ESCAPE:
        state.clear_selection()
        state.mode = Mode.RESTING
    elif key.name == UP:
        state.move_selection(-1)
    elif key.name == DOWN:
        state.move_selection(1)
    elif key.char == "u":
        session.copy_selected_field("username")
        state.message = "Username copied to clipboard"
    elif key.char == "p":
        session.copy_selected_field("password")
        state.message = "Password copied to clipboard"
    elif key.char == "e":
        state.begin_edit()
    elif key.char == "d":
        state.request_delete()
    elif key.char == "v":
        state.toggle_reveal()
    return Signal.CONTINUE


def _confirming_delete(session: Session, key: Key) -> Signal:
    state = session.state
    if key.char == "y":
        session.confirm_delete()
        state.message = "Record deleted"
    elif key.char == "n" or key.name == ESCAPE:
        state.cancel_delete()
    return Signal.CONTINUE


HANDLERS: dict[Mode, Callable[[Session, Key], Signal]] = {
    Mode.RESTING: _resting,
    Mode.SEARCHING: _searching,
    Mode.BROWSING: _browsing,
    Mode.CONFIRMING_SUBMIT: _confirming_submit,
    Mode.CONFIRMING_DELETE: _confirming_delete,
}
HANDLERS.update({mode: _editing_field for mode in BUFFER_FOR_MODE})


def dispatch(session: Session, key: Key) -> Signal:
    """Apply one key press to the session.

    Store failures are reported through ``state.message`` and leave the mode
    where it was, so the user can retry or cancel. Precondition failures
    are ignored.
    """
    state = session.state
    state.message = None
    try:
        return HANDLERS[state.mode](session, key)
    except PreconditionViolation as e:
        logging.debug(f"Ignored {key.name!r} in {state.mode.value}: {e}")
    except StoreIOError as e:
        logging.error(f"Storage error in {state.mode.value}: {e}")
        state.message = f"Storage error: {e}"
    except ClipboardError as e:
        state.message = str(e)
    return Signal.CONTINUE
