import logging
from typing import Callable, Optional
from app.errors import ClipboardError, PreconditionViolation
from app.models import AppState, Mode
from database.db import RecordStore

COPYABLE_FIELDS = ("username", "password")


class Session:
    """Binds the in-memory state to the record store and the clipboard.

    Each operation persists first and only then mutates ``state``; a
    StoreIOError from the store leaves the state exactly as it was.
    """

    def __init__(self, store: RecordStore, state: AppState | None = None,
                 clipboard: Optional[Callable[[str], None]] = None):
        self.store = store
        self.state = state if state is not None else AppState()
        self.clipboard = clipboard

    @classmethod
    def load(cls, store: RecordStore, clipboard: Optional[Callable[[str], None]] = None) -> "Session":
        return cls(store, AppState(records=store.load_all()), clipboard)

    def insert_from_buffers(self) -> None:
        state = self.state
        if state.editing:
            raise PreconditionViolation("buffers belong to an edit in progress")
        record = state.buffers.to_record()
        new_id = self.store.insert(record)
        state.records.append(record.with_id(new_id))
        state.finish_edit()
        state.mode = Mode.RESTING
        state.refresh_filter()
        logging.info(f"Saved new record: id={new_id}")

    def commit_edit(self) -> None:
        state = self.state
        if not state.editing:
            raise PreconditionViolation("no edit in progress")
        target = state.edit_target
        record_id = state.records[target].id
        updated = state.buffers.to_record(record_id)
        self.store.update(record_id, updated)
        state.records[target] = updated
        state.finish_edit()
        state.mode = Mode.BROWSING
        state.refresh_filter()
        logging.info(f"Updated record: id={record_id}")

    def confirm_delete(self) -> None:
        state = self.state
        if not state.pending_delete:
            raise PreconditionViolation("no delete was requested")
        index = state.selected_index()
        # Judged against the view the user confirmed in, before the filter is recomputed
        was_last = state.selection == len(state.displayed) - 1
        record = state.records[index]
        self.store.delete(record.id)
        del state.records[index]
        state.refresh_filter()
        # Re-select the top of the list unless the removed row was the last one shown
        state.selection = None if was_last or not state.displayed else 0
        state.mode = Mode.BROWSING
        logging.info(f"Deleted record: id={record.id}")

    def copy_selected_field(self, field: str) -> None:
        if field not in COPYABLE_FIELDS:
            raise ValueError(f"cannot copy field {field!r}")
        record = self.state.selected_record
        if record is None:
            raise PreconditionViolation("no record selected")
        if self.clipboard is None:
            raise ClipboardError("No clipboard available")
        try:
            self.clipboard(getattr(record, field))
        except Exception as e:
            logging.warning(f"Clipboard rejected {field} of record {record.id}: {e}")
            raise ClipboardError(f"Could not copy {field}: {e}") from e
