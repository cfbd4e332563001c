"""In-memory session model.

Everything here is a pure transformation of ``AppState``; nothing touches the
record store, the clipboard or the terminal. The effectful operations live in
``app.session``.
"""

from dataclasses import dataclass, field
from enum import Enum
from app.errors import PreconditionViolation
from record import Record


class Mode(Enum):
    RESTING = "resting"
    EDITING_TITLE = "editing_title"
    EDITING_USERNAME = "editing_username"
    EDITING_PASSWORD = "editing_password"
    CONFIRMING_SUBMIT = "confirming_submit"
    SEARCHING = "searching"
    BROWSING = "browsing"
    CONFIRMING_DELETE = "confirming_delete"


# Tab walks forward through this chain, shift+tab walks back
FIELD_CHAIN = (
    Mode.EDITING_TITLE,
    Mode.EDITING_USERNAME,
    Mode.EDITING_PASSWORD,
    Mode.CONFIRMING_SUBMIT,
)

BUFFER_FOR_MODE = {
    Mode.EDITING_TITLE: "title",
    Mode.EDITING_USERNAME: "username",
    Mode.EDITING_PASSWORD: "password",
}


@dataclass
class EditBuffers:
    title: str = ""
    username: str = ""
    password: str = ""

    def clear(self) -> None:
        self.title = ""
        self.username = ""
        self.password = ""

    def fill_from(self, record: Record) -> None:
        self.title = record.title
        self.username = record.username
        self.password = record.password

    def to_record(self, record_id: int | None = None) -> Record:
        return Record(id=record_id, title=self.title, username=self.username, password=self.password)


@dataclass
class AppState:
    records: list[Record] = field(default_factory=list)
    mode: Mode = Mode.RESTING
    search_text: str = ""
    filtered: list[Record] = field(default_factory=list)
    selection: int | None = None
    buffers: EditBuffers = field(default_factory=EditBuffers)
    edit_target: int | None = None
    reveal_passwords: bool = False
    message: str | None = None

    @property
    def editing(self) -> bool:
        return self.edit_target is not None

    @property
    def pending_delete(self) -> bool:
        return self.mode is Mode.CONFIRMING_DELETE

    @property
    def displayed(self) -> list[Record]:
        """The sequence the list pane shows; an empty filter means "no filter"."""
        return self.filtered if self.filtered else self.records

    @property
    def selected_record(self) -> Record | None:
        if self.selection is None:
            return None
        return self.displayed[self.selection]

    def selected_index(self) -> int:
        """Position of the selected record inside ``records``."""
        record = self.selected_record
        if record is None:
            raise PreconditionViolation("no record selected")
        for index, candidate in enumerate(self.records):
            if candidate is record:
                return index
        raise PreconditionViolation("selected record is not loaded")

    # Search and navigation

    def update_search(self, text: str) -> None:
        self.search_text = text
        self.refresh_filter()

    def refresh_filter(self) -> None:
        if self.search_text:
            self.filtered = [r for r in self.records if r.title.startswith(self.search_text)]
        else:
            self.filtered = []
        self.clamp_selection()

    def clamp_selection(self) -> None:
        if self.selection is None:
            return
        size = len(self.displayed)
        if size == 0:
            self.selection = None
        elif self.selection >= size:
            self.selection = size - 1

    def move_selection(self, delta: int) -> None:
        if delta not in (-1, 1):
            raise ValueError(f"delta must be -1 or +1, got {delta}")
        size = len(self.displayed)
        if size == 0:
            self.selection = None
        elif self.selection is None:
            self.selection = 0
        else:
            self.selection = min(max(self.selection + delta, 0), size - 1)

    def clear_selection(self) -> None:
        self.selection = None

    # Edit buffers

    def begin_insert(self) -> None:
        self.buffers.clear()
        self.edit_target = None
        self.mode = Mode.EDITING_TITLE

    def begin_edit(self) -> None:
        index = self.selected_index()
        self.buffers.fill_from(self.records[index])
        self.edit_target = index
        self.mode = Mode.EDITING_TITLE

    def finish_edit(self) -> None:
        self.buffers.clear()
        self.edit_target = None

    def cancel_edit(self) -> None:
        # An interrupted edit of an existing record goes back to the list it came from
        self.mode = Mode.BROWSING if self.editing else Mode.RESTING
        self.finish_edit()

    def append_char(self, char: str) -> None:
        name = BUFFER_FOR_MODE[self.mode]
        setattr(self.buffers, name, getattr(self.buffers, name) + char)

    def delete_char(self) -> None:
        name = BUFFER_FOR_MODE[self.mode]
        setattr(self.buffers, name, getattr(self.buffers, name)[:-1])

    def next_field(self) -> None:
        position = FIELD_CHAIN.index(self.mode)
        if position + 1 < len(FIELD_CHAIN):
            self.mode = FIELD_CHAIN[position + 1]

    def previous_field(self) -> None:
        position = FIELD_CHAIN.index(self.mode)
        if position > 0:
            self.mode = FIELD_CHAIN[position - 1]

    # Deletion

    def request_delete(self) -> None:
        if self.selection is None:
            raise PreconditionViolation("nothing selected to delete")
        self.mode = Mode.CONFIRMING_DELETE

    def cancel_delete(self) -> None:
        self.mode = Mode.BROWSING

    def toggle_reveal(self) -> None:
        self.reveal_passwords = not self.reveal_passwords
