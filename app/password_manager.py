import logging
from textual.app import App, ComposeResult
from textual.widgets import Header
from app.config import Settings
from app.errors import AuthenticationError, StoreIOError
from app.session import Session
from database.db import RecordStore
from screens.unlock import UnlockScreen
from screens.vault import VaultScreen


class PasswordManagerApp(App):
    TITLE = "passmng"

    def __init__(self, settings: Settings, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.settings = settings
        self.store: RecordStore | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)

    def on_mount(self) -> None:
        self.push_screen(UnlockScreen())

    def unlock(self, passphrase: str) -> None:
        """Open the store with ``passphrase`` and show the vault, or exit with code 1."""
        try:
            self.store = RecordStore.open(passphrase, self.settings.database_path)
            session = Session.load(self.store, clipboard=self.copy_to_clipboard)
        except AuthenticationError as e:
            logging.error(f"Unlock failed: {e}")
            self.exit(return_code=1, message=str(e))
            return
        except StoreIOError as e:
            logging.error(f"Store unavailable: {e}")
            self.exit(return_code=1, message=f"Could not open password store: {e}")
            return

        logging.info(f"Session started with {len(session.state.records)} records")
        self.switch_screen(VaultScreen(session))

    def close_store(self) -> None:
        if self.store is not None:
            self.store.close()
            self.store = None
