from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import Input, Static
from textual.containers import Container, Vertical


class UnlockScreen(Screen):
    BINDINGS = [
        ("escape", "quit", "Quit")
    ]

    CSS = """
    Container.center-container {
        height: 1fr;
        align: center middle;
    }

    Static.title {
        text-align: center;
    }
    Vertical {
        align: center middle;
        width: 50%;
        height: auto;
        background: $panel;
        border: tall $primary;
        padding: 2;
    }
    Input { margin: 1; width: 100%; }
    Static#message { margin: 1; }
    """

    def compose(self) -> ComposeResult:
        with Container(classes="center-container"):
            with Vertical():
                yield Static("Enter passphrase", id="title", classes="title")
                yield Input(placeholder="Passphrase", password=True, id="passphrase")
                yield Static("", id="message")

    def on_mount(self) -> None:
        self.query_one("#passphrase", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        passphrase = event.value
        if not passphrase:
            self.query_one("#message", Static).update("Please enter a passphrase.")
            return
        # The prompt is shown once: a wrong passphrase ends the program
        event.input.value = ""
        self.app.unlock(passphrase)

    def action_quit(self) -> None:
        self.app.exit()
