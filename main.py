import logging, sys
from app.config import configure_logging, load_settings
from app.password_manager import PasswordManagerApp


def main() -> int:
    settings = load_settings()
    configure_logging(settings)
    logging.info(f"Starting passmng with store {settings.database_path}")

    app = PasswordManagerApp(settings)
    try:
        app.run()
    finally:
        # Textual has already restored the terminal by the time run() returns or raises
        app.close_store()

    return app.return_code or 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
