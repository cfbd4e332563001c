import logging
import os
from dataclasses import dataclass
from pathlib import Path

from appdirs import user_config_dir
from dotenv import find_dotenv, load_dotenv

APP_NAME = "passmng"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class Settings:
    database_path: Path
    log_file: Path
    log_level: str = "DEBUG"


def default_config_dir() -> Path:
    return Path(user_config_dir(APP_NAME))


def load_settings() -> Settings:
    """Build the settings from the environment, reading a .env file first if one exists."""
    load_dotenv(find_dotenv(usecwd=True))
    config_dir = default_config_dir()
    database_path = os.getenv("PASSMNG_DATABASE") or config_dir / "passwords.db"
    log_file = os.getenv("PASSMNG_LOG_FILE") or config_dir / "passmng.log"
    log_level = (os.getenv("PASSMNG_LOG_LEVEL") or "DEBUG").upper()
    return Settings(
        database_path=Path(database_path).expanduser(),
        log_file=Path(log_file).expanduser(),
        log_level=log_level,
    )


def configure_logging(settings: Settings) -> None:
    # The terminal belongs to the TUI, so everything goes to a file
    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=settings.log_file,
        level=getattr(logging, settings.log_level, logging.DEBUG),
        format=LOG_FORMAT
    )
