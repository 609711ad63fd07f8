import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler
from diagnoease.config import get_settings

LOGGER_NAME = "diagnoease"
MAX_LOG_BYTES = 10 * 1024 * 1024  # 10MB
LOG_BACKUPS = 5

_console_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
_file_format = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)


def _rotating(path: Path, level: int) -> RotatingFileHandler:
    handler = RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS)
    handler.setLevel(level)
    handler.setFormatter(_file_format)
    return handler


def setup_logging() -> logging.Logger:
    """Configure the application logger: stdout, app.log and errors.log."""
    settings = get_settings()
    level = logging.DEBUG if settings.APP_DEBUG else logging.INFO

    logs_dir = Path(settings.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)

    # Prevent duplicate logs on re-import (uvicorn --reload)
    if root.handlers:
        root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(_console_format)
    root.addHandler(console_handler)

    root.addHandler(_rotating(logs_dir / "app.log", logging.INFO))
    root.addHandler(_rotating(logs_dir / "errors.log", logging.ERROR))
    return root


logger = setup_logging()


def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance. If name is provided, returns a child logger."""
    if name:
        return logger.getChild(name)
    return logger
