"""Logging bootstrap with optional JSON-lines output."""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
import os
from pathlib import Path
from typing import Any

APP_LOGGER_PREFIX = "assistant_chat"
DEFAULT_LOG_FILE = "~/.local/state/assistant-chat/app.log"

# Chatty third-party loggers capped at WARNING.
_QUIET_LIBRARIES = ("httpx", "httpcore", "textual", "asyncio")

# Every attribute a bare LogRecord carries; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class JsonFormatter(logging.Formatter):
    """Render each record as one compact JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        data.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        )
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)


class AppLoggerFilter(logging.Filter):
    """Pass only records emitted below the application package."""

    def __init__(self, prefix: str = APP_LOGGER_PREFIX) -> None:
        super().__init__()
        self.prefix = prefix

    def filter(self, record: logging.LogRecord) -> bool:
        return record.name == self.prefix or record.name.startswith(f"{self.prefix}.")


def _private_file_handler(
    path: Path, formatter: logging.Formatter, level: int
) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(formatter)
    handler.setLevel(level)
    if os.name == "posix":
        try:
            path.chmod(0o600)
        except OSError:
            logging.getLogger(__name__).warning(
                "Unable to enforce 0600 permissions for %s", path
            )
    return handler


def configure_logging(logging_config: dict[str, Any]) -> None:
    """Configure root logging according to the ``[logging]`` config section.

    The console handler only shows warnings from the app itself, since the
    terminal is owned by the TUI; the optional file handler receives
    everything at the configured level.
    """
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    formatter: logging.Formatter
    if bool(logging_config.get("structured", True)):
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    for logger_name in _QUIET_LIBRARIES:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    console.setLevel(max(level, logging.WARNING))
    console.addFilter(AppLoggerFilter())
    root.addHandler(console)

    if bool(logging_config.get("log_to_file", False)):
        target = Path(
            str(logging_config.get("log_file_path") or DEFAULT_LOG_FILE)
        ).expanduser()
        root.addHandler(_private_file_handler(target, formatter, level))
