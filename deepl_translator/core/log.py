"""structlog setup.

structlog renders each event to a single line and hands it to the stdlib
`deepl_translator` logger, which writes to the console and to a rotating
log file. Handler write errors are reported by the stdlib handler itself
and never reach the caller, so a broken log file cannot fail a translation.
"""

import logging
import logging.handlers
import sys
from pathlib import Path

import structlog

_ROOT_LOGGER = "deepl_translator"
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 3


def _file_handler(log_file: str) -> logging.Handler | None:
    """Open the rotating log file, or return None if it cannot be created."""
    try:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            path,
            maxBytes=_MAX_LOG_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"log file unavailable ({log_file}): {e}", file=sys.stderr)
        return None


def configure_logging(log_level: str = "INFO", log_file: str | None = None) -> None:
    """Configure structlog + stdlib handlers for the whole package."""
    level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter("%(message)s")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        file_handler = _file_handler(log_file)
        if file_handler is not None:
            handlers.append(file_handler)

    root = logging.getLogger(_ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(
                key_order=["timestamp", "level", "event"]
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
