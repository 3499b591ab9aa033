"""
Logging configuration — one-time setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  PROTOSTUB_LOG_LEVEL  >  WARNING

A log file can be added with PROTOSTUB_LOG_FILE (and its own level with
PROTOSTUB_LOG_FILE_LEVEL); it always gets the full diagnostic format.
"""

from __future__ import annotations

import logging
import logging.config
from typing import Any

# ── Formats per console verbosity ───────────────────────────────
#   level   → (format, datefmt)
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    logging.WARNING: ("%(levelname)s: %(message)s", None),
}

_FILE_FORMAT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%Y-%m-%d %H:%M:%S")

# The grammar engine logs table construction at DEBUG
_NOISY_LOGGERS = ("lark",)


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path of a log file to append to.
        log_file_level: Level for the log file; defaults to ``level``.
        quiet_third_party: Hold third-party loggers at WARNING unless the
            console runs at DEBUG.
    """
    logging.config.dictConfig(
        build_logging_config(level, log_file, log_file_level, quiet_third_party)
    )
    logging.raiseExceptions = False


def build_logging_config(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> dict[str, Any]:
    """The ``dictConfig`` mapping used by ``setup_logging``."""
    console_level = parse_level(level)
    fmt, datefmt = console_format(console_level)

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": fmt, "datefmt": datefmt},
            "file": {"format": _FILE_FORMAT[0], "datefmt": _FILE_FORMAT[1]},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "level": console_level,
                "formatter": "console",
            },
        },
        "root": {"level": console_level, "handlers": ["console"]},
        "loggers": {},
    }

    if log_file:
        file_level = parse_level(log_file_level) if log_file_level else console_level
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "filename": log_file,
            "encoding": "utf-8",
            "level": file_level,
            "formatter": "file",
        }
        config["root"]["handlers"].append("file")
        config["root"]["level"] = min(console_level, file_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            config["loggers"][name] = {"level": logging.WARNING}

    return config


def console_format(level: int) -> tuple[str, str | None]:
    """Format and date format for a console level."""
    for threshold in sorted(_CONSOLE_FORMATS):
        if level <= threshold:
            return _CONSOLE_FORMATS[threshold]
    return _CONSOLE_FORMATS[logging.WARNING]


def parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant (WARNING if unknown)."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
