"""
Diagnostics logging bootstrap for the agent.

Configures two handlers on the ``logship`` logger:

- an interactive console handler (rich) accepting every level from TRACE up
- a size-rotating file handler accepting DEBUG and up, written to
  ``<log_directory>/logship/logship.log`` (5 MiB per file, 5 archives)

The logger's own level is the global gate: records below it never reach
either handler.

Usage:
    from logship.diagnostics import initialize

    handle = initialize("info", "/var/log")
    ...
    handle.close()
"""

import logging
import logging.handlers
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from logship.core.exceptions import DiagnosticsBootstrapFailure

__all__ = [
    "AGENT_NAME",
    "TRACE",
    "OFF",
    "MAX_LOG_BYTES",
    "MAX_ARCHIVES",
    "DiagnosticsHandle",
    "initialize",
    "parse_level",
    "log_file_path",
]


AGENT_NAME = "logship"

MAX_LOG_BYTES = 5 * 1024 * 1024
MAX_ARCHIVES = 5

TRACE = 5
OFF = logging.CRITICAL + 10

logging.addLevelName(TRACE, "TRACE")
logging.addLevelName(OFF, "OFF")

CONSOLE_LEVEL = TRACE
FILE_LEVEL = logging.DEBUG

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(threadName)s] %(message)s"

_LEVEL_NAMES = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": OFF,
}


def parse_level(name: str) -> int:
    """
    Map a level name to a logging level number.

    Raises:
        ValueError: If the name is not a known level
    """
    try:
        return _LEVEL_NAMES[name.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown log level '{name}' (expected one of: {', '.join(_LEVEL_NAMES)})"
        ) from None


def log_file_path(log_directory: str | Path) -> Path:
    return Path(log_directory) / AGENT_NAME / f"{AGENT_NAME}.log"


@dataclass
class DiagnosticsHandle:
    """Handlers installed by initialize(), detachable with close()."""
    logger: logging.Logger
    level: int
    log_file: Path
    console_handler: logging.Handler
    file_handler: logging.Handler

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    def close(self) -> None:
        for handler in (self.console_handler, self.file_handler):
            self.logger.removeHandler(handler)
            handler.close()
        self.logger.propagate = True


_active: DiagnosticsHandle | None = None


def initialize(
    minimum_level: str,
    log_directory: str | Path,
    console: Console | None = None,
) -> DiagnosticsHandle:
    """
    Install the console and rotating file handlers.

    Calling this again replaces the handlers installed by the previous call.

    Args:
        minimum_level: Global gate, as a level name ("info", "Warning"...)
        log_directory: Directory under which ``logship/logship.log`` is written
        console: Rich console for the console handler (default: stderr)

    Returns:
        DiagnosticsHandle for the installed handlers

    Raises:
        ValueError: If minimum_level is not a known level name
        DiagnosticsBootstrapFailure: If the log directory cannot be created
            or the log file cannot be opened
    """
    global _active

    level = parse_level(minimum_level)
    log_file = log_file_path(log_directory)

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        # Size based only: never rolled over on a schedule
        file_handler = logging.handlers.RotatingFileHandler(
            filename=str(log_file),
            maxBytes=MAX_LOG_BYTES,
            backupCount=MAX_ARCHIVES,
            encoding="utf-8",
        )
    except OSError as e:
        raise DiagnosticsBootstrapFailure(
            f"Cannot open diagnostics log: {e}",
            log_directory=str(log_directory),
        ) from e

    file_handler.setLevel(FILE_LEVEL)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(CONSOLE_LEVEL)

    if _active is not None:
        _active.close()

    logger = logging.getLogger(AGENT_NAME)
    logger.setLevel(level)
    # Not passed on to the root logger's handlers as well
    logger.propagate = False
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    _active = DiagnosticsHandle(
        logger=logger,
        level=level,
        log_file=log_file,
        console_handler=console_handler,
        file_handler=file_handler,
    )
    return _active
