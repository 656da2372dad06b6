"""
OS event source.

Follows the operating system event log through a command that streams
one JSON object per event (``journalctl --follow --output=json`` by
default).
"""

import logging
import subprocess
import threading
from datetime import datetime, timezone

from logship.config.models import OSEventInput
from logship.core.models import LogRecord
from logship.infrastructure.sources.base import BaseSource
from logship.parsers import registry

__all__ = ["OSEventSource"]

logger = logging.getLogger(__name__)


class OSEventSource(BaseSource):
    """
    Streams events from an OS event reader subprocess.

    journald export fields are mapped onto the record: ``MESSAGE`` and
    ``PRIORITY`` by the JSON parser, ``__REALTIME_TIMESTAMP`` (microseconds
    since the epoch) to the timestamp, and the unit or syslog identifier
    to the origin service.
    """

    kind = "os_events"

    # Seconds to wait for the reader to exit after terminate()
    terminate_timeout = 3.0

    def __init__(self, declaration: OSEventInput, cancel_event, counters):
        super().__init__(declaration, cancel_event, counters)
        self.command = list(declaration.command)
        self._process: subprocess.Popen | None = None
        self._process_lock = threading.Lock()

    def default_name(self) -> str:
        return f"os_events:{self.declaration.command[0]}"

    def run(self) -> None:
        with self._process_lock:
            if self.stopping:
                return
            self._process = subprocess.Popen(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
            process = self._process

        logger.debug("Started event reader %s (pid %d)", self.command[0], process.pid)

        parser = registry.get_parser("json")
        for line in process.stdout:
            if self.stopping:
                break
            line = line.strip()
            if not line:
                continue
            record = parser.parse_line(line)
            if record is None:
                continue
            self._apply_journal_fields(record)
            if not self.emit(record):
                break

        returncode = process.wait()
        if returncode and not self.stopping:
            logger.warning("Event reader %s exited with status %d", self.command[0], returncode)

    def close(self) -> None:
        with self._process_lock:
            process = self._process
        if process is None or process.poll() is not None:
            return

        process.terminate()
        try:
            process.wait(self.terminate_timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Event reader %s ignored SIGTERM, killing it", self.command[0])
            process.kill()
            process.wait()

    @staticmethod
    def _apply_journal_fields(record: LogRecord) -> None:
        fields = record.fields

        realtime = fields.pop("__REALTIME_TIMESTAMP", None)
        if realtime is not None and record.timestamp is None:
            try:
                record.timestamp = datetime.fromtimestamp(int(realtime) / 1_000_000, tz=timezone.utc)
            except (TypeError, ValueError, OverflowError):
                record.parse_errors.append(f"Bad __REALTIME_TIMESTAMP: {realtime!r}")

        service = fields.get("_SYSTEMD_UNIT") or fields.get("SYSLOG_IDENTIFIER")
        if service:
            record.origin.service = str(service)

    def metadata(self) -> dict[str, str]:
        meta = super().metadata()
        meta["command"] = " ".join(self.command)
        if self._process is not None:
            meta["pid"] = str(self._process.pid)
        return meta
