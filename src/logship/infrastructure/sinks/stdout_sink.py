"""
Stdout sink: prints records to the console.
"""

import json
import threading

from rich.console import Console
from rich.text import Text

from logship.config.models import StdoutOutput
from logship.core.models import LogRecord, LogLevel
from logship.infrastructure.sinks.base import BaseSink

__all__ = ["StdoutSink", "LEVEL_STYLES"]


LEVEL_STYLES = {
    LogLevel.EMERGENCY: "red bold reverse",
    LogLevel.ALERT: "red bold reverse",
    LogLevel.CRITICAL: "red bold",
    LogLevel.ERROR: "red",
    LogLevel.WARNING: "yellow",
    LogLevel.NOTICE: "blue",
    LogLevel.INFO: "green",
    LogLevel.DEBUG: "dim",
    LogLevel.TRACE: "dim italic",
    LogLevel.UNKNOWN: "white",
}


class StdoutSink(BaseSink):
    """
    Writes every record to standard output.

    Formats:
        json: one JSON document per line
        compact: timestamp, level, input and message on one line
    """

    kind = "stdout"

    def __init__(self, declaration: StdoutOutput, cancel_event, counters, console: Console | None = None):
        super().__init__(declaration, cancel_event, counters)
        self.format = declaration.format
        self.console = console or Console(soft_wrap=True)
        # Consumers for different sources share one console
        self._write_lock = threading.Lock()

    def send(self, records: list[LogRecord]) -> None:
        with self._write_lock:
            for record in records:
                if self.format == "json":
                    self.console.out(
                        json.dumps(record.to_dict(), default=str),
                        highlight=False,
                    )
                else:
                    self.console.print(self._render_compact(record), soft_wrap=True)

    @staticmethod
    def _render_compact(record: LogRecord) -> Text:
        line = Text()
        line.append(record.formatted_timestamp("%H:%M:%S"), style="dim")
        line.append(" ")
        line.append(f"{record.level.name:8}", style=LEVEL_STYLES.get(record.level, "white"))
        line.append(f" [{record.origin.input_name or record.type}] ", style="cyan")
        line.append(record.message)
        return line
