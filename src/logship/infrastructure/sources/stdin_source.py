"""
Stdin source for logship.

Ships piped data line by line.
"""

import sys
from typing import TextIO

from logship.infrastructure.sources.base import BaseSource

__all__ = ["StdinSource"]


class StdinSource(BaseSource):
    """
    Streaming source for standard input.

    JSON object lines are parsed as structured records, anything else as
    plain text. The stream ends the source when it reaches EOF.

    Example:
        # tail -F app.log | logship run -c stdin.json
        source = StdinSource(StdinInput(), event, counters)
    """

    kind = "stdin"

    # A blocked read on stdin cannot be interrupted, don't hold shutdown for it
    join_timeout = 0.5

    def __init__(self, declaration, cancel_event, counters, stream: TextIO | None = None):
        super().__init__(declaration, cancel_event, counters)
        self.stream = stream
        self._line_count = 0

    def run(self) -> None:
        stream = self.stream if self.stream is not None else sys.stdin
        for line in stream:
            if self.stopping:
                break
            self._line_count += 1
            record = self.parse_text_line(line.rstrip("\n\r"))
            if record is None:
                continue
            record.origin.line_number = self._line_count
            if not self.emit(record):
                break

    def metadata(self) -> dict[str, str]:
        meta = super().metadata()
        meta["lines_read"] = str(self._line_count)
        return meta
