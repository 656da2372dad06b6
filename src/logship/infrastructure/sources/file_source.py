"""
File tailing sources.

Follows every file matching a glob, reading lines as they are appended.
"""

import glob
import logging
import os
import threading
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from logship.config.models import FileInputDeclaration
from logship.core.base import BaseParser
from logship.infrastructure.sources.base import BaseSource
from logship.parsers import registry

__all__ = ["TailFileSource", "JsonLogSource", "IISLogSource", "GenericLogSource", "watch_root"]

logger = logging.getLogger(__name__)


def watch_root(pattern: str) -> tuple[Path, bool]:
    """
    Directory to watch for a glob, and whether to watch it recursively.

    The root is the longest leading run of path parts without wildcards.
    """
    parts = Path(pattern).parts
    root: list[str] = []
    for part in parts[:-1]:
        if glob.has_magic(part):
            break
        root.append(part)
    recursive = len(root) < len(parts) - 1
    return (Path(*root) if root else Path(".")), recursive


class _ChangeHandler(FileSystemEventHandler):
    """Wakes the tailer when something under the watched directory changes."""

    def __init__(self, changed: threading.Event):
        super().__init__()
        self.changed = changed

    def on_created(self, event):
        self.changed.set()

    def on_modified(self, event):
        if not event.is_directory:
            self.changed.set()

    def on_moved(self, event):
        self.changed.set()

    def on_deleted(self, event):
        self.changed.set()


class TailFileSource(BaseSource):
    """
    File tailer driven by watchdog.

    A watchdog observer on the glob's base directory wakes the reader on
    every create, modify, move or delete. Each wake re-expands the glob,
    so files created after startup are picked up. Without any event the
    glob is still rescanned every ``poll_interval`` seconds.

    Per file it remembers the read offset, keeps any trailing partial
    line until its newline arrives, and restarts from the top when the
    file shrinks (truncation or rotation in place).

    Files present at startup are read from the end when ``start_at`` is
    "end"; files appearing later are always read from the beginning.

    Example:
        source = GenericLogSource(LogInput(location="/var/log/*.log"), event, counters)
        queue = source.subscribe()
        source.start()
    """

    kind = "logs"
    format_name = "generic"

    def __init__(self, declaration: FileInputDeclaration, cancel_event, counters):
        super().__init__(declaration, cancel_event, counters)
        self.location = declaration.location
        self.start_at = declaration.start_at
        self.poll_interval = declaration.poll_interval
        self.encoding = "utf-8"
        self.errors = "replace"

        self._offsets: dict[Path, int] = {}
        self._partial: dict[Path, bytes] = {}
        self._parsers: dict[Path, BaseParser] = {}
        self._line_numbers: dict[Path, int | None] = {}
        self._first_scan = True

        self._changed = threading.Event()
        self._observer: Observer | None = None

    def default_name(self) -> str:
        return f"{self.kind}:{self.declaration.location}"

    @property
    def watching(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def open(self) -> None:
        root, recursive = watch_root(os.path.expanduser(self.location))
        if not root.is_dir():
            logger.info("%s does not exist yet, rescanning every %.1fs", root, self.poll_interval)
            return

        observer = Observer()
        try:
            observer.schedule(_ChangeHandler(self._changed), str(root), recursive=recursive)
            observer.start()
        except OSError as e:
            logger.warning("Cannot watch %s (%s), rescanning every %.1fs", root, e, self.poll_interval)
            return
        self._observer = observer
        logger.debug("Watching %s%s", root, " recursively" if recursive else "")

    def run(self) -> None:
        while not self.stopping:
            self._changed.clear()
            self.poll()
            self._changed.wait(self.poll_interval)

    def close(self) -> None:
        self._changed.set()
        observer = self._observer
        if observer is None:
            return
        self._observer = None
        observer.stop()
        observer.join(self.join_timeout)

    def matching_files(self) -> list[Path]:
        pattern = os.path.expanduser(self.location)
        return [
            Path(p) for p in sorted(glob.glob(pattern, recursive=True))
            if os.path.isfile(p)
        ]

    def poll(self) -> int:
        """
        Read whatever was appended since the previous poll.

        Returns:
            Number of records emitted
        """
        emitted = 0
        for path in self.matching_files():
            if path not in self._offsets:
                self._track(path)
            emitted += self._read_new_lines(path)
            if self.stopping:
                break
        self._first_scan = False
        return emitted

    def _track(self, path: Path) -> None:
        offset = 0
        if self._first_scan and self.start_at == "end":
            try:
                offset = path.stat().st_size
            except OSError:
                offset = 0

        logger.debug("Tailing %s from offset %d", path, offset)
        self._offsets[path] = offset
        self._partial[path] = b""
        self._parsers[path] = registry.get_parser(self.format_name)
        self._line_numbers[path] = 0 if offset == 0 else None
        if offset:
            self.prime(path, self._parsers[path], offset)

    def prime(self, path: Path, parser: BaseParser, offset: int) -> None:
        """Prepare a parser for a file whose first offset bytes are skipped."""

    def _forget(self, path: Path) -> None:
        for table in (self._offsets, self._partial, self._parsers, self._line_numbers):
            table.pop(path, None)

    def _read_new_lines(self, path: Path) -> int:
        try:
            size = path.stat().st_size
        except OSError:
            logger.debug("Lost %s, forgetting it", path)
            self._forget(path)
            return 0

        offset = self._offsets[path]
        if size < offset:
            logger.info("%s was truncated, reading from the beginning", path)
            self._forget(path)
            self._track(path)
            self._offsets[path] = 0
            self._line_numbers[path] = 0
            offset = 0

        if size == offset:
            return 0

        try:
            with open(path, "rb") as f:
                f.seek(offset)
                data = f.read(size - offset)
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return 0

        self._offsets[path] = offset + len(data)

        chunks = (self._partial[path] + data).split(b"\n")
        self._partial[path] = chunks.pop()

        emitted = 0
        parser = self._parsers[path]
        for chunk in chunks:
            if self._line_numbers[path] is not None:
                self._line_numbers[path] += 1

            line = chunk.decode(self.encoding, errors=self.errors).rstrip("\r")
            if not line.strip():
                continue

            record = parser.parse_line(line)
            if record is None:
                continue

            record.origin.file_path = str(path)
            record.origin.line_number = self._line_numbers[path]
            if not self.emit(record):
                break
            emitted += 1

        return emitted

    def metadata(self) -> dict[str, str]:
        meta = super().metadata()
        meta.update({
            "location": self.location,
            "files": str(len(self._offsets)),
            "format": self.format_name,
        })
        return meta


class JsonLogSource(TailFileSource):
    """Tails JSON lines files."""

    kind = "json_logs"
    format_name = "json"


class IISLogSource(TailFileSource):
    """Tails IIS / W3C extended log files."""

    kind = "iis_logs"
    format_name = "w3c"

    def prime(self, path: Path, parser: BaseParser, offset: int) -> None:
        # Column layout of the lines after offset is set by the last
        # #Fields: directive before it
        directive = None
        position = 0
        try:
            with open(path, "rb") as f:
                for raw in f:
                    position += len(raw)
                    if position > offset:
                        break
                    if raw.startswith(b"#Fields:"):
                        directive = raw
        except OSError as e:
            logger.warning("Cannot read the header of %s: %s", path, e)
            return

        if directive is not None:
            logger.debug("Using %s from %s", directive.strip(), path)
            parser.parse_line(directive.decode(self.encoding, errors=self.errors))


class GenericLogSource(TailFileSource):
    """Tails text log files with any registered format (generic by default)."""

    kind = "logs"

    def __init__(self, declaration, cancel_event, counters):
        super().__init__(declaration, cancel_event, counters)
        self.format_name = declaration.format
