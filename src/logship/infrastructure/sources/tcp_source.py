"""
TCP listener source.

Accepts newline-delimited records on a TCP port, one thread per connection.
"""

import logging
import socket
import socketserver
import threading

from logship.config.models import TcpInput
from logship.infrastructure.sources.base import BaseSource

__all__ = ["TcpSource", "MAX_LINE_LENGTH"]

logger = logging.getLogger(__name__)

MAX_LINE_LENGTH = 1024 * 1024


class _LineHandler(socketserver.StreamRequestHandler):
    """Reads lines from one client until it disconnects or the source stops."""

    def handle(self) -> None:
        source: "TcpSource" = self.server.source
        host, port = self.client_address[:2]
        peer = f"{host}:{port}"

        source._register(self.connection)
        logger.debug("TCP connection from %s on %s", peer, source.name)
        try:
            while not source.stopping:
                try:
                    raw = self.rfile.readline(source.max_line_length)
                except OSError:
                    break
                if not raw:
                    break

                if len(raw) >= source.max_line_length and not raw.endswith(b"\n"):
                    logger.warning(
                        "Discarding a line longer than %d bytes from %s on %s",
                        source.max_line_length, peer, source.name,
                    )
                    if not self._skip_line(source.max_line_length):
                        break
                    continue

                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                record = source.parse_text_line(line)
                if record is None:
                    continue
                record.origin.peer = peer
                if not source.emit(record):
                    break
        finally:
            source._unregister(self.connection)
            logger.debug("TCP connection from %s closed", peer)

    def _skip_line(self, chunk_size: int) -> bool:
        """Read up to the next newline; False if the client went away first."""
        while True:
            try:
                chunk = self.rfile.readline(chunk_size)
            except OSError:
                return False
            if not chunk:
                return False
            if chunk.endswith(b"\n"):
                return True


class _Server(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address, source: "TcpSource"):
        self.source = source
        super().__init__(address, _LineHandler)


class TcpSource(BaseSource):
    """
    Threaded TCP listener.

    Every open client connection is counted in the shared connection
    counter for as long as it stays open.

    Example:
        source = TcpSource(TcpInput(port=5140), event, counters)
        source.start()
        source.server_address  # ("0.0.0.0", 5140)
    """

    kind = "tcp"

    # Longer lines are discarded whole, never split into several records
    max_line_length: int = MAX_LINE_LENGTH

    def __init__(self, declaration: TcpInput, cancel_event, counters):
        super().__init__(declaration, cancel_event, counters)
        self.host = declaration.host
        self.port = declaration.port
        self._server: _Server | None = None
        self._connections: set[socket.socket] = set()
        self._connections_lock = threading.Lock()

    def default_name(self) -> str:
        return f"tcp:{self.declaration.port}"

    @property
    def server_address(self) -> tuple[str, int] | None:
        if self._server is None:
            return None
        return self._server.server_address[:2]

    def open(self) -> None:
        self._server = _Server((self.host, self.port), self)
        logger.info("Listening for TCP connections on %s:%d", self.host, self.port)

    def run(self) -> None:
        self._server.serve_forever(poll_interval=0.5)

    def close(self) -> None:
        server = self._server
        if server is None:
            return
        if self.running:
            server.shutdown()
        server.server_close()

        with self._connections_lock:
            connections = list(self._connections)
        for connection in connections:
            try:
                connection.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass

    def _register(self, connection: socket.socket) -> None:
        with self._connections_lock:
            self._connections.add(connection)
        self.counters.add_connections(1)

    def _unregister(self, connection: socket.socket) -> None:
        with self._connections_lock:
            self._connections.discard(connection)
        self.counters.add_connections(-1)

    def metadata(self) -> dict[str, str]:
        meta = super().metadata()
        meta.update({
            "host": self.host,
            "port": str(self.port),
            "connections": str(len(self._connections)),
        })
        return meta
