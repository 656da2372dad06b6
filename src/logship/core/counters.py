"""
Throughput counters shared by every source of a pipeline.
"""

import threading

__all__ = ["ProcessCounters"]


class ProcessCounters:
    """
    Active connection count and total record count for one pipeline.

    One instance is created per orchestrator and handed to every source,
    so several pipelines in the same process (tests, embedding) never
    share totals.

    Example:
        counters = ProcessCounters()
        counters.add_messages()
        counters.add_connections(1)
        counters.messages  # 1
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._connections = 0
        self._messages = 0

    @property
    def connections(self) -> int:
        """Number of currently open network connections."""
        return self._connections

    @property
    def messages(self) -> int:
        """Total number of records observed."""
        return self._messages

    def add_connections(self, count: int = 1) -> int:
        """
        Add to the connection counter (negative to release).

        Returns:
            The new value
        """
        with self._lock:
            self._connections += count
            return self._connections

    def add_messages(self, count: int = 1) -> int:
        """
        Add to the record counter.

        Returns:
            The new value
        """
        with self._lock:
            self._messages += count
            return self._messages

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {
                "connections": self._connections,
                "messages": self._messages,
            }

    def __repr__(self) -> str:
        return f"ProcessCounters(connections={self._connections}, messages={self._messages})"
