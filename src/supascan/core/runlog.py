"""Human-readable audit log for a single run.

Every component receives the log explicitly instead of writing to a global.
The CLI echoes lines to the console as they arrive; programmatic callers
read `lines` once the run has finished.
"""

from __future__ import annotations

import threading
from typing import Callable, Protocol


class LogSink(Protocol):
    """Interface for anything that accepts audit log lines."""

    def append(self, message: str) -> None:
        """Record one log line."""
        ...


class RunLog:
    """Append-only, thread-safe log with optional live echo."""

    def __init__(self, echo: Callable[[str], None] | None = None) -> None:
        self._lines: list[str] = []
        self._echo = echo
        self._lock = threading.Lock()

    def append(self, message: str) -> None:
        """Record a line and forward it to the echo callback, if any."""
        with self._lock:
            self._lines.append(message)
            if self._echo is not None:
                self._echo(message)

    @property
    def lines(self) -> tuple[str, ...]:
        """Snapshot of all lines recorded so far."""
        with self._lock:
            return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)
