"""Simulation diagnostic log.

The simulator records what happened on every interesting step of a
run: page faults, evictions, writebacks to the backing store, and the
periodic clearing of reference bits.  The trace itself produces only
the terse output lines; this log is the human-readable companion.

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source, step).
- **Logger** — an append-only log with a level threshold and filtering.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **In-memory buffer** — the core never prints; callers decide
      whether and where to show the log (the CLI writes it to stderr).
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "pager").
        step: Index of the trace reference being processed, if any.

    """

    level: LogLevel
    message: str
    source: str
    step: int | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message`` with an optional step."""
        prefix = f"[{self.level.name}] {self.source}"
        if self.step is not None:
            prefix += f" #{self.step}"
        return f"{prefix}: {self.message}"


class Logger:
    """Append-only log buffer with a severity threshold and filtering.

    Entries below ``min_level`` are discarded as they are logged, so a
    run that will never show its DEBUG trail does not keep one entry per
    page fault in memory.
    """

    def __init__(self, *, min_level: LogLevel = LogLevel.DEBUG) -> None:
        """Create an empty logger that keeps entries at or above *min_level*."""
        self._min_level = min_level
        self._entries: list[LogEntry] = []

    @property
    def min_level(self) -> LogLevel:
        """Return the lowest level this logger keeps."""
        return self._min_level

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        step: int | None = None,
    ) -> None:
        """Append a new entry to the log, unless it is below the threshold.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.
            step: Trace index associated with the event.

        """
        if level < self._min_level:
            return
        self._entries.append(LogEntry(level=level, message=message, source=source, step=step))

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result if result is not self._entries else list(result)
