"""Memory reference traces.

A trace is a text file with one memory reference per line::

    r 0x3f20
    w 0x0041 0x7a

``r <address>`` reads a byte, ``w <address> <value>`` writes one.  Both
fields are hexadecimal, with or without a ``0x`` prefix.  Addresses are
16-bit; values are single bytes.  Blank lines are ignored.

Any other line is a configuration error: the run is refused rather
than replaying a trace that does not mean what its author intended.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from py_memsim.config import ConfigError
from py_memsim.memory.backing import IOFaultError

MAX_ADDRESS = 0xFFFF
MAX_VALUE = 0xFF


class AccessKind(StrEnum):
    """Whether a reference reads or writes memory."""

    READ = "r"
    WRITE = "w"


@dataclass(frozen=True)
class MemoryReference:
    """One entry of a trace.

    Attributes:
        kind: Read or write.
        address: The 16-bit virtual address.
        value: The byte to store (writes only).

    """

    kind: AccessKind
    address: int
    value: int | None = None

    @property
    def is_write(self) -> bool:
        """Return True for a write reference."""
        return self.kind is AccessKind.WRITE


def _parse_hex(text: str, *, limit: int, what: str, line_no: int) -> int:
    try:
        number = int(text, 16)
    except ValueError:
        msg = f"Line {line_no}: {what} {text!r} is not hexadecimal"
        raise ConfigError(msg) from None
    if not 0 <= number <= limit:
        msg = f"Line {line_no}: {what} {text} out of range (max 0x{limit:x})"
        raise ConfigError(msg)
    return number


def parse_line(line: str, *, line_no: int = 1) -> MemoryReference | None:
    """Parse one trace line.

    Returns:
        The reference, or None for a blank line.

    Raises:
        ConfigError: If the line is malformed.

    """
    fields = line.split()
    if not fields:
        return None
    kind, *args = fields
    if kind == AccessKind.READ and len(args) == 1:
        address = _parse_hex(args[0], limit=MAX_ADDRESS, what="address", line_no=line_no)
        return MemoryReference(kind=AccessKind.READ, address=address)
    if kind == AccessKind.WRITE and len(args) == 2:  # noqa: PLR2004
        address = _parse_hex(args[0], limit=MAX_ADDRESS, what="address", line_no=line_no)
        value = _parse_hex(args[1], limit=MAX_VALUE, what="value", line_no=line_no)
        return MemoryReference(kind=AccessKind.WRITE, address=address, value=value)
    msg = f"Line {line_no}: malformed reference {line.strip()!r}"
    raise ConfigError(msg)


def parse_trace(lines: Iterable[str]) -> list[MemoryReference]:
    """Parse every line of a trace, skipping blanks.

    Raises:
        ConfigError: On the first malformed line.

    """
    references: list[MemoryReference] = []
    for line_no, line in enumerate(lines, start=1):
        ref = parse_line(line, line_no=line_no)
        if ref is not None:
            references.append(ref)
    return references


def load_trace(path: Path) -> list[MemoryReference]:
    """Read and parse a trace file.

    Raises:
        IOFaultError: If the file cannot be read.
        ConfigError: If the file is not text or any line is malformed.

    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Trace file {path} is not valid text: {exc}"
        raise ConfigError(msg) from exc
    except OSError as exc:
        msg = f"Cannot read trace file {path}: {exc}"
        raise IOFaultError(msg) from exc
    return parse_trace(text.splitlines())
