"""Plain-text results — one line per reference, then the fault count.

Each reference produces a line like::

    ADDR:0x0100 PTE1:0x4 PTE2:0x0 offset:0x0 PFN:0x0 PA:0x0000 pgfault

The last field is ``pgfault`` when the reference faulted and a single
blank otherwise.  After the last reference comes one line with the total
number of page faults in decimal.

``format_record`` is pure; ``OutputRecorder`` is the thin I/O wrapper
that writes lines to a text stream as the simulation produces them.
"""

from typing import TextIO

from py_memsim.memory.pager import AccessResult

FAULT_MARKER = "pgfault"


def format_record(result: AccessResult) -> str:
    """Format one access result as an output line (without newline)."""
    marker = FAULT_MARKER if result.was_fault else " "
    return (
        f"ADDR:0x{result.address:04x} "
        f"PTE1:0x{result.outer:01x} "
        f"PTE2:0x{result.inner:01x} "
        f"offset:0x{result.offset:01x} "
        f"PFN:0x{result.frame:x} "
        f"PA:0x{result.physical_address:04x} "
        f"{marker}"
    )


class OutputRecorder:
    """Write formatted results to a text stream."""

    def __init__(self, stream: TextIO) -> None:
        """Create a recorder writing to *stream*."""
        self._stream = stream
        self._count = 0

    @property
    def count(self) -> int:
        """Return the number of records written."""
        return self._count

    def record(self, result: AccessResult) -> None:
        """Write one result line."""
        self._stream.write(format_record(result) + "\n")
        self._count += 1

    def finish(self, fault_count: int) -> None:
        """Write the closing fault-count line."""
        self._stream.write(f"{fault_count}\n")
