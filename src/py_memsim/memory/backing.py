"""Backing store — the on-disk home of every virtual page.

In a real OS, pages that are not in RAM live in swap space: a disk
partition or a swap file.  Our backing store is a single binary file
holding the whole 64 KB virtual address space::

    offset 0      64     128           65472   65536
           +------+------+--- ... ---+-------+
           | pg 0 | pg 1 |           | pg 1023|
           +------+------+--- ... ---+-------+

Page ``k`` occupies bytes ``[64k, 64k + 64)``.  The file is created and
zero-filled the first time it is needed and is never truncated, so its
contents persist from one simulation run to the next.  A file that is
shorter than 64 KB (an empty placeholder, say) is zero-extended to full
size; one that is longer is not a backing store and is refused.

Every operation opens the file, does its work, and closes it again.
Failures to open it surface as ``IOFaultError``.
"""

from collections.abc import Iterable
from enum import StrEnum
from pathlib import Path

from py_memsim.memory.address import NUM_PAGES, PAGE_SIZE

STORE_SIZE = NUM_PAGES * PAGE_SIZE


class IOFaultError(Exception):
    """Raised when a trace or backing store file cannot be accessed."""


class StoreStatus(StrEnum):
    """What ``ensure_initialized`` had to do to the store file."""

    CREATED = "created"
    EXTENDED = "extended"
    READY = "ready"


class BackingStore:
    """Persistent page storage addressed by global page id."""

    def __init__(self, path: Path) -> None:
        """Create a handle on the backing store file at *path*.

        The file is not touched until ``ensure_initialized`` or an
        I/O operation is called.
        """
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Return the backing store file path."""
        return self._path

    def ensure_initialized(self) -> StoreStatus:
        """Make sure the file exists and holds exactly 1024 pages.

        A missing file is created with 1024 zero pages.  A short file
        is padded with zeros up to full size; existing bytes are kept.

        Returns:
            Whether the file was created, extended, or already whole.

        Raises:
            IOFaultError: If the file cannot be created or extended, or
                is larger than a backing store can be.

        """
        try:
            if not self._path.exists():
                with self._path.open("wb") as fh:
                    fh.write(bytes(STORE_SIZE))
                return StoreStatus.CREATED
            size = self._path.stat().st_size
            if size > STORE_SIZE:
                msg = f"Backing store {self._path} is {size} bytes, expected {STORE_SIZE}"
                raise IOFaultError(msg)
            if size == STORE_SIZE:
                return StoreStatus.READY
            with self._path.open("ab") as fh:
                fh.write(bytes(STORE_SIZE - size))
        except OSError as exc:
            msg = f"Cannot prepare backing store {self._path}: {exc}"
            raise IOFaultError(msg) from exc
        return StoreStatus.EXTENDED

    def read_page(self, page_id: int) -> bytes:
        """Return the 64 bytes stored for *page_id*.

        Raises:
            ValueError: If *page_id* is outside ``[0, 1024)``.
            IOFaultError: If the file cannot be opened or ends before
                the page does.

        """
        _check_page_id(page_id)
        try:
            with self._path.open("rb") as fh:
                fh.seek(page_id * PAGE_SIZE)
                data = fh.read(PAGE_SIZE)
        except OSError as exc:
            msg = f"Cannot read page {page_id} from {self._path}: {exc}"
            raise IOFaultError(msg) from exc
        if len(data) != PAGE_SIZE:
            msg = f"Backing store {self._path} is truncated: page {page_id} has {len(data)} of {PAGE_SIZE} bytes"
            raise IOFaultError(msg)
        return data

    def write_page(self, page_id: int, data: bytes) -> None:
        """Overwrite the stored contents of *page_id*.

        Raises:
            ValueError: If *page_id* is out of range or *data* is not 64 bytes.
            IOFaultError: If the file cannot be opened.

        """
        self.flush([(page_id, data)])

    def flush(self, pages: Iterable[tuple[int, bytes]]) -> int:
        """Write a batch of ``(page_id, data)`` pairs in a single open.

        Returns:
            The number of pages written.

        Raises:
            ValueError: If any page id or data length is invalid.
            IOFaultError: If the file cannot be opened.

        """
        batch = list(pages)
        for page_id, data in batch:
            _check_page_id(page_id)
            if len(data) != PAGE_SIZE:
                msg = f"Page data must be {PAGE_SIZE} bytes, got {len(data)}"
                raise ValueError(msg)
        try:
            with self._path.open("r+b") as fh:
                for page_id, data in batch:
                    fh.seek(page_id * PAGE_SIZE)
                    fh.write(data)
        except OSError as exc:
            msg = f"Cannot write to backing store {self._path}: {exc}"
            raise IOFaultError(msg) from exc
        return len(batch)


def _check_page_id(page_id: int) -> None:
    if not 0 <= page_id < NUM_PAGES:
        msg = f"Page id {page_id} outside backing store (0-{NUM_PAGES - 1})"
        raise ValueError(msg)
