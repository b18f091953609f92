"""Page tables — flat and two-level.

The MMU consults the page table on every memory access.  Each entry
records where a page lives and a few status bits:

    - **frame** — the physical frame holding the page (if valid).
    - **referenced (R)** — set on every access, cleared periodically.
    - **modified (M)** — set on every write; a modified page must be
      written back before its frame is reused.
    - **valid (V)** — the page is resident in physical memory.

Two layouts are supported:

    - **FlatPageTable** — one array of 1024 entries indexed by VPN.
    - **TwoLevelPageTable** — an outer array of 32 slots, each pointing
      to an inner array of 32 entries.  Inner tables are allocated the
      first time any address in their 2 KB region is referenced, which
      is how real two-level tables save memory for sparse address
      spaces.

Both expose the same operations addressed by ``(outer, inner)``, plus
``entry_for(page_id)`` so replacement policies can inspect R/M bits by
global page id without caring about the layout.
"""

from collections.abc import Iterator
from dataclasses import dataclass

from py_memsim.memory.address import (
    NUM_PAGES,
    TABLE_FANOUT,
    PagingMode,
    page_id_for,
    split_page_id,
)


@dataclass(slots=True)
class PageTableEntry:
    """One page-table entry.  ``frame`` is meaningless unless ``valid``."""

    frame: int = 0
    referenced: bool = False
    modified: bool = False
    valid: bool = False


class PageTable:
    """Operations shared by both page-table layouts.

    Subclasses provide ``lookup`` and ``_entries`` (every allocated
    entry with its global page id); everything else is built on them.
    """

    mode: PagingMode

    def lookup(self, outer: int, inner: int = 0) -> PageTableEntry:
        """Return the entry for ``(outer, inner)``."""
        raise NotImplementedError

    def _entries(self) -> Iterator[tuple[int, PageTableEntry]]:
        raise NotImplementedError

    def entry_for(self, page_id: int) -> PageTableEntry:
        """Return the entry for a global page id."""
        outer, inner = split_page_id(page_id, self.mode)
        return self.lookup(outer, inner)

    def install(self, outer: int, inner: int, frame: int) -> None:
        """Map a page to *frame*: referenced, clean, and valid."""
        entry = self.lookup(outer, inner)
        entry.frame = frame
        entry.referenced = True
        entry.modified = False
        entry.valid = True

    def invalidate(self, outer: int, inner: int = 0) -> None:
        """Mark a page as no longer resident."""
        self.lookup(outer, inner).valid = False

    def mark_referenced(self, outer: int, inner: int = 0) -> None:
        """Set a page's R bit."""
        self.lookup(outer, inner).referenced = True

    def mark_modified(self, outer: int, inner: int = 0) -> None:
        """Set a page's M bit."""
        self.lookup(outer, inner).modified = True

    def clear_all_referenced(self) -> None:
        """Clear the R bit of every allocated entry (aging)."""
        for _, entry in self._entries():
            entry.referenced = False

    def resident_pages(self) -> dict[int, PageTableEntry]:
        """Return ``{page_id: entry}`` for every valid entry."""
        return {page_id: entry for page_id, entry in self._entries() if entry.valid}


class FlatPageTable(PageTable):
    """A single array of 1024 entries indexed by VPN."""

    mode = PagingMode.FLAT

    def __init__(self) -> None:
        """Create a table of 1024 invalid entries."""
        self._table = [PageTableEntry() for _ in range(NUM_PAGES)]

    def lookup(self, outer: int, inner: int = 0) -> PageTableEntry:
        """Return the entry for VPN *outer*; *inner* is ignored."""
        return self._table[outer]

    def _entries(self) -> Iterator[tuple[int, PageTableEntry]]:
        yield from enumerate(self._table)


class TwoLevelPageTable(PageTable):
    """An outer directory of 32 lazily allocated inner tables."""

    mode = PagingMode.TWO_LEVEL

    def __init__(self) -> None:
        """Create an empty outer directory."""
        self._directory: list[list[PageTableEntry] | None] = [None] * TABLE_FANOUT

    @property
    def allocated_tables(self) -> list[int]:
        """Return the outer indices whose inner table exists."""
        return [i for i, table in enumerate(self._directory) if table is not None]

    def lookup(self, outer: int, inner: int = 0) -> PageTableEntry:
        """Return the entry, allocating its inner table on first use."""
        table = self._directory[outer]
        if table is None:
            table = [PageTableEntry() for _ in range(TABLE_FANOUT)]
            self._directory[outer] = table
        return table[inner]

    def _entries(self) -> Iterator[tuple[int, PageTableEntry]]:
        for outer, table in enumerate(self._directory):
            if table is None:
                continue
            for inner, entry in enumerate(table):
                yield page_id_for(outer, inner, self.mode), entry


def create_page_table(mode: PagingMode) -> PageTable:
    """Build the page table for a paging mode."""
    if mode is PagingMode.FLAT:
        return FlatPageTable()
    return TwoLevelPageTable()
