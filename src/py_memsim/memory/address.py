"""Address translation — splitting a virtual address into its parts.

The simulated machine has a 16-bit virtual address space carved into
64-byte pages::

    15            6 5      0
    +--------------+--------+
    |     VPN      | offset |      flat (1-level) table
    +--------------+--------+

    15      11 10    6 5      0
    +---------+-------+--------+
    |  outer  | inner | offset |   two-level table
    +---------+-------+--------+

The 10-bit virtual page number (VPN) selects one of 1024 pages.  In
two-level mode it is further split into a 5-bit outer index (which
inner table) and a 5-bit inner index (which entry in it).

Every page also has a **global page id** in ``[0, 1024)`` — just the
VPN — which is how the backing store and the replacement policies name
it regardless of the table layout.
"""

from dataclasses import dataclass
from enum import IntEnum

PAGE_SIZE = 64
NUM_PAGES = 1024
OFFSET_BITS = 6
INNER_BITS = 5
OFFSET_MASK = PAGE_SIZE - 1
INNER_MASK = (1 << INNER_BITS) - 1
TABLE_FANOUT = 1 << INNER_BITS


class PagingMode(IntEnum):
    """Page-table depth."""

    FLAT = 1
    TWO_LEVEL = 2


@dataclass(frozen=True)
class TranslatedAddress:
    """The page-table indices and byte offset of a virtual address.

    Attributes:
        outer: Flat-mode VPN, or the outer-table index in two-level mode.
        inner: Inner-table index (always 0 in flat mode).
        offset: Byte offset within the page.
        mode: The paging mode the indices were computed for.

    """

    outer: int
    inner: int
    offset: int
    mode: PagingMode

    @property
    def page_id(self) -> int:
        """Return the global page id (the VPN) in ``[0, 1024)``."""
        return page_id_for(self.outer, self.inner, self.mode)


def page_id_for(outer: int, inner: int, mode: PagingMode) -> int:
    """Combine table indices back into a global page id."""
    if mode is PagingMode.FLAT:
        return outer
    return (outer << INNER_BITS) | inner


def split_page_id(page_id: int, mode: PagingMode) -> tuple[int, int]:
    """Return the ``(outer, inner)`` indices for a global page id."""
    if mode is PagingMode.FLAT:
        return page_id, 0
    return page_id >> INNER_BITS, page_id & INNER_MASK


def translate(address: int, mode: PagingMode) -> TranslatedAddress:
    """Split a 16-bit virtual address for the given paging mode."""
    vpn = address >> OFFSET_BITS
    outer, inner = split_page_id(vpn, mode)
    return TranslatedAddress(outer=outer, inner=inner, offset=address & OFFSET_MASK, mode=mode)
