"""Page replacement policies — choosing which resident page to evict.

When every physical frame is in use and a reference faults, the OS
must pick a **victim**: a resident page whose frame the faulting page
will take over.  Each policy tracks the set of resident pages (by
global page id) and decides the victim.

Policies (Strategy pattern, one class per algorithm):
    - **FIFO** — evict the page that was loaded first.  Hits do not
      matter.  Simple, but suffers from Belady's anomaly.
    - **LRU** — evict the page touched longest ago.  Implemented with
      an OrderedDict for O(1) move-to-end on access.
    - **Clock** — second chance.  A hand sweeps a ring of frame slots;
      a page with its R bit set has the bit cleared and is skipped, the
      first page with R=0 is evicted.  The hand also steps forward on
      every hit.
    - **Enhanced Clock** — second chance over (R, M) classes.  Prefer
      a page that is neither referenced nor modified (no writeback
      needed), then one that is modified but not referenced, clearing
      R bits along the way, then repeat both searches once more.

Clock and Enhanced Clock read and clear the R/M bits directly in the
page table, so the periodic aging in the simulation loop is visible to
them.  The ring slot of a page is the frame it occupies: frames are
handed out in order, and an incoming page always takes over both the
victim's frame and its slot.

Every policy follows the same lifecycle:
    1. ``on_install(page)`` — the page was loaded into a free frame.
    2. ``on_access(page)`` — the resident page was hit.
    3. ``select_victim()`` — all frames are full; pick a page.  Does
       not change the tracked set.
    4. ``replace(victim, page)`` — the victim was evicted and *page*
       took over its frame.
"""

from collections import OrderedDict
from typing import Protocol

from py_memsim.config import ConfigError, PolicyName
from py_memsim.memory.page_table import PageTable

# ---------------------------------------------------------------------------
# Replacement Policy Protocol (Strategy pattern)
# ---------------------------------------------------------------------------


class ReplacementPolicy(Protocol):
    """Interface for page replacement algorithms."""

    name: PolicyName

    @property
    def tracked(self) -> frozenset[int]:
        """Return the page ids the policy considers resident."""
        ...

    def on_install(self, page_id: int) -> None:
        """Record that a page was loaded into a free frame."""
        ...

    def on_access(self, page_id: int) -> None:
        """Record a hit on a resident page."""
        ...

    def select_victim(self) -> int:
        """Choose which resident page to evict.

        Raises:
            IndexError: If no pages are tracked.

        """
        ...

    def replace(self, victim: int, page_id: int) -> None:
        """Swap the evicted *victim* for the page that took its frame."""
        ...


def _no_pages() -> IndexError:
    return IndexError("No pages to evict")


# ---------------------------------------------------------------------------
# FIFO Policy
# ---------------------------------------------------------------------------


class FIFOPolicy:
    """First In, First Out — evict the oldest loaded page.

    Uses a list as a queue.  The first element is always the oldest.
    """

    name = PolicyName.FIFO

    def __init__(self) -> None:
        """Create an empty FIFO policy."""
        self._queue: list[int] = []

    @property
    def tracked(self) -> frozenset[int]:
        """Return the queued page ids."""
        return frozenset(self._queue)

    @property
    def queue(self) -> list[int]:
        """Return the load order, oldest first."""
        return list(self._queue)

    def on_install(self, page_id: int) -> None:
        """Append a newly loaded page to the back of the queue."""
        if page_id in self._queue:
            msg = f"Page {page_id} is already tracked"
            raise ValueError(msg)
        self._queue.append(page_id)

    def on_access(self, page_id: int) -> None:
        """FIFO ignores accesses — order is purely by load time."""

    def select_victim(self) -> int:
        """Return the oldest page (front of the queue)."""
        if not self._queue:
            raise _no_pages()
        return self._queue[0]

    def replace(self, victim: int, page_id: int) -> None:
        """Drop the victim and queue the new page at the back."""
        self._queue.remove(victim)
        self._queue.append(page_id)


# ---------------------------------------------------------------------------
# LRU Policy
# ---------------------------------------------------------------------------


class LRUPolicy:
    """Least Recently Used — evict the page accessed longest ago.

    The first key of the OrderedDict is always the least recently used;
    the last is the most recent.
    """

    name = PolicyName.LRU

    def __init__(self) -> None:
        """Create an empty LRU policy."""
        self._order: OrderedDict[int, None] = OrderedDict()

    @property
    def tracked(self) -> frozenset[int]:
        """Return the tracked page ids."""
        return frozenset(self._order)

    @property
    def recency(self) -> list[int]:
        """Return page ids from most to least recently used."""
        return list(reversed(self._order))

    def on_install(self, page_id: int) -> None:
        """Record a newly loaded page as the most recently used."""
        self._touch(page_id)

    def on_access(self, page_id: int) -> None:
        """Move the page to the most recently used position."""
        self._touch(page_id)

    def select_victim(self) -> int:
        """Return the least recently used page."""
        if not self._order:
            raise _no_pages()
        return next(iter(self._order))

    def replace(self, victim: int, page_id: int) -> None:
        """Forget the victim and record the new page as most recent."""
        self._order.pop(victim, None)
        self._touch(page_id)

    def _touch(self, page_id: int) -> None:
        self._order[page_id] = None
        self._order.move_to_end(page_id)


# ---------------------------------------------------------------------------
# Clock Policies
# ---------------------------------------------------------------------------


class _RingPolicy:
    """A ring of frame slots and a hand, shared by both clock variants."""

    def __init__(self, table: PageTable, *, frame_count: int) -> None:
        self._table = table
        self._frame_count = frame_count
        self._ring: list[int] = []
        self._hand = 0

    @property
    def tracked(self) -> frozenset[int]:
        """Return the page ids in the ring."""
        return frozenset(self._ring)

    @property
    def ring(self) -> list[int]:
        """Return the ring contents in slot order."""
        return list(self._ring)

    @property
    def hand(self) -> int:
        """Return the slot the hand points at."""
        return self._hand

    def on_install(self, page_id: int) -> None:
        """Place a newly loaded page in the next empty slot.

        Raises:
            ValueError: If the page is already in the ring or the ring is full.

        """
        if page_id in self._ring:
            msg = f"Page {page_id} is already tracked"
            raise ValueError(msg)
        if len(self._ring) >= self._frame_count:
            msg = f"Clock ring is full ({self._frame_count} slots)"
            raise ValueError(msg)
        self._ring.append(page_id)

    def replace(self, victim: int, page_id: int) -> None:
        """Put the new page in the victim's slot."""
        self._ring[self._ring.index(victim)] = page_id

    def _advance(self) -> None:
        self._hand = (self._hand + 1) % self._frame_count

    def _require_full(self) -> None:
        if not self._ring:
            raise _no_pages()
        if len(self._ring) < self._frame_count:
            msg = f"Clock ring has free slots ({len(self._ring)} of {self._frame_count} used)"
            raise IndexError(msg)


class ClockPolicy(_RingPolicy):
    """Second Chance (Clock) — approximate LRU with reference bits.

    The hand steps one slot on every hit as well as during the victim
    sweep.
    """

    name = PolicyName.CLOCK

    def on_access(self, page_id: int) -> None:
        """Step the hand forward one slot."""
        self._advance()

    def select_victim(self) -> int:
        """Sweep the hand until a page with R=0 is found.

        Pages with R=1 get their bit cleared and a second chance.  The
        hand is left one slot past the victim.  Terminates within two
        rotations: the first clears every R bit it passes.
        """
        self._require_full()
        while True:
            page = self._ring[self._hand]
            entry = self._table.entry_for(page)
            self._advance()
            if not entry.referenced:
                return page
            entry.referenced = False


class EnhancedClockPolicy(_RingPolicy):
    """Enhanced Second Chance — classify pages by (R, M).

    Up to four bounded sweeps from the current hand, each inspected
    slot moving the hand one step:

        1. ``n`` slots looking for (0, 0).
        2. ``n`` slots looking for (0, 1); clear R on every R=1 page.
        3. ``n - 1`` slots looking for (0, 0).
        4. ``n - 1`` slots looking for (0, 1).

    After pass 2 every R bit is clear, so pass 3 or 4 always succeeds.
    Hits do not move the hand.
    """

    name = PolicyName.ENHANCED_CLOCK

    def on_access(self, page_id: int) -> None:
        """Hits are recorded in the page table's R bit only."""

    def select_victim(self) -> int:
        """Run the four sweeps and return the first matching page."""
        self._require_full()
        n = len(self._ring)
        passes = (
            (n, False, False),
            (n, True, True),
            (n - 1, False, False),
            (n - 1, True, False),
        )
        for limit, want_modified, second_chance in passes:
            victim = self._sweep(limit, want_modified=want_modified, second_chance=second_chance)
            if victim is not None:
                return victim
        msg = "Enhanced clock sweep found no victim"
        raise RuntimeError(msg)

    def _sweep(self, limit: int, *, want_modified: bool, second_chance: bool) -> int | None:
        for _ in range(limit):
            page = self._ring[self._hand]
            entry = self._table.entry_for(page)
            self._advance()
            if not entry.referenced and entry.modified == want_modified:
                return page
            if second_chance and entry.referenced:
                entry.referenced = False
        return None


def create_policy(
    name: PolicyName | str,
    *,
    table: PageTable,
    frame_count: int,
) -> ReplacementPolicy:
    """Build a replacement policy by name.

    Raises:
        ConfigError: If the name matches no policy.

    """
    policy = name if isinstance(name, PolicyName) else PolicyName.parse(name)
    match policy:
        case PolicyName.FIFO:
            return FIFOPolicy()
        case PolicyName.LRU:
            return LRUPolicy()
        case PolicyName.CLOCK:
            return ClockPolicy(table, frame_count=frame_count)
        case PolicyName.ENHANCED_CLOCK:
            return EnhancedClockPolicy(table, frame_count=frame_count)
    msg = f"Unknown replacement policy {name!r}"
    raise ConfigError(msg)
