"""Page fault handling — resolving one memory reference.

The handler is the MMU and the kernel's fault handler rolled into one.
For every reference it:

    1. Translates the virtual address into table indices and an offset.
    2. Looks the page up.  A valid entry is a **hit**: set its R bit and
       tell the replacement policy.
    3. Otherwise it is a **page fault**.  The page is read from the
       backing store and placed either in a free frame or, when
       physical memory is full, in the frame of a victim chosen by the
       replacement policy.  A modified victim is written back first.
    4. Computes the physical address ``frame * 64 + offset``.
    5. For a write, stores the byte and sets the M bit.

The handler owns the run's page table, physical memory, frame
allocator, and replacement policy.  Between references the set of
pages the policy tracks is always exactly the set of valid entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from py_memsim.logging import Logger, LogLevel
from py_memsim.memory.address import PAGE_SIZE, TranslatedAddress, split_page_id, translate
from py_memsim.memory.backing import BackingStore
from py_memsim.memory.frames import FrameAllocator, PhysicalMemory
from py_memsim.memory.page_table import PageTable
from py_memsim.memory.replacement import ReplacementPolicy

if TYPE_CHECKING:
    from py_memsim.trace import MemoryReference

_SOURCE = "pager"


@dataclass(frozen=True)
class AccessResult:
    """The outcome of one memory reference.

    Attributes:
        address: The virtual address referenced.
        outer: First page-table index (the VPN in flat mode).
        inner: Second page-table index (0 in flat mode).
        offset: Byte offset within the page.
        frame: Physical frame that now holds the page.
        physical_address: ``frame * 64 + offset``.
        was_fault: True if the page was not resident.
        evicted: Page id evicted to make room, if any.
        wrote_back: True if the evicted page was written to the store.

    """

    address: int
    outer: int
    inner: int
    offset: int
    frame: int
    physical_address: int
    was_fault: bool
    evicted: int | None = None
    wrote_back: bool = False


class PageFaultHandler:
    """Resolve memory references against a fixed pool of frames."""

    def __init__(
        self,
        *,
        table: PageTable,
        policy: ReplacementPolicy,
        store: BackingStore,
        frame_count: int,
        logger: Logger | None = None,
    ) -> None:
        """Create a handler with ``frame_count`` empty frames.

        Args:
            table: The page table to resolve references against.
            policy: The replacement policy, built over the same table.
            store: Where pages are loaded from and written back to.
            frame_count: Number of physical frames.
            logger: Optional diagnostic log.

        """
        self._table = table
        self._policy = policy
        self._store = store
        self._allocator = FrameAllocator(frame_count=frame_count)
        self._memory = PhysicalMemory(frame_count=frame_count)
        self._logger = logger or Logger(min_level=LogLevel.INFO)
        self._fault_count = 0
        self._hit_count = 0
        self._eviction_count = 0
        self._writeback_count = 0

    @property
    def table(self) -> PageTable:
        """Return the page table."""
        return self._table

    @property
    def policy(self) -> ReplacementPolicy:
        """Return the replacement policy."""
        return self._policy

    @property
    def memory(self) -> PhysicalMemory:
        """Return physical memory."""
        return self._memory

    @property
    def fault_count(self) -> int:
        """Return the number of page faults so far."""
        return self._fault_count

    @property
    def hit_count(self) -> int:
        """Return the number of hits so far."""
        return self._hit_count

    @property
    def eviction_count(self) -> int:
        """Return the number of evictions so far."""
        return self._eviction_count

    @property
    def writeback_count(self) -> int:
        """Return how many evicted pages were written back."""
        return self._writeback_count

    def handle(self, reference: MemoryReference, *, step: int | None = None) -> AccessResult:
        """Resolve one reference, faulting the page in if needed.

        Args:
            reference: The memory reference.
            step: Trace index, used to tag log entries.

        Returns:
            The frame, physical address, and fault status.

        """
        where = translate(reference.address, self._table.mode)
        page_id = where.page_id
        entry = self._table.lookup(where.outer, where.inner)

        was_fault = not entry.valid
        evicted: int | None = None
        wrote_back = False
        if not was_fault:
            self._hit_count += 1
            self._table.mark_referenced(where.outer, where.inner)
            self._policy.on_access(page_id)
            frame = entry.frame
        else:
            self._fault_count += 1
            frame, evicted, wrote_back = self._fault(where, step=step)

        if reference.is_write:
            assert reference.value is not None  # noqa: S101
            self._memory.write_byte(frame, where.offset, reference.value)
            self._table.mark_modified(where.outer, where.inner)

        return AccessResult(
            address=reference.address,
            outer=where.outer,
            inner=where.inner,
            offset=where.offset,
            frame=frame,
            physical_address=frame * PAGE_SIZE + where.offset,
            was_fault=was_fault,
            evicted=evicted,
            wrote_back=wrote_back,
        )

    def _fault(self, where: TranslatedAddress, *, step: int | None) -> tuple[int, int | None, bool]:
        """Bring a page into memory.

        Returns:
            ``(frame, evicted page or None, whether it was written back)``.

        """
        page_id = where.page_id
        data = self._store.read_page(page_id)
        frame = self._allocator.try_allocate()

        if frame is not None:
            self._memory.load(frame, data)
            self._table.install(where.outer, where.inner, frame)
            self._policy.on_install(page_id)
            self._logger.log(
                LogLevel.DEBUG,
                f"page fault: page {page_id} loaded into free frame {frame}",
                source=_SOURCE,
                step=step,
            )
            return frame, None, False

        victim = self._policy.select_victim()
        victim_entry = self._table.entry_for(victim)
        frame = victim_entry.frame
        wrote_back = victim_entry.modified
        if wrote_back:
            self._store.write_page(victim, self._memory.frame(frame))
            self._writeback_count += 1
        self._memory.load(frame, data)
        self._table.invalidate(*split_page_id(victim, self._table.mode))
        self._table.install(where.outer, where.inner, frame)
        self._policy.replace(victim, page_id)
        self._eviction_count += 1
        self._logger.log(
            LogLevel.DEBUG,
            f"page fault: {self._policy.name} evicted page {victim} from frame {frame}"
            f"{' (written back)' if wrote_back else ''}, loaded page {page_id}",
            source=_SOURCE,
            step=step,
        )
        return frame, victim, wrote_back

    def flush(self) -> int:
        """Write every resident frame back to its page in the store.

        Returns:
            The number of pages written.

        """
        pages = [
            (page_id, self._memory.frame(entry.frame))
            for page_id, entry in sorted(self._table.resident_pages().items())
        ]
        written = self._store.flush(pages)
        self._logger.log(LogLevel.INFO, f"flushed {written} resident pages", source=_SOURCE)
        return written
