"""Memory subsystem — translation, page tables, frames, replacement, and swap.

Re-exports public symbols so callers can write::

    from py_memsim.memory import PageFaultHandler, create_policy
"""

from py_memsim.memory.address import PAGE_SIZE, PagingMode, TranslatedAddress, translate
from py_memsim.memory.backing import BackingStore, IOFaultError, StoreStatus
from py_memsim.memory.frames import FrameAllocator, PhysicalMemory
from py_memsim.memory.page_table import (
    FlatPageTable,
    PageTable,
    PageTableEntry,
    TwoLevelPageTable,
    create_page_table,
)
from py_memsim.memory.pager import AccessResult, PageFaultHandler
from py_memsim.memory.replacement import (
    ClockPolicy,
    EnhancedClockPolicy,
    FIFOPolicy,
    LRUPolicy,
    ReplacementPolicy,
    create_policy,
)

__all__ = [
    "PAGE_SIZE",
    "AccessResult",
    "BackingStore",
    "ClockPolicy",
    "EnhancedClockPolicy",
    "FIFOPolicy",
    "FlatPageTable",
    "FrameAllocator",
    "IOFaultError",
    "LRUPolicy",
    "PageFaultHandler",
    "PageTable",
    "PageTableEntry",
    "PagingMode",
    "PhysicalMemory",
    "ReplacementPolicy",
    "StoreStatus",
    "TranslatedAddress",
    "TwoLevelPageTable",
    "create_page_table",
    "create_policy",
    "translate",
]
