"""The simulation loop — replaying a trace against the memory system.

``SimulationClock`` plays the role of the hardware timer.  References
are processed strictly in trace order; before reference ``i`` (for
``i > 0``) the clock checks whether ``i`` is a multiple of the tick
period and, if so, clears every R bit in the page table.  This aging is
what lets Clock and Enhanced Clock tell recently used pages from pages
that were only used long ago.

``Simulation`` wires a complete run together from a ``SimulationConfig``:
it prepares the backing store, builds the page table, policy and fault
handler, replays the trace, writes the output file, and finally flushes
resident frames back to the store.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from py_memsim.config import SimulationConfig
from py_memsim.logging import Logger, LogLevel
from py_memsim.memory.address import PagingMode
from py_memsim.memory.backing import BackingStore, IOFaultError, StoreStatus
from py_memsim.memory.page_table import create_page_table
from py_memsim.memory.pager import AccessResult, PageFaultHandler
from py_memsim.memory.replacement import create_policy
from py_memsim.output import OutputRecorder
from py_memsim.trace import MemoryReference, load_trace


@dataclass
class SimulationResult:
    """Everything a finished run produced."""

    records: list[AccessResult] = field(default_factory=list)
    fault_count: int = 0
    hit_count: int = 0
    eviction_count: int = 0
    writeback_count: int = 0


class SimulationClock:
    """Drive references through a fault handler, aging R bits every tick."""

    def __init__(self, handler: PageFaultHandler, *, tick: int, logger: Logger | None = None) -> None:
        """Create a clock that ages the handler's table every *tick* references."""
        self._handler = handler
        self._tick = tick
        self._logger = logger or Logger(min_level=LogLevel.INFO)

    def run(
        self,
        references: Iterable[MemoryReference],
        recorder: OutputRecorder | None = None,
    ) -> SimulationResult:
        """Process every reference in order.

        Args:
            references: The trace, in order.
            recorder: If given, receives each result as it is produced.

        Returns:
            The per-reference records and the run's counters.

        """
        result = SimulationResult()
        for i, ref in enumerate(references):
            if i != 0 and i % self._tick == 0:
                self._handler.table.clear_all_referenced()
                self._logger.log(LogLevel.DEBUG, "cleared reference bits", source="clock", step=i)
            record = self._handler.handle(ref, step=i)
            result.records.append(record)
            if recorder is not None:
                recorder.record(record)

        result.fault_count = self._handler.fault_count
        result.hit_count = self._handler.hit_count
        result.eviction_count = self._handler.eviction_count
        result.writeback_count = self._handler.writeback_count
        return result


def build_handler(
    *,
    levels: int,
    frame_count: int,
    policy: str,
    store: BackingStore,
    logger: Logger | None = None,
) -> PageFaultHandler:
    """Assemble a page table, policy and fault handler for one run."""
    table = create_page_table(PagingMode(levels))
    return PageFaultHandler(
        table=table,
        policy=create_policy(policy, table=table, frame_count=frame_count),
        store=store,
        frame_count=frame_count,
        logger=logger,
    )


def simulate(
    references: Iterable[MemoryReference],
    *,
    levels: int,
    frame_count: int,
    policy: str,
    tick: int,
    store: BackingStore,
    recorder: OutputRecorder | None = None,
    logger: Logger | None = None,
) -> SimulationResult:
    """Replay *references* and flush the final memory state to *store*.

    The store is created and zero-filled first if it does not exist, or
    zero-extended to full size if it is short.
    """
    logger = logger or Logger(min_level=LogLevel.INFO)
    match store.ensure_initialized():
        case StoreStatus.CREATED:
            logger.log(LogLevel.INFO, f"created backing store {store.path}", source="backing")
        case StoreStatus.EXTENDED:
            logger.log(LogLevel.WARNING, f"zero-extended short backing store {store.path}", source="backing")
    handler = build_handler(
        levels=levels,
        frame_count=frame_count,
        policy=policy,
        store=store,
        logger=logger,
    )
    result = SimulationClock(handler, tick=tick, logger=logger).run(references, recorder)
    handler.flush()
    logger.log(
        LogLevel.INFO,
        f"{len(result.records)} references, {result.fault_count} faults, "
        f"{result.eviction_count} evictions, {result.writeback_count} writebacks",
        source="clock",
    )
    return result


class Simulation:
    """A complete run described by a ``SimulationConfig``."""

    def __init__(self, config: SimulationConfig, *, logger: Logger | None = None) -> None:
        """Prepare a run; nothing is read or written until ``run``."""
        self._config = config
        self._logger = logger or Logger(min_level=LogLevel.INFO)

    @property
    def logger(self) -> Logger:
        """Return the run's diagnostic log."""
        return self._logger

    def run(self) -> SimulationResult:
        """Replay the trace and write the output file.

        Raises:
            ConfigError: If the trace is malformed.
            IOFaultError: If a file cannot be read or written.

        """
        config = self._config
        references = load_trace(config.trace_path)
        self._logger.log(
            LogLevel.INFO,
            f"{config.policy} with {config.frame_count} frames, "
            f"{config.levels}-level page table, tick {config.tick}",
            source="clock",
        )
        try:
            with config.output_path.open("w") as out:
                recorder = OutputRecorder(out)
                result = simulate(
                    references,
                    levels=config.levels,
                    frame_count=config.frame_count,
                    policy=config.policy,
                    tick=config.tick,
                    store=BackingStore(config.backing_store_path),
                    recorder=recorder,
                    logger=self._logger,
                )
                recorder.finish(result.fault_count)
        except OSError as exc:
            msg = f"Cannot write output file {config.output_path}: {exc}"
            raise IOFaultError(msg) from exc
        return result
