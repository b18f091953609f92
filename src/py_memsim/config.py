"""Simulation configuration — validated run parameters.

A run is fully described by seven values: the page-table depth, the
trace to replay, the backing store file, the number of physical frames,
the replacement policy, the aging period, and where to write the
output.  ``SimulationConfig`` validates them once, up front, so the
engine never has to second-guess its inputs.

Every invalid value raises ``ConfigError``.  Configuration errors are
fatal: the simulation never starts.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

MIN_FRAMES = 4
MAX_FRAMES = 128
PAGE_TABLE_LEVELS = (1, 2)


class ConfigError(Exception):
    """Raised when a run parameter or trace line is invalid."""


class PolicyName(StrEnum):
    """Names of the supported page replacement policies."""

    FIFO = "FIFO"
    LRU = "LRU"
    CLOCK = "CLOCK"
    ENHANCED_CLOCK = "ENHANCED_CLOCK"

    @classmethod
    def parse(cls, text: str) -> "PolicyName":
        """Resolve a policy name, case-insensitively.

        ``ECLOCK`` is accepted as a short alias for ``ENHANCED_CLOCK``.

        Raises:
            ConfigError: If the name matches no policy.

        """
        key = text.strip().upper().replace("-", "_")
        if key == "ECLOCK":
            return cls.ENHANCED_CLOCK
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            msg = f"Unknown replacement policy {text!r} (expected one of {choices}, or ECLOCK)"
            raise ConfigError(msg) from None


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters for a single simulation run.

    Attributes:
        levels: Page-table depth, 1 (flat) or 2 (two-level).
        trace_path: File of memory references to replay.
        backing_store_path: The persistent 64 KB page store.
        frame_count: Number of physical frames (4 to 128).
        policy: Page replacement policy.
        tick: Clear reference bits every ``tick`` references.
        output_path: Where the per-reference results are written.

    """

    levels: int
    trace_path: Path
    backing_store_path: Path
    frame_count: int
    policy: PolicyName
    tick: int
    output_path: Path

    def __post_init__(self) -> None:
        """Validate every numeric field.

        Raises:
            ConfigError: On the first invalid field.

        """
        check_run_parameters(levels=self.levels, frame_count=self.frame_count, tick=self.tick)


def check_run_parameters(*, levels: int, frame_count: int, tick: int) -> None:
    """Validate the numeric parameters of a run.

    Raises:
        ConfigError: On the first invalid value.

    """
    if levels not in PAGE_TABLE_LEVELS:
        msg = f"Page table levels must be 1 or 2, got {levels}"
        raise ConfigError(msg)
    if not MIN_FRAMES <= frame_count <= MAX_FRAMES:
        msg = f"Frame count must be between {MIN_FRAMES} and {MAX_FRAMES}, got {frame_count}"
        raise ConfigError(msg)
    if tick <= 0:
        msg = f"Tick period must be positive, got {tick}"
        raise ConfigError(msg)
