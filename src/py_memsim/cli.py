"""Command-line entry point.

Usage::

    py-memsim -p 2 -r trace.txt -s swap.bin -f 8 -a ECLOCK -t 10 -o out.txt

Options:
    -p  page-table levels (1 or 2)
    -r  trace file of memory references
    -s  backing store file (created if missing)
    -f  number of physical frames (4 to 128)
    -a  replacement policy: FIFO, LRU, CLOCK, ENHANCED_CLOCK (or ECLOCK)
    -t  clear reference bits every this many references
    -o  output file
    -v  print the diagnostic log to stderr when done; repeat (-vv) to
        include per-reference DEBUG entries

The parser only collects arguments; ``SimulationConfig`` decides what is
valid.  ``run`` returns a process exit status instead of calling
``sys.exit`` so it can be tested directly.
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from py_memsim.config import ConfigError, PolicyName, SimulationConfig
from py_memsim.logging import Logger, LogLevel
from py_memsim.memory.backing import IOFaultError
from py_memsim.simulation import Simulation

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="py-memsim",
        description="Replay a memory reference trace against a paged virtual memory.",
    )
    parser.add_argument("-p", dest="levels", type=int, required=True, help="page-table levels (1 or 2)")
    parser.add_argument("-r", dest="trace", type=Path, required=True, help="memory reference trace file")
    parser.add_argument("-s", dest="swap", type=Path, required=True, help="backing store file")
    parser.add_argument("-f", dest="frames", type=int, required=True, help="number of physical frames")
    parser.add_argument("-a", dest="policy", required=True, help="replacement policy")
    parser.add_argument("-t", dest="tick", type=int, required=True, help="reference-bit clearing period")
    parser.add_argument("-o", dest="output", type=Path, required=True, help="output file")
    parser.add_argument(
        "-v", dest="verbose", action="count", default=0, help="print the diagnostic log (-vv adds DEBUG)"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    """Turn parsed arguments into a validated configuration.

    Raises:
        ConfigError: If any value is invalid.

    """
    return SimulationConfig(
        levels=args.levels,
        trace_path=args.trace,
        backing_store_path=args.swap,
        frame_count=args.frames,
        policy=PolicyName.parse(args.policy),
        tick=args.tick,
        output_path=args.output,
    )


def log_level_for(verbosity: int) -> LogLevel:
    """Map the number of ``-v`` flags to the lowest level worth keeping."""
    if verbosity >= 2:  # noqa: PLR2004
        return LogLevel.DEBUG
    if verbosity == 1:
        return LogLevel.INFO
    return LogLevel.ERROR


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the simulation, and return an exit status."""
    args = build_parser().parse_args(argv)
    logger = Logger(min_level=log_level_for(args.verbose))
    try:
        config = config_from_args(args)
        result = Simulation(config, logger=logger).run()
    except (ConfigError, IOFaultError) as exc:
        logger.log(LogLevel.ERROR, str(exc), source="cli")
        print(f"py-memsim: error: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        if args.verbose:
            for entry in logger.entries:
                print(entry, file=sys.stderr)

    print(f"{result.fault_count} page faults in {len(result.records)} references")
    return EXIT_OK
