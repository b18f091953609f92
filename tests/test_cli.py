"""Tests for the command-line entry point."""

from pathlib import Path

import pytest

from py_memsim.cli import EXIT_FAILURE, EXIT_OK, log_level_for, run
from py_memsim.logging import LogLevel
from py_memsim.memory.backing import STORE_SIZE


def _args(tmp_path: Path, **overrides: str) -> list[str]:
    values = {
        "-p": "1",
        "-r": str(tmp_path / "trace.txt"),
        "-s": str(tmp_path / "swap.bin"),
        "-f": "4",
        "-a": "FIFO",
        "-t": "10",
        "-o": str(tmp_path / "out.txt"),
    }
    values.update(overrides)
    return [item for pair in values.items() for item in pair]


@pytest.fixture
def trace(tmp_path: Path) -> Path:
    """Write a small trace with one write and one hit."""
    path = tmp_path / "trace.txt"
    path.write_text("r 0x0000\nw 0x0001 0xff\nr 0x0040\n")
    return path


class TestRun:
    """Verify exit codes and output."""

    def test_success(self, tmp_path: Path, trace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A valid run writes the output file and exits 0."""
        assert run(_args(tmp_path)) == EXIT_OK
        lines = (tmp_path / "out.txt").read_text().splitlines()
        expected_lines = 4
        assert len(lines) == expected_lines
        assert lines[1].endswith("  ")
        assert lines[-1] == "2"
        assert "2 page faults" in capsys.readouterr().out

    def test_eclock_alias(self, tmp_path: Path, trace: Path) -> None:
        """The short ECLOCK spelling is accepted."""
        assert run(_args(tmp_path, **{"-a": "ECLOCK", "-p": "2"})) == EXIT_OK

    def test_bad_frame_count(self, tmp_path: Path, trace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Frame counts outside 4..128 fail with a message."""
        assert run(_args(tmp_path, **{"-f": "2"})) == EXIT_FAILURE
        assert "Frame count" in capsys.readouterr().err

    def test_unknown_policy(self, tmp_path: Path, trace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Unknown policies fail before anything runs."""
        assert run(_args(tmp_path, **{"-a": "OPT"})) == EXIT_FAILURE
        assert "Unknown replacement policy" in capsys.readouterr().err
        assert not (tmp_path / "out.txt").exists()

    def test_missing_trace(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A missing trace file is reported as an error."""
        assert run(_args(tmp_path)) == EXIT_FAILURE
        assert "Cannot read trace" in capsys.readouterr().err

    def test_malformed_trace(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A malformed trace line is reported with its line number."""
        (tmp_path / "trace.txt").write_text("r 0x0\nz 0x1\n")
        assert run(_args(tmp_path)) == EXIT_FAILURE
        assert "Line 2" in capsys.readouterr().err

    def test_binary_trace(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A trace that is not valid text fails cleanly instead of crashing."""
        (tmp_path / "trace.txt").write_bytes(b"r 0x0000\nr 0x\xff40\n")
        assert run(_args(tmp_path)) == EXIT_FAILURE
        assert "not valid text" in capsys.readouterr().err

    def test_empty_store_is_extended(self, tmp_path: Path) -> None:
        """An empty placeholder store is grown to full size and keeps the written page."""
        (tmp_path / "trace.txt").write_text("w 0x0000 0x11\n")
        swap = tmp_path / "swap.bin"
        swap.write_bytes(b"")
        assert run(_args(tmp_path)) == EXIT_OK
        data = swap.read_bytes()
        assert len(data) == STORE_SIZE
        assert data[0] == 0x11

    def test_oversized_store(self, tmp_path: Path, trace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A store larger than 64 KB is refused."""
        (tmp_path / "swap.bin").write_bytes(bytes(STORE_SIZE + 1))
        assert run(_args(tmp_path)) == EXIT_FAILURE
        assert "expected 65536" in capsys.readouterr().err

    def test_verbose_prints_log(self, tmp_path: Path, trace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """-v dumps the INFO log to stderr; per-fault DEBUG entries need -vv."""
        assert run([*_args(tmp_path), "-v"]) == EXIT_OK
        err = capsys.readouterr().err
        assert "[INFO] clock" in err
        assert "[DEBUG]" not in err

    def test_very_verbose_prints_debug(self, tmp_path: Path, trace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """-vv adds the per-fault DEBUG entries."""
        assert run([*_args(tmp_path), "-vv"]) == EXIT_OK
        assert "[DEBUG] pager" in capsys.readouterr().err

    def test_quiet_by_default(self, tmp_path: Path, trace: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Without -v nothing but the summary is printed."""
        assert run(_args(tmp_path)) == EXIT_OK
        assert capsys.readouterr().err == ""

    def test_missing_argument(self, tmp_path: Path) -> None:
        """argparse rejects an incomplete command line."""
        with pytest.raises(SystemExit):
            run(["-p", "1"])


class TestLogLevelFor:
    """Verify how -v flags map to a log threshold."""

    @pytest.mark.parametrize(
        ("verbosity", "level"),
        [(0, LogLevel.ERROR), (1, LogLevel.INFO), (2, LogLevel.DEBUG), (3, LogLevel.DEBUG)],
    )
    def test_levels(self, verbosity: int, level: LogLevel) -> None:
        """More -v flags keep more of the log."""
        assert log_level_for(verbosity) is level
