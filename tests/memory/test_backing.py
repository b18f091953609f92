"""Tests for the on-disk backing store."""

from pathlib import Path

import pytest

from py_memsim.memory.address import PAGE_SIZE
from py_memsim.memory.backing import STORE_SIZE, BackingStore, IOFaultError, StoreStatus


def _store(tmp_path: Path) -> BackingStore:
    store = BackingStore(tmp_path / "swap.bin")
    store.ensure_initialized()
    return store


class TestInitialization:
    """Verify lazy creation of the store file."""

    def test_creates_zeroed_file(self, tmp_path: Path) -> None:
        """A missing store is created as 64 KB of zeros."""
        store = BackingStore(tmp_path / "swap.bin")
        assert store.ensure_initialized() is StoreStatus.CREATED
        data = store.path.read_bytes()
        assert len(data) == STORE_SIZE
        assert data == bytes(STORE_SIZE)

    def test_idempotent(self, tmp_path: Path) -> None:
        """An existing store is left untouched."""
        store = _store(tmp_path)
        store.write_page(3, bytes([7]) * PAGE_SIZE)
        assert store.ensure_initialized() is StoreStatus.READY
        assert store.read_page(3) == bytes([7]) * PAGE_SIZE

    def test_unwritable_location(self, tmp_path: Path) -> None:
        """Creating the store in a missing directory is an I/O fault."""
        store = BackingStore(tmp_path / "no" / "such" / "dir" / "swap.bin")
        with pytest.raises(IOFaultError):
            store.ensure_initialized()

    def test_short_file_is_zero_extended(self, tmp_path: Path) -> None:
        """A short store keeps its bytes and is padded with zeros to 64 KB."""
        path = tmp_path / "swap.bin"
        path.write_bytes(b"\x2a" * PAGE_SIZE)
        store = BackingStore(path)
        assert store.ensure_initialized() is StoreStatus.EXTENDED
        data = path.read_bytes()
        assert len(data) == STORE_SIZE
        assert data[:PAGE_SIZE] == b"\x2a" * PAGE_SIZE
        assert data[PAGE_SIZE:] == bytes(STORE_SIZE - PAGE_SIZE)

    def test_empty_file_is_zero_extended(self, tmp_path: Path) -> None:
        """An empty placeholder file becomes a full zeroed store."""
        path = tmp_path / "swap.bin"
        path.write_bytes(b"")
        assert BackingStore(path).ensure_initialized() is StoreStatus.EXTENDED
        assert path.read_bytes() == bytes(STORE_SIZE)

    def test_oversized_file(self, tmp_path: Path) -> None:
        """A file larger than 64 KB is not a backing store."""
        path = tmp_path / "swap.bin"
        path.write_bytes(bytes(STORE_SIZE + PAGE_SIZE))
        with pytest.raises(IOFaultError, match="expected 65536"):
            BackingStore(path).ensure_initialized()


class TestPageAccess:
    """Verify page reads and writes."""

    def test_write_then_read(self, tmp_path: Path) -> None:
        """A written page reads back unchanged."""
        store = _store(tmp_path)
        page = bytes(range(PAGE_SIZE))
        store.write_page(1023, page)
        assert store.read_page(1023) == page

    def test_page_layout(self, tmp_path: Path) -> None:
        """Page k occupies bytes [64k, 64k + 64) of the file."""
        store = _store(tmp_path)
        store.write_page(2, b"\xab" * PAGE_SIZE)
        raw = store.path.read_bytes()
        assert raw[2 * PAGE_SIZE : 3 * PAGE_SIZE] == b"\xab" * PAGE_SIZE
        assert raw[PAGE_SIZE : 2 * PAGE_SIZE] == bytes(PAGE_SIZE)

    def test_flush_batch(self, tmp_path: Path) -> None:
        """Flushing writes every page in the batch."""
        store = _store(tmp_path)
        written = store.flush([(0, b"\x01" * PAGE_SIZE), (5, b"\x05" * PAGE_SIZE)])
        expected = 2
        assert written == expected
        assert store.read_page(5) == b"\x05" * PAGE_SIZE

    def test_read_missing_store(self, tmp_path: Path) -> None:
        """Reading before the store exists is an I/O fault."""
        store = BackingStore(tmp_path / "absent.bin")
        with pytest.raises(IOFaultError):
            store.read_page(0)

    def test_write_missing_store(self, tmp_path: Path) -> None:
        """Writing before the store exists is an I/O fault."""
        store = BackingStore(tmp_path / "absent.bin")
        with pytest.raises(IOFaultError):
            store.write_page(0, bytes(PAGE_SIZE))

    @pytest.mark.parametrize("page_id", [-1, 1024])
    def test_page_id_out_of_range(self, tmp_path: Path, page_id: int) -> None:
        """Page ids must lie in [0, 1024)."""
        store = _store(tmp_path)
        with pytest.raises(ValueError, match="outside backing store"):
            store.read_page(page_id)

    def test_wrong_page_size(self, tmp_path: Path) -> None:
        """Only whole pages can be written."""
        store = _store(tmp_path)
        with pytest.raises(ValueError, match="64 bytes"):
            store.write_page(0, b"short")

    def test_truncated_store_read(self, tmp_path: Path) -> None:
        """Reading past the end of a short store is an I/O fault, not zeros."""
        path = tmp_path / "swap.bin"
        path.write_bytes(bytes(PAGE_SIZE))
        with pytest.raises(IOFaultError, match="truncated"):
            BackingStore(path).read_page(1)
