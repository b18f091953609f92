"""Tests for virtual address translation.

A 16-bit address is a 10-bit virtual page number and a 6-bit offset.
Two-level tables split the page number again into 5-bit outer and
inner indices.
"""

import pytest

from py_memsim.memory.address import PagingMode, page_id_for, split_page_id, translate


class TestFlatTranslation:
    """Verify 1-level translation."""

    def test_split(self) -> None:
        """The outer index is the full VPN."""
        where = translate(0x3F25, PagingMode.FLAT)
        assert where.outer == 0x3F25 >> 6
        assert where.inner == 0
        assert where.offset == 0x25

    def test_every_address(self) -> None:
        """Translation is exact over the whole address space."""
        for address in range(1 << 16):
            where = translate(address, PagingMode.FLAT)
            assert where.outer == address >> 6
            assert where.offset == address & 63
            assert where.page_id == address >> 6


class TestTwoLevelTranslation:
    """Verify 2-level translation."""

    def test_split(self) -> None:
        """0x0845 is VPN 33: outer 1, inner 1, offset 5."""
        where = translate(0x0845, PagingMode.TWO_LEVEL)
        assert (where.outer, where.inner, where.offset) == (1, 1, 5)

    def test_every_address(self) -> None:
        """Outer and inner always recombine into the VPN."""
        for address in range(1 << 16):
            where = translate(address, PagingMode.TWO_LEVEL)
            assert where.outer == (address >> 6) >> 5
            assert where.inner == (address >> 6) & 31
            assert where.outer * 32 + where.inner == address >> 6
            assert where.page_id == address >> 6

    def test_highest_address(self) -> None:
        """0xFFFF lands in the last entry of the last inner table."""
        where = translate(0xFFFF, PagingMode.TWO_LEVEL)
        last = 31
        assert (where.outer, where.inner, where.offset) == (last, last, 63)


class TestPageIds:
    """Verify page id helpers."""

    @pytest.mark.parametrize("mode", list(PagingMode))
    def test_split_and_join(self, mode: PagingMode) -> None:
        """Splitting a page id and joining it back is lossless."""
        for page_id in range(1024):
            outer, inner = split_page_id(page_id, mode)
            assert page_id_for(outer, inner, mode) == page_id

    def test_distinct_outer_segments_do_not_alias(self) -> None:
        """Same inner index under different outer slots gives different ids."""
        assert page_id_for(0, 1, PagingMode.TWO_LEVEL) != page_id_for(1, 1, PagingMode.TWO_LEVEL)
