"""Physical memory — frames and the frame allocator.

Physical memory is divided into fixed-size **frames**, the physical
counterpart of virtual pages.  The simulator's machine has between 4
and 128 frames of 64 bytes each.

Allocation is deliberately simple: frames are handed out in ascending
order (0, 1, 2, ...) until every frame is in use.  From then on a frame
only changes hands by eviction — the replacement policy picks a victim
page, and the faulting page takes over its frame.  Frames are never
returned to the free pool.
"""

from py_memsim.memory.address import PAGE_SIZE


class FrameAllocator:
    """Hand out physical frames in ascending order until exhausted."""

    def __init__(self, *, frame_count: int) -> None:
        """Create an allocator over ``frame_count`` frames."""
        self._frame_count = frame_count
        self._next = 0

    @property
    def frame_count(self) -> int:
        """Return the total number of frames."""
        return self._frame_count

    @property
    def used(self) -> int:
        """Return how many frames have been handed out."""
        return self._next

    @property
    def exhausted(self) -> bool:
        """Return True once every frame has been handed out."""
        return self._next >= self._frame_count

    def try_allocate(self) -> int | None:
        """Return the next unused frame, or None if all are in use.

        None tells the caller it must evict a page instead.
        """
        if self.exhausted:
            return None
        frame = self._next
        self._next += 1
        return frame


class PhysicalMemory:
    """The contents of every physical frame.

    Frames start zeroed and are addressed by frame number.
    """

    def __init__(self, *, frame_count: int) -> None:
        """Create ``frame_count`` zeroed frames."""
        self._frames = [bytearray(PAGE_SIZE) for _ in range(frame_count)]

    def __len__(self) -> int:
        """Return the number of frames."""
        return len(self._frames)

    def frame(self, index: int) -> bytes:
        """Return a snapshot of a frame's 64 bytes."""
        return bytes(self._frames[index])

    def load(self, index: int, data: bytes) -> None:
        """Replace a frame's contents with a page's data.

        Raises:
            ValueError: If *data* is not exactly one page long.

        """
        if len(data) != PAGE_SIZE:
            msg = f"Frame data must be {PAGE_SIZE} bytes, got {len(data)}"
            raise ValueError(msg)
        self._frames[index][:] = data

    def read_byte(self, index: int, offset: int) -> int:
        """Return the byte at *offset* within a frame."""
        return self._frames[index][offset]

    def write_byte(self, index: int, offset: int, value: int) -> None:
        """Store *value* at *offset* within a frame."""
        self._frames[index][offset] = value
