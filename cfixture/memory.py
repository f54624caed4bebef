"""A guarded allocator that detects leaks and buffer overruns in tests.

Each block carries a header guard before its data and an ``END`` marker
after it; both are checked when the block is freed or reallocated.  With a
``heap_size`` the blocks come from one fixed heap that is released only
from its end, so blocks freed out of LIFO order stay stranded.
"""

from __future__ import annotations

from cfixture.outcome import TestFailure

ALIGNMENT = 8
HEADER_SIZE = 16
_SIZE_FIELD = 8
_GUARD_SPACE = HEADER_SIZE - _SIZE_FIELD
END_MARKER = b"END\0"
INTERNAL_HEAP_SIZE = 256


def _round_up(size: int) -> int:
    return -(-size // ALIGNMENT) * ALIGNMENT


class Block:
    """A view on allocated memory.

    Indices ``0 .. len-1`` address the data.  Indices past the end reach the
    trailing marker and padding, and negative indices reach the header
    guard, just as stray pointer writes would.
    """

    __slots__ = ("_buffer", "_offset", "_size", "_capacity")

    def __init__(self, buffer: bytearray, offset: int, size: int) -> None:
        self._buffer = buffer
        self._offset = offset
        self._size = size
        self._capacity = _round_up(size + len(END_MARKER))

    @property
    def address(self) -> int:
        """Offset of the data within its backing memory."""
        return self._offset

    def __len__(self) -> int:
        return self._size

    def _position(self, index: int) -> int:
        if not -_GUARD_SPACE <= index < self._capacity:
            raise IndexError("block index out of range")
        return self._offset + index

    def __getitem__(self, index):
        if isinstance(index, slice):
            return self.tobytes()[index]
        return self._buffer[self._position(index)]

    def __setitem__(self, index, value) -> None:
        if isinstance(index, slice):
            positions = range(*index.indices(self._size))
            data = bytes(value)
            if len(data) != len(positions):
                raise ValueError("slice assignment must not change the block size")
            for position, byte in zip(positions, data):
                self._buffer[self._offset + position] = byte
            return
        self._buffer[self._position(index)] = value

    def tobytes(self) -> bytes:
        """Return a copy of the data."""
        return bytes(self._buffer[self._offset:self._offset + self._size])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Block):
            return NotImplemented
        return self._buffer is other._buffer and self._offset == other._offset

    def __hash__(self) -> int:
        return hash((id(self._buffer), self._offset))

    def __repr__(self) -> str:
        return f"Block(address={self._offset}, size={self._size})"

    def _write_guards(self) -> None:
        start = self._offset - HEADER_SIZE
        self._buffer[start:start + _SIZE_FIELD] = self._size.to_bytes(_SIZE_FIELD, "little")
        self._buffer[start + _SIZE_FIELD:self._offset] = bytes(_GUARD_SPACE)
        end = self._offset + self._size
        self._buffer[end:end + len(END_MARKER)] = END_MARKER

    def _overrun(self) -> bool:
        if any(self._buffer[self._offset - _GUARD_SPACE:self._offset]):
            return True
        tail = bytes(self._buffer[self._offset + self._size:self._offset + self._capacity])
        nul = tail.find(0)
        text = tail if nul < 0 else tail[:nul]
        return text != END_MARKER[:-1]


class GuardedAllocator:
    """Allocator that counts live blocks and checks their guards."""

    def __init__(self, heap_size: int | None = None) -> None:
        if heap_size is not None and heap_size < 0:
            raise ValueError("heap_size must not be negative")
        self._heap = None if heap_size is None else bytearray(heap_size)
        self._heap_index = 0
        self._count = 0
        self._countdown: int | None = None

    @property
    def heap_size(self) -> int | None:
        """Size of the fixed heap, or None when blocks are unbounded."""
        return None if self._heap is None else len(self._heap)

    def start_test(self) -> None:
        """Reset the live-block count and disable forced failures."""
        self._count = 0
        self._countdown = None

    def end_test(self) -> None:
        """Disable forced failures and fail if any block is still live."""
        self._countdown = None
        if self._count != 0:
            raise TestFailure("This test leaks!")

    def fail_after(self, countdown: int | None) -> None:
        """Let ``countdown`` more allocations succeed, then fail them all.

        None or a negative count turns forced failure off.
        """
        self._countdown = None if countdown is None or countdown < 0 else countdown

    def outstanding(self) -> int:
        """Number of blocks allocated and not yet released."""
        return self._count

    def malloc(self, size: int) -> Block | None:
        """Allocate ``size`` bytes; return None when allocation fails."""
        if size < 0:
            raise ValueError("size must not be negative")
        total = HEADER_SIZE + _round_up(size + len(END_MARKER))

        if self._countdown is not None:
            if self._countdown == 0:
                return None
            self._countdown -= 1

        if size == 0:
            return None
        if self._heap is None:
            buffer = bytearray(total)
            offset = HEADER_SIZE
        else:
            if self._heap_index + total > len(self._heap):
                return None
            buffer = self._heap
            offset = self._heap_index + HEADER_SIZE
            self._heap_index += total

        self._count += 1
        block = Block(buffer, offset, size)
        block._write_guards()
        return block

    def calloc(self, num: int, size: int) -> Block | None:
        """Allocate ``num * size`` zeroed bytes; return None on failure."""
        block = self.malloc(num * size)
        if block is None:
            return None
        block[:] = bytes(len(block))
        return block

    def realloc(self, block: Block | None, size: int) -> Block | None:
        """Resize a block, keeping its data; None when it fails or size is 0.

        On failure the old block stays allocated.
        """
        if block is None:
            return self.malloc(size)

        if block._overrun():
            self._release(block)
            raise TestFailure("Buffer overrun detected during realloc()")

        if size == 0:
            self._release(block)
            return None

        if len(block) >= size:
            return block

        if self._heap is not None:
            old_total = _round_up(len(block) + len(END_MARKER))
            at_end = block._buffer is self._heap and block.address == self._heap_index - old_total
            fits = (self._heap_index - old_total
                    + _round_up(size + len(END_MARKER))) <= len(self._heap)
            if at_end and fits:
                self._release(block)
                return self.malloc(size)

        grown = self.malloc(size)
        if grown is None:
            return None
        grown[:len(block)] = block.tobytes()
        self._release(block)
        return grown

    def free(self, block: Block | None) -> None:
        """Release a block, failing the test if its guards were overwritten."""
        if block is None:
            return
        overrun = block._overrun()
        self._release(block)
        if overrun:
            raise TestFailure("Buffer overrun detected during free()")

    def _release(self, block: Block) -> None:
        self._count -= 1
        if self._heap is not None and block._buffer is self._heap:
            block_size = _round_up(len(block) + len(END_MARKER))
            if block.address == self._heap_index - block_size:
                self._heap_index -= HEADER_SIZE + block_size