from __future__ import annotations

from threading import RLock
from typing import Callable, Union

BUFFER_CAPACITY = 8192

BytesLike = Union[bytes, bytearray, memoryview]
FlushHook = Callable[[bytearray, int], None]


class LineBuffer:
    """
    Accumulate bytes and hand them over to a hook one line at a time.

    Every newline byte that gets written hands everything accumulated up to,
    and including, that newline to ``hook``. The hook is also called when the
    buffer reaches its capacity and on every explicit :py:meth:`flush`, even
    if nothing was accumulated.

    Once the hook returns, the buffer is emptied. If it raises, the content
    is kept and the exception propagates to the caller.

    :param hook: called with the buffer and the number of valid bytes in it.
                 It must not keep a reference to the buffer after returning.
    :param capacity: the maximum number of bytes held before forcing a flush.
    """

    def __init__(
        self, hook: FlushHook, capacity: int = BUFFER_CAPACITY
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")

        self._hook = hook
        self._capacity = capacity
        self._buffer = bytearray()
        # Reentrant, the hook is called from within 'write'
        self._lock = RLock()

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def capacity(self) -> int:
        return self._capacity

    def write(self, data: BytesLike) -> int:
        data = bytes(data)
        total = len(data)
        start = 0

        with self._lock:
            while start < total:
                stop = start + self._capacity - len(self._buffer)
                newline = data.find(b"\n", start, stop)

                if newline != -1:
                    stop = newline + 1
                elif stop > total:
                    self._buffer += data[start:]
                    break

                self._buffer += data[start:stop]
                start = stop
                self.flush()

        return total

    def flush(self) -> None:
        with self._lock:
            self._hook(self._buffer, len(self._buffer))
            del self._buffer[:]
