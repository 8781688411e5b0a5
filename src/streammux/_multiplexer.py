"""
Multiplex several byte streams into a single one.

The combined stream is made of control lines, each followed by exactly one
payload line::

    combined     ::= ( control_line payload )*
    control_line ::= '@' marker ('@')? '\\n'
    payload      ::= <any bytes without '\\n'> '\\n'

The marker tells which stream the payload belongs to (``1`` for stdout,
``2`` for stderr and ``3`` for control messages). A second ``@`` means the
payload was not terminated by a newline in the original stream: the newline
ending it was added and must be dropped by the reader, which then joins it
with the next payload of the same stream.

This allows a reader to split the combined stream back from a single
thread, without having to ``select`` on multiple file descriptors.
"""
from __future__ import annotations

import logging
from threading import Lock
from types import TracebackType
from typing import Iterable, Optional, Protocol, Type

from ._buffer import BUFFER_CAPACITY, BytesLike, LineBuffer
from ._markers import (
    AT,
    CONTROL,
    NEWLINE,
    STDERR,
    STDOUT,
    MarkerLike,
    describe_marker,
    to_marker,
)

LOGGER = logging.getLogger(__name__)


class SinkProtocol(Protocol):
    def write(self, data: memoryview) -> Optional[int]:
        ...

    def flush(self) -> None:
        ...


class StreamMultiplexer:
    """
    Owns the physical sink and serializes every tagged write to it.

    The multiplexer never closes the sink, this is left to whoever
    created it.

    :param sink: a binary writer, for example ``sys.stdout.buffer`` or a
                 socket file opened in ``"wb"`` mode. Short writes are
                 retried until everything is written. A writer returning
                 ``None`` is assumed to have written everything.
    """

    def __init__(self, sink: SinkProtocol) -> None:
        if sink is None:
            raise TypeError("StreamMultiplexer requires a sink, got None")

        self._sink = sink
        self._lock = Lock()

    @property
    def sink(self) -> SinkProtocol:
        return self._sink

    def create_channel(
        self, marker: MarkerLike, *, capacity: int = BUFFER_CAPACITY
    ) -> TaggedChannel:
        """
        Create a new channel tagging its contributions with ``marker``.

        :param marker: the identity of the stream, see
                       :py:func:`streammux.to_marker` for accepted values.
        :param capacity: the size of the channel's line buffer. Lines longer
                         than this are split in multiple partial lines.
        :raise InvalidMarkerException: if ``marker`` can't be used as marker.
        """
        channel = TaggedChannel(self, to_marker(marker), capacity=capacity)
        LOGGER.debug(
            "Created channel %s on %r", describe_marker(channel.marker), self
        )
        return channel

    def create_stdout(self) -> TaggedChannel:
        return self.create_channel(STDOUT)

    def create_stderr(self) -> TaggedChannel:
        return self.create_channel(STDERR)

    def create_control(self) -> TaggedChannel:
        return self.create_channel(CONTROL)

    def emit(
        self, marker: bytes, payload: BytesLike, length: int, partial: bool
    ) -> None:
        """
        Write one tagged chunk to the sink, and flush it.

        This is called by the channels when their buffer gets flushed and
        should not be needed otherwise.

        An empty chunk doesn't write anything, but still flushes the sink.

        Any exception raised by the sink is propagated as is. Nothing is
        rolled back, so a failure after the control line was written leaves
        a truncated chunk in the sink.
        """
        with self._lock:
            if length == 0:
                self._sink.flush()
                return

            control = bytearray((AT,))
            control += marker
            if partial:
                control.append(AT)
            control.append(NEWLINE)

            data = bytes(payload[:length])
            if partial:
                data += b"\n"

            self._write_all(bytes(control))
            self._write_all(data)
            self._sink.flush()

    def _write_all(self, data: bytes) -> None:
        # Raw writers can accept less than what they are given
        view = memoryview(data)
        while view:
            written = self._sink.write(view)
            if written is None:
                return
            view = view[written:]


class TaggedChannel:
    """
    A binary writer whose contributions end up tagged in the combined stream.

    Every newline written causes the line to be emitted. Content that is not
    terminated by a newline is kept until the next newline or an explicit
    :py:meth:`flush`, in which case it is emitted as a partial line.

    Closing a channel only flushes it: the sink is shared with the other
    channels of the multiplexer and stays open, and so does the channel.
    """

    def __init__(
        self,
        multiplexer: StreamMultiplexer,
        marker: bytes,
        *,
        capacity: int = BUFFER_CAPACITY,
    ) -> None:
        self._multiplexer = multiplexer
        self._marker = marker
        self._buffer = LineBuffer(self._flushing_hook, capacity)

    def __repr__(self) -> str:
        return f"TaggedChannel(marker={self._marker!r})"

    def __enter__(self) -> TaggedChannel:
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    @property
    def marker(self) -> bytes:
        return self._marker

    @property
    def multiplexer(self) -> StreamMultiplexer:
        return self._multiplexer

    @property
    def closed(self) -> bool:
        return False

    def writable(self) -> bool:
        return True

    def pending(self) -> int:
        """Return the number of bytes waiting for a newline or a flush."""
        return len(self._buffer)

    def write(self, data: BytesLike) -> int:
        return self._buffer.write(data)

    def writelines(self, lines: Iterable[BytesLike]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        self._buffer.flush()

    def close(self) -> None:
        self.flush()

    def _flushing_hook(self, buffer: bytearray, length: int) -> None:
        partial = length > 0 and buffer[length - 1] != NEWLINE
        self._multiplexer.emit(self._marker, buffer, length, partial)
