from __future__ import annotations

import io
import re
from contextlib import (
    ExitStack,
    contextmanager,
    redirect_stderr,
    redirect_stdout,
)
from typing import TYPE_CHECKING, Iterator, Tuple

if TYPE_CHECKING:
    from ._multiplexer import StreamMultiplexer, TaggedChannel

ANSI_ESCAPE_CODE_RE = re.compile(r"\x1b\[\d+(;\d+)*m")


class TextChannel(io.TextIOWrapper):
    """
    Expose a :py:class:`TaggedChannel` as a text stream.

    This allows using a channel where a :py:class:`typing.TextIO` is
    expected, for example as ``sys.stdout``.
    """

    def __init__(
        self,
        channel: TaggedChannel,
        encoding: str = "utf-8",
        errors: str = "strict",
    ) -> None:
        # pylint: disable=super-init-not-called
        self._channel = channel
        self._encoding = encoding
        self._errors = errors

    @property
    def channel(self) -> TaggedChannel:
        return self._channel

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def errors(self) -> str:
        return self._errors

    def isatty(self) -> bool:
        return False

    def readable(self) -> bool:
        return False

    def writable(self) -> bool:
        return True

    def read(self, size: int | None = None) -> str:  # noqa: ARG002
        raise io.UnsupportedOperation("can't read from a text channel")

    def write(self, data: str) -> int:
        self._channel.write(data.encode(self._encoding, self._errors))
        return len(data)

    def flush(self) -> None:
        self._channel.flush()

    def close(self) -> None:
        self._channel.close()


def text_channels(
    multiplexer: StreamMultiplexer, encoding: str = "utf-8"
) -> Tuple[TextChannel, TextChannel]:
    return (
        TextChannel(multiplexer.create_stdout(), encoding),
        TextChannel(multiplexer.create_stderr(), encoding),
    )


@contextmanager
def redirect_streams(
    multiplexer: StreamMultiplexer, encoding: str = "utf-8"
) -> Iterator[Tuple[TextChannel, TextChannel]]:
    """
    Send everything written to ``sys.stdout`` and ``sys.stderr`` to
    ``multiplexer``, tagged as stdout and stderr respectively.

    Pending partial lines are flushed when leaving the context.
    """
    stdout, stderr = text_channels(multiplexer, encoding)

    with ExitStack() as stack:
        stack.callback(stderr.flush)
        stack.callback(stdout.flush)
        stack.enter_context(redirect_stdout(stdout))
        stack.enter_context(redirect_stderr(stderr))
        yield stdout, stderr
