"""
Everything explicitly exposed here is part of the ``streammux`` public API.

``streammux`` interleaves several byte streams into a single one, tagging
each line with the stream it belongs to, so that a single reader can split
them back without having to ``select`` on multiple file descriptors.

.. warning::

    While ``streammux`` is not at version 1.0.0, it does not guarantee API
    stability.
"""
from ._buffer import BUFFER_CAPACITY, LineBuffer
from ._exceptions import (
    BaseStreamMuxException,
    CommandNotFoundException,
    InvalidMarkerException,
)
from ._io import TextChannel, redirect_streams, text_channels
from ._markers import CONTROL, RESERVED_MARKERS, STDERR, STDOUT, to_marker
from ._multiplexer import StreamMultiplexer, TaggedChannel
from ._subproc import ProcessManager, run_multiplexed

# XXX: The order here is important, it declares the order in which the entries
#      are documented in the public docs.
__all__ = [
    "StreamMultiplexer",
    "TaggedChannel",
    "LineBuffer",
    "BUFFER_CAPACITY",
    "STDOUT",
    "STDERR",
    "CONTROL",
    "RESERVED_MARKERS",
    "to_marker",
    "TextChannel",
    "text_channels",
    "redirect_streams",
    "ProcessManager",
    "run_multiplexed",
    "BaseStreamMuxException",
    "InvalidMarkerException",
    "CommandNotFoundException",
]
