"""
Stream identities used to tag the contributions to a multiplexed stream.

Markers are an open set: the three below are reserved, but any single
printable ASCII byte other than ``@`` can identify a stream.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Union

from ._exceptions import InvalidMarkerException

AT = ord("@")
NEWLINE = ord("\n")

STDOUT = b"1"
STDERR = b"2"
CONTROL = b"3"

RESERVED_MARKERS = MappingProxyType(
    {STDOUT: "stdout", STDERR: "stderr", CONTROL: "control"}
)

MarkerLike = Union[bytes, bytearray, int]


def to_marker(marker: MarkerLike) -> bytes:
    """
    Normalize and validate a marker identity.

    :param marker: a one-byte :py:class:`bytes` (or :py:class:`bytearray`),
                   or the integer value of that byte.
    :return: the marker as a one-byte :py:class:`bytes` object.
    :raise InvalidMarkerException: if the value is not a single printable
                                   byte, or is ``@``.
    """
    if isinstance(marker, bool):
        raise InvalidMarkerException(marker)

    if isinstance(marker, int):
        value = marker
    elif isinstance(marker, (bytes, bytearray)) and len(marker) == 1:
        value = marker[0]
    else:
        raise InvalidMarkerException(marker)

    # printable ASCII only, which also excludes newline
    if not 0x20 <= value <= 0x7E or value == AT:
        raise InvalidMarkerException(marker)

    return bytes((value,))


def describe_marker(marker: bytes) -> str:
    name = RESERVED_MARKERS.get(marker)
    if name is None:
        return repr(marker.decode("ascii"))
    return name
