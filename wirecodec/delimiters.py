"""Length delimiters written in front of length-delimited messages."""

from __future__ import annotations

import sys
from typing import Union

from wirecodec.errors import DecodeError, EncodeError
from wirecodec.varint import Reader, decode_varint, encode_varint, encoded_len_varint

__all__ = [
    "encode_length_delimiter",
    "length_delimiter_len",
    "decode_length_delimiter",
]

_SIZE_MAX = sys.maxsize * 2 + 1


def encode_length_delimiter(
    length: int, buf: bytearray, capacity: int | None = None
) -> None:
    """Append ``length`` to ``buf`` as a varint.

    ``capacity`` is the number of bytes ``buf`` may still take; ``None`` means
    unlimited. EncodeError is raised if the delimiter does not fit.
    """
    required = encoded_len_varint(length)
    if capacity is not None and required > capacity:
        raise EncodeError(required, capacity)
    encode_varint(length, buf)


def length_delimiter_len(length: int) -> int:
    """Encoded length (1 to 10) of the delimiter for ``length``."""
    return encoded_len_varint(length)


def decode_length_delimiter(
    data: Union[bytes, bytearray, memoryview, Reader],
) -> int:
    """Read a length delimiter from the start of ``data``.

    Given a Reader, the delimiter's bytes are consumed from it.
    """
    reader = data if isinstance(data, Reader) else Reader(data)
    length = decode_varint(reader)
    if length > _SIZE_MAX:
        raise DecodeError("length delimiter exceeds maximum usize value")
    return length