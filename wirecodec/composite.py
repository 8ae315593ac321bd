"""Encoding of nested messages, groups and map fields."""

from __future__ import annotations

from typing import Any, Callable, Iterable, MutableMapping, Protocol

from wirecodec.errors import DecodeError
from wirecodec.varint import Reader, encode_varint, encoded_len_varint
from wirecodec.wire import (
    DecodeContext,
    WireType,
    check_wire_type,
    decode_key,
    encode_key,
    key_len,
    merge_loop,
    skip_field,
)

__all__ = [
    "encode_message",
    "merge_message",
    "encode_repeated_messages",
    "merge_repeated_messages",
    "encoded_len_message",
    "encoded_len_repeated_messages",
    "encode_group",
    "merge_group",
    "encode_repeated_groups",
    "merge_repeated_groups",
    "encoded_len_group",
    "encoded_len_repeated_groups",
    "encode_map",
    "merge_map",
    "encoded_len_map",
]


class _MessageLike(Protocol):
    def encode_raw(self, buf: bytearray) -> None: ...

    def merge_field(
        self, tag: int, wire_type: WireType, reader: Reader, ctx: DecodeContext
    ) -> None: ...

    def encoded_len(self) -> int: ...


class _Codec(Protocol):
    default: Any

    def encode(self, tag: int, value: Any, buf: bytearray) -> None: ...

    def merge(
        self, wire_type: WireType, value: Any, reader: Reader, ctx: DecodeContext
    ) -> Any: ...

    def encoded_len(self, tag: int, value: Any) -> int: ...


_CODEC_DEFAULT: Any = object()


# Nested messages.


def encode_message(tag: int, msg: _MessageLike, buf: bytearray) -> None:
    """Append ``msg`` as a length-delimited field ``tag``."""
    encode_key(tag, WireType.LENGTH_DELIMITED, buf)
    encode_varint(msg.encoded_len(), buf)
    msg.encode_raw(buf)


def _merge_one_field(msg: _MessageLike, reader: Reader, ctx: DecodeContext) -> None:
    tag, wire_type = decode_key(reader)
    msg.merge_field(tag, wire_type, reader, ctx)


def merge_message(
    wire_type: WireType, msg: _MessageLike, reader: Reader, ctx: DecodeContext
) -> None:
    """Decode a length-delimited message and merge it into ``msg``."""
    check_wire_type(WireType.LENGTH_DELIMITED, wire_type)
    ctx.check_limit()
    merge_loop(msg, reader, ctx.enter_recursion(), _merge_one_field)


def encode_repeated_messages(
    tag: int, messages: Iterable[_MessageLike], buf: bytearray
) -> None:
    """Append each message as its own field ``tag``."""
    for msg in messages:
        encode_message(tag, msg, buf)


def merge_repeated_messages(
    wire_type: WireType,
    messages: list[Any],
    reader: Reader,
    ctx: DecodeContext,
    factory: Callable[[], Any],
) -> None:
    """Decode one message made by ``factory`` and append it to ``messages``."""
    check_wire_type(WireType.LENGTH_DELIMITED, wire_type)
    msg = factory()
    merge_message(WireType.LENGTH_DELIMITED, msg, reader, ctx)
    messages.append(msg)


def encoded_len_message(tag: int, msg: _MessageLike) -> int:
    """Encoded length of ``msg`` as field ``tag``, key and prefix included."""
    length = msg.encoded_len()
    return key_len(tag) + encoded_len_varint(length) + length


def encoded_len_repeated_messages(tag: int, messages: Iterable[_MessageLike]) -> int:
    """Encoded length of ``messages`` written as repeated field ``tag``."""
    lengths = [msg.encoded_len() for msg in messages]
    return key_len(tag) * len(lengths) + sum(
        length + encoded_len_varint(length) for length in lengths
    )


# Groups.


def encode_group(tag: int, msg: _MessageLike, buf: bytearray) -> None:
    """Append ``msg`` between start-group and end-group keys for ``tag``."""
    encode_key(tag, WireType.START_GROUP, buf)
    msg.encode_raw(buf)
    encode_key(tag, WireType.END_GROUP, buf)


def merge_group(
    tag: int,
    wire_type: WireType,
    msg: _MessageLike,
    reader: Reader,
    ctx: DecodeContext,
) -> None:
    """Decode fields into ``msg`` until the end-group key for ``tag``."""
    check_wire_type(WireType.START_GROUP, wire_type)
    ctx.check_limit()
    while True:
        field_tag, field_wire_type = decode_key(reader)
        if field_wire_type is WireType.END_GROUP:
            if field_tag != tag:
                raise DecodeError("unexpected end group tag")
            return
        msg.merge_field(field_tag, field_wire_type, reader, ctx.enter_recursion())


def encode_repeated_groups(
    tag: int, messages: Iterable[_MessageLike], buf: bytearray
) -> None:
    """Append each message as its own group ``tag``."""
    for msg in messages:
        encode_group(tag, msg, buf)


def merge_repeated_groups(
    tag: int,
    wire_type: WireType,
    messages: list[Any],
    reader: Reader,
    ctx: DecodeContext,
    factory: Callable[[], Any],
) -> None:
    """Decode one group made by ``factory`` and append it to ``messages``."""
    check_wire_type(WireType.START_GROUP, wire_type)
    msg = factory()
    merge_group(tag, WireType.START_GROUP, msg, reader, ctx)
    messages.append(msg)


def encoded_len_group(tag: int, msg: _MessageLike) -> int:
    """Encoded length of ``msg`` as group ``tag``, both keys included."""
    return 2 * key_len(tag) + msg.encoded_len()


def encoded_len_repeated_groups(tag: int, messages: Iterable[_MessageLike]) -> int:
    """Encoded length of ``messages`` written as repeated group ``tag``."""
    lengths = [msg.encoded_len() for msg in messages]
    return 2 * key_len(tag) * len(lengths) + sum(lengths)


# Maps.


def _entry_len(
    key_codec: _Codec, value_codec: _Codec, key: Any, value: Any, value_default: Any
) -> int:
    key_part = 0 if key == key_codec.default else key_codec.encoded_len(1, key)
    value_part = 0 if value == value_default else value_codec.encoded_len(2, value)
    return key_part + value_part


def encode_map(
    key_codec: _Codec,
    value_codec: _Codec,
    tag: int,
    values: MutableMapping[Any, Any],
    buf: bytearray,
    value_default: Any = _CODEC_DEFAULT,
) -> None:
    """Append each entry of ``values`` as a map entry under field ``tag``.

    Keys and values equal to their defaults are left out of the entry.
    ``value_default`` overrides the value codec's default.
    """
    if value_default is _CODEC_DEFAULT:
        value_default = value_codec.default
    for key, value in values.items():
        skip_key = key == key_codec.default
        skip_value = value == value_default
        length = _entry_len(key_codec, value_codec, key, value, value_default)
        encode_key(tag, WireType.LENGTH_DELIMITED, buf)
        encode_varint(length, buf)
        if not skip_key:
            key_codec.encode(1, key, buf)
        if not skip_value:
            value_codec.encode(2, value, buf)


def merge_map(
    key_codec: _Codec,
    value_codec: _Codec,
    values: MutableMapping[Any, Any],
    reader: Reader,
    ctx: DecodeContext,
    value_default: Any = _CODEC_DEFAULT,
) -> None:
    """Decode one length-delimited map entry and store it in ``values``."""
    if value_default is _CODEC_DEFAULT:
        value_default = value_codec.default
    entry = [key_codec.default, value_default]

    def merge_entry(state: list[Any], inner: Reader, inner_ctx: DecodeContext) -> None:
        field_tag, wire_type = decode_key(inner)
        if field_tag == 1:
            state[0] = key_codec.merge(wire_type, state[0], inner, inner_ctx)
        elif field_tag == 2:
            state[1] = value_codec.merge(wire_type, state[1], inner, inner_ctx)
        else:
            skip_field(wire_type, field_tag, inner, inner_ctx)

    ctx.check_limit()
    merge_loop(entry, reader, ctx.enter_recursion(), merge_entry)
    values[entry[0]] = entry[1]


def encoded_len_map(
    key_codec: _Codec,
    value_codec: _Codec,
    tag: int,
    values: MutableMapping[Any, Any],
    value_default: Any = _CODEC_DEFAULT,
) -> int:
    """Encoded length of all entries of ``values`` under field ``tag``."""
    if value_default is _CODEC_DEFAULT:
        value_default = value_codec.default
    total = key_len(tag) * len(values)
    for key, value in values.items():
        length = _entry_len(key_codec, value_codec, key, value, value_default)
        total += encoded_len_varint(length) + length
    return total