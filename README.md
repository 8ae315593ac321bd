# wirecodec

Building blocks for reading and writing the Protocol Buffers binary wire
format: varints, zig-zag integers, field keys, skipping of unknown fields,
and codecs for scalar, string, bytes, nested-message, group and map fields.
The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `wirecodec.errors`: `DecodeError` and `EncodeError`, both subclasses of
  `ValueError`.
- `wirecodec.varint`: the `Reader` input cursor, `encode_varint`,
  `decode_varint`, `decode_varint_slow`, `encoded_len_varint`, and the
  zig-zag helpers `zigzag_encode32`, `zigzag_decode32`, `zigzag_encode64`
  and `zigzag_decode64`.
- `wirecodec.wire`: `WireType`, `DecodeContext` (nesting limit
  `RECURSION_LIMIT = 100`), `MIN_TAG`, `MAX_TAG`, `encode_key`, `decode_key`,
  `key_len`, `check_wire_type`, `merge_loop` and `skip_field`.
- `wirecodec.scalars`: the codec classes `VarintCodec`, `FixedCodec`,
  `StringCodec` and `BytesCodec`, and one ready-made codec per scalar type:
  `BOOL`, `INT32`, `INT64`, `UINT32`, `UINT64`, `SINT32`, `SINT64`, `FLOAT`,
  `DOUBLE`, `FIXED32`, `FIXED64`, `SFIXED32`, `SFIXED64`, `STRING`, `BYTES`.
- `wirecodec.composite`: nested messages (`encode_message`,
  `merge_message`, ...), groups (`encode_group`, `merge_group`, ...) and maps
  (`encode_map`, `merge_map`, `encoded_len_map`).
- `wirecodec.delimiters`: `encode_length_delimiter`, `length_delimiter_len`
  and `decode_length_delimiter`.

Output is always appended to a `bytearray`; input is read through a
`wirecodec.varint.Reader`.

## Varints

```python
from wirecodec.varint import Reader, decode_varint, encode_varint

buf = bytearray()
encode_varint(300, buf)
assert bytes(buf) == b"\xac\x02"
assert decode_varint(Reader(bytes(buf))) == 300
```

Values must be unsigned 64-bit integers. Decoding rejects varints longer
than ten bytes and those that overflow 64 bits.

## Scalar fields

Each codec has `encode`, `merge`, `encoded_len`, `encode_repeated`,
`merge_repeated` and `encoded_len_repeated`. `merge` returns the decoded
value, because for a single field the last value seen wins.
`merge_repeated` appends to the list it is given. Numeric codecs also have
`encode_packed` and `encoded_len_packed`. Their `merge_repeated` accepts
elements in both packed and unpacked form.

```python
from wirecodec.scalars import SINT32, UINT32
from wirecodec.varint import Reader
from wirecodec.wire import DecodeContext, decode_key

buf = bytearray()
SINT32.encode(1, -1, buf)
assert bytes(buf) == b"\x08\x01"

reader = Reader(bytes(buf))
tag, wire_type = decode_key(reader)
assert SINT32.merge(wire_type, 0, reader, DecodeContext()) == -1

packed = bytearray()
UINT32.encode_packed(4, [3, 270, 86942], packed)
assert bytes(packed) == b"\x22\x06\x03\x8e\x02\x9e\xa7\x05"

reader = Reader(bytes(packed))
tag, wire_type = decode_key(reader)
values = []
UINT32.merge_repeated(wire_type, values, reader, DecodeContext())
assert values == [3, 270, 86942]
```

Encoding a value outside the range of its type raises `ValueError`.
Decoding a string that is not valid UTF-8 raises `DecodeError`.

## Messages, groups and maps

The functions in `wirecodec.composite` work with any object that has these
three methods:

- `encode_raw(buf)`
- `merge_field(tag, wire_type, reader, ctx)`
- `encoded_len()`

The repeated-message and repeated-group decoders take a `factory` that
creates each new element.

Map functions take a key codec and a value codec from `wirecodec.scalars`.
They leave out keys and values that equal their defaults. An optional
`value_default` overrides the default of the value codec. Each nested
message, group and map entry uses up one level of the `DecodeContext`
recursion limit.

## Length delimiters

```python
from wirecodec.delimiters import decode_length_delimiter, encode_length_delimiter

buf = bytearray()
encode_length_delimiter(300, buf)
assert decode_length_delimiter(bytes(buf)) == 300
```

`encode_length_delimiter` takes an optional `capacity`. It raises
`EncodeError` if the delimiter would not fit in that many bytes.

## Errors

Malformed input raises `DecodeError`. Its text starts with
`failed to decode Protobuf message: `. Any `(message, field)` locations
recorded with `push` come next, and the root-cause `description` comes
last.

`EncodeError` carries `required` and `remaining`.

## What this package does not do

This package holds the wire-format primitives only. It has no message base
class that supplies whole-message `encode`/`decode` methods. It has no
ready-made well-known wrapper messages. It does not generate code from
`.proto` files. You write your message types yourself on top of the
functions above.