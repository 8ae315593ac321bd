import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from wirecodec.errors import DecodeError
from wirecodec.scalars import (
    BOOL,
    BYTES,
    DOUBLE,
    FIXED32,
    FIXED64,
    FLOAT,
    INT32,
    INT64,
    SFIXED32,
    SFIXED64,
    SINT32,
    SINT64,
    STRING,
    UINT32,
    UINT64,
)
from wirecodec.varint import Reader
from wirecodec.wire import MAX_TAG, MIN_TAG, DecodeContext, WireType, decode_key

I32 = st.integers(-(2**31), 2**31 - 1)
I64 = st.integers(-(2**63), 2**63 - 1)
U32 = st.integers(0, 2**32 - 1)
U64 = st.integers(0, 2**64 - 1)

NUMERIC = [
    (BOOL, st.booleans()),
    (INT32, I32),
    (INT64, I64),
    (UINT32, U32),
    (UINT64, U64),
    (SINT32, I32),
    (SINT64, I64),
    (FLOAT, st.floats(width=32, allow_nan=False)),
    (DOUBLE, st.floats(allow_nan=False)),
    (FIXED32, U32),
    (FIXED64, U64),
    (SFIXED32, I32),
    (SFIXED64, I64),
]
ALL = NUMERIC + [(STRING, st.text()), (BYTES, st.binary())]
IDS = [codec.name for codec, _ in ALL]
NUMERIC_IDS = [codec.name for codec, _ in NUMERIC]

TAGS = st.integers(MIN_TAG, MAX_TAG)


def check_type(value, tag, wire_type, encode, decode, encoded_len):
    expected_len = encoded_len(tag, value)
    buf = bytearray()
    encode(tag, value, buf)
    assert len(buf) == expected_len
    if not buf:
        return
    reader = Reader(bytes(buf))
    decoded_tag, decoded_wire_type = decode_key(reader)
    assert decoded_tag == tag
    assert decoded_wire_type == wire_type
    if wire_type is WireType.SIXTY_FOUR_BIT:
        assert reader.remaining == 8
    if wire_type is WireType.THIRTY_TWO_BIT:
        assert reader.remaining == 4
    roundtrip = decode(wire_type, reader, DecodeContext())
    assert reader.remaining == 0
    assert roundtrip == value


def check_collection_type(values, tag, wire_type, codec):
    expected_len = codec.encoded_len_repeated(tag, values)
    buf = bytearray()
    codec.encode_repeated(tag, values, buf)
    assert len(buf) == expected_len
    reader = Reader(bytes(buf))
    roundtrip = []
    while reader.remaining:
        decoded_tag, decoded_wire_type = decode_key(reader)
        assert decoded_tag == tag
        assert decoded_wire_type == wire_type
        codec.merge_repeated(decoded_wire_type, roundtrip, reader, DecodeContext())
    assert roundtrip == values


@pytest.mark.parametrize(("codec", "strategy"), ALL, ids=IDS)
@settings(max_examples=50)
@given(data=st.data(), tag=TAGS)
def test_check(codec, strategy, data, tag):
    value = data.draw(strategy)
    check_type(
        value,
        tag,
        codec.wire_type,
        codec.encode,
        lambda wt, r, c: codec.merge(wt, codec.default, r, c),
        codec.encoded_len,
    )


@pytest.mark.parametrize(("codec", "strategy"), ALL, ids=IDS)
@settings(max_examples=50)
@given(data=st.data(), tag=TAGS)
def test_check_repeated(codec, strategy, data, tag):
    values = data.draw(st.lists(strategy, max_size=8))
    check_collection_type(values, tag, codec.wire_type, codec)


@pytest.mark.parametrize(("codec", "strategy"), NUMERIC, ids=NUMERIC_IDS)
@settings(max_examples=50)
@given(data=st.data(), tag=TAGS)
def test_check_packed(codec, strategy, data, tag):
    values = data.draw(st.lists(strategy, max_size=8))

    def decode(wire_type, reader, ctx):
        out = []
        codec.merge_repeated(wire_type, out, reader, ctx)
        return out

    check_type(
        values,
        tag,
        WireType.LENGTH_DELIMITED,
        codec.encode_packed,
        decode,
        codec.encoded_len_packed,
    )


def test_string_merge_invalid_utf8():
    with pytest.raises(DecodeError, match="not UTF-8"):
        STRING.merge(
            WireType.LENGTH_DELIMITED, "", Reader(b"\x02\x80\x80"), DecodeContext()
        )


@pytest.mark.parametrize(
    ("codec", "tag", "value", "expected"),
    [
        (UINT32, 1, 150, b"\x08\x96\x01"),
        (INT32, 1, -1, b"\x08" + b"\xff" * 9 + b"\x01"),
        (SINT32, 1, -1, b"\x08\x01"),
        (SINT64, 1, 1, b"\x08\x02"),
        (BOOL, 3, True, b"\x18\x01"),
        (FIXED32, 1, 1, b"\x0d\x01\x00\x00\x00"),
        (SFIXED64, 2, -2, b"\x11" + b"\xfe" + b"\xff" * 7),
        (DOUBLE, 1, 1.0, b"\x09\x00\x00\x00\x00\x00\x00\xf0\x3f"),
        (FLOAT, 1, 1.0, b"\x0d\x00\x00\x80\x3f"),
        (STRING, 2, "testing", b"\x12\x07testing"),
        (BYTES, 2, b"\x00\x01", b"\x12\x02\x00\x01"),
    ],
)
def test_encode_pinned(codec, tag, value, expected):
    buf = bytearray()
    codec.encode(tag, value, buf)
    assert bytes(buf) == expected
    assert codec.encoded_len(tag, value) == len(expected)


def test_packed_pinned():
    buf = bytearray()
    INT32.encode_packed(4, [3, 270, 86942], buf)
    assert bytes(buf) == b"\x22\x06\x03\x8e\x02\x9e\xa7\x05"


def test_packed_empty_writes_nothing():
    buf = bytearray()
    FIXED64.encode_packed(1, [], buf)
    assert buf == bytearray()
    assert FIXED64.encoded_len_packed(1, []) == 0


def test_int32_decode_truncates_to_32_bits():
    reader = Reader(b"\xff\xff\xff\xff\x1f")  # 2**32 + ... low bits all set
    assert INT32.merge(WireType.VARINT, 0, reader, DecodeContext()) == -1


def test_uint32_decode_truncates():
    reader = Reader(b"\x80\x80\x80\x80\x10")  # 2**32
    assert UINT32.merge(WireType.VARINT, 7, reader, DecodeContext()) == 0


def test_bool_decodes_any_nonzero_as_true():
    reader = Reader(b"\x05")
    assert BOOL.merge(WireType.VARINT, False, reader, DecodeContext()) is True


def test_wrong_wire_type_rejected():
    with pytest.raises(DecodeError, match=r"ThirtyTwoBit \(expected Varint\)"):
        INT32.merge(WireType.THIRTY_TWO_BIT, 0, Reader(b"\x00" * 4), DecodeContext())


def test_fixed_underflow():
    with pytest.raises(DecodeError, match="buffer underflow"):
        FIXED32.merge(WireType.THIRTY_TWO_BIT, 0, Reader(b"\x01\x02"), DecodeContext())


def test_bytes_underflow():
    with pytest.raises(DecodeError, match="buffer underflow"):
        BYTES.merge(WireType.LENGTH_DELIMITED, b"", Reader(b"\x05ab"), DecodeContext())


def test_string_repeated_rejects_packed_wire_type():
    with pytest.raises(DecodeError):
        STRING.merge_repeated(WireType.VARINT, [], Reader(b"\x00"), DecodeContext())


def test_packed_delimited_length_exceeded():
    values = []
    # Length 1, but the varint inside spans two bytes.
    with pytest.raises(DecodeError, match="delimited length exceeded"):
        INT32.merge_repeated(
            WireType.LENGTH_DELIMITED, values, Reader(b"\x01\x80\x01"), DecodeContext()
        )


def test_merge_repeated_unpacked_appends():
    values = [1]
    UINT64.merge_repeated(WireType.VARINT, values, Reader(b"\x2a"), DecodeContext())
    assert values == [1, 42]


@pytest.mark.parametrize(
    ("codec", "value"),
    [
        (INT32, 2**31),
        (UINT32, -1),
        (UINT64, 2**64),
        (SINT32, -(2**31) - 1),
        (FIXED32, 2**32),
        (SFIXED32, 2**31),
    ],
)
def test_out_of_range_values_rejected(codec, value):
    with pytest.raises(ValueError):
        codec.encode(1, value, bytearray())


def test_invalid_tag_rejected():
    with pytest.raises(ValueError):
        UINT32.encode(0, 1, bytearray())