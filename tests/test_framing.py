import pytest

from mqttwire.errors import (
    BoundaryCrossedError,
    InsufficientBytesError,
    InvalidPacketTypeError,
    MalformedPacketError,
    MalformedRemainingLengthError,
    PayloadSizeLimitExceededError,
    PayloadTooLongError,
    TopicNotUtf8Error,
)
from mqttwire.v4.framing import (
    FixedHeader,
    PacketType,
    Reader,
    check,
    check_reserved_flags,
    len_len,
    length,
    parse_fixed_header,
    write_mqtt_bytes,
    write_mqtt_string,
    write_remaining_length,
)


@pytest.mark.parametrize(
    "value", [0, 1, 127, 128, 16_383, 16_384, 2_097_151, 2_097_152, 268_435_455]
)
def test_remaining_length_round_trip(value):
    buffer = bytearray()
    count = write_remaining_length(buffer, value)
    assert count == len(buffer)
    assert count == len_len(value)
    assert length(buffer) == (count, value)


def test_remaining_length_max_encoding():
    buffer = bytearray()
    write_remaining_length(buffer, 268_435_455)
    assert bytes(buffer) == b"\xff\xff\xff\x7f"


def test_remaining_length_too_long():
    with pytest.raises(PayloadTooLongError):
        write_remaining_length(bytearray(), 268_435_456)


def test_length_malformed_after_four_continuation_bytes():
    with pytest.raises(MalformedRemainingLengthError):
        length(bytes([0xFF] * 5))


def test_length_needs_more_bytes():
    with pytest.raises(InsufficientBytesError) as info:
        length(bytes([0x80]))
    assert info.value.needed == 1


@pytest.mark.parametrize("stream", [b"", b"\x30"])
def test_parse_fixed_header_needs_two_bytes(stream):
    with pytest.raises(InsufficientBytesError) as info:
        parse_fixed_header(stream)
    assert info.value.needed == 2 - len(stream)


def test_check_complete_frame():
    data = bytearray([0x30])
    write_remaining_length(data, 3)
    data += b"a/b"
    header = check(data, 10)
    assert header.byte1 == 0x30
    assert header.remaining_len == 3
    assert header.frame_length() == len(data)


def test_check_ignores_trailing_bytes():
    data = bytearray([0xC0, 0x00]) + b"extra"
    header = check(data, 10)
    assert header.frame_length() == 2
    assert header.packet_type() is PacketType.PINGREQ


def test_check_insufficient_bytes():
    stream = b"\x30\x05abc"
    header = parse_fixed_header(stream)
    with pytest.raises(InsufficientBytesError) as info:
        check(stream, 100)
    assert info.value.needed == header.frame_length() - len(stream)


def test_check_size_limit():
    data = bytearray([0x30])
    write_remaining_length(data, 3)
    data += b"a/b"
    with pytest.raises(PayloadSizeLimitExceededError) as info:
        check(data, 2)
    assert info.value.size == 3


def test_fixed_header_from_lengths():
    header = FixedHeader.from_lengths(0x30, 2, 200)
    assert header.fixed_header_len == 2 + 1
    assert header.frame_length() == header.fixed_header_len + 200


@pytest.mark.parametrize("packet_type", list(PacketType))
def test_packet_type_round_trip(packet_type):
    header = FixedHeader.from_lengths(packet_type << 4, 1, 0)
    assert header.packet_type() is packet_type


@pytest.mark.parametrize("num", [0, 15])
def test_packet_type_invalid(num):
    with pytest.raises(InvalidPacketTypeError) as info:
        FixedHeader.from_lengths(num << 4, 1, 0).packet_type()
    assert info.value.packet_type == num


def test_check_reserved_flags():
    assert check_reserved_flags(PacketType.PUBLISH, 0x3F) is None
    assert check_reserved_flags(PacketType.PUBREL, 0x62) is None
    with pytest.raises(MalformedPacketError):
        check_reserved_flags(PacketType.PUBREL, 0x60)
    with pytest.raises(MalformedPacketError):
        check_reserved_flags(PacketType.SUBSCRIBE, 0x80)
    with pytest.raises(MalformedPacketError):
        check_reserved_flags(PacketType.CONNECT, 0x12)


def test_reader_reads_fields_in_order():
    data = bytearray()
    write_mqtt_string(data, "a/b")
    data += b"\x01\x02"
    reader = Reader(data)
    assert reader.read_mqtt_string() == "a/b"
    assert reader.read_u16() == 0x0102
    assert len(reader) == 0
    with pytest.raises(MalformedPacketError):
        reader.read_u8()


def test_reader_start_offset_and_rest():
    reader = Reader(b"\x30\x03xyz", start=2)
    assert reader.rest() == b"xyz"
    assert reader.rest() == b""


def test_reader_read_u16_short():
    with pytest.raises(MalformedPacketError):
        Reader(b"\x01").read_u16()


def test_reader_boundary_crossed():
    with pytest.raises(BoundaryCrossedError) as info:
        Reader(b"\x00\x05ab").read_mqtt_bytes()
    assert info.value.length == 5


def test_reader_string_not_utf8():
    data = bytearray()
    write_mqtt_bytes(data, b"\xff\xfe")
    with pytest.raises(TopicNotUtf8Error):
        Reader(data).read_mqtt_string()


def test_write_mqtt_bytes_round_trip():
    data = bytearray()
    write_mqtt_bytes(data, b"payload")
    assert len(data) == 2 + len(b"payload")
    assert Reader(data).read_mqtt_bytes() == b"payload"