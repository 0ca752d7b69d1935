import pytest

from mqttwire.errors import (
    InvalidConnectReturnCodeError,
    InvalidRemainingLengthError,
    MalformedPacketError,
    PayloadSizeIncorrectError,
)
from mqttwire.packets import (
    ConnAck,
    ConnectReturnCode,
    PubAck,
    PubComp,
    PubCompReason,
    PubRec,
    PubRecReason,
    PubRel,
    UnsubAck,
)
from mqttwire.v4 import acks
from mqttwire.v4.framing import check


def _frame(data):
    data = bytes(data)
    return check(data, len(data)), data


def _encode(writer, packet):
    buffer = bytearray()
    size = writer(packet, buffer)
    return size, bytes(buffer)


@pytest.mark.parametrize(
    "value, code",
    [
        (0, ConnectReturnCode.SUCCESS),
        (1, ConnectReturnCode.REFUSED_PROTOCOL_VERSION),
        (2, ConnectReturnCode.CLIENT_IDENTIFIER_NOT_VALID),
        (3, ConnectReturnCode.SERVICE_UNAVAILABLE),
        (4, ConnectReturnCode.BAD_USER_NAME_PASSWORD),
        (5, ConnectReturnCode.NOT_AUTHORIZED),
    ],
)
def test_connack_codes(value, code):
    size, data = _encode(acks.write_connack, ConnAck(session_present=True, code=code))
    assert data[0] == 0x20
    assert data[-1] == value
    assert size == len(data)
    assert acks.read_connack(*_frame(data)) == ConnAck(session_present=True, code=code)


def test_connack_session_flag_roundtrip():
    packet = ConnAck(session_present=False, code=ConnectReturnCode.SUCCESS)
    _, data = _encode(acks.write_connack, packet)
    assert acks.read_connack(*_frame(data)) == packet


def test_connack_invalid_code():
    with pytest.raises(InvalidConnectReturnCodeError) as info:
        acks.read_connack(*_frame(b"\x20\x02\x00\x06"))
    assert info.value.code == 6


def test_connack_unsupported_code_on_write():
    with pytest.raises(ValueError):
        acks.write_connack(ConnAck(False, ConnectReturnCode.BANNED), bytearray())


def test_connack_truncated():
    with pytest.raises(MalformedPacketError):
        acks.read_connack(*_frame(b"\x20\x01\x00"))


@pytest.mark.parametrize(
    "writer, reader, packet, first",
    [
        (acks.write_puback, acks.read_puback, PubAck(pkid=7), 0x40),
        (acks.write_pubrec, acks.read_pubrec, PubRec(pkid=300), 0x50),
        (acks.write_pubrel, acks.read_pubrel, PubRel(pkid=65535), 0x62),
        (acks.write_pubcomp, acks.read_pubcomp, PubComp(pkid=1), 0x70),
        (acks.write_unsuback, acks.read_unsuback, UnsubAck(pkid=42), 0xB0),
    ],
)
def test_pkid_packets_roundtrip(writer, reader, packet, first):
    size, data = _encode(writer, packet)
    assert data[0] == first
    assert data[1] == 2
    assert int.from_bytes(data[2:4], "big") == packet.pkid
    assert size == len(data)
    assert reader(*_frame(data)) == packet


def test_write_appends():
    buffer = bytearray(b"xy")
    acks.write_puback(PubAck(pkid=9), buffer)
    assert buffer[:2] == b"xy"
    assert acks.read_puback(*_frame(buffer[2:])) == PubAck(pkid=9)


def test_puback_wrong_remaining_length():
    with pytest.raises(InvalidRemainingLengthError) as info:
        acks.read_puback(*_frame(b"\x40\x03\x00\x01\x00"))
    assert info.value.length == 3


def test_unsuback_wrong_remaining_length():
    with pytest.raises(PayloadSizeIncorrectError):
        acks.read_unsuback(*_frame(b"\xb0\x03\x00\x01\x00"))


def test_pubrec_ignores_trailing_bytes():
    packet = acks.read_pubrec(*_frame(b"\x50\x04\x00\x05\x10\x00"))
    assert packet.pkid == 5
    assert packet.reason == PubRecReason.SUCCESS


def test_pubcomp_with_reason_byte():
    packet = acks.read_pubcomp(*_frame(b"\x70\x03\x00\x05\x92"))
    assert packet == PubComp(pkid=5, reason=PubCompReason.SUCCESS)


def test_pubrel_too_short():
    with pytest.raises(MalformedPacketError):
        acks.read_pubrel(*_frame(b"\x62\x01\x00"))