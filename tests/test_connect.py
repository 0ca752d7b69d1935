import pytest

from mqttwire.errors import (
    IncorrectPacketFormatError,
    InvalidProtocolError,
    InvalidProtocolLevelError,
    InvalidQoSError,
    MalformedPacketError,
    PayloadNotUtf8Error,
)
from mqttwire.packets import Connect, LastWill, Login, QoS
from mqttwire.v4 import connect
from mqttwire.v4.framing import check

password = "password"


def _encode(packet):
    buffer = bytearray()
    connect.write(packet, buffer)
    return buffer


def _decode(data):
    data = bytes(data)
    header = check(data, len(data))
    return connect.read(header, data)


def _flags_index(frame):
    return bytes(frame).index(b"MQTT") + 5


def test_roundtrip_minimal():
    packet = Connect(keep_alive=30, client_id="client", clean_session=True)
    assert _decode(_encode(packet)) == packet


def test_roundtrip_with_will_and_login():
    packet = Connect(
        keep_alive=10,
        client_id="client",
        clean_session=False,
        last_will=LastWill(b"will/topic", b"bye", QoS.AT_LEAST_ONCE, True),
        login=Login(username="user", password=password),
    )
    assert _decode(_encode(packet)) == packet


def test_header_bytes():
    frame = _encode(Connect(keep_alive=5, client_id="", clean_session=True))
    assert frame[0] == 0x10
    start = bytes(frame).index(b"MQTT")
    assert frame[start - 2 : start] == b"\x00\x04"
    assert frame[start + 4] == 4
    assert frame[start + 5] == 0x02


def test_write_returns_remaining_length():
    buffer = bytearray()
    packet = Connect(
        keep_alive=1,
        client_id="abc",
        clean_session=False,
        login=Login(username="user", password=password),
    )
    returned = connect.write(packet, buffer)
    assert check(bytes(buffer), len(buffer)).remaining_len == returned


def test_write_appends_to_existing_buffer():
    buffer = bytearray(b"prefix")
    packet = Connect(keep_alive=1, client_id="id", clean_session=True)
    connect.write(packet, buffer)
    assert buffer[:6] == b"prefix"
    assert _decode(buffer[6:]) == packet


def test_empty_login_is_not_written():
    packet = Connect(keep_alive=1, client_id="id", clean_session=False, login=Login())
    decoded = _decode(_encode(packet))
    assert decoded.login is None
    assert decoded.client_id == "id"


def test_password_only_login():
    packet = Connect(
        keep_alive=1,
        client_id="id",
        clean_session=False,
        login=Login(username="", password=password),
    )
    assert _decode(_encode(packet)).login == Login(username="", password=password)


def test_invalid_protocol_name():
    frame = _encode(Connect(keep_alive=1, client_id="id", clean_session=True))
    start = bytes(frame).index(b"MQTT")
    frame[start + 3] = ord("X")
    with pytest.raises(InvalidProtocolError):
        _decode(frame)


def test_invalid_protocol_level():
    frame = _encode(Connect(keep_alive=1, client_id="id", clean_session=True))
    frame[_flags_index(frame) - 1] = 5
    with pytest.raises(InvalidProtocolLevelError) as info:
        _decode(frame)
    assert info.value.level == 5


def test_will_bits_without_will_flag():
    frame = _encode(Connect(keep_alive=1, client_id="id", clean_session=False))
    frame[_flags_index(frame)] = 0b0000_1000
    with pytest.raises(IncorrectPacketFormatError):
        _decode(frame)


def test_invalid_will_qos():
    packet = Connect(
        keep_alive=1,
        client_id="id",
        clean_session=False,
        last_will=LastWill(b"t", b"m"),
    )
    frame = _encode(packet)
    frame[_flags_index(frame)] |= 0b0001_1000
    with pytest.raises(InvalidQoSError) as info:
        _decode(frame)
    assert info.value.qos == 3


def test_client_id_not_utf8():
    frame = _encode(Connect(keep_alive=1, client_id="ab", clean_session=False))
    frame[-1] = 0xFF
    with pytest.raises(PayloadNotUtf8Error):
        _decode(frame)


def test_truncated_keep_alive():
    frame = bytearray(b"\x10\x07\x00\x04MQTT\x04")
    with pytest.raises(MalformedPacketError):
        _decode(frame)


def test_validate_login():
    login = Login(username="user", password=password)
    assert connect.validate_login(login, "user", password)
    assert not connect.validate_login(login, "user", "secret")
    assert not connect.validate_login(login, "other", password)