"""CONNECT packet codec for MQTT 3.1.1."""

from __future__ import annotations

from ..errors import (
    IncorrectPacketFormatError,
    InvalidProtocolError,
    InvalidProtocolLevelError,
    InvalidQoSError,
    PayloadNotUtf8Error,
)
from ..packets import Connect, LastWill, Login, qos
from .framing import (
    FixedHeader,
    Reader,
    write_mqtt_bytes,
    write_mqtt_string,
    write_remaining_length,
)

PROTOCOL_NAME = "MQTT"
PROTOCOL_LEVEL = 4

_CLEAN_SESSION = 0x02
_WILL_FLAG = 0x04
_WILL_QOS_MASK = 0b0001_1000
_WILL_RETAIN = 0x20
_PASSWORD_FLAG = 0x40
_USERNAME_FLAG = 0x80


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadNotUtf8Error(str(exc)) from None


def _will_len(will: LastWill) -> int:
    return 2 + len(will.topic) + 2 + len(will.message)


def _login_len(login: Login) -> int:
    size = 0
    if login.username:
        size += 2 + len(login.username.encode("utf-8"))
    if login.password:
        size += 2 + len(login.password.encode("utf-8"))
    return size


def _remaining_len(connect: Connect) -> int:
    # protocol name, level, flags, keep alive
    size = 2 + len(PROTOCOL_NAME) + 1 + 1 + 2
    size += 2 + len(connect.client_id.encode("utf-8"))
    if connect.last_will is not None:
        size += _will_len(connect.last_will)
    if connect.login is not None:
        size += _login_len(connect.login)
    return size


def _read_will(flags: int, reader: Reader) -> LastWill | None:
    if not flags & _WILL_FLAG:
        if flags & 0b0011_1000:
            raise IncorrectPacketFormatError()
        return None

    topic = reader.read_mqtt_bytes()
    message = reader.read_mqtt_bytes()
    qos_num = (flags & _WILL_QOS_MASK) >> 3
    level = qos(qos_num)
    if level is None:
        raise InvalidQoSError(qos_num)
    return LastWill(
        topic=topic,
        message=message,
        qos=level,
        retain=bool(flags & _WILL_RETAIN),
    )


def _read_login(flags: int, reader: Reader) -> Login | None:
    username = _decode(reader.read_mqtt_bytes()) if flags & _USERNAME_FLAG else ""
    password = _decode(reader.read_mqtt_bytes()) if flags & _PASSWORD_FLAG else ""
    if not username and not password:
        return None
    return Login(username=username, password=password)


def read(fixed_header: FixedHeader, data: bytes) -> Connect:
    """Decode a framed CONNECT packet, including its will and login."""
    reader = Reader(data, fixed_header.fixed_header_len)

    protocol_name = _decode(reader.read_mqtt_bytes())
    protocol_level = reader.read_u8()
    if protocol_name != PROTOCOL_NAME:
        raise InvalidProtocolError()
    if protocol_level != PROTOCOL_LEVEL:
        raise InvalidProtocolLevelError(protocol_level)

    flags = reader.read_u8()
    clean_session = bool(flags & _CLEAN_SESSION)
    keep_alive = reader.read_u16()
    client_id = _decode(reader.read_mqtt_bytes())
    last_will = _read_will(flags, reader)
    login = _read_login(flags, reader)

    return Connect(
        keep_alive=keep_alive,
        client_id=client_id,
        clean_session=clean_session,
        last_will=last_will,
        login=login,
    )


def write(connect: Connect, buffer: bytearray) -> int:
    """Append an encoded CONNECT packet; return its remaining length."""
    remaining = _remaining_len(connect)

    buffer.append(0b0001_0000)
    write_remaining_length(buffer, remaining)
    write_mqtt_string(buffer, PROTOCOL_NAME)
    buffer.append(PROTOCOL_LEVEL)

    flags_index = len(buffer)
    buffer.append(0)
    buffer += connect.keep_alive.to_bytes(2, "big")
    write_mqtt_string(buffer, connect.client_id)

    flags = _CLEAN_SESSION if connect.clean_session else 0

    will = connect.last_will
    if will is not None:
        flags |= _WILL_FLAG | int(will.qos) << 3
        if will.retain:
            flags |= _WILL_RETAIN
        write_mqtt_bytes(buffer, will.topic)
        write_mqtt_bytes(buffer, will.message)

    login = connect.login
    if login is not None:
        if login.username:
            flags |= _USERNAME_FLAG
            write_mqtt_string(buffer, login.username)
        if login.password:
            flags |= _PASSWORD_FLAG
            write_mqtt_string(buffer, login.password)

    buffer[flags_index] = flags
    return remaining


def validate_login(login: Login, username: str, password: str) -> bool:
    """Return whether ``login`` carries exactly these credentials."""
    return login.username == username and login.password == password