"""Codecs for the MQTT 3.1.1 acknowledgement packets."""

from __future__ import annotations

from ..errors import (
    InvalidConnectReturnCodeError,
    InvalidRemainingLengthError,
    PayloadSizeIncorrectError,
)
from ..packets import (
    ConnAck,
    ConnectReturnCode,
    PubAck,
    PubComp,
    PubRec,
    PubRel,
    UnsubAck,
)
from .framing import FixedHeader, Reader, write_remaining_length

# MQTT 3.1.1 connect return codes do not use the >= 0x80 error range.
_RETURN_CODES = {
    0: ConnectReturnCode.SUCCESS,
    1: ConnectReturnCode.REFUSED_PROTOCOL_VERSION,
    2: ConnectReturnCode.CLIENT_IDENTIFIER_NOT_VALID,
    3: ConnectReturnCode.SERVICE_UNAVAILABLE,
    4: ConnectReturnCode.BAD_USER_NAME_PASSWORD,
    5: ConnectReturnCode.NOT_AUTHORIZED,
}
_CODE_VALUES = {code: value for value, code in _RETURN_CODES.items()}


def _write_pkid_packet(first_byte: int, pkid: int, buffer: bytearray) -> int:
    buffer.append(first_byte)
    count = write_remaining_length(buffer, 2)
    buffer += pkid.to_bytes(2, "big")
    return 1 + count + 2


def read_connack(fixed_header: FixedHeader, data: bytes) -> ConnAck:
    reader = Reader(data, fixed_header.fixed_header_len)
    flags = reader.read_u8()
    return_code = reader.read_u8()

    code = _RETURN_CODES.get(return_code)
    if code is None:
        raise InvalidConnectReturnCodeError(return_code)
    return ConnAck(session_present=(flags & 0x01) == 1, code=code)


def write_connack(connack: ConnAck, buffer: bytearray) -> int:
    """Append a CONNACK; codes without a 3.1.1 value raise ``ValueError``."""
    value = _CODE_VALUES.get(connack.code)
    if value is None:
        raise ValueError(f"unsupported CONNACK code: {connack.code!r}")

    buffer.append(0x20)
    count = write_remaining_length(buffer, 2)
    buffer.append(int(connack.session_present))
    buffer.append(value)
    return 1 + count + 2


def read_puback(fixed_header: FixedHeader, data: bytes) -> PubAck:
    if fixed_header.remaining_len != 2:
        raise InvalidRemainingLengthError(fixed_header.remaining_len)
    reader = Reader(data, fixed_header.fixed_header_len)
    return PubAck(pkid=reader.read_u16())


def write_puback(puback: PubAck, buffer: bytearray) -> int:
    return _write_pkid_packet(0x40, puback.pkid, buffer)


def read_pubrec(fixed_header: FixedHeader, data: bytes) -> PubRec:
    reader = Reader(data, fixed_header.fixed_header_len)
    return PubRec(pkid=reader.read_u16())


def write_pubrec(pubrec: PubRec, buffer: bytearray) -> int:
    return _write_pkid_packet(0x50, pubrec.pkid, buffer)


def read_pubrel(fixed_header: FixedHeader, data: bytes) -> PubRel:
    reader = Reader(data, fixed_header.fixed_header_len)
    return PubRel(pkid=reader.read_u16())


def write_pubrel(pubrel: PubRel, buffer: bytearray) -> int:
    return _write_pkid_packet(0x62, pubrel.pkid, buffer)


def read_pubcomp(fixed_header: FixedHeader, data: bytes) -> PubComp:
    reader = Reader(data, fixed_header.fixed_header_len)
    return PubComp(pkid=reader.read_u16())


def write_pubcomp(pubcomp: PubComp, buffer: bytearray) -> int:
    return _write_pkid_packet(0x70, pubcomp.pkid, buffer)


def read_unsuback(fixed_header: FixedHeader, data: bytes) -> UnsubAck:
    if fixed_header.remaining_len != 2:
        raise PayloadSizeIncorrectError()
    reader = Reader(data, fixed_header.fixed_header_len)
    return UnsubAck(pkid=reader.read_u16(), reasons=[])


def write_unsuback(unsuback: UnsubAck, buffer: bytearray) -> int:
    buffer += b"\xb0\x02"
    buffer += unsuback.pkid.to_bytes(2, "big")
    return 4