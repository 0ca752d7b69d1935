"""Fixed-header framing and primitive field codecs for MQTT 3.1.1."""

from __future__ import annotations

import enum
import itertools
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..errors import (
    BoundaryCrossedError,
    InsufficientBytesError,
    InvalidPacketTypeError,
    MalformedPacketError,
    MalformedRemainingLengthError,
    PayloadSizeLimitExceededError,
    PayloadTooLongError,
    TopicNotUtf8Error,
)

MAX_REMAINING_LENGTH = 268_435_455


class PacketType(enum.IntEnum):
    """MQTT control packet type, the high nibble of the first byte."""

    CONNECT = 1
    CONNACK = 2
    PUBLISH = 3
    PUBACK = 4
    PUBREC = 5
    PUBREL = 6
    PUBCOMP = 7
    SUBSCRIBE = 8
    SUBACK = 9
    UNSUBSCRIBE = 10
    UNSUBACK = 11
    PINGREQ = 12
    PINGRESP = 13
    DISCONNECT = 14


@dataclass(frozen=True)
class FixedHeader:
    """First byte of a packet plus its decoded remaining length.

    ``fixed_header_len`` counts the first byte and the 1 to 4 bytes of
    the remaining length; ``remaining_len`` covers variable header and payload.
    """

    byte1: int
    fixed_header_len: int
    remaining_len: int

    @classmethod
    def from_lengths(cls, byte1: int, remaining_len_len: int, remaining_len: int) -> FixedHeader:
        return cls(byte1, remaining_len_len + 1, remaining_len)

    def packet_type(self) -> PacketType:
        num = self.byte1 >> 4
        try:
            return PacketType(num)
        except ValueError:
            raise InvalidPacketTypeError(num) from None

    def frame_length(self) -> int:
        """Size of the whole packet: fixed header, variable header and payload."""
        return self.fixed_header_len + self.remaining_len


def check(stream: Sequence[int], max_packet_size: int) -> FixedHeader:
    """Return the fixed header if ``stream`` holds a complete packet.

    The stream itself is not consumed.
    """
    fixed_header = parse_fixed_header(stream)

    # Refuse oversized packets before waiting for all of their data.
    if fixed_header.remaining_len > max_packet_size:
        raise PayloadSizeLimitExceededError(fixed_header.remaining_len)

    frame_length = fixed_header.frame_length()
    if len(stream) < frame_length:
        raise InsufficientBytesError(frame_length - len(stream))

    return fixed_header


def parse_fixed_header(stream: Sequence[int]) -> FixedHeader:
    """Decode the first byte and remaining length at the start of ``stream``."""
    stream_len = len(stream)
    if stream_len < 2:
        raise InsufficientBytesError(2 - stream_len)

    len_len, remaining = length(itertools.islice(stream, 1, None))
    return FixedHeader.from_lengths(stream[0], len_len, remaining)


def length(stream: Iterable[int]) -> tuple[int, int]:
    """Decode a variable byte integer; return ``(bytes used, value)``."""
    value = 0
    shift = 0
    for count, byte in enumerate(stream, start=1):
        value += (byte & 0x7F) << shift
        if not byte & 0x80:
            return count, value

        shift += 7
        # at most four bytes: shifts of 0, 7, 14 and 21
        if shift > 21:
            raise MalformedRemainingLengthError()

    raise InsufficientBytesError(1)


class Reader:
    """Cursor over a framed packet that checks every read against its end."""

    def __init__(self, data: bytes, start: int = 0) -> None:
        self._data = bytes(data)
        self._pos = start

    def __len__(self) -> int:
        return max(0, len(self._data) - self._pos)

    def _take(self, count: int) -> bytes:
        chunk = self._data[self._pos : self._pos + count]
        self._pos += count
        return chunk

    def read_u8(self) -> int:
        if len(self) < 1:
            raise MalformedPacketError()
        return self._take(1)[0]

    def read_u16(self) -> int:
        if len(self) < 2:
            raise MalformedPacketError()
        return int.from_bytes(self._take(2), "big")

    def read_mqtt_bytes(self) -> bytes:
        """Read a two-byte length followed by that many bytes."""
        size = self.read_u16()
        if size > len(self):
            raise BoundaryCrossedError(size)
        return self._take(size)

    def read_mqtt_string(self) -> str:
        raw = self.read_mqtt_bytes()
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            raise TopicNotUtf8Error() from None

    def rest(self) -> bytes:
        """Return everything not yet read and move to the end."""
        return self._take(len(self))


def write_mqtt_bytes(buffer: bytearray, data: bytes) -> None:
    """Append ``data`` prefixed with its two-byte length."""
    buffer += (len(data) & 0xFFFF).to_bytes(2, "big")
    buffer += data


def write_mqtt_string(buffer: bytearray, string: str) -> None:
    write_mqtt_bytes(buffer, string.encode("utf-8"))


def write_remaining_length(buffer: bytearray, length: int) -> int:
    """Append ``length`` as a variable byte integer; return bytes written."""
    if length > MAX_REMAINING_LENGTH:
        raise PayloadTooLongError()

    count = 0
    while True:
        length, byte = divmod(length, 128)
        if length:
            byte |= 0x80
        buffer.append(byte)
        count += 1
        if not length:
            return count


def len_len(length: int) -> int:
    """Number of bytes needed to encode ``length`` as a remaining length."""
    if length >= 2_097_152:
        return 4
    if length >= 16_384:
        return 3
    if length >= 128:
        return 2
    return 1


_RESERVED_0010 = frozenset({PacketType.PUBREL, PacketType.SUBSCRIBE, PacketType.UNSUBSCRIBE})


def check_reserved_flags(packet_type: PacketType, byte1: int) -> None:
    """Raise if the reserved low-nibble flags of ``byte1`` are wrong for the type."""
    if packet_type == PacketType.PUBLISH:
        return
    expected = 0b0010 if packet_type in _RESERVED_0010 else 0b0000
    if byte1 & 0b1111 != expected:
        raise MalformedPacketError()