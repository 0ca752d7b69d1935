"""PUBLISH packet codec for MQTT 3.1.1."""

from __future__ import annotations

from ..errors import InvalidQoSError, PacketIdZeroError
from ..packets import Publish, QoS, qos
from .framing import FixedHeader, Reader, write_mqtt_bytes, write_remaining_length


def read(fixed_header: FixedHeader, data: bytes) -> Publish:
    """Decode a framed PUBLISH packet."""
    byte1 = fixed_header.byte1
    qos_num = (byte1 & 0b0110) >> 1
    level = qos(qos_num)
    if level is None:
        raise InvalidQoSError(qos_num)
    dup = bool(byte1 & 0b1000)
    retain = bool(byte1 & 0b0001)

    reader = Reader(data, fixed_header.fixed_header_len)
    topic = reader.read_mqtt_bytes()

    # a packet identifier is present only for QoS > 0
    pkid = 0 if level == QoS.AT_MOST_ONCE else reader.read_u16()
    if level != QoS.AT_MOST_ONCE and pkid == 0:
        raise PacketIdZeroError()

    return Publish(
        topic=topic,
        payload=reader.rest(),
        retain=retain,
        qos=level,
        pkid=pkid,
        dup=dup,
    )


def write(publish: Publish, buffer: bytearray) -> int:
    """Append an encoded PUBLISH packet; return its total size."""
    if publish.qos != QoS.AT_MOST_ONCE and publish.pkid == 0:
        raise PacketIdZeroError()

    remaining = publish.encoded_len()
    buffer.append(
        0b0011_0000
        | int(publish.retain)
        | int(publish.qos) << 1
        | int(publish.dup) << 3
    )
    count = write_remaining_length(buffer, remaining)
    write_mqtt_bytes(buffer, bytes(publish.topic))

    if publish.qos != QoS.AT_MOST_ONCE:
        buffer += publish.pkid.to_bytes(2, "big")

    buffer += publish.payload
    return 1 + count + remaining