"""MQTT 3.1.1 packet codec: frames packets out of a stream and encodes them."""

from __future__ import annotations

from ..errors import InvalidProtocolError, PayloadRequiredError
from ..packets import (
    ConnAck,
    Connect,
    Disconnect,
    DisconnectReasonCode,
    PingReq,
    PingResp,
    Protocol,
    PubAck,
    PubComp,
    Publish,
    PubRec,
    PubRel,
    SubAck,
    Subscribe,
    UnsubAck,
    Unsubscribe,
)
from . import acks, connect, publish, subscriptions
from .framing import PacketType, check, check_reserved_flags


def write_pingreq(buffer: bytearray) -> int:
    buffer += b"\xc0\x00"
    return 2


def write_pingresp(buffer: bytearray) -> int:
    buffer += b"\xd0\x00"
    return 2


def write_disconnect(disconnect: Disconnect, buffer: bytearray) -> int:
    """Append a DISCONNECT; 3.1.1 carries neither reason code nor properties."""
    buffer += b"\xe0\x00"
    return 2


_READERS = {
    PacketType.CONNECT: connect.read,
    PacketType.CONNACK: acks.read_connack,
    PacketType.PUBLISH: publish.read,
    PacketType.PUBACK: acks.read_puback,
    PacketType.SUBSCRIBE: subscriptions.read_subscribe,
    PacketType.SUBACK: subscriptions.read_suback,
    PacketType.UNSUBSCRIBE: subscriptions.read_unsubscribe,
    PacketType.UNSUBACK: acks.read_unsuback,
    PacketType.PUBREC: acks.read_pubrec,
    PacketType.PUBREL: acks.read_pubrel,
    PacketType.PUBCOMP: acks.read_pubcomp,
}


class V4(Protocol):
    """The MQTT 3.1.1 wire format."""

    def read_mut(self, stream: bytearray, max_size: int):
        """Remove the next complete packet from ``stream`` and decode it.

        The stream is left untouched if it does not yet hold a whole packet.
        """
        fixed_header = check(stream, max_size)

        frame_length = fixed_header.frame_length()
        packet = bytes(stream[:frame_length])
        del stream[:frame_length]

        packet_type = fixed_header.packet_type()
        check_reserved_flags(packet_type, fixed_header.byte1)

        if fixed_header.remaining_len == 0:
            if packet_type == PacketType.PINGREQ:
                return PingReq()
            if packet_type == PacketType.PINGRESP:
                return PingResp()
            if packet_type == PacketType.DISCONNECT:
                return Disconnect(reason_code=DisconnectReasonCode.NORMAL_DISCONNECTION)
            raise PayloadRequiredError()

        if packet_type == PacketType.PINGREQ:
            return PingReq()
        if packet_type == PacketType.PINGRESP:
            return PingResp()
        if packet_type == PacketType.DISCONNECT:
            # a DISCONNECT with a body only exists in MQTT 5
            raise InvalidProtocolError()

        return _READERS[packet_type](fixed_header, packet)

    def write(self, packet, buffer: bytearray) -> int:
        """Append the encoding of ``packet`` to ``buffer``.

        Packets carrying MQTT 5 properties cannot be encoded and raise
        ``ValueError``; CONNACK properties are ignored.
        """
        match packet:
            case Connect(properties=None, last_will_properties=None):
                return connect.write(packet, buffer)
            case ConnAck():
                return acks.write_connack(packet, buffer)
            case Publish(properties=None):
                return publish.write(packet, buffer)
            case PubAck(properties=None):
                return acks.write_puback(packet, buffer)
            case Subscribe(properties=None):
                return subscriptions.write_subscribe(packet, buffer)
            case SubAck(properties=None):
                return subscriptions.write_suback(packet, buffer)
            case PubRec(properties=None):
                return acks.write_pubrec(packet, buffer)
            case PubRel(properties=None):
                return acks.write_pubrel(packet, buffer)
            case PubComp(properties=None):
                return acks.write_pubcomp(packet, buffer)
            case Unsubscribe(properties=None):
                return subscriptions.write_unsubscribe(packet, buffer)
            case UnsubAck(properties=None):
                return acks.write_unsuback(packet, buffer)
            case Disconnect(properties=None):
                return write_disconnect(packet, buffer)
            case PingReq():
                return write_pingreq(buffer)
            case PingResp():
                return write_pingresp(buffer)
        raise ValueError(f"packet cannot be encoded as MQTT 3.1.1: {packet!r}")