"""SUBSCRIBE, SUBACK and UNSUBSCRIBE codecs for MQTT 3.1.1."""

from __future__ import annotations

from ..errors import (
    EmptySubscriptionError,
    InvalidQoSError,
    InvalidSubscribeReasonCodeError,
    MalformedPacketError,
    PayloadNotUtf8Error,
)
from ..packets import (
    Filter,
    RetainForwardRule,
    SubAck,
    Subscribe,
    SubscribeReasonCode,
    Unsubscribe,
    qos,
)
from .framing import FixedHeader, Reader, write_mqtt_string, write_remaining_length

_SUBACK_FAILURE = 0x80


def _decode(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadNotUtf8Error(str(exc)) from None


def _filter_len(subscription: Filter) -> int:
    # length prefix, path, options byte
    return 2 + len(subscription.path.encode("utf-8")) + 1


def _read_filters(reader: Reader) -> list[Filter]:
    filters = []
    while len(reader):
        path = _decode(reader.read_mqtt_bytes())
        options = reader.read_u8()
        requested = options & 0b0000_0011
        level = qos(requested)
        if level is None:
            raise InvalidQoSError(requested)
        filters.append(
            Filter(
                path=path,
                qos=level,
                nolocal=False,
                preserve_retain=False,
                retain_forward_rule=RetainForwardRule.ON_EVERY_SUBSCRIBE,
            )
        )
    return filters


def read_subscribe(fixed_header: FixedHeader, data: bytes) -> Subscribe:
    """Decode a framed SUBSCRIBE packet; at least one filter is required."""
    reader = Reader(data, fixed_header.fixed_header_len)
    pkid = reader.read_u16()
    filters = _read_filters(reader)
    if not filters:
        raise EmptySubscriptionError()
    return Subscribe(pkid=pkid, filters=filters)


def write_subscribe(subscribe: Subscribe, buffer: bytearray) -> int:
    """Append an encoded SUBSCRIBE packet; return its total size."""
    remaining = 2 + sum(_filter_len(f) for f in subscribe.filters)

    buffer.append(0x82)
    count = write_remaining_length(buffer, remaining)
    buffer += subscribe.pkid.to_bytes(2, "big")
    for subscription in subscribe.filters:
        write_mqtt_string(buffer, subscription.path)
        buffer.append(int(subscription.qos))

    return 1 + count + remaining


def _reason(code: int) -> SubscribeReasonCode:
    if code == _SUBACK_FAILURE:
        return SubscribeReasonCode.FAILURE
    level = qos(code)
    if level is None:
        raise InvalidSubscribeReasonCodeError(code)
    return SubscribeReasonCode.success(level)


def _code(reason: SubscribeReasonCode) -> int:
    # only 0x00, 0x01, 0x02 and 0x80 are allowed in a 3.1.1 SUBACK
    granted = reason.granted_qos
    return _SUBACK_FAILURE if granted is None else int(granted)


def read_suback(fixed_header: FixedHeader, data: bytes) -> SubAck:
    """Decode a framed SUBACK packet; at least one return code is required."""
    reader = Reader(data, fixed_header.fixed_header_len)
    pkid = reader.read_u16()
    if not len(reader):
        raise MalformedPacketError()

    return_codes = []
    while len(reader):
        return_codes.append(_reason(reader.read_u8()))
    return SubAck(pkid=pkid, return_codes=return_codes)


def write_suback(suback: SubAck, buffer: bytearray) -> int:
    """Append an encoded SUBACK packet; return its total size."""
    remaining = suback.encoded_len()

    buffer.append(0x90)
    count = write_remaining_length(buffer, remaining)
    buffer += suback.pkid.to_bytes(2, "big")
    buffer += bytes(_code(reason) for reason in suback.return_codes)

    return 1 + count + remaining


def read_unsubscribe(fixed_header: FixedHeader, data: bytes) -> Unsubscribe:
    """Decode a framed UNSUBSCRIBE packet."""
    reader = Reader(data, fixed_header.fixed_header_len)
    pkid = reader.read_u16()

    payload_bytes = fixed_header.remaining_len - 2
    filters = []
    while payload_bytes > 0:
        topic_filter = reader.read_mqtt_string()
        payload_bytes -= len(topic_filter.encode("utf-8")) + 2
        filters.append(topic_filter)

    return Unsubscribe(pkid=pkid, filters=filters)


def write_unsubscribe(unsubscribe: Unsubscribe, buffer: bytearray) -> int:
    """Append an encoded UNSUBSCRIBE packet; return its total size."""
    remaining = 2 + sum(len(topic.encode("utf-8")) + 2 for topic in unsubscribe.filters)

    buffer.append(0xA2)
    count = write_remaining_length(buffer, remaining)
    buffer += unsubscribe.pkid.to_bytes(2, "big")
    for topic in unsubscribe.filters:
        write_mqtt_string(buffer, topic)

    return 1 + count + remaining