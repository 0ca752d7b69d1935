"""Protocol-independent MQTT packet structures."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field
from typing import Union

from .errors import MalformedPacketError


class QoS(enum.IntEnum):
    """Quality of service."""

    AT_MOST_ONCE = 0
    AT_LEAST_ONCE = 1
    EXACTLY_ONCE = 2


def qos(num: int) -> QoS | None:
    """Map a number to a QoS level, or ``None`` if it is not one."""
    try:
        return QoS(num)
    except ValueError:
        return None


class ConnectReturnCode(enum.Enum):
    """Return code in CONNACK, covering both MQTT 3.1.1 and 5."""

    SUCCESS = enum.auto()
    REFUSED_PROTOCOL_VERSION = enum.auto()
    SERVICE_UNAVAILABLE = enum.auto()
    UNSPECIFIED_ERROR = enum.auto()
    MALFORMED_PACKET = enum.auto()
    PROTOCOL_ERROR = enum.auto()
    IMPLEMENTATION_SPECIFIC_ERROR = enum.auto()
    UNSUPPORTED_PROTOCOL_VERSION = enum.auto()
    CLIENT_IDENTIFIER_NOT_VALID = enum.auto()
    BAD_USER_NAME_PASSWORD = enum.auto()
    NOT_AUTHORIZED = enum.auto()
    SERVER_UNAVAILABLE = enum.auto()
    SERVER_BUSY = enum.auto()
    BANNED = enum.auto()
    BAD_AUTHENTICATION_METHOD = enum.auto()
    TOPIC_NAME_INVALID = enum.auto()
    PACKET_TOO_LARGE = enum.auto()
    QUOTA_EXCEEDED = enum.auto()
    PAYLOAD_FORMAT_INVALID = enum.auto()
    RETAIN_NOT_SUPPORTED = enum.auto()
    QOS_NOT_SUPPORTED = enum.auto()
    USE_ANOTHER_SERVER = enum.auto()
    SERVER_MOVED = enum.auto()
    CONNECTION_RATE_EXCEEDED = enum.auto()


class PubAckReason(enum.Enum):
    SUCCESS = enum.auto()
    NO_MATCHING_SUBSCRIBERS = enum.auto()
    UNSPECIFIED_ERROR = enum.auto()
    IMPLEMENTATION_SPECIFIC_ERROR = enum.auto()
    NOT_AUTHORIZED = enum.auto()
    TOPIC_NAME_INVALID = enum.auto()
    PACKET_IDENTIFIER_IN_USE = enum.auto()
    QUOTA_EXCEEDED = enum.auto()
    PAYLOAD_FORMAT_INVALID = enum.auto()


class SubscribeReasonCode(enum.Enum):
    """Reason code in SUBACK; the success codes carry the granted QoS."""

    SUCCESS_AT_MOST_ONCE = enum.auto()
    SUCCESS_AT_LEAST_ONCE = enum.auto()
    SUCCESS_EXACTLY_ONCE = enum.auto()
    FAILURE = enum.auto()
    UNSPECIFIED = enum.auto()
    IMPLEMENTATION_SPECIFIC = enum.auto()
    NOT_AUTHORIZED = enum.auto()
    TOPIC_FILTER_INVALID = enum.auto()
    PKID_IN_USE = enum.auto()
    QUOTA_EXCEEDED = enum.auto()
    SHARED_SUBSCRIPTIONS_NOT_SUPPORTED = enum.auto()
    SUBSCRIPTION_ID_NOT_SUPPORTED = enum.auto()
    WILDCARD_SUBSCRIPTIONS_NOT_SUPPORTED = enum.auto()

    @classmethod
    def success(cls, granted: QoS) -> SubscribeReasonCode:
        """Return the success code granting ``granted``."""
        return _SUCCESS_BY_QOS[QoS(granted)]

    @property
    def granted_qos(self) -> QoS | None:
        """The QoS granted by a success code, ``None`` for failures."""
        return _QOS_BY_SUCCESS.get(self)


_SUCCESS_BY_QOS = {
    QoS.AT_MOST_ONCE: SubscribeReasonCode.SUCCESS_AT_MOST_ONCE,
    QoS.AT_LEAST_ONCE: SubscribeReasonCode.SUCCESS_AT_LEAST_ONCE,
    QoS.EXACTLY_ONCE: SubscribeReasonCode.SUCCESS_EXACTLY_ONCE,
}
_QOS_BY_SUCCESS = {code: level for level, code in _SUCCESS_BY_QOS.items()}


class RetainForwardRule(enum.Enum):
    ON_EVERY_SUBSCRIBE = enum.auto()
    ON_NEW_SUBSCRIBE = enum.auto()
    NEVER = enum.auto()


class UnsubAckReason(enum.Enum):
    SUCCESS = enum.auto()
    NO_SUBSCRIPTION_EXISTED = enum.auto()
    UNSPECIFIED_ERROR = enum.auto()
    IMPLEMENTATION_SPECIFIC_ERROR = enum.auto()
    NOT_AUTHORIZED = enum.auto()
    TOPIC_FILTER_INVALID = enum.auto()
    PACKET_IDENTIFIER_IN_USE = enum.auto()


class PubRecReason(enum.Enum):
    SUCCESS = enum.auto()
    NO_MATCHING_SUBSCRIBERS = enum.auto()
    UNSPECIFIED_ERROR = enum.auto()
    IMPLEMENTATION_SPECIFIC_ERROR = enum.auto()
    NOT_AUTHORIZED = enum.auto()
    TOPIC_NAME_INVALID = enum.auto()
    PACKET_IDENTIFIER_IN_USE = enum.auto()
    QUOTA_EXCEEDED = enum.auto()
    PAYLOAD_FORMAT_INVALID = enum.auto()


class PubCompReason(enum.Enum):
    SUCCESS = enum.auto()
    PACKET_IDENTIFIER_NOT_FOUND = enum.auto()


class PubRelReason(enum.Enum):
    SUCCESS = enum.auto()
    PACKET_IDENTIFIER_NOT_FOUND = enum.auto()


class DisconnectReasonCode(enum.Enum):
    NORMAL_DISCONNECTION = enum.auto()
    DISCONNECT_WITH_WILL_MESSAGE = enum.auto()
    UNSPECIFIED_ERROR = enum.auto()
    MALFORMED_PACKET = enum.auto()
    PROTOCOL_ERROR = enum.auto()
    IMPLEMENTATION_SPECIFIC_ERROR = enum.auto()
    NOT_AUTHORIZED = enum.auto()
    SERVER_BUSY = enum.auto()
    SERVER_SHUTTING_DOWN = enum.auto()
    KEEP_ALIVE_TIMEOUT = enum.auto()
    SESSION_TAKEN_OVER = enum.auto()
    TOPIC_FILTER_INVALID = enum.auto()
    TOPIC_NAME_INVALID = enum.auto()
    RECEIVE_MAXIMUM_EXCEEDED = enum.auto()
    TOPIC_ALIAS_INVALID = enum.auto()
    PACKET_TOO_LARGE = enum.auto()
    MESSAGE_RATE_TOO_HIGH = enum.auto()
    QUOTA_EXCEEDED = enum.auto()
    ADMINISTRATIVE_ACTION = enum.auto()
    PAYLOAD_FORMAT_INVALID = enum.auto()
    RETAIN_NOT_SUPPORTED = enum.auto()
    QOS_NOT_SUPPORTED = enum.auto()
    USE_ANOTHER_SERVER = enum.auto()
    SERVER_MOVED = enum.auto()
    SHARED_SUBSCRIPTION_NOT_SUPPORTED = enum.auto()
    CONNECTION_RATE_EXCEEDED = enum.auto()
    MAXIMUM_CONNECT_TIME = enum.auto()
    SUBSCRIPTION_IDENTIFIERS_NOT_SUPPORTED = enum.auto()
    WILDCARD_SUBSCRIPTIONS_NOT_SUPPORTED = enum.auto()


UserProperties = list[tuple[str, str]]


# ------------------------------------------------------------- ping


@dataclass(frozen=True)
class PingReq:
    """PINGREQ packet."""


@dataclass(frozen=True)
class PingResp:
    """PINGRESP packet."""


# ------------------------------------------------------------- connect


@dataclass
class ConnectProperties:
    session_expiry_interval: int | None = None
    receive_maximum: int | None = None
    max_packet_size: int | None = None
    topic_alias_max: int | None = None
    request_response_info: int | None = None
    request_problem_info: int | None = None
    user_properties: UserProperties = field(default_factory=list)
    authentication_method: str | None = None
    authentication_data: bytes | None = None


@dataclass
class LastWill:
    """Message the broker publishes on behalf of a client that goes away."""

    topic: bytes
    message: bytes
    qos: QoS = QoS.AT_MOST_ONCE
    retain: bool = False


@dataclass
class LastWillProperties:
    delay_interval: int | None = None
    payload_format_indicator: int | None = None
    message_expiry_interval: int | None = None
    content_type: str | None = None
    response_topic: str | None = None
    correlation_data: bytes | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class Login:
    username: str = ""
    password: str = ""


@dataclass
class Connect:
    """CONNECT packet, with its optional will, login and properties."""

    keep_alive: int
    client_id: str
    clean_session: bool
    properties: ConnectProperties | None = None
    last_will: LastWill | None = None
    last_will_properties: LastWillProperties | None = None
    login: Login | None = None


# ------------------------------------------------------------- connack


@dataclass
class ConnAckProperties:
    session_expiry_interval: int | None = None
    receive_max: int | None = None
    max_qos: int | None = None
    retain_available: bool = False
    max_packet_size: int | None = None
    assigned_client_identifier: str | None = None
    topic_alias_max: int | None = None
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)
    wildcard_subscription_available: bool = False
    subscription_identifiers_available: bool = False
    shared_subscription_available: bool = False
    server_keep_alive: int | None = None
    response_information: str | None = None
    server_reference: str | None = None
    authentication_method: str | None = None
    authentication_data: bytes | None = None


@dataclass
class ConnAck:
    session_present: bool
    code: ConnectReturnCode
    properties: ConnAckProperties | None = None


# ------------------------------------------------------------- publish


@dataclass
class PublishProperties:
    payload_format_indicator: int | None = None
    message_expiry_interval: int | None = None
    topic_alias: int | None = None
    response_topic: str | None = None
    correlation_data: bytes | None = None
    user_properties: UserProperties = field(default_factory=list)
    subscription_identifiers: list[int] = field(default_factory=list)
    content_type: str | None = None


@dataclass
class Publish:
    """PUBLISH packet."""

    topic: bytes = b""
    payload: bytes = b""
    retain: bool = False
    qos: QoS = QoS.AT_MOST_ONCE
    pkid: int = 0
    dup: bool = False
    properties: PublishProperties | None = None

    def encoded_len(self) -> int:
        """Approximate encoded length, used for metering."""
        length = 2 + len(self.topic) + len(self.payload)
        if self.qos != QoS.AT_MOST_ONCE:
            length += 2
        return length

    def serialize(self) -> bytes:
        """Encode independently of any MQTT version."""
        header = 0b0011_0000 | int(self.retain) | int(self.qos) << 1 | int(self.dup) << 3
        return b"".join(
            (
                bytes([header]),
                self.pkid.to_bytes(2, "big"),
                len(self.topic).to_bytes(2, "big"),
                bytes(self.topic),
                bytes(self.payload),
            )
        )

    @classmethod
    def deserialize(cls, data: bytes) -> Publish:
        """Decode what :meth:`serialize` produced."""
        data = bytes(data)
        if len(data) < 5:
            raise MalformedPacketError()
        header = data[0]
        level = qos((header & 0b0110) >> 1) or QoS.AT_MOST_ONCE
        pkid = int.from_bytes(data[1:3], "big")
        topic_len = int.from_bytes(data[3:5], "big")
        body = data[5:]
        if topic_len > len(body):
            raise MalformedPacketError()
        return cls(
            topic=body[:topic_len],
            payload=body[topic_len:],
            retain=bool(header & 0b0001),
            qos=level,
            pkid=pkid,
            dup=bool(header & 0b1000),
        )


# ------------------------------------------------------------- puback


@dataclass
class PubAckProperties:
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class PubAck:
    pkid: int
    reason: PubAckReason = PubAckReason.SUCCESS
    properties: PubAckProperties | None = None


# ------------------------------------------------------------- subscribe


@dataclass
class Filter:
    """A single subscription filter with its options."""

    path: str
    qos: QoS = QoS.AT_MOST_ONCE
    nolocal: bool = False
    preserve_retain: bool = False
    retain_forward_rule: RetainForwardRule = RetainForwardRule.ON_EVERY_SUBSCRIBE


@dataclass
class SubscribeProperties:
    id: int | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class Subscribe:
    pkid: int
    filters: list[Filter] = field(default_factory=list)
    properties: SubscribeProperties | None = None


@dataclass
class SubAckProperties:
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class SubAck:
    pkid: int
    return_codes: list[SubscribeReasonCode] = field(default_factory=list)
    properties: SubAckProperties | None = None

    def encoded_len(self) -> int:
        """Remaining length of the encoded packet: id plus one byte per code."""
        return 2 + len(self.return_codes)


# ------------------------------------------------------------- unsubscribe


@dataclass
class UnsubscribeProperties:
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class Unsubscribe:
    pkid: int
    filters: list[str] = field(default_factory=list)
    properties: UnsubscribeProperties | None = None


@dataclass
class UnsubAckProperties:
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class UnsubAck:
    pkid: int
    reasons: list[UnsubAckReason] = field(default_factory=list)
    properties: UnsubAckProperties | None = None


# ------------------------------------------------------------- QoS 2 flow


@dataclass
class PubRecProperties:
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class PubRec:
    pkid: int
    reason: PubRecReason = PubRecReason.SUCCESS
    properties: PubRecProperties | None = None


@dataclass
class PubCompProperties:
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class PubComp:
    pkid: int
    reason: PubCompReason = PubCompReason.SUCCESS
    properties: PubCompProperties | None = None


@dataclass
class PubRelProperties:
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)


@dataclass
class PubRel:
    pkid: int
    reason: PubRelReason = PubRelReason.SUCCESS
    properties: PubRelProperties | None = None


# ------------------------------------------------------------- disconnect


@dataclass
class DisconnectProperties:
    session_expiry_interval: int | None = None
    reason_string: str | None = None
    user_properties: UserProperties = field(default_factory=list)
    server_reference: str | None = None


@dataclass
class Disconnect:
    reason_code: DisconnectReasonCode = DisconnectReasonCode.NORMAL_DISCONNECTION
    properties: DisconnectProperties | None = None


_Packet = Union[
    Connect,
    ConnAck,
    Publish,
    PubAck,
    PingReq,
    PingResp,
    Subscribe,
    SubAck,
    PubRec,
    PubRel,
    PubComp,
    Unsubscribe,
    UnsubAck,
    Disconnect,
]


class Protocol(abc.ABC):
    """A wire format that frames packets out of a byte stream and back."""

    @abc.abstractmethod
    def read_mut(self, stream: bytearray, max_size: int) -> _Packet:
        """Remove the next complete packet from ``stream`` and return it."""

    @abc.abstractmethod
    def write(self, packet: _Packet, buffer: bytearray) -> int:
        """Append the encoding of ``packet`` to ``buffer``; return its size."""