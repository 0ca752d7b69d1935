"""Errors raised while encoding or decoding MQTT packets."""

from __future__ import annotations


class MqttError(Exception):
    """Base class for every serialization and deserialization error."""

    message = "MQTT protocol error"

    def __str__(self) -> str:
        return self.message.format(*self.args)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MqttError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class InvalidConnectReturnCodeError(MqttError):
    message = "Invalid return code received as response for connect = {0}"

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


class InvalidReasonError(MqttError):
    message = "Invalid reason = {0}"

    def __init__(self, reason: int) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidRemainingLengthError(MqttError):
    message = "Invalid reason = {0}"

    def __init__(self, length: int) -> None:
        super().__init__(length)
        self.length = length


class InvalidProtocolError(MqttError):
    message = "Invalid protocol used"


class InvalidProtocolLevelError(MqttError):
    message = "Invalid protocol level {0}. Make sure right port is being used."

    def __init__(self, level: int) -> None:
        super().__init__(level)
        self.level = level


class IncorrectPacketFormatError(MqttError):
    message = "Invalid packet format"


class InvalidPacketTypeError(MqttError):
    message = "Invalid packet type = {0}"

    def __init__(self, packet_type: int) -> None:
        super().__init__(packet_type)
        self.packet_type = packet_type


class InvalidRetainForwardRuleError(MqttError):
    message = "Invalid retain forward rule = {0}"

    def __init__(self, rule: int) -> None:
        super().__init__(rule)
        self.rule = rule


class InvalidQoSError(MqttError):
    message = "Invalid QoS level = {0}"

    def __init__(self, qos: int) -> None:
        super().__init__(qos)
        self.qos = qos


class InvalidSubscribeReasonCodeError(MqttError):
    message = "Invalid subscribe reason code = {0}"

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


class PacketIdZeroError(MqttError):
    message = "Packet received has id Zero"


class EmptySubscriptionError(MqttError):
    message = "Empty Subscription"


class SubscriptionIdZeroError(MqttError):
    message = "Subscription had id Zero"


class PayloadSizeIncorrectError(MqttError):
    message = "Payload size is incorrect"


class PayloadTooLongError(MqttError):
    message = "Payload is too long"


class PayloadSizeLimitExceededError(MqttError):
    message = "Payload size has been exceeded by {0} bytes"

    def __init__(self, size: int) -> None:
        super().__init__(size)
        self.size = size


class PayloadRequiredError(MqttError):
    message = "Payload is required"


class PayloadNotUtf8Error(MqttError):
    """Raised when a field that must be UTF-8 text fails to decode."""

    message = "Payload is required = {0}"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class TopicNotUtf8Error(MqttError):
    message = "Topic not utf-8"


class BoundaryCrossedError(MqttError):
    message = "Promised boundary crossed, contains {0} bytes"

    def __init__(self, length: int) -> None:
        super().__init__(length)
        self.length = length


class MalformedPacketError(MqttError):
    message = "Packet is malformed"


class MalformedRemainingLengthError(MqttError):
    message = "Remaining length is malformed"


class InvalidPropertyTypeError(MqttError):
    message = "Invalid property type = {0}"

    def __init__(self, property_type: int) -> None:
        super().__init__(property_type)
        self.property_type = property_type


class InsufficientBytesError(MqttError):
    """More bytes are needed to frame a packet; ``needed`` is the minimum."""

    message = "Insufficient number of bytes to frame packet, {0} more bytes required"

    def __init__(self, needed: int) -> None:
        super().__init__(needed)
        self.needed = needed