"""MQTT 3.1.1 (protocol level 4) framing, encoding and decoding."""

__all__ = ["acks", "codec", "connect", "framing", "publish", "subscriptions"]