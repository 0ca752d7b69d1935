"""MQTT packet model, topic helpers and an MQTT 3.1.1 codec."""

__version__ = "0.19.0"
__all__ = ["errors", "packets", "topics", "v4"]