# mqttwire

mqttwire is a pure-Python library for the MQTT 3.1.1 wire format. It has no dependencies.

## What it provides

- **`mqttwire.packets`** holds the packet models.
  - There is a dataclass for every control packet: `Connect`, `ConnAck`, `Publish`, `PubAck`, `PubRec`, `PubRel`, `PubComp`, `Subscribe`, `SubAck`, `Unsubscribe`, `UnsubAck`, `PingReq`, `PingResp` and `Disconnect`.
  - There are dataclasses for the parts of packets: `LastWill`, `Login` and `Filter`.
  - There are property dataclasses such as `PublishProperties`.
  - There are enums for reason codes and for `QoS`.
  - `qos(num)` maps a number to a `QoS`. It returns `None` for a number that is not a QoS level.
  - `Publish.serialize()` and `Publish.deserialize()` give a compact encoding of a PUBLISH that does not depend on any MQTT version.
- **`mqttwire.topics`** holds the topic helpers:
  - `has_wildcards`
  - `valid_topic`
  - `valid_filter`
  - `matches`
- **`mqttwire.v4.framing`** holds the framing primitives:
  - `FixedHeader` and `PacketType`;
  - `check`, which returns the fixed header once a buffer holds a complete frame;
  - `length` and `write_remaining_length`, which decode and encode the remaining length;
  - a bounds-checked `Reader` for the fields of a frame.
- **`mqttwire.v4.codec`** holds the codec.
  - `V4.read_mut(stream, max_size)` removes the next packet from a `bytearray` and decodes it.
  - `V4.write(packet, buffer)` appends the encoded packet to `buffer`.
  - The encoders and decoders for each packet type are in `mqttwire.v4.connect`, `mqttwire.v4.publish`, `mqttwire.v4.acks` and `mqttwire.v4.subscriptions`.
- **`mqttwire.errors`** holds the error classes. They all derive from `MqttError`.

## Installation

```
pip install mqttwire
```

## Decoding a stream

```python
from mqttwire.errors import InsufficientBytesError
from mqttwire.v4.codec import V4

codec = V4()
stream = bytearray()
received = []

def feed(chunk: bytes) -> None:
    stream.extend(chunk)
    while True:
        try:
            received.append(codec.read_mut(stream, max_size=1024 * 1024))
        except InsufficientBytesError:
            return  # wait for more data
```

### When `read_mut` consumes bytes

`read_mut` first checks the fixed header. It raises and leaves the stream untouched in three cases:

- the stream does not yet hold a whole frame (`InsufficientBytesError`, whose `needed` gives the minimum number of further bytes);
- the remaining length exceeds `max_size` (`PayloadSizeLimitExceededError`);
- the remaining length is malformed (`MalformedRemainingLengthError`).

Once a whole frame is present, `read_mut` removes it from the stream before it decodes the frame. If decoding then fails, for example with `MalformedPacketError` or `InvalidPacketTypeError`, the frame's bytes are already gone.

## Encoding

```python
from mqttwire.packets import Publish, QoS
from mqttwire.v4.codec import V4

buffer = bytearray()
V4().write(
    Publish(topic=b"sensors/1", payload=b"21.5", qos=QoS.AT_LEAST_ONCE, pkid=7),
    buffer,
)
```

`write` raises `ValueError` in two cases:

- the packet carries MQTT 5 properties;
- the packet is a `ConnAck` whose code has no 3.1.1 value.

`ConnAck` properties are ignored. A `Publish` with QoS above 0 and packet id 0 raises `PacketIdZeroError`.

## Topic matching

```python
from mqttwire.topics import matches, valid_filter

valid_filter("sport/tennis/+")                      # True
matches("sport/tennis/player1", "sport/+/player1")  # True
matches("$SYS/uptime", "#")                         # False: '$' topics never match
```

## What it does not do

mqttwire only encodes and decodes bytes. It has no network client and no broker, and it has no session or retained-message storage.

The packet models carry the MQTT 5 property types, but only the 3.1.1 wire format is implemented. Properties cannot be encoded or decoded.

## Running the tests

```
pip install -e .[test]
pytest
```