# srtproto

Protocol building blocks for SRT (Secure Reliable Transport), the low-latency
video streaming protocol. The package provides the data structures and
algorithms that an SRT endpoint is built from. It is a library only. It opens
no sockets and runs no commands.

## Modules

- `srtproto.config`: `SrtConfig`, a dataclass with every connection parameter
  and its default. It provides `live_defaults()`, `file_defaults()`,
  `max_payload_size()` and `encryption_enabled()`. The module also holds the
  enums `TransType`, `CryptoModeConfig`, `KeySize`, `RetransmitAlgo`, `KmState`
  and `SocketStatus`, the `SrtFlags` handshake capability flags,
  `version_capabilities()`, and constants such as `SRT_VERSION`.
- `srtproto.loss_list`: helpers for 31-bit wrap-around sequence numbers
  (`seq_add`, `seq_offset`, `seq_is_before`, `seq_is_after`), plus
  `SendLossList` (losses reported by NAK that wait for retransmission) and
  `ReceiveLossList` (gaps to report, with NAK suppression through
  `get_loss_ranges(min_nak_interval)`).
- `srtproto.send_buffer`: `SendBuffer` splits messages into packets
  (`PacketBoundary`: `SOLO`, `FIRST`, `SUBSEQUENT`, `LAST`) and keeps each
  `SendBufferEntry` until it is acknowledged. It also drops messages whose TTL
  has passed.
- `srtproto.receive_buffer`: `ReceiveBuffer` is a circular buffer indexed by
  sequence number. It offers message and stream reads, FEC placeholders,
  ACK and loss-list computation, and dropping of late packets.
- `srtproto.congestion`: the `CongestionControl` abstract base class and
  `RexmitMethod`.
- `srtproto.live_cc`: `LiveCC`. It sends at a constant rate and limits the
  rate only when a maximum or input bandwidth is configured.
- `srtproto.file_cc`: `FileCC`, which uses slow start followed by AIMD.
- `srtproto.token_bucket`: `TokenBucket`, which limits retransmission
  bandwidth. A rate of 0 or less means no limit.
- `srtproto.rate`: `RateEstimator`, which gives byte and packet rates over
  one-second periods and a smoothed average payload size.
- `srtproto.crypto`: `KeyIndex`, `CryptoMode`, `KeyPair` (even/odd keys) and
  `CryptoControl`, which holds the key refresh and pre-announce schedule.
- `srtproto.aes_ctr`: `AesCtrCipher`, AES-CTR payload encryption with
  128, 192 or 256-bit keys.
- `srtproto.aes_gcm`: `AesGcmCipher`, AES-GCM authenticated encryption with
  128 or 256-bit keys. The 16-byte tag is appended to the ciphertext.
- `srtproto.km_exchange`: `KeyMaterialMessage`, which encodes and decodes the
  Key Material payload of KMREQ/KMRSP. The module also holds `CipherType`,
  `AuthType` and `StreamEncap`.
- `srtproto.access_control`: `AccessControl`, `AcceptAll`, `AccessControlFn`,
  `HandshakeInfo` and `ConnectionRejected` for listener admission decisions.
  It also provides the Stream ID handshake extension (`parse_stream_id`,
  `serialize_stream_id`) and `StreamIdInfo` for the `#!::key=value,...` form.

## Conventions

- Sequence numbers and message numbers are plain `int`s.
- Time intervals are in seconds. Message TTLs passed to
  `SendBuffer.add_message` are in milliseconds, and a negative TTL means
  unlimited.
- The time-based classes (`RateEstimator`, `SendLossList`, `ReceiveLossList`,
  `SendBuffer`, `ReceiveBuffer`, `TokenBucket`) take an optional `clock`
  callable. It defaults to `time.monotonic`.
- Malformed input raises `ValueError`. This covers an unsupported key length
  in `KeySize.from_bytes`, a bad message in `KeyMaterialMessage.deserialize`,
  and failed authentication in `AesGcmCipher.decrypt`.

## Installation

```
pip install srtproto
```

## Examples

Segment a message and reassemble it:

```python
from srtproto.receive_buffer import ReceiveBuffer
from srtproto.send_buffer import SendBuffer

sender = SendBuffer(max_packets=8, max_payload_size=4, initial_seq=100)
assert sender.add_message(b"hello world") == 3

receiver = ReceiveBuffer(capacity=16, initial_seq=100)
while (pkt := sender.next_packet()) is not None:
    receiver.insert(pkt.seq_no, pkt.msg_no, pkt.boundary, 0, pkt.in_order, pkt.data)

assert receiver.ack_seq() == 103
assert receiver.read_message() == b"hello world"
```

Collect loss ranges for a NAK report:

```python
from srtproto.loss_list import ReceiveLossList

losses = ReceiveLossList()
losses.insert_range(10, 14)
losses.remove(12)
assert losses.get_loss_ranges(0.0) == [(10, 11), (13, 14)]
```

Parse and rebuild a Stream ID, and use it to admit connections:

```python
from srtproto.access_control import (
    AccessControlFn, ConnectionRejected, HandshakeInfo, StreamIdInfo,
)

info = StreamIdInfo.parse("#!::r=live/cam1,m=publish,u=admin")
assert info.resource == "live/cam1"
assert info.to_stream_id() == "#!::r=live/cam1,m=publish,u=admin"

def check(hs: HandshakeInfo) -> None:
    if StreamIdInfo.parse(hs.stream_id).resource != "live/cam1":
        raise ConnectionRejected("peer")

gate = AccessControlFn(check)
gate.on_accept(HandshakeInfo(("127.0.0.1", 1234), stream_id="#!::r=live/cam1"))
```

Encrypt a payload with AES-CTR:

```python
from srtproto.aes_ctr import AesCtrCipher

cipher = AesCtrCipher(bytes(16))
salt = bytes(16)
sealed = cipher.encrypt(salt, 1234, b"payload")
assert cipher.decrypt(salt, 1234, sealed) == b"payload"
```

Encode a Key Material message:

```python
from srtproto.config import KeySize
from srtproto.crypto import KeyIndex
from srtproto.km_exchange import CipherType, KeyMaterialMessage

msg = KeyMaterialMessage.new_single(
    KeyIndex.EVEN, KeySize.AES128, CipherType.AES_CTR, bytes(16), bytes(24)
)
wire = msg.serialize()
assert len(wire) == 56
assert KeyMaterialMessage.deserialize(wire).key_size is KeySize.AES128
```

Limit retransmission bandwidth:

```python
from srtproto.token_bucket import TokenBucket

bucket = TokenBucket(1500, 1500)   # burst of 3000 bytes
assert bucket.try_consume(1500)
assert bucket.try_consume(1500)
assert not bucket.try_consume(1500)
```

## What the package does not do

- It contains no socket, connection, listener or handshake logic, and it has
  no command-line program.
- It does not encode or decode SRT packet headers or control packets.
- It has no TSBPD timer. `ReceiveBuffer.read_message` and `drop_too_late`
  take any object with `is_ready(timestamp)` and `is_too_late(timestamp)`
  methods, and the caller must supply one.
- It does not derive keys from a passphrase, generate keys or salts, or wrap
  and unwrap keys. `KeyMaterialMessage` carries wrapped keys exactly as it is
  given them.

## Running the tests

```
pip install -e ".[test]"
pytest
```