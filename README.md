# rtpwire

Pure-Python building blocks for the payloads of RTP media streams:

- RTP header extension payloads: audio level (RFC 6464), absolute send time
  and absolute capture time.
- Payloaders that split encoded media into RTP payloads no larger than a
  given MTU: G.711, G.722, H.264 (single NAL unit, STAP-A and FU-A) and AV1.
- Depacketizers that rebuild media from RTP payloads: H.264 (Annex B or AVC
  length-prefixed framing) and AV1 (low-overhead bitstream with `obu_size`
  fields).
- AV1 OBU helpers: header parsing and serialisation, LEB128 coding.

The package has no runtime dependencies.

## Installation

```
pip install rtpwire
```

## Header extensions

Each extension is a dataclass with a `marshal()` method returning the
extension payload bytes and an `unmarshal()` class method parsing them.
Times are integer nanoseconds since the Unix epoch; offsets are integer
nanoseconds.

```python
import time

from rtpwire.audio_level import AudioLevelExtension
from rtpwire.abs_send_time import AbsSendTimeExtension
from rtpwire.abs_capture_time import AbsCaptureTimeExtension

level = AudioLevelExtension(level=8, voice=True)
assert level.marshal() == b"\x88"
assert AudioLevelExtension.unmarshal(b"\x88") == level

now_ns = time.time_ns()
send = AbsSendTimeExtension.from_time(now_ns)
received = AbsSendTimeExtension.unmarshal(send.marshal())
estimated_ns = received.estimate(time.time_ns())

capture = AbsCaptureTimeExtension.from_time_with_offset(now_ns, 1_250_000_000)
parsed = AbsCaptureTimeExtension.unmarshal(capture.marshal())
assert parsed.estimated_capture_clock_offset_duration() == 1_250_000_000
print(parsed.capture_time())
```

`AudioLevelExtension.marshal()` raises `AudioLevelOverflowError` for levels
outside 0..127. `AbsSendTimeExtension.estimate()` recovers the full send time
from the 24-bit timestamp and a receive time; it is wrong if the
transmission delay exceeds 64 seconds. `rtpwire.abs_send_time` also offers
`to_ntp_time()` and `ntp_to_unix_ns()` for converting between Unix
nanoseconds and 64-bit NTP timestamps.

## Audio payloaders

`G711Payloader` and `G722Payloader` (in `rtpwire.pcm`) split a sample buffer
into chunks of at most `mtu` bytes. An MTU of 0 or a `None` payload gives an
empty list.

```python
from rtpwire.pcm import G711Payloader

chunks = G711Payloader().payload(1500, bytes(10000))
assert len(chunks) == 7
```

## H.264

`H264Payloader.payload()` takes an Annex B byte stream. Access unit
delimiters and filler data are dropped; SPS and PPS NAL units are held and
sent as one STAP-A packet ahead of the next NAL unit (set
`disable_stap_a=True` to send them on their own). NAL units larger than the
MTU are split into FU-A fragments.

`H264Packet.unmarshal()` turns each RTP payload back into Annex B NAL units
(or 4-byte length-prefixed ones with `is_avc=True`). FU-A fragments are held
until the fragment carrying the end bit arrives; until then it returns
`b""`.

```python
from rtpwire.h264 import H264Packet, H264Payloader

sps = b"\x67\x42\x00\x1f"
pps = b"\x68\xce\x3c\x80"
idr = b"\x65" + bytes(3000)
stream = b"".join(b"\x00\x00\x00\x01" + nalu for nalu in (sps, pps, idr))

payloads = H264Payloader().payload(1200, stream)

depacketizer = H264Packet()
assert b"".join(depacketizer.unmarshal(p) for p in payloads) == stream
```

`H264Packet.is_partition_head()` tells whether a payload starts a NAL unit,
and `is_partition_tail(marker, payload)` returns the RTP marker bit.
`set_zero_allocation(True)` makes `unmarshal()` return payloads unparsed.

## AV1

`AV1Payloader.payload()` takes a low-overhead OBU stream. It removes
`obu_size` fields, drops temporal delimiter and tile list OBUs, starts a new
packet at each sequence header and temporal delimiter, and fragments OBUs
across packets using the Z, Y, W and N aggregation header bits.

`AV1Depacketizer.unmarshal()` reverses this: it reassembles fragments across
calls and emits OBUs with their `obu_size` fields restored. The `z`, `y` and
`n` attributes hold the flags of the last payload parsed.

```python
from rtpwire.av1_depacketizer import AV1Depacketizer
from rtpwire.av1_packet import AV1Payloader
from rtpwire.obu import OBU, Header, OBUType

temporal_unit = OBU(
    header=Header(obu_type=OBUType.FRAME, has_size_field=True),
    payload=bytes(3000),
).marshal()

packets = AV1Payloader().payload(1200, temporal_unit)
assert all(len(p) <= 1200 for p in packets)

depacketizer = AV1Depacketizer()
assert b"".join(depacketizer.unmarshal(p) for p in packets) == temporal_unit
```

For lower-level work, `AV1Packet.unmarshal()` parses one payload into its
flags and `obu_elements` (whole OBUs or fragments), and `AV1Frame` from
`rtpwire.av1_frame` joins the elements of consecutive packets into whole
OBUs. Use a fresh `AV1Packet` for each payload:

```python
from rtpwire.av1_frame import AV1Frame
from rtpwire.av1_packet import AV1Packet

frame = AV1Frame()
for p in packets:
    packet = AV1Packet()
    packet.unmarshal(p)
    for obu in frame.read_frames(packet):
        print(len(obu))
```

## OBU helpers

`rtpwire.obu` has `parse_obu_header()`, `Header`, `ExtensionHeader`, `OBU`,
the `OBUType` enum and `obu_type_name()`, plus `read_leb128()` and
`write_leb128()` for LEB128 bytes and `encode_leb128()`/`decode_leb128()` for
LEB128 values packed into an integer.

```python
from rtpwire.obu import parse_obu_header, read_leb128, write_leb128

assert write_leb128(150) == b"\x96\x01"
assert read_leb128(b"\x96\x01") == (150, 2)
header = parse_obu_header(b"\x32")
assert header.obu_type == OBUType.FRAME and header.has_size_field
```

## Errors

Malformed input raises an exception derived from `rtpwire.errors.RTPError`
(itself a `ValueError`): `TooSmallError`, `ShortPacketError`,
`NilPacketError`, `UnhandledNALUTypeError`, `KeyframeAndFragmentError`, or
the OBU errors `InvalidOBUHeaderError`, `ShortHeaderError` and `LEB128Error`
from `rtpwire.obu`.

## What the package does not do

It works on RTP payloads and header extension payloads only. It does not
parse or build RTP packet headers, does not reorder packets, and does no
network input or output. There is no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```