"""Absolute capture time RTP header extension."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from rtpwire.abs_send_time import ntp_to_unix_ns, to_ntp_time
from rtpwire.errors import TooSmallError

_EXTENSION_SIZE = 8
_EXTENDED_EXTENSION_SIZE = 16
_NS_PER_SECOND = 1_000_000_000
_UINT64_MASK = (1 << 64) - 1


def _to_int64(value: int) -> int:
    value &= _UINT64_MASK
    return value - (1 << 64) if value >= 1 << 63 else value


@dataclass
class AbsCaptureTimeExtension:
    """The abs-capture-time extension.

    The timestamp is a 64-bit NTP time; the optional clock offset is a signed
    Q32.32 fixed-point number of seconds.
    """

    timestamp: int = 0
    estimated_capture_clock_offset: int | None = None

    def marshal(self) -> bytes:
        """Serialize to the 8- or 16-byte extension payload."""
        if self.estimated_capture_clock_offset is not None:
            return struct.pack(
                ">QQ",
                self.timestamp & _UINT64_MASK,
                self.estimated_capture_clock_offset & _UINT64_MASK,
            )
        return struct.pack(">Q", self.timestamp & _UINT64_MASK)

    @classmethod
    def unmarshal(cls, raw_data: bytes) -> AbsCaptureTimeExtension:
        """Parse an extension payload."""
        if len(raw_data) < _EXTENSION_SIZE:
            raise TooSmallError()
        (timestamp,) = struct.unpack_from(">Q", raw_data, 0)
        offset = None
        if len(raw_data) >= _EXTENDED_EXTENSION_SIZE:
            (offset,) = struct.unpack_from(">q", raw_data, 8)
        return cls(timestamp=timestamp, estimated_capture_clock_offset=offset)

    def capture_time(self) -> int:
        """The capture time in nanoseconds since the Unix epoch."""
        return ntp_to_unix_ns(self.timestamp)

    def estimated_capture_clock_offset_duration(self) -> int | None:
        """The estimated capture clock offset in nanoseconds, or None if absent."""
        if self.estimated_capture_clock_offset is None:
            return None
        offset = self.estimated_capture_clock_offset
        negative = offset < 0
        offset = abs(offset)
        duration = (offset >> 32) * _NS_PER_SECOND + (
            (offset & 0xFFFFFFFF) * _NS_PER_SECOND >> 32
        )
        return -duration if negative else duration

    @classmethod
    def from_time(cls, capture_time_ns: int) -> AbsCaptureTimeExtension:
        """Build an extension from a capture time in Unix nanoseconds."""
        return cls(timestamp=to_ntp_time(capture_time_ns))

    @classmethod
    def from_time_with_offset(
        cls, capture_time_ns: int, offset_ns: int
    ) -> AbsCaptureTimeExtension:
        """Build an extension from a capture time and a clock offset, both in nanoseconds."""
        negative = offset_ns < 0
        ns = abs(offset_ns)
        seconds = (ns // _NS_PER_SECOND) & 0xFFFFFFFF
        fraction = (((ns % _NS_PER_SECOND) << 32) // _NS_PER_SECOND) & 0xFFFFFFFF
        offset = _to_int64((seconds << 32) | fraction)
        if negative:
            offset = _to_int64(-offset)
        return cls(
            timestamp=to_ntp_time(capture_time_ns),
            estimated_capture_clock_offset=offset,
        )