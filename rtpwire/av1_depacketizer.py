"""AV1 RTP depacketizer producing a low-overhead OBU bitstream."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field

from rtpwire.errors import ShortPacketError
from rtpwire.obu import OBUType, parse_obu_header, read_leb128, write_leb128

_Z_MASK = 0b1000_0000
_Y_MASK = 0b0100_0000
_W_MASK = 0b0011_0000
_N_MASK = 0b0000_1000
_W_SHIFT = 4

_DROPPED_TYPES = (OBUType.TEMPORAL_DELIMITER, OBUType.TILE_LIST)


@dataclass
class AV1Depacketizer:
    """Reads AV1 RTP payloads and outputs OBUs carrying obu_size fields.

    Packets must be fed in order. A trailing OBU fragment is held until the
    packet that completes it arrives. The z, y and n attributes hold the
    aggregation header flags of the last payload parsed.
    """

    z: bool = False
    y: bool = False
    n: bool = False
    _buffer: bytes | None = field(default=None, repr=False)

    def unmarshal(self, payload: bytes | None) -> bytes:
        """Parse one AV1 RTP payload and return the complete OBUs it yields."""
        if payload is None or len(payload) <= 1:
            raise ShortPacketError()
        payload = bytes(payload)

        head = payload[0]
        obu_z = bool(head & _Z_MASK)
        obu_y = bool(head & _Y_MASK)
        obu_count = (head & _W_MASK) >> _W_SHIFT
        obu_n = bool(head & _N_MASK)
        self.z, self.y, self.n = obu_z, obu_y, obu_n

        if obu_n:
            self._buffer = None
        # A buffered fragment is useless unless this packet continues it.
        if not obu_z and self._buffer:
            self._buffer = None

        out = bytearray()
        offset = 1
        obu_offset = 0
        for obu_offset in itertools.count():
            if offset >= len(payload):
                break
            is_first = obu_offset == 0
            is_last = obu_count != 0 and obu_offset == obu_count - 1

            # With W set, the last element carries no length field.
            if obu_count == 0 or not is_last:
                length, read = read_leb128(payload[offset:])
                offset += read
                if obu_count == 0 and offset + length == len(payload):
                    is_last = True
            else:
                length = len(payload) - offset

            if offset + length > len(payload):
                raise ShortPacketError(
                    f"packet is not large enough: OBU size {length} + {offset} "
                    f"offset exceeds payload length {len(payload)}"
                )

            if is_first and obu_z:
                if not self._buffer:
                    # The first fragment was lost; drop this continuation.
                    if is_last:
                        break
                    offset += length
                    continue
                obu_buffer = self._buffer + payload[offset:offset + length]
                self._buffer = None
            else:
                obu_buffer = payload[offset:offset + length]
            offset += length

            if is_last and obu_y:
                self._buffer = obu_buffer
                break

            if not obu_buffer:
                continue

            header = parse_obu_header(obu_buffer)
            if header.obu_type in _DROPPED_TYPES:
                continue

            header_size = header.size()
            if header.has_size_field:
                obu_size, read = read_leb128(obu_buffer[header_size:])
                expected = header_size + obu_size + read
                if length != expected:
                    raise ShortPacketError(
                        f"packet is not large enough: OBU size {obu_size} "
                        f"does not match calculated size {expected}"
                    )
                out += obu_buffer
            else:
                header.has_size_field = True
                out += header.marshal()
                out += write_leb128(len(obu_buffer) - header_size)
                out += obu_buffer[header_size:]

            if is_last:
                break

        if obu_count != 0 and obu_offset != obu_count - 1:
            raise ShortPacketError(
                f"packet is not large enough: OBU count {obu_count} "
                f"does not match number of OBUs {obu_offset}"
            )
        return bytes(out)

    def is_partition_head(self, payload: bytes | None) -> bool:
        """True if Z in the aggregation header is 0."""
        if not payload:
            return False
        return payload[0] & _Z_MASK == 0

    def is_partition_tail(self, marker: bool, payload: bytes | None) -> bool:
        """True if the RTP marker bit is set."""
        return marker