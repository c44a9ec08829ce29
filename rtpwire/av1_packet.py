"""AV1 RTP payloader and aggregation-header packet parser."""

from __future__ import annotations

from dataclasses import dataclass, field

from rtpwire.errors import (
    KeyframeAndFragmentError,
    NilPacketError,
    RTPError,
    ShortPacketError,
)
from rtpwire.obu import (
    ExtensionHeader,
    OBUType,
    parse_obu_header,
    read_leb128,
    write_leb128,
)

_Z_MASK = 0b1000_0000
_Z_SHIFT = 7
_Y_MASK = 0b0100_0000
_Y_SHIFT = 6
_W_MASK = 0b0011_0000
_W_SHIFT = 4
_N_MASK = 0b0000_1000
_N_SHIFT = 3

_SKIPPED_TYPES = (OBUType.TILE_LIST, OBUType.TEMPORAL_DELIMITER)
_PACKET_BREAK_TYPES = (OBUType.TEMPORAL_DELIMITER, OBUType.SEQUENCE_HEADER)


def leb128_size(value: int) -> tuple[int, bool]:
    """Return the LEB128 encoded size of value and whether value sits at a size boundary."""
    if value >= 1 << 28:
        return 5, value == 1 << 28
    if value >= 1 << 21:
        return 4, value == 1 << 21
    if value >= 1 << 14:
        return 3, value == 1 << 14
    if value >= 1 << 7:
        return 2, value == 1 << 7
    return 1, False


def _compute_write_size(want_to_write: int, can_write: int) -> int:
    """Largest write that still fits once its LEB128 length field is added."""
    size, at_edge = leb128_size(want_to_write)
    if can_write >= want_to_write + size:
        return want_to_write
    # One byte less may need a shorter length field and still fit.
    if at_edge and can_write >= want_to_write + size - 1:
        return want_to_write - 1
    return want_to_write - size


class AV1Payloader:
    """Packs a low-overhead AV1 OBU stream into AV1 RTP payloads."""

    def payload(self, mtu: int, payload: bytes | None) -> list[bytes]:
        """Split an OBU stream into RTP payloads of at most mtu bytes each."""
        if mtu <= 1 or not payload:
            return []
        data = bytes(payload)
        packets: list[bytearray] = []

        # Each OBU is held back until the next one is seen, so that we know
        # whether it is the last one in its packet and the W field can be used.
        current_obu: bytes | None = None
        current_ext: ExtensionHeader | None = None
        obus_in_packet = 0
        new_sequence = False
        start_with_new_packet = False

        offset = 0
        while offset < len(data):
            try:
                header = parse_obu_header(data[offset:])
            except RTPError:
                break
            offset += header.size()

            if header.has_size_field:
                try:
                    obu_size, read = read_leb128(data[offset:])
                except RTPError:
                    break
                offset += read
            else:
                obu_size = len(data) - offset

            # Packets must not mix temporal units, and a sequence header
            # should open its packet.
            need_new_packet = header.obu_type in _PACKET_BREAK_TYPES
            # OBUs sharing a packet must share temporal and spatial ids.
            ext = header.extension_header
            if not need_new_packet and ext is not None and current_ext is not None:
                need_new_packet = (
                    ext.spatial_id != current_ext.spatial_id
                    or ext.temporal_id != current_ext.temporal_id
                )
            if ext is not None:
                current_ext = ext

            if obu_size > len(data) - offset:
                break

            if current_obu:
                obus_in_packet = self._append_obu(
                    packets,
                    current_obu,
                    new_sequence,
                    need_new_packet,
                    start_with_new_packet,
                    mtu,
                    obus_in_packet,
                )
                current_obu = None
                start_with_new_packet = need_new_packet
                if need_new_packet:
                    new_sequence = False
                    current_ext = None

            if header.obu_type in _SKIPPED_TYPES:
                offset += obu_size
                continue

            # obu_has_size_field should be zero inside RTP payloads.
            header.has_size_field = False
            current_obu = header.marshal() + data[offset:offset + obu_size]
            offset += obu_size
            new_sequence = header.obu_type == OBUType.SEQUENCE_HEADER

        if current_obu:
            self._append_obu(
                packets,
                current_obu,
                new_sequence,
                True,
                start_with_new_packet,
                mtu,
                obus_in_packet,
            )

        return [bytes(packet) for packet in packets]

    @staticmethod
    def _append_obu(
        packets: list[bytearray],
        obu_payload: bytes,
        is_new_video_sequence: bool,
        is_last: bool,
        start_with_new_packet: bool,
        mtu: int,
        obu_count: int,
    ) -> int:
        """Append one OBU to packets, fragmenting it as needed.

        Returns the number of length-prefixed OBUs in the last packet.
        """
        free_space = mtu - len(packets[-1]) if packets else 0

        if not packets or free_space <= 0 or start_with_new_packet:
            packet = bytearray(1)
            if is_new_video_sequence:
                packet[0] |= 1 << _N_SHIFT
            packets.append(packet)
            free_space = mtu - 1
            obu_count = 0

        current = packets[-1]
        remaining = len(obu_payload)
        to_write = min(remaining, free_space)

        # A W field of 1..3 means the last element has no length field.
        use_w_field = (is_last or to_write >= free_space) and obu_count < 3
        if use_w_field:
            current[0] |= ((obu_count + 1) << _W_SHIFT) & _W_MASK
            current += obu_payload[:to_write]
            obu_count = 0
        elif free_space >= 2:
            # A length-prefixed element needs at least one length byte and one data byte.
            to_write = _compute_write_size(to_write, free_space)
            current += write_leb128(to_write)
            current += obu_payload[:to_write]
            obu_count += 1
        else:
            to_write = 0

        obu_payload = obu_payload[to_write:]
        remaining -= to_write

        while remaining > 0:
            previous = packets[-1]
            packet = bytearray(1)
            packets.append(packet)

            # Nothing was written to the previous packet when it had a single
            # byte left and the W field was not usable.
            if to_write != 0:
                previous[0] |= _Y_MASK
                packet[0] |= _Z_MASK

            to_write = min(remaining, mtu - 1)
            if is_last or remaining >= mtu - 1:
                packet[0] |= 1 << _W_SHIFT
            else:
                to_write = _compute_write_size(to_write, mtu - 1)
                packet += write_leb128(to_write)

            packet += obu_payload[:to_write]
            obu_payload = obu_payload[to_write:]
            remaining -= to_write
            obu_count = 1

        return obu_count


@dataclass
class AV1Packet:
    """An AV1 RTP payload split into its aggregation header flags and OBU elements.

    Each OBU element is a whole OBU or a fragment of one. With zero_allocation
    set, the elements are not extracted.
    """

    z: bool = False
    y: bool = False
    w: int = 0
    n: bool = False
    obu_elements: list[bytes] | None = None
    zero_allocation: bool = field(default=False, repr=False)

    def unmarshal(self, payload: bytes | None) -> bytes:
        """Parse an AV1 RTP payload and return it without its aggregation header."""
        if payload is None:
            raise NilPacketError()
        if len(payload) < 2:
            raise ShortPacketError()
        payload = bytes(payload)

        head = payload[0]
        self.z = bool((head & _Z_MASK) >> _Z_SHIFT)
        self.y = bool((head & _Y_MASK) >> _Y_SHIFT)
        self.n = bool((head & _N_MASK) >> _N_SHIFT)
        self.w = (head & _W_MASK) >> _W_SHIFT

        if self.z and self.n:
            raise KeyframeAndFragmentError()

        if not self.zero_allocation:
            self.obu_elements = self._parse_body(payload[1:])
        return payload[1:]

    def _parse_body(self, body: bytes) -> list[bytes]:
        if self.obu_elements is not None:
            return self.obu_elements

        elements: list[bytes] = []
        index = 0
        number = 1
        while index != len(body):
            # The W-th element carries no length field.
            if number == self.w:
                read = 0
                length = len(body) - index
            else:
                length, read = read_leb128(body[index:])
            index += read
            if len(body) < index + length:
                raise ShortPacketError()
            elements.append(body[index:index + length])
            index += length
            number += 1
        return elements