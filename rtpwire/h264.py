"""H.264 RTP payloading and depayloading (RFC 6184)."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from rtpwire.depacketizer import VideoDepacketizer
from rtpwire.errors import ShortPacketError, UnhandledNALUTypeError

STAPA_NALU_TYPE = 24
FUA_NALU_TYPE = 28
FUB_NALU_TYPE = 29
SPS_NALU_TYPE = 7
PPS_NALU_TYPE = 8
AUD_NALU_TYPE = 9
FILLER_NALU_TYPE = 12

FUA_HEADER_SIZE = 2
STAPA_HEADER_SIZE = 1
STAPA_NALU_LENGTH_SIZE = 2

NALU_TYPE_BITMASK = 0x1F
NALU_REF_IDC_BITMASK = 0x60
FU_START_BITMASK = 0x80
FU_END_BITMASK = 0x40

OUTPUT_STAPA_HEADER = 0x78

_NALU_START_CODE = b"\x00\x00\x01"
_ANNEXB_START_CODE = b"\x00\x00\x00\x01"


def iter_nalus(data: bytes) -> Iterator[bytes]:
    """Yield the NAL units of an Annex B byte stream.

    A buffer with no start code is yielded whole.
    """
    start = data.find(_NALU_START_CODE)
    if start == -1:
        yield data
        return

    offset = 3
    while start < len(data):
        next_start = data.find(_NALU_START_CODE, start + offset)
        if next_start == -1:
            yield data[start + offset:]
            return
        four_byte = data[next_start - 1] == 0
        if four_byte:
            next_start -= 1
        yield data[start + offset:next_start]
        start = next_start
        offset = 4 if four_byte else 3


@dataclass
class H264Payloader:
    """Payloads H.264 NAL units, bundling SPS and PPS into STAP-A packets."""

    disable_stap_a: bool = False
    _sps: bytes | None = field(default=None, repr=False)
    _pps: bytes | None = field(default=None, repr=False)

    def payload(self, mtu: int, payload: bytes | None) -> list[bytes]:
        """Fragment an Annex B stream across one or more RTP payloads."""
        payloads: list[bytes] = []
        if not payload:
            return payloads
        for nalu in iter_nalus(bytes(payload)):
            payloads.extend(self._packetize(mtu, nalu))
        return payloads

    def _packetize(self, mtu: int, nalu: bytes) -> list[bytes]:
        if not nalu:
            return []
        nalu_type = nalu[0] & NALU_TYPE_BITMASK
        ref_idc = nalu[0] & NALU_REF_IDC_BITMASK
        out: list[bytes] = []

        if nalu_type in (AUD_NALU_TYPE, FILLER_NALU_TYPE):
            return out
        if nalu_type == SPS_NALU_TYPE:
            if not self.disable_stap_a:
                self._sps = nalu
                return out
        elif nalu_type == PPS_NALU_TYPE:
            if not self.disable_stap_a:
                self._pps = nalu
                return out
        elif not self.disable_stap_a and self._sps is not None and self._pps is not None:
            stap_a = (
                bytes((OUTPUT_STAPA_HEADER,))
                + (len(self._sps) & 0xFFFF).to_bytes(2, "big")
                + self._sps
                + (len(self._pps) & 0xFFFF).to_bytes(2, "big")
                + self._pps
            )
            if len(stap_a) <= mtu:
                out.append(stap_a)
            self._sps = None
            self._pps = None

        if len(nalu) <= mtu:
            out.append(nalu)
            return out

        # FU-A: the NAL unit header byte is carried in the FU indicator and header.
        max_fragment = mtu - FUA_HEADER_SIZE
        body = nalu[1:]
        if min(max_fragment, len(body)) <= 0:
            return out

        indicator = FUA_NALU_TYPE | ref_idc
        for start in range(0, len(body), max_fragment):
            fragment = body[start:start + max_fragment]
            fu_header = nalu_type
            if start == 0:
                fu_header |= FU_START_BITMASK
            elif start + len(fragment) == len(body):
                fu_header |= FU_END_BITMASK
            out.append(bytes((indicator, fu_header)) + fragment)
        return out


@dataclass
class H264Packet(VideoDepacketizer):
    """Depacketizes H.264 RTP payloads into Annex B or AVC (length-prefixed) form.

    With zero_allocation set, payloads are returned unparsed.
    """

    is_avc: bool = False
    zero_allocation: bool = False
    _fua_buffer: bytearray | None = field(default=None, repr=False)

    def _package(self, nalu: bytes) -> bytes:
        if self.is_avc:
            return (len(nalu) & 0xFFFFFFFF).to_bytes(4, "big") + nalu
        return _ANNEXB_START_CODE + nalu

    def is_detected_final_packet_in_sequence(self, marker: bool) -> bool:
        """True if the RTP marker bit ends a packet sequence."""
        return self.is_partition_tail(bool(marker), b"")

    def unmarshal(self, payload: bytes | None) -> bytes:
        """Parse one RTP payload and return the NAL units it completes."""
        if self.zero_allocation:
            return payload
        if not payload:
            raise ShortPacketError("packet is not large enough: 0 <=0")
        payload = bytes(payload)

        nalu_type = payload[0] & NALU_TYPE_BITMASK
        if 0 < nalu_type < STAPA_NALU_TYPE:
            return self._package(payload)

        if nalu_type == STAPA_NALU_TYPE:
            return self._parse_stap_a(payload)

        if nalu_type == FUA_NALU_TYPE:
            return self._parse_fu_a(payload)

        raise UnhandledNALUTypeError(f"NALU Type is unhandled: {nalu_type}")

    def _parse_stap_a(self, payload: bytes) -> bytes:
        result = bytearray()
        offset = STAPA_HEADER_SIZE
        while offset < len(payload):
            if len(payload) - offset < STAPA_NALU_LENGTH_SIZE:
                break
            size = int.from_bytes(payload[offset:offset + 2], "big")
            offset += STAPA_NALU_LENGTH_SIZE
            if len(payload) < offset + size:
                raise ShortPacketError(
                    f"packet is not large enough: STAP-A declared size({size}) "
                    f"is larger than buffer({len(payload) - offset})"
                )
            result += self._package(payload[offset:offset + size])
            offset += size
        return bytes(result)

    def _parse_fu_a(self, payload: bytes) -> bytes:
        if len(payload) < FUA_HEADER_SIZE:
            raise ShortPacketError()
        if self._fua_buffer is None:
            self._fua_buffer = bytearray()
        self._fua_buffer += payload[FUA_HEADER_SIZE:]

        if payload[1] & FU_END_BITMASK:
            header = (payload[0] & NALU_REF_IDC_BITMASK) | (payload[1] & NALU_TYPE_BITMASK)
            nalu = bytes((header,)) + bytes(self._fua_buffer)
            self._fua_buffer = None
            return self._package(nalu)
        return b""

    def is_partition_head(self, payload: bytes | None) -> bool:
        """True if the payload starts a packetized NAL unit."""
        if not payload or len(payload) < 2:
            return False
        if payload[0] & NALU_TYPE_BITMASK in (FUA_NALU_TYPE, FUB_NALU_TYPE):
            return bool(payload[1] & FU_START_BITMASK)
        return True


class H264PartitionHeadChecker:
    """Checks whether an H.264 payload is a partition head."""

    def is_partition_head(self, packet: bytes | None) -> bool:
        """True if the packet starts a packetized NAL unit."""
        return H264Packet().is_partition_head(packet)