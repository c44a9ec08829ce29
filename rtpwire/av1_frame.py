"""Reassembly of complete AV1 OBUs from a stream of AV1 RTP packets."""

from __future__ import annotations

from dataclasses import dataclass, field

from rtpwire.av1_packet import AV1Packet


@dataclass
class AV1Frame:
    """Builds whole OBUs from the OBU elements of consecutive AV1 packets.

    Holds a fragment between packets, so one instance serves a whole stream.
    """

    _buffer: bytes | None = field(default=None, repr=False)

    def read_frames(self, packet: AV1Packet) -> list[bytes]:
        """Return the OBUs completed by this packet."""
        obus: list[bytes] = []
        continues_fragment = packet.z

        for element in packet.obu_elements or []:
            if continues_fragment:
                continues_fragment = False
                if self._buffer is None:
                    # No earlier fragment to join this one to.
                    continue
                element = self._buffer + element
                self._buffer = None
            obus.append(bytes(element))

        if packet.y and obus:
            last = obus.pop()
            if self._buffer is not None or last:
                self._buffer = (self._buffer or b"") + last
        return obus