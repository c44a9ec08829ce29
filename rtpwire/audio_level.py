"""Audio level RTP header extension (RFC 6464)."""

from __future__ import annotations

from dataclasses import dataclass

from rtpwire.errors import AudioLevelOverflowError, TooSmallError

_EXTENSION_SIZE = 1


@dataclass
class AudioLevelExtension:
    """Audio level in -dBov (0..127) and the voice activity flag."""

    level: int = 0
    voice: bool = False

    def marshal(self) -> bytes:
        """Serialize to the one-byte extension payload."""
        if not 0 <= self.level <= 127:
            raise AudioLevelOverflowError()
        return bytes(((0x80 if self.voice else 0x00) | self.level,))

    @classmethod
    def unmarshal(cls, raw_data: bytes) -> AudioLevelExtension:
        """Parse an extension payload."""
        if len(raw_data) < _EXTENSION_SIZE:
            raise TooSmallError()
        return cls(level=raw_data[0] & 0x7F, voice=bool(raw_data[0] & 0x80))