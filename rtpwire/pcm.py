"""Payloaders for G.711 and G.722 audio, which split samples at the MTU."""

from __future__ import annotations


def _split_samples(mtu: int, payload: bytes | None) -> list[bytes]:
    """Split a sample buffer into chunks of at most the MTU."""
    if payload is None or mtu == 0:
        return []
    data = bytes(payload)
    chunks = [data[start:start + mtu] for start in range(0, len(data), mtu)]
    return chunks or [b""]


class G711Payloader:
    """Payloads G.711 packets."""

    def payload(self, mtu: int, payload: bytes | None) -> list[bytes]:
        """Fragment a G.711 payload across one or more byte strings."""
        return _split_samples(mtu, payload)


class G722Payloader:
    """Payloads G.722 packets."""

    def payload(self, mtu: int, payload: bytes | None) -> list[bytes]:
        """Fragment a G.722 payload across one or more byte strings."""
        return _split_samples(mtu, payload)