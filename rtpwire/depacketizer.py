"""Shared partition behaviour for audio and video depacketizers."""


class AudioDepacketizer:
    """Mixin for audio depacketizers: every packet is a whole partition."""

    packets_are_partitions: bool = True

    def is_partition_tail(self, marker: bool, payload: bytes) -> bool:
        """Every audio packet ends a partition."""
        return self.packets_are_partitions

    def is_partition_head(self, payload: bytes) -> bool:
        """Every audio packet starts a partition."""
        return self.packets_are_partitions


class VideoDepacketizer:
    """Mixin for video depacketizers: the RTP marker bit ends a partition."""

    zero_allocation: bool = False

    def is_partition_tail(self, marker: bool, payload: bytes) -> bool:
        """A video partition ends on the packet carrying the marker bit."""
        return bool(marker)

    def set_zero_allocation(self, zero_allocation: bool) -> None:
        """Turn off optional parsing work that only fills metadata."""
        self.zero_allocation = zero_allocation