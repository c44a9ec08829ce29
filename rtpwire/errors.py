"""Exception types raised by the RTP payload and extension codecs."""


class RTPError(ValueError):
    """Base class for every error raised by this package."""


class TooSmallError(RTPError):
    """Raised when a buffer is too small to hold the expected data."""

    def __init__(self, message: str = "buffer too small") -> None:
        super().__init__(message)


class AudioLevelOverflowError(RTPError):
    """Raised when an audio level does not fit in seven bits."""

    def __init__(self, message: str = "audio level overflow") -> None:
        super().__init__(message)


class ShortPacketError(RTPError):
    """Raised when a packet is not large enough for what it claims to hold."""

    def __init__(self, message: str = "packet is not large enough") -> None:
        super().__init__(message)


class NilPacketError(RTPError):
    """Raised when no packet was given at all."""

    def __init__(self, message: str = "invalid nil packet") -> None:
        super().__init__(message)


class UnhandledNALUTypeError(RTPError):
    """Raised when an H.264 NAL unit type is not supported."""

    def __init__(self, message: str = "NALU Type is unhandled") -> None:
        super().__init__(message)


class KeyframeAndFragmentError(RTPError):
    """Raised when an AV1 aggregation header has both Z and N set."""

    def __init__(
        self,
        message: str = (
            "bits Z and N are set. Not possible to have OBU be tail fragment and be keyframe"
        ),
    ) -> None:
        super().__init__(message)