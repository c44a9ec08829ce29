"""AV1 Open Bitstream Unit headers and LEB128 integer coding."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from rtpwire.errors import RTPError

_SEVEN_LSB = 0b0111_1111
_MSB = 0b1000_0000
_UINT64_MASK = (1 << 64) - 1


class InvalidOBUHeaderError(RTPError):
    """Raised when an OBU header has forbidden bits set."""


class ShortHeaderError(RTPError):
    """Raised when data is too short to hold an OBU header."""


class LEB128Error(RTPError):
    """Raised when a buffer ends before a LEB128 value is complete."""

    def __init__(self, message: str = "payload ended before LEB128 was finished") -> None:
        super().__init__(message)


class OBUType(enum.IntEnum):
    """OBU types defined by the AV1 specification."""

    SEQUENCE_HEADER = 1
    TEMPORAL_DELIMITER = 2
    FRAME_HEADER = 3
    TILE_GROUP = 4
    METADATA = 5
    FRAME = 6
    REDUNDANT_FRAME_HEADER = 7
    TILE_LIST = 8
    PADDING = 15

    def __str__(self) -> str:
        return obu_type_name(self)


def obu_type_name(value: int) -> str:
    """Return the specification name of an OBU type, or OBU_RESERVED."""
    try:
        return "OBU_" + OBUType(value).name
    except ValueError:
        return "OBU_RESERVED"


def _as_type(value: int) -> int:
    try:
        return OBUType(value)
    except ValueError:
        return value


def encode_leb128(value: int) -> int:
    """Encode an integer as LEB128, returning the encoded bytes packed in an int."""
    out = 0
    while True:
        out |= value & _SEVEN_LSB
        value >>= 7
        if value == 0:
            return out
        out |= _MSB
        out <<= 8


def decode_leb128(value: int) -> int:
    """Decode a LEB128 value packed in an int, as produced by encode_leb128."""
    out = 0
    while True:
        out |= value & _SEVEN_LSB
        value >>= 8
        if value == 0:
            return out
        out <<= 7


def read_leb128(data: bytes) -> tuple[int, int]:
    """Read a LEB128 value from the start of data.

    Returns the decoded value and the number of bytes it occupied.
    """
    encoded = 0
    for index, byte in enumerate(data):
        encoded |= byte
        if byte & _MSB == 0:
            return decode_leb128(encoded), index + 1
        encoded = (encoded << 8) & _UINT64_MASK
    raise LEB128Error()


def write_leb128(value: int) -> bytes:
    """Encode a non-negative integer as LEB128 bytes."""
    if value < 0:
        raise ValueError("LEB128 value must not be negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value == 0:
            out.append(byte)
            return bytes(out)
        out.append(byte | 0x80)


@dataclass
class ExtensionHeader:
    """OBU extension header: temporal id, spatial id and reserved bits."""

    temporal_id: int = 0
    spatial_id: int = 0
    reserved_3bits: int = 0

    def marshal(self) -> int:
        """Serialize to a single byte value, truncating each field to its width."""
        return (
            ((self.temporal_id << 5) & 0xFF)
            | ((self.spatial_id & 0x03) << 3)
            | (self.reserved_3bits & 0x07)
        )


def parse_obu_extension_header(header_byte: int) -> ExtensionHeader:
    """Parse an OBU extension header from one byte."""
    return ExtensionHeader(
        temporal_id=header_byte >> 5,
        spatial_id=(header_byte >> 3) & 0x03,
        reserved_3bits=header_byte & 0x07,
    )


@dataclass
class Header:
    """OBU header, optionally followed by an extension header."""

    obu_type: int = 0
    extension_header: ExtensionHeader | None = None
    has_size_field: bool = False
    reserved_1bit: bool = False

    def size(self) -> int:
        """Size of the serialized header in bytes."""
        return 2 if self.extension_header is not None else 1

    def marshal(self) -> bytes:
        """Serialize the header and any extension header."""
        first = (int(self.obu_type) & 0x0F) << 3
        if self.extension_header is not None:
            first |= 0x04
        if self.has_size_field:
            first |= 0x02
        if self.reserved_1bit:
            first |= 0x01
        if self.extension_header is not None:
            return bytes((first, self.extension_header.marshal()))
        return bytes((first,))


def parse_obu_header(data: bytes) -> Header:
    """Parse an OBU header from the start of data."""
    if len(data) < 1:
        raise ShortHeaderError("OBU header is not large enough: data is too short")
    first = data[0]
    if first & 0x80:
        raise InvalidOBUHeaderError("invalid OBU header: forbidden bit is set")

    header = Header(
        obu_type=_as_type((first & 0x78) >> 3),
        has_size_field=bool(first & 0x02),
        reserved_1bit=bool(first & 0x01),
    )
    if first & 0x04:
        if len(data) < 2:
            raise ShortHeaderError(
                "OBU header is not large enough: unexpected end of data, "
                "expected extension header"
            )
        header.extension_header = parse_obu_extension_header(data[1])
    return header


@dataclass
class OBU:
    """An AV1 OBU: a header and its payload."""

    header: Header = field(default_factory=Header)
    payload: bytes = b""

    def marshal(self) -> bytes:
        """Serialize to low-overhead bitstream format."""
        out = self.header.marshal()
        if self.header.has_size_field:
            out += write_leb128(len(self.payload))
        return out + bytes(self.payload)