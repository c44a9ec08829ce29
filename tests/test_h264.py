import pytest

from rtpwire.errors import ShortPacketError, UnhandledNALUTypeError
from rtpwire.h264 import (
    FU_END_BITMASK,
    FU_START_BITMASK,
    FUA_NALU_TYPE,
    FUB_NALU_TYPE,
    STAPA_NALU_TYPE,
    H264Packet,
    H264PartitionHeadChecker,
    H264Payloader,
    iter_nalus,
)

SMALL = bytes([0x90, 0x90, 0x90])
MULTIPLE = bytes([0x00, 0x00, 0x01, 0x90, 0x00, 0x00, 0x01, 0x90])
MIXED = bytes([
    0x00, 0x00, 0x01, 0x90,
    0x00, 0x00, 0x00, 0x01, 0x90,
    0x00, 0x00, 0x01, 0x90,
    0x00, 0x00, 0x00, 0x01, 0x90,
])
LARGE = bytes([
    0x00, 0x00, 0x01, 0x00, 0x01, 0x02, 0x03, 0x04, 0x05, 0x06, 0x07,
    0x08, 0x09, 0x10, 0x11, 0x12, 0x13, 0x14, 0x15,
])
LARGE_PACKETIZED = [
    bytes([0x1C, 0x80, 0x01, 0x02, 0x03]),
    bytes([0x1C, 0x00, 0x04, 0x05, 0x06]),
    bytes([0x1C, 0x00, 0x07, 0x08, 0x09]),
    bytes([0x1C, 0x00, 0x10, 0x11, 0x12]),
    bytes([0x1C, 0x40, 0x13, 0x14, 0x15]),
]
STAPA_MULTI = bytes([
    0x78, 0x00, 0x0F, 0x67, 0x42, 0xC0, 0x1F, 0x1A, 0x32, 0x35, 0x01, 0x40, 0x7A, 0x40,
    0x3C, 0x22, 0x11, 0xA8, 0x00, 0x05, 0x68, 0x1A, 0x34, 0xE3, 0xC8,
])


@pytest.mark.parametrize(
    "mtu,payload",
    [
        (1, None),
        (1, b""),
        (1, b"\x00\x00\x01"),
        (0, SMALL),
        (1, SMALL),
        (5, bytes([0x09, 0x00, 0x00])),
    ],
)
def test_payload_empty_results(mtu, payload):
    assert H264Payloader().payload(mtu, payload) == []


def test_payload_small():
    res = H264Payloader().payload(5, SMALL)
    assert res == [SMALL]


def test_payload_multiple_nalus():
    assert H264Payloader().payload(5, MULTIPLE) == [b"\x90", b"\x90"]


def test_payload_mixed_start_codes():
    assert H264Payloader().payload(5, MIXED) == [b"\x90"] * 4


def test_payload_fu_a():
    assert H264Payloader().payload(5, LARGE) == LARGE_PACKETIZED


def test_iter_nalus():
    assert list(iter_nalus(MIXED)) == [b"\x90"] * 4
    assert list(iter_nalus(SMALL)) == [SMALL]


def test_sps_pps_packed_as_stap_a():
    pck = H264Payloader()
    assert pck.payload(1500, bytes([0x07, 0x00, 0x01])) == []
    assert pck.payload(1500, bytes([0x08, 0x02, 0x03])) == []
    assert pck.payload(1500, bytes([0x05, 0x04, 0x05])) == [
        bytes([0x78, 0x00, 0x03, 0x07, 0x00, 0x01, 0x00, 0x03, 0x08, 0x02, 0x03]),
        bytes([0x05, 0x04, 0x05]),
    ]


def test_sps_pps_without_stap_a():
    pck = H264Payloader(disable_stap_a=True)
    sps = bytes([0x07, 0x00, 0x01])
    pps = bytes([0x08, 0x02, 0x03])
    assert pck.payload(1500, sps) == [sps]
    assert pck.payload(1500, pps) == [pps]


@pytest.mark.parametrize(
    "payload,error",
    [
        (None, ShortPacketError),
        (b"", ShortPacketError),
        (bytes([0xFC]), ShortPacketError),
        (bytes([0xFF, 0x00, 0x00]), UnhandledNALUTypeError),
        (STAPA_MULTI[:17], ShortPacketError),
    ],
)
def test_unmarshal_errors(payload, error):
    with pytest.raises(error):
        H264Packet().unmarshal(payload)


def test_unmarshal_end_of_sequence():
    assert H264Packet().unmarshal(bytes([0x0A])) == bytes([0x00, 0x00, 0x00, 0x01, 0x0A])


def test_unmarshal_single():
    assert H264Packet().unmarshal(SMALL) == bytes([0, 0, 0, 1]) + SMALL
    assert H264Packet(is_avc=True).unmarshal(SMALL) == bytes([0, 0, 0, 3]) + SMALL


def test_unmarshal_fu_a():
    pkt = H264Packet()
    result = b"".join(pkt.unmarshal(p) for p in LARGE_PACKETIZED)
    assert result == bytes([0x00, 0x00, 0x00, 0x01]) + LARGE[3:]

    avc = H264Packet(is_avc=True)
    result = b"".join(avc.unmarshal(p) for p in LARGE_PACKETIZED)
    assert result == bytes([0x00, 0x00, 0x00, 0x10]) + LARGE[3:]


def test_unmarshal_stap_a():
    assert H264Packet().unmarshal(STAPA_MULTI) == bytes([
        0x00, 0x00, 0x00, 0x01, 0x67, 0x42, 0xC0, 0x1F, 0x1A, 0x32, 0x35, 0x01, 0x40, 0x7A,
        0x40, 0x3C, 0x22, 0x11, 0xA8, 0x00, 0x00, 0x00, 0x01, 0x68, 0x1A, 0x34, 0xE3, 0xC8,
    ])
    assert H264Packet(is_avc=True).unmarshal(STAPA_MULTI) == bytes([
        0x00, 0x00, 0x00, 0x0F, 0x67, 0x42, 0xC0, 0x1F, 0x1A, 0x32, 0x35, 0x01, 0x40, 0x7A,
        0x40, 0x3C, 0x22, 0x11, 0xA8, 0x00, 0x00, 0x00, 0x05, 0x68, 0x1A, 0x34, 0xE3, 0xC8,
    ])


def test_unmarshal_stap_a_broken_second_nalu():
    broken = STAPA_MULTI[:19]
    body = bytes([
        0x67, 0x42, 0xC0, 0x1F, 0x1A, 0x32, 0x35, 0x01, 0x40, 0x7A,
        0x40, 0x3C, 0x22, 0x11, 0xA8,
    ])
    assert H264Packet().unmarshal(broken) == bytes([0, 0, 0, 1]) + body
    assert H264Packet(is_avc=True).unmarshal(broken) == bytes([0, 0, 0, 0x0F]) + body


def test_unmarshal_zero_allocation_returns_input():
    pkt = H264Packet(zero_allocation=True)
    assert pkt.unmarshal(STAPA_MULTI) == STAPA_MULTI


def test_is_detected_final_packet_in_sequence():
    pkt = H264Packet()
    assert pkt.is_detected_final_packet_in_sequence(True) is True
    assert pkt.is_detected_final_packet_in_sequence(False) is False


@pytest.mark.parametrize(
    "payload,expected",
    [
        (None, False),
        (b"", False),
        (bytes([1, 0]), True),
        (bytes([STAPA_NALU_TYPE, 0]), True),
        (bytes([FUA_NALU_TYPE, FU_START_BITMASK]), True),
        (bytes([FUA_NALU_TYPE, FU_END_BITMASK]), False),
        (bytes([FUB_NALU_TYPE, FU_START_BITMASK]), True),
        (bytes([FUB_NALU_TYPE, FU_END_BITMASK]), False),
    ],
)
def test_is_partition_head(payload, expected):
    assert H264Packet().is_partition_head(payload) is expected
    assert H264PartitionHeadChecker().is_partition_head(payload) is expected