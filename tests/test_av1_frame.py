from rtpwire.av1_frame import AV1Frame
from rtpwire.av1_packet import AV1Packet, AV1Payloader


def test_first_fragment_without_buffer_is_dropped():
    frame = AV1Frame()
    assert frame.read_frames(AV1Packet(z=True, obu_elements=[b"\x01"])) == []


def test_self_contained_obu():
    frame = AV1Frame()
    assert frame.read_frames(AV1Packet(obu_elements=[b"\x01"])) == [b"\x01"]


def test_fragment_joined_across_packets():
    frame = AV1Frame()
    assert frame.read_frames(AV1Packet(y=True, obu_elements=[b"\x00"])) == []
    assert frame.read_frames(AV1Packet(z=True, obu_elements=[b"\x01"])) == [b"\x00\x01"]


def test_end_to_end():
    chunk = bytes(range(0x0B))
    frames = [
        chunk,
        b"\x00\x01",
        chunk * 2,
        b"\x00\x01",
        chunk * 6,
        chunk * 501,
    ]
    payloader = AV1Payloader()
    frame = AV1Frame()
    decoded = []
    for original in frames:
        for payload in payloader.payload(1500, original):
            packet = AV1Packet()
            packet.unmarshal(payload)
            result = frame.read_frames(packet)
            if result:
                assert result[0] == original
            decoded.extend(result)
    assert decoded == frames