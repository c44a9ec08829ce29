import pytest

from rtpwire.depacketizer import AudioDepacketizer, VideoDepacketizer


@pytest.mark.parametrize("marker", [True, False])
def test_audio_always_partition_tail(marker):
    assert AudioDepacketizer().is_partition_tail(marker, b"\x01\x02") is True


@pytest.mark.parametrize("payload", [b"", b"\x00", b"\xff\xff"])
def test_audio_always_partition_head(payload):
    assert AudioDepacketizer().is_partition_head(payload) is True


def test_video_partition_tail_follows_marker():
    depacketizer = VideoDepacketizer()
    assert depacketizer.is_partition_tail(True, b"\x01\x02") is True
    assert depacketizer.is_partition_tail(False, b"\x01\x02") is False


def test_video_zero_allocation_toggle():
    depacketizer = VideoDepacketizer()
    assert depacketizer.zero_allocation is False
    depacketizer.set_zero_allocation(True)
    assert depacketizer.zero_allocation is True
    depacketizer.set_zero_allocation(False)
    assert depacketizer.zero_allocation is False


def test_video_zero_allocation_is_per_instance():
    first = VideoDepacketizer()
    second = VideoDepacketizer()
    first.set_zero_allocation(True)
    assert second.zero_allocation is False