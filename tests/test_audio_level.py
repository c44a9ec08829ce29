import pytest

from rtpwire.audio_level import AudioLevelExtension
from rtpwire.errors import AudioLevelOverflowError, TooSmallError


def test_too_small():
    with pytest.raises(TooSmallError):
        AudioLevelExtension.unmarshal(b"")


def test_voice_true():
    raw = bytes([0x88])
    parsed = AudioLevelExtension.unmarshal(raw)
    expected = AudioLevelExtension(level=8, voice=True)
    assert parsed == expected
    assert expected.marshal() == raw


def test_voice_false():
    raw = bytes([0x08])
    parsed = AudioLevelExtension.unmarshal(raw)
    expected = AudioLevelExtension(level=8, voice=False)
    assert parsed == expected
    assert expected.marshal() == raw


def test_level_overflow():
    with pytest.raises(AudioLevelOverflowError):
        AudioLevelExtension(level=128, voice=False).marshal()


@pytest.mark.parametrize("level", [0, 1, 64, 127])
@pytest.mark.parametrize("voice", [True, False])
def test_round_trip(level, voice):
    ext = AudioLevelExtension(level=level, voice=voice)
    assert AudioLevelExtension.unmarshal(ext.marshal()) == ext