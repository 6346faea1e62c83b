import sys
import types

import pytest

from voicetwin.client.audio import CaptureError, SoundDeviceCapture


class _FakeStream:
    def __init__(self, fail_start: bool = False, **kwargs):
        self.kwargs = kwargs
        self.fail_start = fail_start
        self.started = False
        self.stopped = False
        self.closed = False

    def start(self):
        if self.fail_start:
            raise RuntimeError("device busy")
        self.started = True

    def stop(self):
        self.stopped = True

    def close(self):
        self.closed = True


def _install_fake_sounddevice(monkeypatch, fail_start: bool = False) -> list[_FakeStream]:
    streams: list[_FakeStream] = []

    def input_stream(**kwargs):
        stream = _FakeStream(fail_start=fail_start, **kwargs)
        streams.append(stream)
        return stream

    fake = types.ModuleType("sounddevice")
    fake.InputStream = input_stream
    monkeypatch.setitem(sys.modules, "sounddevice", fake)
    return streams


@pytest.mark.asyncio
async def test_stream_is_closed_when_start_fails(monkeypatch):
    streams = _install_fake_sounddevice(monkeypatch, fail_start=True)

    with pytest.raises(CaptureError, match="device busy"):
        async with SoundDeviceCapture().open():
            pass

    assert len(streams) == 1
    assert streams[0].closed is True


@pytest.mark.asyncio
async def test_stream_is_stopped_and_closed_after_recording(monkeypatch):
    streams = _install_fake_sounddevice(monkeypatch)
    capture = SoundDeviceCapture(sample_rate_hz=8000)

    async with capture.open() as recording:
        assert streams[0].started is True
        assert streams[0].closed is False
        assert recording.sample_rate_hz == 8000

    assert streams[0].kwargs["samplerate"] == 8000
    assert streams[0].kwargs["dtype"] == "int16"
    assert streams[0].stopped is True
    assert streams[0].closed is True
