import io

import numpy as np
import pytest
from scipy.io import wavfile

from spectrum_canvas import decode
from spectrum_canvas.decode import DecodedAudio, decode_audio, to_float32
from spectrum_canvas.errors import DecodeFailure


def wav_bytes(rate, data):
    buf = io.BytesIO()
    wavfile.write(buf, rate, data)
    return buf.getvalue()


def test_decodes_stereo_int16():
    data = np.zeros((4800, 2), dtype=np.int16)
    data[:, 0] = 16384
    data[:, 1] = -32768
    decoded = decode_audio(wav_bytes(48000, data))

    assert decoded.rate == 48000
    assert decoded.samples.shape == (4800, 2)
    assert decoded.samples.dtype == np.float32
    assert decoded.samples[0, 0] == pytest.approx(0.5)
    assert decoded.samples[0, 1] == pytest.approx(-1.0)


def test_mono_becomes_single_column():
    decoded = decode_audio(wav_bytes(22050, np.full(100, 128, dtype=np.uint8)))
    assert decoded.samples.shape == (100, 1)
    assert not decoded.samples.any()


def test_extra_channels_are_dropped():
    decoded = decode_audio(wav_bytes(8000, np.zeros((10, 4), dtype=np.float32)))
    assert decoded.samples.shape == (10, 2)


def test_empty_bytes_fail():
    with pytest.raises(DecodeFailure):
        decode_audio(b"")


def test_wav_without_frames_fails():
    with pytest.raises(DecodeFailure):
        decode_audio(wav_bytes(8000, np.zeros(0, dtype=np.int16)))


def test_garbage_without_ffmpeg_fails(monkeypatch):
    monkeypatch.setattr(decode.shutil, "which", lambda name: None)
    with pytest.raises(DecodeFailure, match="ffmpeg is not available"):
        decode_audio(b"definitely not a wave file")


def test_ffmpeg_error_becomes_decode_failure(monkeypatch):
    class Result:
        returncode = 1
        stdout = b""
        stderr = b"Invalid data found when processing input"

    monkeypatch.setattr(decode.shutil, "which", lambda name: "/usr/bin/ffmpeg")
    monkeypatch.setattr(decode.subprocess, "run", lambda *args, **kwargs: Result())
    with pytest.raises(DecodeFailure, match="Invalid data"):
        decode_audio(b"ID3 not really an mp3")


def test_ffmpeg_output_is_reshaped(monkeypatch):
    pcm = np.arange(8, dtype='<f4') / 10

    class Result:
        returncode = 0
        stdout = pcm.tobytes()
        stderr = b""

    calls = []

    def fake_run(cmd, **kwargs):
        calls.append((cmd, kwargs["input"]))
        return Result()

    monkeypatch.setattr(decode.shutil, "which", lambda name: "/usr/bin/ffmpeg")
    monkeypatch.setattr(decode.subprocess, "run", fake_run)
    decoded = decode_audio(b"OggS fake")

    assert isinstance(decoded, DecodedAudio)
    assert decoded.samples.shape == (4, 2)
    assert decoded.samples[1, 0] == pytest.approx(0.2)
    assert calls[0][1] == b"OggS fake"
    assert "pipe:0" in calls[0][0]


def test_unsupported_dtype_rejected():
    with pytest.raises(DecodeFailure):
        to_float32(np.zeros(4, dtype=np.int64))
