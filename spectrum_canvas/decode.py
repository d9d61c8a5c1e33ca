"""
Audio file decoding

WAV bytes are read with scipy. Anything else is piped through ffmpeg when it
is installed.
"""

import io
import shutil
import subprocess
from collections import namedtuple

import numpy as np
from scipy.io import wavfile

from . import config
from .console import print
from .errors import DecodeFailure

# samples: float32 array shaped (frames, channels), values in [-1, 1]
DecodedAudio = namedtuple('DecodedAudio', 'rate samples')


def to_float32(data):
    """Convert a wavfile array to float32 in [-1, 1]"""
    if data.dtype == np.uint8:
        return (data.astype(np.float32) - 128.0) / 128.0
    if data.dtype == np.int16:
        return data.astype(np.float32) / 32768.0
    if data.dtype == np.int32:
        return data.astype(np.float32) / 2147483648.0
    if np.issubdtype(data.dtype, np.floating):
        return data.astype(np.float32)
    raise DecodeFailure(f"Unsupported sample format: {data.dtype}")


def _shape_channels(samples):
    if samples.ndim == 1:
        samples = samples[:, None]
    elif samples.shape[1] > 2:
        samples = samples[:, :2]
    return np.ascontiguousarray(samples)


def _decode_wav(data):
    rate, samples = wavfile.read(io.BytesIO(data))
    return DecodedAudio(int(rate), _shape_channels(to_float32(samples)))


def _decode_ffmpeg(data, rate=config.SAMPLE_RATE, channels=config.CHANNELS):
    cmd = [
        "ffmpeg",
        "-v",
        "error",
        "-i",
        "pipe:0",
        "-f",
        "f32le",
        "-ac",
        str(channels),
        "-ar",
        str(rate),
        "pipe:1",
    ]
    result = subprocess.run(cmd, input=data, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    if result.returncode != 0:
        message = result.stderr.decode('utf-8', errors='replace').strip() or f"exit code {result.returncode}"
        raise DecodeFailure(f"ffmpeg could not decode audio: {message}")
    samples = np.frombuffer(result.stdout, dtype='<f4')
    usable = len(samples) - len(samples) % channels
    return DecodedAudio(rate, samples[:usable].reshape(-1, channels).copy())


def decode_audio(data):
    """Decode raw file bytes into a DecodedAudio, raising DecodeFailure"""
    if not data:
        raise DecodeFailure("Audio file is empty")

    try:
        decoded = _decode_wav(bytes(data))
    except (ValueError, EOFError, OSError) as e:
        if shutil.which("ffmpeg") is None:
            raise DecodeFailure(
                f"Not a readable WAV file ({e}) and ffmpeg is not available. "
                "Install ffmpeg or provide a .wav file."
            ) from e
        print(f"WAV read failed ({e}), trying ffmpeg", debug_only=True)
        decoded = _decode_ffmpeg(bytes(data))

    if decoded.samples.shape[0] == 0:
        raise DecodeFailure("Audio file contains no samples")

    duration = decoded.samples.shape[0] / decoded.rate
    print(f"Decoded audio: {decoded.rate} Hz, channels={decoded.samples.shape[1]}, duration={duration:.2f}s")
    return decoded
