"""
Frequency sampler

Keeps a rolling mono buffer of the most recent FFT_SIZE samples from the
bound audio source and turns it into one byte per frequency bin on demand.
"""

import queue

import numpy as np

from . import config
from .console import print
from .errors import NoActiveSource


def blackman_window(size):
    """Periodic Blackman window (alpha 0.16)"""
    n = np.arange(size, dtype=np.float64)
    a0, a1, a2 = 0.42, 0.5, 0.08
    return (a0 - a1 * np.cos(2.0 * np.pi * n / size) + a2 * np.cos(4.0 * np.pi * n / size)).astype(np.float32)


def magnitudes_to_bytes(magnitudes, min_db=config.MIN_DECIBELS, max_db=config.MAX_DECIBELS):
    """Map linear magnitudes onto 0..255 across the [min_db, max_db] range"""
    with np.errstate(divide='ignore'):
        db = 20.0 * np.log10(magnitudes)
    scaled = np.floor((255.0 / (max_db - min_db)) * (db - min_db))
    # log10(0) gives -inf which the clip maps to 0
    return np.clip(np.nan_to_num(scaled, nan=0.0, neginf=0.0), 0, 255).astype(np.uint8)


class FrequencySampler:
    """Magnitude spectrum of whatever source is currently bound"""

    def __init__(self, fft_size=config.FFT_SIZE, smoothing=config.SMOOTHING_TIME_CONSTANT,
                 queue_depth=config.QUEUE_DEPTH):
        if fft_size <= 0 or fft_size & (fft_size - 1) != 0:
            raise ValueError(f"fft_size must be a power of 2, got {fft_size}")
        self.fft_size = fft_size
        self.bin_count = fft_size // 2
        self.smoothing = smoothing

        # Rolling buffer for FFT
        self.audio_buffer = np.zeros(self.fft_size, dtype=np.float32)
        self.window = blackman_window(self.fft_size)
        self.smoothed = np.zeros(self.bin_count, dtype=np.float64)

        # Chunks arrive from the audio thread, the render loop drains them
        self.audio_queue = queue.Queue(maxsize=queue_depth)
        self._source = None

    @property
    def is_bound(self):
        return self._source is not None

    @property
    def source(self):
        return self._source

    def bind(self, source):
        """Attach a source and start from an empty buffer"""
        self.reset()
        self._source = source
        print(f"Sampler bound to {source.describe()}", debug_only=True)

    def unbind(self):
        self._source = None
        self.reset()

    def reset(self):
        self.audio_buffer[:] = 0.0
        self.smoothed[:] = 0.0
        while True:
            try:
                self.audio_queue.get_nowait()
            except queue.Empty:
                break

    def push(self, samples):
        """Queue a mono chunk (called from the audio thread)"""
        chunk = np.asarray(samples, dtype=np.float32).reshape(-1)
        # Drop the oldest chunk rather than block the audio thread
        if self.audio_queue.full():
            try:
                self.audio_queue.get_nowait()
            except queue.Empty:
                pass
        self.audio_queue.put_nowait(chunk)

    def _drain(self):
        chunks = []
        while True:
            try:
                chunks.append(self.audio_queue.get_nowait())
            except queue.Empty:
                break
        return chunks

    def _append(self, data):
        n = len(data)
        if n == 0:
            return
        if n >= self.fft_size:
            self.audio_buffer[:] = data[-self.fft_size:]
        else:
            # In-place shift, no np.roll allocation
            self.audio_buffer[:-n] = self.audio_buffer[n:]
            self.audio_buffer[-n:] = data

    def sample(self):
        """Return the current FrequencySampleFrame (read-only uint8 array)"""
        if self._source is None:
            raise NoActiveSource("sample() called with no audio source bound")

        chunks = self._drain()
        if chunks:
            self._append(np.concatenate(chunks))
        elif self._source.exhausted:
            # Source ended: analyse silence so the spectrum decays
            self.audio_buffer[:] = 0.0

        spectrum = np.fft.rfft(self.audio_buffer * self.window)
        magnitudes = np.abs(spectrum[:self.bin_count]) / self.fft_size
        self.smoothed = self.smoothing * self.smoothed + (1.0 - self.smoothing) * magnitudes

        frame = magnitudes_to_bytes(self.smoothed)
        frame.flags.writeable = False
        return frame
