"""
Audio sources backed by PyAudio

Both sources run a PortAudio callback that pushes mono float32 chunks into
a sink (normally FrequencySampler.push). Closing a source stops the stream
and terminates its PortAudio instance immediately so the device is freed.
"""

import numpy as np
import pyaudio

from . import config
from .console import print
from .errors import SourceAcquisitionDenied


def _device_name(dev):
    name = dev["name"]
    if type(name) is bytes:
        name = name.decode("cp932")  # for windows
    return name


def list_input_devices():
    """Return (index, name, max input channels, default rate) for capture devices"""
    p = pyaudio.PyAudio()
    devices = []
    try:
        for k in range(p.get_device_count()):
            dev = p.get_device_info_by_index(k)
            if int(dev["maxInputChannels"]) > 0:
                devices.append((int(dev["index"]), _device_name(dev),
                                int(dev["maxInputChannels"]), int(dev["defaultSampleRate"])))
    finally:
        p.terminate()
    return devices


def to_mono(samples):
    """Average a (frames, channels) block down to one channel"""
    if samples.ndim == 1 or samples.shape[1] == 1:
        return samples.reshape(-1)
    return samples.mean(axis=1)


class AudioSource:
    """Interface shared by live capture and file playback"""

    exhausted = False

    def describe(self):
        return self.__class__.__name__

    def close(self):
        raise NotImplementedError


class PyAudioInputSource(AudioSource):
    """Live capture from an input (or loopback) device"""

    def __init__(self, sink, device_index=None, device_keyword=None, chunk_size=config.CHUNK_SIZE):
        self.sink = sink
        self.chunk_size = chunk_size
        self.stream = None
        self._closed = False

        self.p = pyaudio.PyAudio()
        try:
            dev = self._select_device(device_index, device_keyword)
            self.device_index = int(dev["index"])
            self.device_name = _device_name(dev)
            self.rate = int(dev["defaultSampleRate"])
            self.channels = min(int(dev["maxInputChannels"]), config.CHANNELS)

            self.stream = self.p.open(
                format=pyaudio.paFloat32,
                channels=self.channels,
                rate=self.rate,
                input=True,
                output=False,
                frames_per_buffer=self.chunk_size,
                input_device_index=self.device_index,
                stream_callback=self._audio_callback,
            )
            self.stream.start_stream()
        except SourceAcquisitionDenied:
            self.p.terminate()
            raise
        except (OSError, ValueError) as e:
            self.p.terminate()
            raise SourceAcquisitionDenied(f"Could not open capture device: {e}") from e

        print(f"✓ Capturing from: {self.device_name}")
        print(f"  Channels: {self.channels}")
        print(f"  Sample rate: {self.rate} Hz")

    def _select_device(self, device_index, device_keyword):
        """Pick device by index, then keyword, then the system default"""
        inputs = []
        for k in range(self.p.get_device_count()):
            dev = self.p.get_device_info_by_index(k)
            if int(dev["maxInputChannels"]) > 0:
                inputs.append(dev)

        if not inputs:
            raise SourceAcquisitionDenied("No audio input device available")

        if device_index is not None:
            for dev in inputs:
                if int(dev["index"]) == device_index:
                    return dev
            raise SourceAcquisitionDenied(f"Input device {device_index} does not exist")

        if device_keyword:
            for dev in inputs:
                if device_keyword.lower() in _device_name(dev).lower():
                    return dev
            print(f"Warning: No input device matching '{device_keyword}', using default")

        try:
            return self.p.get_default_input_device_info()
        except (OSError, IOError) as e:
            raise SourceAcquisitionDenied(f"No default input device: {e}") from e

    def _audio_callback(self, in_data, frame_count, time_info, status):
        data = np.frombuffer(in_data, dtype=np.float32)
        usable = len(data) - len(data) % self.channels
        self.sink(to_mono(data[:usable].reshape(-1, self.channels)))
        return (None, pyaudio.paContinue)

    def describe(self):
        return f"input device '{self.device_name}' ({self.rate} Hz)"

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            if self.stream is not None:
                if self.stream.is_active():
                    self.stream.stop_stream()
                self.stream.close()
        finally:
            self.p.terminate()
        print(f"Released input device '{self.device_name}'", debug_only=True)


class PyAudioPlaybackSource(AudioSource):
    """Plays a decoded buffer to the default output while feeding the sink"""

    def __init__(self, decoded, sink, chunk_size=config.CHUNK_SIZE):
        self.sink = sink
        self.rate = decoded.rate
        self.samples = np.ascontiguousarray(decoded.samples, dtype=np.float32)
        self.channels = self.samples.shape[1]
        self.position = 0
        self.exhausted = False
        self.stream = None
        self._closed = False

        self.p = pyaudio.PyAudio()
        try:
            self.stream = self.p.open(
                format=pyaudio.paFloat32,
                channels=self.channels,
                rate=self.rate,
                output=True,
                frames_per_buffer=chunk_size,
                stream_callback=self._audio_callback,
            )
            self.stream.start_stream()
        except (OSError, ValueError) as e:
            self.p.terminate()
            raise SourceAcquisitionDenied(f"Could not open output device for playback: {e}") from e

        print(f"✓ Playing {self.samples.shape[0] / self.rate:.2f}s of audio ({self.rate} Hz, {self.channels} ch)")

    def _audio_callback(self, in_data, frame_count, time_info, status):
        block = self.samples[self.position:self.position + frame_count]
        self.position += len(block)

        if len(block):
            self.sink(to_mono(block))

        if len(block) < frame_count:
            # Pad the final block with silence
            padded = np.zeros((frame_count, self.channels), dtype=np.float32)
            padded[:len(block)] = block
            self.exhausted = True
            return (padded.tobytes(), pyaudio.paComplete)
        return (block.tobytes(), pyaudio.paContinue)

    def describe(self):
        return f"file playback ({self.rate} Hz, {self.channels} ch)"

    def close(self):
        if self._closed:
            return
        self._closed = True
        try:
            if self.stream is not None:
                if self.stream.is_active():
                    self.stream.stop_stream()
                self.stream.close()
        finally:
            self.p.terminate()
        print("Released playback stream", debug_only=True)
