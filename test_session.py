import numpy as np
import pytest
from PyQt5.QtCore import Qt

from spectrum_canvas.decode import DecodedAudio
from spectrum_canvas.errors import DecodeFailure, SourceAcquisitionDenied
from spectrum_canvas.params import RenderStyle
from spectrum_canvas.session import CaptureSession, SessionState


class Harness:
    """A session wired to fakes, with every callback recorded"""

    def __init__(self, context, frames, spies, source_cls, live_error=None, decode_error=None,
                 playback_error=None, spawn=None, hold_on_end=False):
        self.context = context
        self.frames = frames
        self.source_cls = source_cls
        self.live_error = live_error
        self.decode_error = decode_error
        self.playback_error = playback_error
        self.acquired = []
        self.played = []
        self.decoded = []
        self.failures = []
        self.states = []

        self.session = CaptureSession(
            context,
            acquire_live=self.acquire_live,
            open_playback=self.open_playback,
            decoder=self.decode,
            request_frame=frames,
            spawn=spawn or (lambda target, *args: target(*args)),
            hold_on_end=hold_on_end,
        )
        self.session.scheduler.renderers = spies
        self.session.capture_failed.connect(self.failures.append)
        self.session.state_changed.connect(self.states.append)

    def acquire_live(self, sink):
        if self.live_error is not None:
            raise self.live_error
        source = self.source_cls("live")
        self.acquired.append(source)
        return source

    def decode(self, data):
        self.decoded.append(data)
        if self.decode_error is not None:
            raise self.decode_error
        return DecodedAudio(8000, np.zeros((800, 1), dtype=np.float32))

    def open_playback(self, decoded, sink):
        if self.playback_error is not None:
            raise self.playback_error
        source = self.source_cls("file")
        self.played.append((decoded, source))
        return source


@pytest.fixture
def harness(context, frames, spies, fake_source_cls):
    def build(**kwargs):
        return Harness(context, frames, spies, fake_source_cls, **kwargs)
    return build


def assert_consistent(session):
    assert (session.source is not None) == (session.state is SessionState.CAPTURING)
    assert session.context.sampler.is_bound == (session.state is SessionState.CAPTURING)


def test_initial_state_is_idle(harness):
    h = harness()
    assert h.session.state is SessionState.IDLE
    assert_consistent(h.session)


def test_start_capture_binds_source_and_schedules(harness):
    h = harness()
    assert h.session.start_capture() is True

    assert h.session.state is SessionState.CAPTURING
    assert h.session.source is h.acquired[0]
    assert h.context.sampler.source is h.acquired[0]
    assert h.frames.pending == 1
    assert h.states == ["capturing"]
    assert_consistent(h.session)


def test_start_capture_failure_stays_idle(harness, spies):
    h = harness(live_error=SourceAcquisitionDenied("permission denied"))
    assert h.session.start_capture() is False

    assert h.session.state is SessionState.IDLE
    assert h.frames.requests == 0
    assert not any(spy.calls for spy in spies.values())
    assert len(h.failures) == 1 and "permission denied" in h.failures[0]
    assert h.states == []
    assert_consistent(h.session)

    # Still usable afterwards
    h.live_error = None
    assert h.session.start_capture() is True


def test_stop_capture_releases_clears_and_halts(harness, spies):
    h = harness()
    h.session.start_capture()
    h.frames.fire()
    with h.context.surface.painter() as painter:
        painter.fillRect(0, 0, 50, 50, Qt.white)

    h.session.stop_capture()
    source = h.acquired[0]
    assert source.close_calls == 1
    assert h.session.state is SessionState.IDLE
    assert h.context.surface.is_clear()
    assert_consistent(h.session)

    # The tick already requested must not draw or reschedule
    draws = sum(len(spy.calls) for spy in spies.values())
    h.frames.fire()
    assert sum(len(spy.calls) for spy in spies.values()) == draws
    assert h.frames.pending == 0
    assert h.context.surface.is_clear()


def test_stop_capture_is_idempotent_when_idle(harness):
    h = harness()
    h.session.stop_capture()
    h.session.start_capture()
    h.session.stop_capture()
    h.session.stop_capture()
    assert h.acquired[0].close_calls == 1
    assert h.states == ["capturing", "idle"]


def test_restart_after_stop_keeps_single_tick_in_flight(harness):
    h = harness()
    h.session.start_capture()
    h.session.stop_capture()
    h.session.start_capture()
    # The old request is still pending and serves the new capture
    assert h.frames.pending == 1
    h.frames.fire()
    assert h.frames.pending == 1


def test_starting_again_replaces_active_source(harness):
    h = harness()
    h.session.start_capture()
    h.session.start_capture()
    first, second = h.acquired
    assert first.close_calls == 1
    assert h.session.source is second
    assert_consistent(h.session)


def test_style_switch_mid_capture_keeps_source(harness, spies):
    h = harness()
    h.session.start_capture()
    h.frames.fire()
    h.context.params.set_style(RenderStyle.WAVEFORM)
    h.frames.fire()

    assert len(spies[RenderStyle.BARS].calls) == 1
    assert len(spies[RenderStyle.WAVEFORM].calls) == 1
    assert h.session.state is SessionState.CAPTURING
    assert h.acquired[0].close_calls == 0
    assert len(h.acquired) == 1


def test_file_capture_decodes_then_plays(harness):
    h = harness()
    h.session.start_file_capture(b"RIFF...")

    assert h.decoded == [b"RIFF..."]
    assert h.session.state is SessionState.CAPTURING
    assert h.session.source is h.played[0][1]
    assert h.played[0][0].rate == 8000
    assert h.states == ["decoding", "capturing"]
    assert h.frames.pending == 1


def test_decode_failure_returns_to_idle(harness):
    h = harness(decode_error=DecodeFailure("not audio"))
    h.session.start_file_capture(b"garbage")

    assert h.session.state is SessionState.IDLE
    assert h.played == []
    assert h.frames.requests == 0
    assert "not audio" in h.failures[0]
    assert h.states == ["decoding", "idle"]
    assert_consistent(h.session)


def test_unexpected_decoder_error_is_reported_as_decode_failure(harness):
    h = harness(decode_error=MemoryError("too big"))
    h.session.start_file_capture(b"x")
    assert h.session.state is SessionState.IDLE
    assert "too big" in h.failures[0]


def test_playback_device_failure_returns_to_idle(harness):
    h = harness(playback_error=SourceAcquisitionDenied("no output"))
    h.session.start_file_capture(b"RIFF")
    assert h.session.state is SessionState.IDLE
    assert h.frames.requests == 0
    assert "no output" in h.failures[0]


def test_stop_during_decode_discards_result(harness):
    deferred = []
    h = harness(spawn=lambda target, *args: deferred.append((target, args)))
    h.session.start_file_capture(b"RIFF")
    assert h.session.state is SessionState.DECODING
    assert_consistent(h.session)

    h.session.stop_capture()
    assert h.session.state is SessionState.IDLE

    target, args = deferred[0]
    target(*args)
    assert h.session.state is SessionState.IDLE
    assert h.played == []
    assert h.frames.requests == 0


def test_newer_file_supersedes_pending_decode(harness):
    deferred = []
    h = harness(spawn=lambda target, *args: deferred.append((target, args)))
    h.session.start_file_capture(b"first")
    h.session.start_file_capture(b"second")

    for target, args in deferred:
        target(*args)

    assert len(h.played) == 1
    assert h.session.state is SessionState.CAPTURING


def test_end_of_file_stops_capture(harness, spies):
    h = harness()
    h.session.start_file_capture(b"RIFF")
    h.frames.fire()
    source = h.session.source
    source.exhausted = True

    h.frames.fire()
    assert h.session.state is SessionState.IDLE
    assert source.close_calls == 1
    assert h.frames.pending == 0
    assert h.context.surface.is_clear()
    assert len(spies[RenderStyle.BARS].calls) == 1


def test_hold_on_end_keeps_rendering(harness, spies):
    h = harness(hold_on_end=True)
    h.session.start_file_capture(b"RIFF")
    h.session.source.exhausted = True
    h.frames.fire()
    h.frames.fire()
    assert h.session.state is SessionState.CAPTURING
    assert len(spies[RenderStyle.BARS].calls) == 2
