"""
Capture session

Owns the lifecycle of the single active audio source and the frame loop
that renders it.

    IDLE --start_capture()--------------------------------> CAPTURING
    IDLE --start_file_capture()--> DECODING --decoded-----> CAPTURING
                                   DECODING --failure/stop-> IDLE
    CAPTURING --stop_capture() / end of file--------------> IDLE

A source is held exactly while CAPTURING, and the frame loop only keeps
rescheduling while CAPTURING.
"""

import sys
import threading
from enum import Enum

from PyQt5.QtCore import QObject, pyqtSignal

from .console import print
from .decode import decode_audio
from .errors import DecodeFailure, SourceAcquisitionDenied
from .scheduler import FrameScheduler


class SessionState(Enum):
    IDLE = 'idle'
    DECODING = 'decoding'
    CAPTURING = 'capturing'


def _spawn_daemon(target, *args):
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()
    return thread


class CaptureSession(QObject):
    state_changed = pyqtSignal(str)
    capture_failed = pyqtSignal(str)
    # Decode results are marshalled back onto the thread that owns the session
    _decode_done = pyqtSignal(int, object, object)

    def __init__(self, context, acquire_live, open_playback, decoder=decode_audio,
                 request_frame=None, on_frame=None, spawn=None, hold_on_end=False, parent=None):
        """
        acquire_live(sink) -> AudioSource and open_playback(decoded, sink) ->
        AudioSource raise SourceAcquisitionDenied on failure; decoder(bytes)
        raises DecodeFailure. spawn(target, *args) runs the decode off the
        main thread.
        """
        super().__init__(parent)
        self.context = context
        self.state = SessionState.IDLE
        self.source = None
        self.hold_on_end = hold_on_end
        self.on_frame = on_frame

        self._acquire_live = acquire_live
        self._open_playback = open_playback
        self._decoder = decoder
        self._spawn = spawn or _spawn_daemon
        self._decode_token = 0

        self.scheduler = FrameScheduler(context, self._frame_gate, request_frame, on_frame=on_frame)
        self._decode_done.connect(self._finish_decode)

    @property
    def is_capturing(self):
        return self.state is SessionState.CAPTURING

    def _set_state(self, state):
        if state is self.state:
            return
        print(f"Session: {self.state.value} -> {state.value}", debug_only=True)
        self.state = state
        self.state_changed.emit(state.value)

    def _report_failure(self, message):
        print(f"✗ {message}", file=sys.stderr)
        self.capture_failed.emit(message)

    def _activate(self, source):
        self.context.sampler.bind(source)
        self.source = source
        self._set_state(SessionState.CAPTURING)
        self.scheduler.start()

    # ----- live capture -----

    def start_capture(self):
        """Acquire a live source and start rendering; returns True on success"""
        if self.state is not SessionState.IDLE:
            self.stop_capture()

        try:
            source = self._acquire_live(self.context.sampler.push)
        except SourceAcquisitionDenied as e:
            self._report_failure(f"Error capturing audio: {e}")
            return False

        self._activate(source)
        return True

    # ----- file playback -----

    def start_file_capture(self, data):
        """Decode file bytes in the background, then play and render them"""
        if self.state is not SessionState.IDLE:
            self.stop_capture()

        self._decode_token += 1
        self._set_state(SessionState.DECODING)
        self._spawn(self._decode_worker, self._decode_token, data)

    def _decode_worker(self, token, data):
        try:
            decoded = self._decoder(data)
        except DecodeFailure as e:
            self._decode_done.emit(token, None, e)
        except Exception as e:
            self._decode_done.emit(token, None, DecodeFailure(f"Unexpected decode error: {e}"))
        else:
            self._decode_done.emit(token, decoded, None)

    def _finish_decode(self, token, decoded, error):
        if token != self._decode_token or self.state is not SessionState.DECODING:
            print("Discarding result of cancelled decode", debug_only=True)
            return

        if error is not None:
            self._set_state(SessionState.IDLE)
            self._report_failure(f"Error decoding audio: {error}")
            return

        try:
            source = self._open_playback(decoded, self.context.sampler.push)
        except SourceAcquisitionDenied as e:
            self._set_state(SessionState.IDLE)
            self._report_failure(f"Error starting playback: {e}")
            return

        self._activate(source)

    def cancel_decode(self):
        if self.state is SessionState.DECODING:
            self._decode_token += 1
            self._set_state(SessionState.IDLE)

    # ----- shutdown -----

    def stop_capture(self):
        """Release the source, go IDLE and clear the surface (no-op when IDLE)"""
        if self.state is SessionState.DECODING:
            self.cancel_decode()
            return
        if self.state is not SessionState.CAPTURING:
            return

        source = self.source
        try:
            source.close()
        finally:
            self.source = None
            self.context.sampler.unbind()
            self._set_state(SessionState.IDLE)
            self.context.surface.clear()
            if self.on_frame is not None:
                self.on_frame()

    def _frame_gate(self):
        """Checked at the top of every tick"""
        if self.state is not SessionState.CAPTURING:
            return False
        if self.source.exhausted and not self.hold_on_end:
            print("✓ Playback finished")
            self.stop_capture()
            return False
        return True
