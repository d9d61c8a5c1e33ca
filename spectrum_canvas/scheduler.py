"""
Frame scheduler

Cooperative clear -> sample -> render loop. Each tick asks the host to be
called again on the next display refresh; the loop ends the first time the
gate reports the session is no longer capturing.
"""

import time

from PyQt5.QtCore import QTimer
from PyQt5.QtGui import QGuiApplication

from . import config
from .console import print
from .styles import RENDERERS


def display_refresh_interval_ms():
    """Milliseconds between display refreshes on the primary screen"""
    rate = 0.0
    app = QGuiApplication.instance()
    if app is not None:
        screen = QGuiApplication.primaryScreen()
        if screen is not None:
            rate = screen.refreshRate()
    if not rate or rate <= 0:
        rate = config.FALLBACK_REFRESH_RATE
    return max(1, int(round(1000.0 / rate)))


def qt_frame_requester(interval_ms=None):
    """Return a request_frame(callback) that fires once on the next refresh"""
    def request_frame(callback):
        QTimer.singleShot(interval_ms if interval_ms is not None else display_refresh_interval_ms(), callback)
    return request_frame


class FrameScheduler:
    def __init__(self, context, gate, request_frame=None, renderers=None, on_frame=None):
        self.context = context
        self._gate = gate
        self._request_frame = request_frame or qt_frame_requester()
        self.renderers = renderers if renderers is not None else RENDERERS
        self.on_frame = on_frame

        self._pending = False
        self.frame_count = 0

        # Performance monitoring
        self.frame_times = []
        self.last_frame_time = None
        self.last_fps_report = time.perf_counter()

    @property
    def pending(self):
        return self._pending

    def start(self):
        """Request the first tick unless one is already in flight"""
        if self._pending:
            return
        self.last_frame_time = None
        self._pending = True
        self._request_frame(self._tick)

    def _tick(self):
        self._pending = False
        if not self._gate():
            print(f"Frame loop stopped after {self.frame_count} frames", debug_only=True)
            return

        self.render_frame()

        self._pending = True
        self._request_frame(self._tick)

    def render_frame(self):
        """One clear-sample-render pass"""
        context = self.context
        surface = context.surface
        params = context.params

        surface.clear()
        frame = context.sampler.sample()
        renderer = self.renderers[params.style]
        with surface.painter() as painter:
            renderer.render(painter, frame, params, surface.width, surface.height)

        self.frame_count += 1
        if self.on_frame is not None:
            self.on_frame()
        self._track_fps()

    def _track_fps(self):
        now = time.perf_counter()
        if self.last_frame_time is not None:
            self.frame_times.append(now - self.last_frame_time)
        self.last_frame_time = now

        if now - self.last_fps_report >= config.FPS_REPORT_INTERVAL:
            if self.frame_times:
                avg = sum(self.frame_times) / len(self.frame_times)
                fps = 1.0 / avg if avg > 0 else 0.0
                print(f"[VIZ] {fps:.1f} FPS (frame interval {avg * 1000:.2f}ms)", debug_only=True)
            self.frame_times = []
            self.last_fps_report = now
