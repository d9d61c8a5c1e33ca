import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5.QtWidgets import QApplication

from spectrum_canvas.context import VisualizerContext


class FakeSource:
    """Stands in for a PyAudio source; counts close() calls"""

    def __init__(self, name="fake"):
        self.name = name
        self.exhausted = False
        self.close_calls = 0

    @property
    def closed(self):
        return self.close_calls > 0

    def describe(self):
        return f"fake source '{self.name}'"

    def close(self):
        self.close_calls += 1


class ManualFrames:
    """request_frame replacement; ticks only run when the test fires them"""

    def __init__(self):
        self.callbacks = []
        self.requests = 0

    def __call__(self, callback):
        self.requests += 1
        self.callbacks.append(callback)

    @property
    def pending(self):
        return len(self.callbacks)

    def fire(self):
        callback = self.callbacks.pop(0)
        callback()


class SpyRenderer:
    def __init__(self, name):
        self.name = name
        self.calls = []

    def render(self, painter, frame, params, width, height):
        self.calls.append((len(frame), params.style, width, height))


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def frames():
    return ManualFrames()


@pytest.fixture
def context():
    return VisualizerContext.create(200, 100)


@pytest.fixture
def spies():
    from spectrum_canvas.params import RenderStyle
    return {style: SpyRenderer(style.value) for style in RenderStyle}


@pytest.fixture
def fake_source_cls():
    return FakeSource
