"""State constructed once at startup and handed to the session, scheduler and renderers."""

from .params import RenderParameters
from .sampler import FrequencySampler
from .surface import Surface


class VisualizerContext:
    def __init__(self, surface, params=None, sampler=None):
        self.surface = surface
        self.params = params if params is not None else RenderParameters()
        self.sampler = sampler if sampler is not None else FrequencySampler()

    @classmethod
    def create(cls, width, height, **kwargs):
        return cls(Surface(width, height), **kwargs)
