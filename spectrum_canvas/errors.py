"""Exceptions raised by the capture and sampling pipeline."""


class VisualizerError(Exception):
    """Base class for Spectrum Canvas errors"""


class SourceAcquisitionDenied(VisualizerError):
    """The capture device was refused, missing or could not be opened"""


class DecodeFailure(VisualizerError):
    """Audio file bytes were malformed or in an unsupported format"""


class NoActiveSource(VisualizerError):
    """A frame was requested while no audio source was bound"""
