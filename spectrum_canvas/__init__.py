"""
Spectrum Canvas
Real-time audio frequency visualizer with interchangeable render styles
"""

__version__ = "1.0.0"
