"""Raster drawing target shared by every frame"""

from contextlib import contextmanager

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QImage, QPainter


class Surface:
    """Fixed-size ARGB image; dimensions are set once at startup"""

    def __init__(self, width, height, antialias=True):
        self.width = max(int(width), 0)
        self.height = max(int(height), 0)
        self.antialias = antialias
        # QImage refuses a zero dimension, keep at least one pixel of backing store
        self.image = QImage(max(self.width, 1), max(self.height, 1), QImage.Format_ARGB32_Premultiplied)
        self.clear()

    def clear(self):
        self.image.fill(Qt.transparent)

    def is_clear(self):
        blank = QImage(self.image.size(), self.image.format())
        blank.fill(Qt.transparent)
        return self.image == blank

    @contextmanager
    def painter(self):
        painter = QPainter(self.image)
        painter.setRenderHint(QPainter.Antialiasing, self.antialias)
        try:
            yield painter
        finally:
            painter.end()
