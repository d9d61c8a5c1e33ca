"""Waveform - one connected trace rising from the center line"""

from collections import namedtuple

import numpy as np
from PyQt5.QtCore import QPointF, Qt
from PyQt5.QtGui import QColor, QPen, QPolygonF

STYLE_NAME = "Waveform"
STYLE_DESCRIPTION = "Continuous trace across all bins with rounded joins"

AMPLITUDE_SCALE = 0.1
LINE_WIDTH = 2

WaveLayout = namedtuple('WaveLayout', 'x y center_y')


def layout(frame, params, width, height):
    """Vertex positions, one per bin; offsets point up (negative y) from center"""
    count = len(frame)
    if count == 0 or width <= 0 or height <= 0:
        return None

    spacing = width / count
    start_x = width / 2 - (count * spacing) / 2
    center_y = height / 2
    xs = start_x + spacing * np.arange(count)
    ys = center_y - np.asarray(frame, dtype=np.float64) * params.sensitivity * AMPLITUDE_SCALE
    return WaveLayout(xs, ys, center_y)


def render(painter, frame, params, width, height):
    geometry = layout(frame, params, width, height)
    if geometry is None:
        return

    pen = QPen(QColor(*params.color), LINE_WIDTH)
    pen.setJoinStyle(Qt.RoundJoin)
    painter.setPen(pen)
    painter.setBrush(Qt.NoBrush)

    trace = QPolygonF([QPointF(float(x), float(y)) for x, y in zip(geometry.x, geometry.y)])
    painter.drawPolyline(trace)
