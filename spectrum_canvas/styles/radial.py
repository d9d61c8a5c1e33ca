"""Radial - a ring with spectrum spokes pointing outward"""

import math
from collections import namedtuple

import numpy as np
from PyQt5.QtCore import QLineF, QPointF, Qt
from PyQt5.QtGui import QColor, QPen

STYLE_NAME = "Radial"
STYLE_DESCRIPTION = "Circle with one spoke per retained bin"

# Keep one bin in ten
BIN_DIVISOR = 10
SPOKE_SCALE = 0.1
LINE_WIDTH = 2

RadialLayout = namedtuple('RadialLayout', 'center_x center_y radius angles lengths')


def layout(frame, params, width, height):
    count = len(frame) // BIN_DIVISOR
    if count == 0 or width <= 0 or height <= 0:
        return None

    radius = min(width, height) / 8
    angles = np.arange(count) / count * 2.0 * math.pi
    lengths = np.asarray(frame[:count], dtype=np.float64) * params.sensitivity * SPOKE_SCALE
    return RadialLayout(width / 2, height / 2, radius, angles, lengths)


def spoke_endpoints(geometry):
    """(inner, outer) endpoint arrays, each shaped (count, 2)"""
    directions = np.column_stack((np.cos(geometry.angles), np.sin(geometry.angles)))
    center = np.array([geometry.center_x, geometry.center_y])
    inner = center + directions * geometry.radius
    outer = center + directions * (geometry.radius + geometry.lengths)[:, None]
    return inner, outer


def render(painter, frame, params, width, height):
    geometry = layout(frame, params, width, height)
    if geometry is None:
        return

    painter.setPen(QPen(QColor(*params.color), LINE_WIDTH))
    painter.setBrush(Qt.NoBrush)
    painter.drawEllipse(QPointF(geometry.center_x, geometry.center_y), geometry.radius, geometry.radius)

    inner, outer = spoke_endpoints(geometry)
    for (x1, y1), (x2, y2), length in zip(inner, outer, geometry.lengths):
        # A zero-length line would still leave a pen-width dot
        if length <= 0:
            continue
        painter.drawLine(QLineF(x1, y1, x2, y2))
