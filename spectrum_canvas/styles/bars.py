"""Bars - mirrored spectrum bars fading to black away from the center line"""

from collections import namedtuple

import numpy as np
from PyQt5.QtCore import QRectF, Qt
from PyQt5.QtGui import QBrush, QColor, QLinearGradient

STYLE_NAME = "Bars"
STYLE_DESCRIPTION = "Mirrored frequency bars above and below the center line"

HEIGHT_SCALE = 0.2
BAR_GAP = 1.0

BarLayout = namedtuple('BarLayout', 'x bar_width heights center_y')


def layout(frame, params, width, height):
    """
    Compute bar geometry for one frame.

    Only the lower half of the bins is used. The 1px gap is taken out of
    each bar's stride so the whole group spans at most `width`; on narrow
    surfaces the gap shrinks to half the stride.
    Returns None when there is nothing to draw.
    """
    count = len(frame) // 2
    if count == 0 or width <= 0 or height <= 0:
        return None

    stride = width / count
    gap = min(BAR_GAP, stride / 2)
    bar_width = stride - gap
    start_x = (width - stride * count) / 2
    xs = start_x + stride * np.arange(count)
    heights = np.asarray(frame[:count], dtype=np.float64) * params.sensitivity * HEIGHT_SCALE
    return BarLayout(xs, bar_width, heights, height / 2)


def _gradient(center_y, edge_y, color):
    gradient = QLinearGradient(0, center_y, 0, edge_y)
    gradient.setColorAt(0.0, color)
    gradient.setColorAt(1.0, QColor(Qt.black))
    return QBrush(gradient)


def render(painter, frame, params, width, height):
    geometry = layout(frame, params, width, height)
    if geometry is None:
        return

    color = QColor(*params.color)
    center_y = geometry.center_y
    bar_width = geometry.bar_width
    painter.setPen(Qt.NoPen)

    for x, bar_height in zip(geometry.x, geometry.heights):
        if bar_height <= 0:
            continue
        x = float(x)
        bar_height = float(bar_height)
        painter.fillRect(QRectF(x, center_y - bar_height, bar_width, bar_height),
                         _gradient(center_y, center_y - bar_height, color))
        painter.fillRect(QRectF(x, center_y, bar_width, bar_height),
                         _gradient(center_y, center_y + bar_height, color))
