"""
Render styles

Each style module exposes STYLE_NAME, STYLE_DESCRIPTION, a pure `layout()`
returning the frame's geometry and `render(painter, frame, params, width,
height)` which draws it. The caller clears the surface beforehand.
"""

from ..params import RenderStyle
from . import bars, radial, waveform

RENDERERS = {
    RenderStyle.BARS: bars,
    RenderStyle.WAVEFORM: waveform,
    RenderStyle.RADIAL: radial,
}
