"""
Render parameters shared between the control surface and the renderers.

Each field has a single writer (its UI control) and is read once per frame.
Writes take effect on the next tick.
"""

import math
from enum import Enum

from . import config


class RenderStyle(Enum):
    BARS = 'bars'
    WAVEFORM = 'waveform'
    RADIAL = 'radial'

    @classmethod
    def from_name(cls, name):
        """Resolve a style from its name ('circle' is accepted for RADIAL)"""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        if key == 'circle':
            return cls.RADIAL
        for style in cls:
            if style.value == key:
                return style
        raise ValueError(f"Unknown style '{name}' (choose from: {', '.join(s.value for s in cls)})")


def parse_color(value):
    """Parse '#rrggbb', 'rrggbb', '#rgb', 'r,g,b' or an (r, g, b) sequence"""
    if isinstance(value, (tuple, list)):
        parts = list(value)
    else:
        text = str(value).strip()
        if ',' in text:
            parts = [p.strip() for p in text.split(',')]
        else:
            hex_text = text[1:] if text.startswith('#') else text
            if len(hex_text) == 3:
                hex_text = ''.join(c * 2 for c in hex_text)
            if len(hex_text) != 6:
                raise ValueError(f"Invalid color '{value}'")
            try:
                parts = [int(hex_text[i:i + 2], 16) for i in (0, 2, 4)]
            except ValueError:
                raise ValueError(f"Invalid color '{value}'") from None

    if len(parts) != 3:
        raise ValueError(f"Color needs 3 components, got {len(parts)}")
    try:
        rgb = tuple(int(p) for p in parts)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid color '{value}'") from None
    if any(c < 0 or c > 255 for c in rgb):
        raise ValueError(f"Color components must be 0-255, got {rgb}")
    return rgb


def format_color(rgb):
    return '#{:02x}{:02x}{:02x}'.format(*rgb)


class RenderParameters:
    """Active style, sensitivity scale and stroke/fill color"""

    def __init__(self, style=config.DEFAULT_STYLE, sensitivity=config.DEFAULT_SENSITIVITY,
                 color=config.DEFAULT_COLOR):
        self.style = RenderStyle.BARS
        self.sensitivity = config.DEFAULT_SENSITIVITY
        self.color = config.DEFAULT_COLOR
        self.set_style(style)
        self.set_sensitivity(sensitivity)
        self.set_color(color)

    def set_style(self, style):
        self.style = RenderStyle.from_name(style)

    def set_sensitivity(self, sensitivity):
        value = float(sensitivity)
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Sensitivity must be a non-negative number, got {sensitivity}")
        self.sensitivity = value

    def set_color(self, color):
        self.color = parse_color(color)

    def to_settings(self):
        return {
            'style': self.style.value,
            'sensitivity': self.sensitivity,
            'color': format_color(self.color),
        }

    def apply_settings(self, settings):
        """Apply stored values, skipping any that no longer validate"""
        applied = []
        for key, setter in (('style', self.set_style),
                            ('sensitivity', self.set_sensitivity),
                            ('color', self.set_color)):
            if key not in settings:
                continue
            try:
                setter(settings[key])
            except (TypeError, ValueError):
                continue
            applied.append(key)
        return applied

    def __repr__(self):
        return (f"RenderParameters(style={self.style.value!r}, "
                f"sensitivity={self.sensitivity}, color={format_color(self.color)!r})")
