"""
Spectrum Canvas configuration

Analysis constants, render defaults and cross-platform settings persistence.
"""

import json
import platform
from pathlib import Path

from .console import print

IS_WINDOWS = platform.system() == 'Windows'
IS_MACOS = platform.system() == 'Darwin'

# =============================================================================
# ANALYSIS
# =============================================================================

# Analysis window in samples (power of two).
# Larger = finer frequency resolution, more latency
FFT_SIZE = 2048
FREQUENCY_BIN_COUNT = FFT_SIZE // 2

# Byte mapping range for magnitudes, in dBFS
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0

# Averaging with the previous frame (0.0 = none, close to 1.0 = sluggish)
SMOOTHING_TIME_CONSTANT = 0.8

# =============================================================================
# AUDIO I/O
# =============================================================================

CHUNK_SIZE = 512
SAMPLE_RATE = 48000
CHANNELS = 2
# Chunks buffered between the PortAudio thread and the sampler
QUEUE_DEPTH = 8

# =============================================================================
# RENDERING
# =============================================================================

DEFAULT_STYLE = 'bars'
DEFAULT_SENSITIVITY = 5.0
SENSITIVITY_RANGE = (1, 10)
DEFAULT_COLOR = (0, 255, 204)

# Used when the screen does not report a refresh rate
FALLBACK_REFRESH_RATE = 60.0
FPS_REPORT_INTERVAL = 2.0

APP_NAME = 'spectrum-canvas'

# Keys written to the settings file
PERSISTED_KEYS = ('style', 'sensitivity', 'color', 'device_index', 'device_keyword', 'hold_on_end')


# ===== Settings persistence (cross-platform) =====
def get_config_dir():
    """Get platform-appropriate config directory for settings persistence"""
    if IS_WINDOWS:
        config_dir = Path.home() / 'AppData' / 'Roaming' / APP_NAME
    elif IS_MACOS:
        config_dir = Path.home() / 'Library' / 'Application Support' / APP_NAME
    else:
        # Linux and others: ~/.config (XDG)
        config_dir = Path.home() / '.config' / APP_NAME

    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_settings_file():
    """Get path to settings JSON file"""
    return get_config_dir() / 'settings.json'


def load_settings():
    """Load settings from file, return dict or empty dict if file doesn't exist"""
    settings_file = get_settings_file()

    if settings_file.exists():
        try:
            with open(settings_file, 'r') as f:
                settings = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            print(f"Warning: Could not load settings file: {e}")
            return {}
        if not isinstance(settings, dict):
            print(f"Warning: Ignoring malformed settings file: {settings_file}")
            return {}
        return {key: value for key, value in settings.items() if key in PERSISTED_KEYS}

    return {}


def save_settings(settings):
    """Save settings to file"""
    settings_file = get_settings_file()
    payload = {key: value for key, value in settings.items() if key in PERSISTED_KEYS}

    try:
        with open(settings_file, 'w') as f:
            json.dump(payload, f, indent=2)
    except IOError as e:
        print(f"Warning: Could not save settings file: {e}")
