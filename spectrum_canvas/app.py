#!/usr/bin/env python3
"""
Spectrum Canvas
Renders live or file audio as bars, a waveform trace or a radial burst
"""

import argparse
import sys

from PyQt5.QtCore import Qt, QTimer
from PyQt5.QtGui import QColor, QPainter
from PyQt5.QtWidgets import (QApplication, QColorDialog, QComboBox, QFileDialog, QHBoxLayout, QLabel,
                             QMainWindow, QPushButton, QSlider, QVBoxLayout, QWidget)

from . import config
from .console import print, set_print_flags
from .context import VisualizerContext
from .params import RenderParameters, RenderStyle, format_color
from .session import CaptureSession, SessionState
from .styles import RENDERERS

BACKGROUND = QColor(0, 0, 0)


class VisualizerCanvas(QWidget):
    """Shows the shared surface; the frame loop draws, this only presents"""

    def __init__(self, surface, parent=None):
        super().__init__(parent)
        self.surface = surface
        self.setMinimumSize(200, 200)
        self.setAttribute(Qt.WA_OpaquePaintEvent, True)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), BACKGROUND)
        painter.drawImage(0, 0, self.surface.image)
        painter.end()


class VisualizerWindow(QMainWindow):
    def __init__(self, context, acquire_live, open_playback, hold_on_end=False):
        super().__init__()
        self.setWindowTitle("Spectrum Canvas")
        self.context = context
        self.params = context.params

        # Fullscreen state tracking
        self.is_fullscreen = False
        self.normal_geometry = None

        self.setup_ui()

        self.session = CaptureSession(context, acquire_live, open_playback,
                                      on_frame=self.canvas.update, hold_on_end=hold_on_end, parent=self)
        self.session.state_changed.connect(self.on_state_changed)
        self.session.capture_failed.connect(self.on_capture_failed)
        self.on_state_changed(self.session.state.value)

    def setup_ui(self):
        """Control bar on top, canvas below"""
        central_widget = QWidget()
        self.setCentralWidget(central_widget)
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)
        central_widget.setLayout(layout)

        self.setStyleSheet("QMainWindow { background-color: rgb(0, 0, 0); }")

        self.controls = QWidget()
        self.controls.setStyleSheet("background-color: rgb(30, 30, 40); color: rgb(220, 220, 230);")
        controls_layout = QHBoxLayout()
        controls_layout.setContentsMargins(8, 4, 8, 4)
        self.controls.setLayout(controls_layout)

        self.start_btn = QPushButton("Start Capture")
        self.start_btn.setToolTip("Capture from the default input device (Space)")
        self.start_btn.clicked.connect(self.start_capture)
        controls_layout.addWidget(self.start_btn)

        self.stop_btn = QPushButton("Stop Capture")
        self.stop_btn.clicked.connect(self.stop_capture)
        controls_layout.addWidget(self.stop_btn)

        self.file_btn = QPushButton("Open File...")
        self.file_btn.setToolTip("Play and visualize an audio file")
        self.file_btn.clicked.connect(self.open_file)
        controls_layout.addWidget(self.file_btn)

        controls_layout.addWidget(QLabel("Style:"))
        self.style_combo = QComboBox()
        for style, module in RENDERERS.items():
            self.style_combo.addItem(module.STYLE_NAME, style.value)
            self.style_combo.setItemData(self.style_combo.count() - 1, module.STYLE_DESCRIPTION, Qt.ToolTipRole)
        self.style_combo.setCurrentIndex(self.style_combo.findData(self.params.style.value))
        self.style_combo.currentIndexChanged.connect(self.on_style_changed)
        controls_layout.addWidget(self.style_combo)

        controls_layout.addWidget(QLabel("Sensitivity:"))
        self.sensitivity_slider = QSlider(Qt.Horizontal)
        self.sensitivity_slider.setRange(*config.SENSITIVITY_RANGE)
        self.sensitivity_slider.setFixedWidth(140)
        self.sensitivity_slider.setValue(int(round(self.params.sensitivity)))
        self.sensitivity_slider.valueChanged.connect(self.params.set_sensitivity)
        controls_layout.addWidget(self.sensitivity_slider)

        self.color_btn = QPushButton("Color")
        self.color_btn.clicked.connect(self.pick_color)
        controls_layout.addWidget(self.color_btn)
        self._update_color_button()

        controls_layout.addStretch()
        self.status_label = QLabel("")
        controls_layout.addWidget(self.status_label)

        layout.addWidget(self.controls)

        self.canvas = VisualizerCanvas(self.context.surface, self)
        layout.addWidget(self.canvas, 1)

    # ----- control handlers -----

    def start_capture(self):
        self.session.start_capture()

    def stop_capture(self):
        self.session.stop_capture()

    def open_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open Audio File", "",
                                              "Audio Files (*.wav *.mp3 *.ogg *.flac *.m4a);;All Files (*)")
        if path:
            self.load_file(path)

    def load_file(self, path):
        try:
            with open(path, 'rb') as f:
                data = f.read()
        except IOError as e:
            self.on_capture_failed(f"Could not read {path}: {e}")
            return
        print(f"Loading {path}")
        self.session.start_file_capture(data)

    def on_style_changed(self, index):
        self.params.set_style(self.style_combo.itemData(index))

    def pick_color(self):
        color = QColorDialog.getColor(QColor(*self.params.color), self, "Stroke/Fill Color")
        if color.isValid():
            self.params.set_color((color.red(), color.green(), color.blue()))
            self._update_color_button()

    def _update_color_button(self):
        self.color_btn.setStyleSheet(f"background-color: {format_color(self.params.color)}; color: black;")

    def select_style(self, style):
        self.style_combo.setCurrentIndex(self.style_combo.findData(RenderStyle.from_name(style).value))

    # ----- session feedback -----

    def on_state_changed(self, state):
        idle = state == SessionState.IDLE.value
        self.start_btn.setEnabled(idle)
        self.stop_btn.setEnabled(not idle)
        if state == SessionState.DECODING.value:
            self.status_label.setText("Decoding...")
        elif state == SessionState.CAPTURING.value:
            self.status_label.setText("Capturing")
        else:
            self.status_label.setText("Idle")

    def on_capture_failed(self, message):
        self.status_label.setText(message)

    # ----- window behaviour -----

    def toggle_fullscreen(self):
        """Toggle fullscreen mode with no window borders"""
        if not self.is_fullscreen:
            self.normal_geometry = self.geometry()
            self.controls.hide()
            self.showFullScreen()
            self.is_fullscreen = True
        else:
            self.setWindowState(Qt.WindowNoState)
            self.controls.show()
            self.showNormal()
            if self.normal_geometry:
                self.setGeometry(self.normal_geometry)
            self.is_fullscreen = False

    def keyPressEvent(self, event):
        """Handle keyboard events"""
        key = event.key()
        if key in (Qt.Key_F11, Qt.Key_F):
            self.toggle_fullscreen()
        elif key == Qt.Key_Escape and self.is_fullscreen:
            self.toggle_fullscreen()
        elif key == Qt.Key_Space:
            if self.session.state is SessionState.IDLE:
                self.start_capture()
            else:
                self.stop_capture()
        elif key == Qt.Key_1:
            self.select_style(RenderStyle.BARS)
        elif key == Qt.Key_2:
            self.select_style(RenderStyle.WAVEFORM)
        elif key == Qt.Key_3:
            self.select_style(RenderStyle.RADIAL)
        elif key == Qt.Key_Q:
            self.close()
        else:
            super().keyPressEvent(event)

    def closeEvent(self, event):
        """Release the audio device before the window goes away"""
        self.session.stop_capture()
        event.accept()


def _parse_size(text):
    try:
        width, height = (int(part) for part in text.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got '{text}'") from None
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got '{text}'")
    return width, height


def build_parser():
    parser = argparse.ArgumentParser(
        description='Real-time Audio Spectrum Canvas',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  %(prog)s                                  # Capture the default input
  %(prog)s --style radial --sensitivity 8   # Radial burst, more gain
  %(prog)s --file song.wav                  # Play and visualize a file
  %(prog)s --device-keyword monitor         # Pick a loopback/monitor device
        '''
    )

    parser.add_argument('--style', choices=[s.value for s in RenderStyle] + ['circle'], default=None,
                        help='Visualization style (default: bars).')
    parser.add_argument('--sensitivity', type=float, default=None, metavar='FACTOR',
                        help='Magnitude to pixel scale factor (default: 5).')
    parser.add_argument('--color', default=None, metavar='COLOR',
                        help="Stroke/fill color as #rrggbb or r,g,b (default: #00ffcc).")
    parser.add_argument('--file', default=None, metavar='PATH',
                        help='Play and visualize an audio file instead of live capture.')
    parser.add_argument('--device-index', type=int, default=None, metavar='INDEX',
                        help='Capture device index (see --list-devices).')
    parser.add_argument('--device-keyword', default=None, metavar='TEXT',
                        help='Capture from the first input device whose name contains TEXT.')
    parser.add_argument('--size', type=_parse_size, default=None, metavar='WxH',
                        help='Surface size in pixels (default: the screen size at startup).')
    parser.add_argument('--no-autostart', action='store_true',
                        help='Do not start live capture when the window opens.')
    parser.add_argument('--hold-on-end', action='store_true', default=None,
                        help='Keep rendering after file playback ends instead of stopping.')
    parser.add_argument('--list-devices', action='store_true',
                        help='List capture devices and exit.')
    parser.add_argument('--silent', action='store_true',
                        help='Suppress all output except errors.')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug output (state changes, FPS, device info).')
    return parser


def resolve_settings(args, parser, stored):
    """Merge stored settings with command line flags (flags win)"""
    params = RenderParameters()
    params.apply_settings(stored)

    try:
        if args.style is not None:
            params.set_style(args.style)
        if args.sensitivity is not None:
            params.set_sensitivity(args.sensitivity)
        if args.color is not None:
            params.set_color(args.color)
    except ValueError as e:
        parser.error(str(e))

    device_index = args.device_index if args.device_index is not None else stored.get('device_index')
    device_keyword = args.device_keyword if args.device_keyword is not None else stored.get('device_keyword')
    hold_on_end = args.hold_on_end if args.hold_on_end is not None else bool(stored.get('hold_on_end', False))

    return params, {
        'device_index': device_index,
        'device_keyword': device_keyword,
        'hold_on_end': hold_on_end,
    }


def main():
    parser = build_parser()
    args = parser.parse_args()

    if args.device_index is not None and args.device_index < 0:
        parser.error('--device-index must be >= 0')

    set_print_flags(args.silent, args.debug)

    # Imported here so --help works without PortAudio installed
    from .sources import PyAudioInputSource, PyAudioPlaybackSource, list_input_devices

    if args.list_devices:
        for index, name, channels, rate in list_input_devices():
            print(f"  {index}: {name}  (in:{channels}, {rate} Hz)", force=True)
        return

    stored = config.load_settings()
    params, audio_settings = resolve_settings(args, parser, stored)

    app = QApplication(sys.argv)

    if args.size is not None:
        width, height = args.size
    else:
        screen = app.primaryScreen().availableGeometry()
        width, height = screen.width(), screen.height()

    context = VisualizerContext.create(width, height, params=params)
    print(f"Surface: {width}x{height}, {params}", debug_only=True)

    def acquire_live(sink):
        return PyAudioInputSource(sink, device_index=audio_settings['device_index'],
                                  device_keyword=audio_settings['device_keyword'])

    def open_playback(decoded, sink):
        return PyAudioPlaybackSource(decoded, sink)

    window = VisualizerWindow(context, acquire_live, open_playback, hold_on_end=audio_settings['hold_on_end'])
    window.resize(min(width, 1200), min(height, 700))
    window.show()

    if args.file:
        window.load_file(args.file)
    elif not args.no_autostart:
        # Start once the event loop is running, like a page load
        QTimer.singleShot(0, window.start_capture)

    exit_code = app.exec_()

    settings = dict(stored)
    settings.update(params.to_settings())
    settings.update(audio_settings)
    config.save_settings(settings)
    sys.exit(exit_code)


if __name__ == '__main__':
    main()
