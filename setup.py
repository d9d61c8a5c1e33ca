#!/usr/bin/env python3
"""
Setup script for Spectrum Canvas
"""

from setuptools import setup, find_packages

# Read long description from README
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

install_requires = [
    "numpy>=1.21.0",
    "PyQt5>=5.15.0",
    "pyaudio>=0.2.11",
    "scipy>=1.7.0",  # WAV decoding
]

extras_require = {
    'tests': ['pytest>=7.0'],
}

setup(
    name="spectrum-canvas",
    version="1.0.0",
    description="Real-time audio spectrum visualizer with bars, waveform and radial styles",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["spectrum_canvas", "spectrum_canvas.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Multimedia :: Sound/Audio :: Analysis",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: Microsoft :: Windows :: Windows 10",
        "Operating System :: Microsoft :: Windows :: Windows 11",
        "Operating System :: POSIX :: Linux",
    ],
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "spectrum-canvas=spectrum_canvas.app:main",
        ],
    },
    keywords="audio visualizer fft frequency spectrum real-time",
)
