"""
SoundWave - Doppler push/pull gesture sensing

Plays an ultrasonic tone through the speaker and listens for its
reflection. A hand moving toward or away from the device shifts part of
the reflected energy above or below the carrier; a fixed-size FFT and a
band analysis around the carrier bin turn that into Push / Pull.
"""

__version__ = "0.1.0"
__author__ = "SoundWave Project"

from .config import Config, ConfigurationError
from .fft import FFT
from .bands import Direction, BaselineState, GestureResult, analyze_window, bin_to_frequency
from .detector import DopplerDetector
