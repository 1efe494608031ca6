"""
Band analysis module for SoundWave.

Classifies one carrier window of the magnitude spectrum as a push, a pull
or no gesture, and estimates the frequency of the shifted reflection.
"""

import numpy as np
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from .config import Config


class Direction(Enum):
    """Shift direction relative to the carrier."""
    PULL = -1       # Energy below the carrier (hand moving away)
    NONE = 0
    PUSH = 1        # Energy above the carrier (hand moving closer)
    
    @property
    def label(self) -> str:
        return self.name.capitalize()


@dataclass
class BaselineState:
    """
    Idle band widths for one analysis stream.
    
    Set once, on the first analysed window, then left alone for the rest
    of the session. Each stream owns its own instance.
    """
    left: int = 0
    right: int = 0
    initialized: bool = False
    
    def initialize(self, config: Config) -> bool:
        """Apply the calibrated widths. Returns True only on the first call."""
        if self.initialized:
            return False
        self.left = config.left_baseline
        self.right = config.right_baseline
        self.initialized = True
        return True


@dataclass
class BandScan:
    """Band growth and peak detection for one side of the carrier."""
    band: int           # Contiguous bins at or above the band threshold
    pointer: int        # First bin that broke the band (or one past the edge)
    peak: bool          # A bin beyond the band reached the peak threshold
    start: int          # First such bin, scanning away from the carrier
    end: int            # Last such bin, scanning away from the carrier
    
    @property
    def peak_center(self) -> int:
        """Midpoint of the peak run, rounded toward the start."""
        if self.end >= self.start:
            return self.start + (self.end - self.start) // 2
        return self.start - (self.start - self.end) // 2


@dataclass
class GestureResult:
    """Outcome of one analysed frame."""
    direction: Direction
    frequency: int      # Hz
    
    @property
    def is_gesture(self) -> bool:
        return self.direction != Direction.NONE
    
    def __str__(self) -> str:
        if not self.is_gesture:
            return "None"
        return f"{self.direction.label}\n{self.frequency} Hz"


def scan_side(window: Sequence[float], center: int, step: int,
              threshold: float, peak_threshold: float) -> BandScan:
    """
    Walk one side of the carrier.
    
    Starting next to the carrier, count contiguous bins >= threshold.
    Past the first bin that fails, look for bins >= peak_threshold all the
    way to the window edge; the first hit is the peak start and every later
    hit moves the peak end, gaps included.
    
    Args:
        window: Carrier window (magnitudes)
        center: Index of the carrier inside the window
        step: -1 to scan toward lower frequencies, +1 toward higher
        threshold: Band growth threshold
        peak_threshold: Peak detection threshold
    """
    edge = -1 if step < 0 else len(window)
    
    pointer = center + step
    band = 0
    while pointer != edge and window[pointer] >= threshold:
        band += 1
        pointer += step
    
    peak = False
    start = pointer + step
    end = start
    for i in range(pointer + step, edge, step):
        if window[i] >= peak_threshold:
            if not peak:
                peak = True
                start = i
            end = i
    
    return BandScan(band=band, pointer=pointer, peak=peak, start=start, end=end)


def bin_to_frequency(bin_index: int, config: Optional[Config] = None) -> float:
    """
    Map a window index to Hz, linear around the carrier.
    
    (bin - 33) * (22050 / 1024) + 18500 at the default settings.
    """
    if config is None:
        config = Config()
    return (bin_index - config.window_center) * config.freq_resolution + config.carrier_freq


class BandAnalyzer:
    """
    Directional Doppler classifier over a carrier window.
    
    Compares how far energy spreads on each side of the carrier against
    the idle baseline, and looks for strong isolated shifted peaks.
    """
    
    def __init__(self, config: Config):
        self.config = config
    
    def scan(self, window: Sequence[float]):
        """Return (left, right) BandScan for a window."""
        center = self.config.window_center
        peak_strength = window[center]
        threshold = peak_strength * self.config.band_threshold_ratio
        p_threshold = peak_strength * self.config.peak_threshold_ratio
        
        left = scan_side(window, center, -1, threshold, p_threshold)
        right = scan_side(window, center, 1, threshold, p_threshold)
        return left, right
    
    def analyze(self, window: Sequence[float], state: BaselineState) -> GestureResult:
        """
        Classify one carrier window.
        
        Args:
            window: window_size magnitudes, carrier at window_center
            state: Baseline for this stream, initialised on first use
            
        Returns:
            GestureResult with direction and estimated frequency
        """
        if len(window) != self.config.window_size:
            raise ValueError(
                f"Window must have {self.config.window_size} bins, got {len(window)}"
            )
        
        left, right = self.scan(window)
        
        state.initialize(self.config)
        
        direction = Direction.NONE
        if left.band > state.left or left.peak:
            direction = Direction.PULL
        if right.band > state.right or right.peak:
            direction = Direction.PUSH
        
        center = self.config.window_center
        if left.band > state.left:
            freq = bin_to_frequency(center - left.band, self.config)
        elif right.band > state.right:
            freq = bin_to_frequency(center + right.band, self.config)
        elif left.peak:
            freq = bin_to_frequency(left.peak_center, self.config)
        elif right.peak:
            freq = bin_to_frequency(right.peak_center, self.config)
        else:
            freq = self.config.carrier_freq
        
        return GestureResult(direction=direction, frequency=int(freq))


def analyze_window(window: Sequence[float], state: BaselineState,
                   config: Optional[Config] = None) -> GestureResult:
    """Classify a carrier window with a throwaway analyzer."""
    return BandAnalyzer(config if config is not None else Config()).analyze(
        np.asarray(window, dtype=float), state
    )
