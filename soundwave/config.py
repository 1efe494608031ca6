"""
Configuration module for SoundWave.

All tunable parameters in one place. Window bounds, the carrier bin and the
bin stride are derived from the audio settings so they always move together.
"""

import math
from dataclasses import dataclass
from typing import Tuple


class ConfigurationError(ValueError):
    """Raised when a set-up parameter makes the pipeline impossible to build."""


def is_power_of_two(n: int) -> bool:
    return n >= 2 and (n & (n - 1)) == 0


@dataclass
class Config:
    """SoundWave configuration parameters."""
    
    # ==========================================================================
    # Audio Settings
    # ==========================================================================
    sample_rate: int = 44100              # Hz
    carrier_freq: float = 18500.0         # Hz - emitted tone
    tone_amplitude: float = 1.0           # 0-1, full scale by default
    tone_duration_sec: float = 10.0       # Length of the looped static tone buffer
    settle_delay_sec: float = 0.3         # Tone runs this long before capture starts
    
    # ==========================================================================
    # Transform Settings
    # ==========================================================================
    fft_size: int = 2048                  # N - must be a power of two
    apply_window: bool = False            # Blackman weighting before the FFT
    
    # ==========================================================================
    # Band Analysis
    # ==========================================================================
    window_half_width: int = 33           # Bins each side of the carrier
    band_threshold_ratio: float = 0.1     # Fraction of carrier strength for band growth
    peak_threshold_ratio: float = 0.3     # Fraction of carrier strength for a shifted peak
    left_baseline: int = 4                # Idle left band width (calibrated)
    right_baseline: int = 5               # Idle right band width (calibrated)
    
    # ==========================================================================
    # Capture
    # ==========================================================================
    partial_frame_policy: str = "pad"     # "pad" zero-fills short reads, "skip" drops them
    
    # ==========================================================================
    # Derived Properties
    # ==========================================================================
    @property
    def nyquist(self) -> float:
        """Highest representable frequency in Hz."""
        return self.sample_rate / 2.0
    
    @property
    def half_spectrum(self) -> int:
        """Number of meaningful bins in the one-sided spectrum."""
        return self.fft_size // 2
    
    @property
    def freq_resolution(self) -> float:
        """Hz per bin (22050 / 1024 at the defaults)."""
        return self.nyquist / self.half_spectrum
    
    @property
    def carrier_bin(self) -> int:
        """Spectrum bin nearest (at or below) the carrier frequency."""
        return int(math.floor((self.carrier_freq / self.nyquist) * self.half_spectrum))
    
    @property
    def window_size(self) -> int:
        """Width of the analysis window centred on the carrier."""
        return 2 * self.window_half_width + 1
    
    @property
    def window_center(self) -> int:
        """Index of the carrier inside the analysis window."""
        return self.window_half_width
    
    def get_window_bounds(self) -> Tuple[int, int]:
        """Get (start, stop) spectrum indices of the analysis window, stop exclusive."""
        center = self.carrier_bin
        return (center - self.window_half_width, center + self.window_half_width + 1)
    
    def get_window_slice(self) -> slice:
        start, stop = self.get_window_bounds()
        return slice(start, stop)
    
    def validate(self) -> "Config":
        """
        Check that the settings describe a buildable pipeline.
        
        Returns:
            self, so calls can be chained
            
        Raises:
            ConfigurationError: on the first invalid setting found
        """
        if not is_power_of_two(self.fft_size):
            raise ConfigurationError(
                f"FFT length must be power of 2, got {self.fft_size}"
            )
        if self.sample_rate <= 0:
            raise ConfigurationError(f"Sample rate must be positive, got {self.sample_rate}")
        if self.window_half_width < 1:
            raise ConfigurationError(
                f"Window half width must be at least 1, got {self.window_half_width}"
            )
        
        start, stop = self.get_window_bounds()
        if start < 0 or stop > self.half_spectrum:
            raise ConfigurationError(
                f"Carrier window [{start}, {stop}) falls outside the spectrum "
                f"[0, {self.half_spectrum}) for {self.carrier_freq:.0f} Hz "
                f"at {self.sample_rate} Hz"
            )
        
        if not 0.0 < self.band_threshold_ratio <= self.peak_threshold_ratio:
            raise ConfigurationError(
                "Thresholds must satisfy 0 < band_threshold_ratio <= peak_threshold_ratio"
            )
        if self.left_baseline < 0 or self.right_baseline < 0:
            raise ConfigurationError("Baseline band widths must be non-negative")
        if self.partial_frame_policy not in ("pad", "skip"):
            raise ConfigurationError(
                f"Unknown partial frame policy: {self.partial_frame_policy!r}"
            )
        return self
