"""
Spectral transform engine for SoundWave.

Fixed-length, in-place radix-2 decimation-in-time FFT. Twiddle tables,
the bit-reversal permutation and the Blackman window are built once per
length and reused for every frame.
"""

import numpy as np
from scipy import signal
from typing import List, Optional, Tuple

from .config import ConfigurationError, is_power_of_two


class FFT:
    """
    In-place complex FFT of a fixed power-of-two length.
    
    Scratch buffers for the permutation and the butterfly products are
    allocated here, so a transform call only creates array views.
    
    Real input frames are transformed by passing the samples as the real
    part and zeros as the imaginary part. Output is unnormalised (no 1/N
    scaling); only relative magnitudes are used downstream.
    """
    
    def __init__(self, n: int):
        if not is_power_of_two(n):
            raise ConfigurationError(f"FFT length must be power of 2, got {n}")
        
        self.n = n
        self.m = n.bit_length() - 1     # n = 2**m
        
        # Lookup tables, only recomputed when the length changes
        angles = -2 * np.pi * np.arange(n // 2) / n
        self.cos = np.cos(angles)
        self.sin = np.sin(angles)
        
        # Blackman window, available but not applied unless asked for
        self.window = signal.windows.get_window("blackman", n, fftbins=False)
        
        self._bitrev = self._make_bitrev(n)
        self._stages = self._make_stages()
        
        # Scratch, reshaped per stage into (groups, n1) views
        self._swap = np.empty(n)
        self._t1 = np.empty(n // 2)
        self._t2 = np.empty(n // 2)
        self._tmp = np.empty(n // 2)
    
    @staticmethod
    def _make_bitrev(n: int) -> np.ndarray:
        """
        Bit-reversed index permutation for length n.
        
        Walks the reversed counter j alongside i for i in 1..n-2 and swaps
        pairs where j > i. Indices 0 and n-1 map to themselves.
        """
        perm = np.arange(n)
        j = 0
        for i in range(1, n - 1):
            n1 = n // 2
            while j >= n1:
                j -= n1
                n1 //= 2
            j += n1
            if i < j:
                perm[i], perm[j] = perm[j], perm[i]
        return perm
    
    def _make_stages(self) -> List[Tuple[int, np.ndarray, np.ndarray]]:
        """Per-stage (half group size, cos, sin) with the table stride halving each stage."""
        stages = []
        for i in range(self.m):
            n1 = 1 << i
            stride = 1 << (self.m - i - 1)
            stages.append((n1, self.cos[::stride][:n1], self.sin[::stride][:n1]))
        return stages
    
    def _check(self, name: str, a: np.ndarray):
        if not isinstance(a, np.ndarray) or a.ndim != 1 or a.shape[0] != self.n:
            raise ValueError(
                f"{name} must be a 1-D array of length {self.n}, "
                f"got {getattr(a, 'shape', type(a).__name__)}"
            )
        if a.dtype != np.float64:
            raise ValueError(f"{name} must be a float64 array, got {a.dtype}")
        if not a.flags.c_contiguous or not a.flags.writeable:
            raise ValueError(f"{name} must be a contiguous writeable array")
    
    def fft(self, x: np.ndarray, y: np.ndarray):
        """
        Transform in place.
        
        Args:
            x: Real part, length n (overwritten with the real spectrum)
            y: Imaginary part, length n (overwritten with the imaginary spectrum)
        """
        self._check("x", x)
        self._check("y", y)
        
        # Bit-reverse
        np.take(x, self._bitrev, out=self._swap, mode="clip")
        np.copyto(x, self._swap)
        np.take(y, self._bitrev, out=self._swap, mode="clip")
        np.copyto(y, self._swap)
        
        # Butterflies, every wing of a stage at once. Reads and writes of
        # the two halves go through scratch so no ufunc sees overlapping views.
        for n1, c, s in self._stages:
            n2 = n1 + n1
            xg = x.reshape(-1, n2)
            yg = y.reshape(-1, n2)
            x_lo, x_hi = xg[:, :n1], xg[:, n1:]
            y_lo, y_hi = yg[:, :n1], yg[:, n1:]
            t1 = self._t1.reshape(-1, n1)
            t2 = self._t2.reshape(-1, n1)
            tmp = self._tmp.reshape(-1, n1)
            
            # t1 = c*x_hi - s*y_hi, t2 = s*x_hi + c*y_hi
            np.multiply(c, x_hi, out=t1)
            np.multiply(s, y_hi, out=tmp)
            np.subtract(t1, tmp, out=t1)
            np.multiply(s, x_hi, out=t2)
            np.multiply(c, y_hi, out=tmp)
            np.add(t2, tmp, out=t2)
            
            np.subtract(x_lo, t1, out=tmp)
            np.copyto(x_hi, tmp)
            np.add(x_lo, t1, out=x_lo)
            np.subtract(y_lo, t2, out=tmp)
            np.copyto(y_hi, tmp)
            np.add(y_lo, t2, out=y_lo)
    
    def apply_window(self, frame: np.ndarray) -> np.ndarray:
        """Multiply a frame by the Blackman window in place and return it."""
        self._check("frame", frame)
        frame *= self.window
        return frame
    
    def magnitude(self, x: np.ndarray, y: np.ndarray,
                  out: Optional[np.ndarray] = None) -> np.ndarray:
        """
        One-sided magnitude spectrum of a transformed frame.
        
        Args:
            x, y: Transformed real/imaginary parts
            out: Optional length n/2 buffer to write into
            
        Returns:
            sqrt(x**2 + y**2) for the first n/2 bins
        """
        half = self.n // 2
        return np.hypot(x[:half], y[:half], out=out)
