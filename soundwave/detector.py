"""
Doppler detection session for SoundWave.

Runs the per-frame pipeline: frame -> FFT -> magnitude spectrum ->
carrier window -> band analysis. One detector is one analysis stream and
owns its buffers and baseline.
"""

import numpy as np
from typing import Optional

from .config import Config
from .fft import FFT
from .bands import BandAnalyzer, BaselineState, GestureResult


class DopplerDetector:
    """
    Frame-by-frame push/pull detector.
    
    Buffers are allocated once and overwritten every frame.
    """
    
    def __init__(self, config: Config):
        self.config = config.validate()
        
        self.transform = FFT(config.fft_size)
        self.analyzer = BandAnalyzer(config)
        self.baseline = BaselineState()
        
        n = config.fft_size
        self.frame = np.zeros(n)
        self._x = np.zeros(n)
        self._y = np.zeros(n)
        self._p = np.zeros(n // 2)
        self._window_slice = config.get_window_slice()
        
        self._frames_analyzed = 0
    
    def compute_spectrum(self, frame: np.ndarray) -> np.ndarray:
        """
        Magnitude spectrum of one frame.
        
        Args:
            frame: fft_size samples in [-1, 1]
            
        Returns:
            Internal length fft_size/2 buffer, overwritten by the next call
        """
        self._x[:] = frame
        self._y.fill(0.0)
        if self.config.apply_window:
            self.transform.apply_window(self._x)
        
        self.transform.fft(self._x, self._y)
        return self.transform.magnitude(self._x, self._y, out=self._p)
    
    def carrier_window(self, spectrum: np.ndarray) -> np.ndarray:
        """Slice the analysis window around the carrier bin."""
        return spectrum[self._window_slice]
    
    def process(self, frame: Optional[np.ndarray] = None) -> GestureResult:
        """
        Analyse one frame.
        
        Args:
            frame: Samples to analyse (the detector's own frame buffer if None)
        """
        if frame is None:
            frame = self.frame
        spectrum = self.compute_spectrum(frame)
        calibrated = self.baseline.initialized
        result = self.analyzer.analyze(self.carrier_window(spectrum), self.baseline)
        if not calibrated:
            print(f"[DETECT] Baseline left={self.baseline.left}, "
                  f"right={self.baseline.right}")
        self._frames_analyzed += 1
        return result
    
    def run(self, source, sink, max_frames: Optional[int] = None) -> int:
        """
        Blocking analysis loop.
        
        Reads frames from source into the frame buffer, analyses them and
        passes every result to sink.show(). Runs until interrupted, until
        max_frames reads, or until a replay source runs out.
        
        Args:
            source: Object with read_frame(out) -> bool
            sink: Object with show(GestureResult)
            max_frames: Stop after this many reads (None = forever)
            
        Returns:
            Number of frames analysed
        """
        print(f"[DETECT] Carrier bin {self.config.carrier_bin}, "
              f"window {self.config.get_window_bounds()}")
        
        reads = 0
        analyzed = 0
        while max_frames is None or reads < max_frames:
            try:
                ready = source.read_frame(self.frame)
            except EOFError:
                break
            reads += 1
            if not ready:
                continue
            
            sink.show(self.process())
            analyzed += 1
        
        return analyzed
    
    @property
    def frames_analyzed(self) -> int:
        return self._frames_analyzed
