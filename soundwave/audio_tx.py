"""
Audio transmission module - plays the carrier tone.

The tone is rendered once into a static 16-bit buffer and looped for as
long as the stream runs.
"""

import numpy as np
from typing import Optional

from .config import Config
from .audio_rx import PCM_MAX


def make_tone(config: Config, duration: Optional[float] = None) -> np.ndarray:
    """
    Build a static 16-bit tone buffer at the carrier frequency.
    
    Args:
        config: SoundWave configuration
        duration: Seconds of tone (config.tone_duration_sec if None)
        
    Returns:
        int16 samples, amplitude scaled to tone_amplitude of full scale
    """
    if duration is None:
        duration = config.tone_duration_sec
    num_samples = int(duration * config.sample_rate)
    
    increment = 2 * np.pi * config.carrier_freq / config.sample_rate
    angle = increment * np.arange(num_samples)
    samples = config.tone_amplitude * np.sin(angle) * PCM_MAX
    
    return samples.astype(np.int16)


class AudioTx:
    """
    Carrier tone transmitter.
    
    Loops a make_tone() buffer through the speaker. At the default 10 s
    length the buffer holds a whole number of carrier cycles, so the loop
    point is seamless.
    """
    
    def __init__(self, config: Config, device: Optional[int] = None):
        self.config = config
        self.device = device
        self._stream = None
        self._running: bool = False
        
        self._tone = make_tone(config)
        if len(self._tone) == 0:
            raise ValueError("Tone buffer is empty, check tone_duration_sec")
        self._pos: int = 0
    
    def next_block(self, num_frames: int) -> np.ndarray:
        """Next num_frames samples of the looped tone."""
        idx = (self._pos + np.arange(num_frames)) % len(self._tone)
        self._pos = (self._pos + num_frames) % len(self._tone)
        return self._tone[idx]
    
    def _output_callback(self, outdata: np.ndarray, frames: int,
                         time_info, status):
        """Sounddevice output callback."""
        if status:
            print(f"[TX] Output status: {status}")
        
        outdata[:, 0] = self.next_block(frames)
    
    def start(self):
        """Start looping the carrier tone."""
        if self._running:
            return
        
        import sounddevice as sd
        
        print(f"[TX] Looping {len(self._tone) / self.config.sample_rate:.1f}s tone "
              f"at {self.config.carrier_freq:.0f} Hz, "
              f"amplitude {self.config.tone_amplitude:.2f}")
        
        self._stream = sd.OutputStream(
            samplerate=self.config.sample_rate,
            channels=1,
            dtype="int16",
            callback=self._output_callback,
            device=self.device,
        )
        self._stream.start()
        self._running = True
        print("[TX] Tone started ✓")
    
    def stop(self):
        """Stop playing the carrier tone."""
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        self._running = False
        self._pos = 0
        print("[TX] Tone stopped")
    
    @property
    def is_running(self) -> bool:
        """Check if transmitter is active."""
        return self._running
    
    def __enter__(self):
        self.start()
        return self
    
    def __exit__(self, *args):
        self.stop()
