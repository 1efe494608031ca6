"""
Audio reception module - captures microphone input.

Delivers fixed-size frames of normalised samples to the analysis loop,
either live from the microphone or replayed from a WAV recording.
"""

import numpy as np
import warnings
from typing import Optional

from .config import Config, ConfigurationError

PCM_MAX = 32767     # Largest signed 16-bit sample


class PartialFrameWarning(UserWarning):
    """A read returned fewer samples than one frame."""


def pcm_to_float(samples: np.ndarray, out: np.ndarray) -> np.ndarray:
    """
    Normalise signed 16-bit samples into a float buffer.
    
    Args:
        samples: int16 samples, at most len(out) of them
        out: Float frame buffer, written from the start
        
    Returns:
        out
    """
    count = len(samples)
    np.divide(samples, PCM_MAX, out=out[:count])
    return out


def fill_frame(samples: np.ndarray, out: np.ndarray, policy: str = "pad") -> bool:
    """
    Copy one read into the frame buffer, handling short reads.
    
    A short read raises PartialFrameWarning. With policy "pad" the rest of
    the frame is zeroed and the frame is used; with "skip" it is dropped.
    
    Returns:
        True if the frame should be analysed
    """
    frame_size = len(out)
    count = min(len(samples), frame_size)
    
    if count < frame_size:
        warnings.warn(
            f"read {count} of {frame_size} samples ({policy})",
            PartialFrameWarning,
            stacklevel=2,
        )
        if policy == "skip":
            return False
        out[count:] = 0.0
    
    pcm_to_float(samples[:count], out)
    return True


class AudioRx:
    """
    Microphone input receiver.
    
    Opens a mono 16-bit input stream and hands out one frame per blocking
    read, the way the analysis loop consumes it.
    """
    
    def __init__(self, config: Config, device: Optional[int] = None):
        """
        Initialize receiver.
        
        Args:
            config: SoundWave configuration
            device: sounddevice input device (default device if None)
        """
        self.config = config
        self.device = device
        self._stream = None
        self._running: bool = False
        self._frame_count: int = 0
    
    def start(self):
        """Start recording from microphone."""
        if self._running:
            return
        
        import sounddevice as sd
        
        print(f"[RX] Starting microphone capture at {self.config.sample_rate} Hz")
        
        self._stream = sd.InputStream(
            samplerate=self.config.sample_rate,
            channels=1,
            dtype="int16",
            blocksize=self.config.fft_size,
            device=self.device,
        )
        self._stream.start()
        self._running = True
        print("[RX] Recording started ✓")
    
    def stop(self):
        """Stop recording."""
        if self._stream is not None:
            self._stream.stop()
            self._stream.close()
            self._stream = None
        self._running = False
        print("[RX] Recording stopped")
    
    def read_frame(self, out: np.ndarray) -> bool:
        """
        Block until one frame is available and normalise it into out.
        
        Returns:
            True if out holds a frame to analyse
        """
        if self._stream is None:
            raise RuntimeError("AudioRx not started")
        
        data, overflowed = self._stream.read(len(out))
        if overflowed:
            print("[RX] Input overflow")
        
        self._frame_count += 1
        return fill_frame(data[:, 0], out, self.config.partial_frame_policy)
    
    @property
    def frame_count(self) -> int:
        return self._frame_count
    
    @property
    def is_running(self) -> bool:
        """Check if receiver is active."""
        return self._running
    
    def __enter__(self):
        self.start()
        return self
    
    def __exit__(self, *args):
        self.stop()


class WavRx:
    """
    Replays a mono 16-bit WAV recording frame by frame.
    
    Same read interface as AudioRx. The last frame of a recording is
    usually short and goes through the partial frame policy.
    """
    
    def __init__(self, config: Config, samples: np.ndarray):
        self.config = config
        self._data = np.asarray(samples, dtype=np.int16)
        self._pos = 0
        self._frame_count = 0
    
    @classmethod
    def from_wav(cls, config: Config, path: str) -> "WavRx":
        """
        Load a recording with scipy.io.wavfile.
        
        Raises:
            ConfigurationError: if the file's sample rate differs from the config
        """
        from scipy.io import wavfile
        
        rate, data = wavfile.read(path)
        if rate != config.sample_rate:
            raise ConfigurationError(
                f"{path}: recorded at {rate} Hz, configured for {config.sample_rate} Hz"
            )
        if data.ndim > 1:
            data = data[:, 0]
        if data.dtype != np.int16:
            raise ValueError(f"{path}: expected 16-bit PCM, got {data.dtype}")
        return cls(config, data)
    
    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._data)
    
    @property
    def frame_count(self) -> int:
        return self._frame_count
    
    def read_frame(self, out: np.ndarray) -> bool:
        if self.exhausted:
            raise EOFError("end of recording")
        
        chunk = self._data[self._pos:self._pos + len(out)]
        self._pos += len(chunk)
        self._frame_count += 1
        return fill_frame(chunk, out, self.config.partial_frame_policy)
    
    def __enter__(self):
        return self
    
    def __exit__(self, *args):
        pass
