import warnings

import numpy as np
import pytest
from scipy.io import wavfile

from soundwave.audio_rx import PartialFrameWarning, WavRx, fill_frame, pcm_to_float
from soundwave.audio_tx import AudioTx, make_tone
from soundwave.config import Config, ConfigurationError
from soundwave.fft import FFT


def test_pcm_to_float_scales_by_short_max() -> None:
    out = np.zeros(4)
    pcm_to_float(np.array([32767, -32767, 0, 16384], dtype=np.int16), out)
    np.testing.assert_allclose(out, [1.0, -1.0, 0.0, 16384 / 32767])


def test_full_frame_does_not_warn() -> None:
    out = np.zeros(4)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        assert fill_frame(np.array([1, 2, 3, 4], dtype=np.int16), out)


def test_short_frame_is_zero_padded() -> None:
    out = np.full(4, 9.0)
    with pytest.warns(PartialFrameWarning):
        ready = fill_frame(np.array([32767, 32767], dtype=np.int16), out, "pad")
    assert ready
    np.testing.assert_allclose(out, [1.0, 1.0, 0.0, 0.0])


def test_short_frame_can_be_skipped() -> None:
    out = np.full(4, 9.0)
    with pytest.warns(PartialFrameWarning):
        assert not fill_frame(np.array([1], dtype=np.int16), out, "skip")


def test_replay_reads_frames_then_stops() -> None:
    rx = WavRx(Config(), np.arange(20, dtype=np.int16))
    out = np.zeros(8)

    assert rx.read_frame(out)
    assert out[7] == pytest.approx(7 / 32767)
    assert rx.read_frame(out)
    with pytest.warns(PartialFrameWarning):
        assert rx.read_frame(out)
    assert out[3] == pytest.approx(19 / 32767)
    assert out[4] == 0.0
    assert rx.exhausted
    assert rx.frame_count == 3
    with pytest.raises(EOFError):
        rx.read_frame(out)


def test_replay_from_wav_file(tmp_path) -> None:
    path = tmp_path / "tone.wav"
    config = Config()
    wavfile.write(str(path), config.sample_rate, make_tone(config, 0.1))

    rx = WavRx.from_wav(config, str(path))
    out = np.zeros(config.fft_size)
    assert rx.read_frame(out)
    assert np.max(np.abs(out)) > 0.9


def test_replay_rejects_float_wav(tmp_path) -> None:
    path = tmp_path / "float.wav"
    wavfile.write(str(path), 44100, np.zeros(100, dtype=np.float32))
    with pytest.raises(ValueError):
        WavRx.from_wav(Config(), str(path))


def test_tone_buffer() -> None:
    config = Config()
    tone = make_tone(config)
    assert tone.dtype == np.int16
    assert len(tone) == 10 * 44100
    assert np.max(tone) <= 32767
    assert np.max(tone) > 32000


def test_tone_peaks_at_carrier_bin() -> None:
    config = Config()
    engine = FFT(config.fft_size)
    x = make_tone(config, 0.1)[:config.fft_size] / 32767.0
    y = np.zeros_like(x)
    engine.fft(x, y)
    assert int(np.argmax(engine.magnitude(x, y))) == config.carrier_bin


def test_transmitter_loops_tone_buffer() -> None:
    config = Config(tone_duration_sec=0.01)
    tone = make_tone(config)
    assert len(tone) == 441

    tx = AudioTx(config)
    played = np.concatenate([tx.next_block(300), tx.next_block(300), tx.next_block(400)])
    np.testing.assert_array_equal(played, np.tile(tone, 3)[:1000])
    assert played.dtype == np.int16
    assert not tx.is_running


def test_default_tone_loops_without_a_jump() -> None:
    config = Config()
    tone = make_tone(config)
    longer = make_tone(config, 2 * config.tone_duration_sec)
    np.testing.assert_allclose(np.tile(tone, 2).astype(float), longer.astype(float), atol=1)


def test_transmitter_rewinds_on_stop() -> None:
    tx = AudioTx(Config(tone_duration_sec=0.01))
    first = tx.next_block(50)
    tx.stop()
    np.testing.assert_array_equal(tx.next_block(50), first)


def test_replay_rejects_other_sample_rate(tmp_path) -> None:
    # idle carrier recorded at 48 kHz would land in the wrong bins at 44.1 kHz
    recorded = Config(sample_rate=48000)
    path = tmp_path / "idle48k.wav"
    wavfile.write(str(path), 48000, make_tone(recorded, 0.2))

    with pytest.raises(ConfigurationError):
        WavRx.from_wav(Config(), str(path))

    rx = WavRx.from_wav(recorded, str(path))
    assert rx.read_frame(np.zeros(recorded.fft_size))
