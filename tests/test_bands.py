import numpy as np
import pytest

from soundwave.bands import (
    BandAnalyzer,
    BaselineState,
    Direction,
    GestureResult,
    analyze_window,
    bin_to_frequency,
    scan_side,
)
from soundwave.config import Config

STRIDE = 22050 / 1024


def _window(**bins: float) -> np.ndarray:
    window = np.zeros(67)
    window[33] = 10.0
    for key, value in bins.items():
        window[int(key[1:])] = value
    return window


def test_bin_to_frequency() -> None:
    assert bin_to_frequency(33) == 18500.0
    assert bin_to_frequency(34) == pytest.approx(18500 + STRIDE)
    for k in range(1, 34):
        above = bin_to_frequency(33 + k) - 18500
        below = 18500 - bin_to_frequency(33 - k)
        assert above == pytest.approx(below)


def test_band_growth_past_baseline_is_pull() -> None:
    window = _window(b28=2, b29=2, b30=2, b31=2, b32=2, b60=0.5)
    result = analyze_window(window, BaselineState())
    assert result.direction == Direction.PULL
    assert result.frequency == int((28 - 33) * STRIDE + 18500)
    assert result.frequency == 18392


def test_push_wins_when_both_sides_fire() -> None:
    # b50 reaches the peak threshold on the right
    window = _window(b28=2, b29=2, b30=2, b31=2, b32=2, b50=5)
    result = analyze_window(window, BaselineState())
    assert result.direction == Direction.PUSH
    # band growth on the left still picks the frequency
    assert result.frequency == 18392


def test_right_band_growth_is_push() -> None:
    window = _window(b34=2, b35=2, b36=2, b37=2, b38=2, b39=2)
    result = analyze_window(window, BaselineState())
    assert result.direction == Direction.PUSH
    assert result.frequency == int(6 * STRIDE + 18500)


def test_left_peak_uses_run_midpoint() -> None:
    window = _window(b20=5, b18=4)
    result = analyze_window(window, BaselineState())
    assert result.direction == Direction.PULL
    assert result.frequency == int((19 - 33) * STRIDE + 18500)


def test_right_peak_uses_run_midpoint() -> None:
    window = _window(b45=4, b48=4)
    result = analyze_window(window, BaselineState())
    assert result.direction == Direction.PUSH
    assert result.frequency == int((46 - 33) * STRIDE + 18500)


def test_lone_carrier_falls_back_to_carrier_frequency() -> None:
    result = analyze_window(_window(), BaselineState())
    assert result.direction == Direction.NONE
    assert result.frequency == 18500


def test_band_at_baseline_is_not_a_gesture() -> None:
    left = _window(b29=2, b30=2, b31=2, b32=2)
    right = _window(b34=2, b35=2, b36=2, b37=2, b38=2)
    assert analyze_window(left, BaselineState()).direction == Direction.NONE
    assert analyze_window(right, BaselineState()).direction == Direction.NONE


def test_silent_window_spreads_to_both_edges() -> None:
    # zero carrier makes every bin pass the band threshold
    result = analyze_window(np.zeros(67), BaselineState())
    assert result.direction == Direction.PUSH
    assert result.frequency == int(-33 * STRIDE + 18500)


def test_flat_window_spreads_to_both_edges() -> None:
    result = analyze_window(np.full(67, 3.0), BaselineState())
    assert result.direction == Direction.PUSH
    assert result.frequency == int(-33 * STRIDE + 18500)


def test_baseline_initialises_once() -> None:
    state = BaselineState()
    assert not state.initialized

    analyze_window(np.random.default_rng(3).uniform(0, 20, 67), state)
    assert (state.left, state.right, state.initialized) == (4, 5, True)

    for seed in range(5):
        analyze_window(np.random.default_rng(seed).uniform(0, 20, 67), state)
        assert (state.left, state.right) == (4, 5)
    assert state.initialize(Config()) is False


def test_streams_keep_separate_baselines() -> None:
    config = Config(left_baseline=1, right_baseline=2)
    first = BaselineState()
    second = BaselineState()
    analyze_window(_window(), first, config)
    assert (first.left, first.right) == (1, 2)
    assert not second.initialized


def test_custom_baseline_changes_classification() -> None:
    window = _window(b30=2, b31=2, b32=2)
    assert analyze_window(window, BaselineState()).direction == Direction.NONE
    config = Config(left_baseline=2)
    assert analyze_window(window, BaselineState(), config).direction == Direction.PULL


def test_scan_sides_are_mirror_images() -> None:
    window = np.random.default_rng(11).uniform(0, 1, 67)
    window[33] = 1.5
    mirrored = window[::-1].copy()

    left = scan_side(window, 33, -1, 0.15, 0.45)
    right = scan_side(mirrored, 33, 1, 0.15, 0.45)
    assert left.band == right.band
    assert left.peak == right.peak
    assert left.pointer == 66 - right.pointer
    assert left.start == 66 - right.start
    assert left.end == 66 - right.end


def test_scan_side_runs_to_window_edge() -> None:
    window = np.ones(67)
    left = scan_side(window, 33, -1, 0.1, 0.3)
    right = scan_side(window, 33, 1, 0.1, 0.3)
    assert (left.band, left.pointer, left.peak) == (33, -1, False)
    assert (right.band, right.pointer, right.peak) == (33, 67, False)


def test_peak_end_skips_gaps() -> None:
    window = np.zeros(67)
    window[33] = 10
    window[60] = 5
    window[64] = 5
    scan = scan_side(window, 33, 1, 1.0, 3.0)
    assert scan.peak
    assert (scan.start, scan.end) == (60, 64)
    assert scan.peak_center == 62


def test_analyzer_scan_uses_carrier_ratios() -> None:
    analyzer = BandAnalyzer(Config())
    window = _window(b32=1.0, b31=0.99)
    left, _ = analyzer.scan(window)
    assert left.band == 1
    assert left.pointer == 31


def test_rejects_wrong_window_length() -> None:
    with pytest.raises(ValueError):
        analyze_window(np.zeros(66), BaselineState())


def test_result_text() -> None:
    assert str(GestureResult(Direction.PULL, 18392)) == "Pull\n18392 Hz"
    assert str(GestureResult(Direction.PUSH, 18600)) == "Push\n18600 Hz"
    assert str(GestureResult(Direction.NONE, 18500)) == "None"
    assert not GestureResult(Direction.NONE, 18500).is_gesture


def test_analysis_does_no_output(capsys) -> None:
    state = BaselineState()
    analyze_window(_window(), state)
    analyze_window(_window(b20=5), state)
    assert capsys.readouterr().out == ""
