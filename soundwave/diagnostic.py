#!/usr/bin/env python3
"""
SoundWave Diagnostic Tool

Quick checks to verify audio hardware and that the carrier shows up
where the band analyzer expects it. Run this first.
"""

import numpy as np
from typing import Dict, Optional

from .config import Config
from .audio_rx import WavRx
from .audio_tx import make_tone
from .detector import DopplerDetector


def carrier_report(config: Config, samples: np.ndarray) -> Dict[str, float]:
    """
    Run a recording through a fresh detector and summarise the window.
    
    Args:
        config: SoundWave configuration
        samples: int16 mono recording
        
    Returns:
        Dict with frame count, mean carrier strength, mean left/right band
        widths, and the fraction of frames classified as a gesture
    """
    detector = DopplerDetector(config)
    source = WavRx(config, samples)
    
    strengths = []
    left_bands = []
    right_bands = []
    gestures = 0
    
    while not source.exhausted:
        if not source.read_frame(detector.frame):
            continue
        window = detector.carrier_window(detector.compute_spectrum(detector.frame))
        left, right = detector.analyzer.scan(window)
        result = detector.analyzer.analyze(window, detector.baseline)
        
        strengths.append(window[config.window_center])
        left_bands.append(left.band)
        right_bands.append(right.band)
        gestures += int(result.is_gesture)
    
    frames = len(strengths)
    if frames == 0:
        return {"frames": 0, "carrier": 0.0, "left_band": 0.0,
                "right_band": 0.0, "gesture_ratio": 0.0}
    
    return {
        "frames": frames,
        "carrier": float(np.mean(strengths)),
        "left_band": float(np.mean(left_bands)),
        "right_band": float(np.mean(right_bands)),
        "gesture_ratio": gestures / frames,
    }


def check_imports():
    """Check all required imports."""
    print("=" * 50)
    print("1. CHECKING IMPORTS")
    print("=" * 50)
    
    checks = []
    
    try:
        import sounddevice  # noqa: F401
        checks.append(("sounddevice", "✅"))
    except (ImportError, OSError) as e:
        checks.append(("sounddevice", f"❌ {e}"))
    
    try:
        import scipy  # noqa: F401
        checks.append(("scipy", "✅"))
    except ImportError as e:
        checks.append(("scipy", f"❌ {e}"))
    
    for name, status in checks:
        print(f"  {name}: {status}")
    
    return all("✅" in s for _, s in checks)


def check_audio_devices():
    """List available audio devices."""
    print("\n" + "=" * 50)
    print("2. AUDIO DEVICES")
    print("=" * 50)
    
    import sounddevice as sd
    
    defaults = sd.default.device
    print(f"\n  Default input:  {defaults[0]}")
    print(f"  Default output: {defaults[1]}")
    
    print("\nAll devices:")
    for i, d in enumerate(sd.query_devices()):
        marker = ""
        if i == defaults[0]:
            marker += " [DEFAULT INPUT]"
        if i == defaults[1]:
            marker += " [DEFAULT OUTPUT]"
        
        channels = f"in={d['max_input_channels']}, out={d['max_output_channels']}"
        print(f"  [{i}] {d['name'][:40]:<40} ({channels}){marker}")
    
    return True


def check_sample_rate(config: Config):
    """Check the configured sample rate works both ways."""
    print("\n" + "=" * 50)
    print("3. SAMPLE RATE SUPPORT")
    print("=" * 50)
    
    import sounddevice as sd
    
    try:
        sd.check_input_settings(samplerate=config.sample_rate, channels=1, dtype="int16")
        sd.check_output_settings(samplerate=config.sample_rate, channels=1)
        print(f"  {config.sample_rate} Hz: ✅ Supported")
        return True
    except Exception as e:
        print(f"  {config.sample_rate} Hz: ❌ {e}")
        return False


def check_carrier(config: Config, duration: float = 1.0) -> Optional[Dict[str, float]]:
    """Play the carrier while recording and report what the analyzer sees."""
    print("\n" + "=" * 50)
    print("4. CARRIER LOOPBACK (Play + Record)")
    print("=" * 50)
    
    import sounddevice as sd
    
    print(f"  Playing {config.carrier_freq:.0f} Hz while recording for {duration}s...")
    print("  Keep hands away from the device.")
    
    tone = make_tone(config, duration)
    try:
        recording = sd.playrec(tone, samplerate=config.sample_rate,
                               channels=1, dtype="int16")
        sd.wait()
    except Exception as e:
        print(f"  ❌ Error: {e}")
        return None
    
    # Skip the settling period, the tone is still ramping in
    settle = int(config.settle_delay_sec * config.sample_rate)
    report = carrier_report(config, recording[settle:, 0])
    
    print(f"  Frames analysed: {report['frames']}")
    print(f"  Carrier strength (bin {config.carrier_bin}): {report['carrier']:.1f}")
    print(f"  Idle band widths: left {report['left_band']:.1f} "
          f"(baseline {config.left_baseline}), right {report['right_band']:.1f} "
          f"(baseline {config.right_baseline})")
    
    if report["gesture_ratio"] > 0.2:
        print(f"  ⚠️  {report['gesture_ratio']:.0%} of idle frames classified as gestures")
    else:
        print("  ✅ Idle frames classified as None")
    
    return report


def run_all_diagnostics(config: Optional[Config] = None):
    """Run all diagnostic tests."""
    if config is None:
        config = Config()
    
    print("\n" + "=" * 50)
    print("   SOUNDWAVE DIAGNOSTIC")
    print("=" * 50)
    
    results = [("Imports", check_imports())]
    if not results[0][1]:
        print("\n⚠️  Missing dependencies, stopping here.")
        return False
    
    results.append(("Audio Devices", check_audio_devices()))
    results.append(("Sample Rate", check_sample_rate(config)))
    results.append(("Carrier", check_carrier(config) is not None))
    
    print("\n" + "=" * 50)
    print("SUMMARY")
    print("=" * 50)
    
    all_ok = True
    for name, ok in results:
        print(f"  {name}: {'✅' if ok else '❌'}")
        all_ok = all_ok and ok
    
    print("\n" + "-" * 50)
    if all_ok:
        print("🎉 All checks passed. Next: python main.py detect")
    else:
        print("⚠️  Some checks failed. See errors above.")
    
    return all_ok


if __name__ == "__main__":
    run_all_diagnostics()
