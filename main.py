#!/usr/bin/env python3
"""
SoundWave - Doppler Push/Pull Gesture Sensing

Emits an 18.5 kHz tone and classifies hand motion from the Doppler shift
of its reflection.

Usage:
    python main.py detect                 # Live push/pull detection
    python main.py detect --wav rec.wav   # Replay a 16-bit mono recording
    python main.py tone                   # Play the carrier only
    python main.py diagnose               # Hardware and carrier checks

License: MIT
"""

import argparse
import sys
import time

from soundwave import Config, ConfigurationError
from soundwave.audio_rx import AudioRx, WavRx
from soundwave.audio_tx import AudioTx
from soundwave.detector import DopplerDetector
from soundwave.ui import ConsoleUI


def build_config(args) -> Config:
    """Config from common CLI flags."""
    return Config(
        sample_rate=args.rate,
        carrier_freq=args.freq,
        fft_size=args.fft_size,
        tone_amplitude=args.amplitude,
        apply_window=args.blackman,
        partial_frame_policy=args.partial,
    ).validate()


def cmd_detect(args):
    """Gesture detection mode."""
    config = build_config(args)
    
    print("\n" + "=" * 60)
    print("  SoundWave - Push/Pull Detection")
    print("=" * 60)
    print(f"\nCarrier: {config.carrier_freq:,.0f} Hz (bin {config.carrier_bin})")
    print(f"Frame: {config.fft_size} samples at {config.sample_rate} Hz")
    
    detector = DopplerDetector(config)
    ui = ConsoleUI()
    
    if args.wav:
        with WavRx.from_wav(config, args.wav) as source:
            count = detector.run(source, ui, max_frames=args.frames)
        print(f"\n\n{count} frames analysed, last display: {ui.text!r}")
        return
    
    print("\nMove a hand toward (push) or away from (pull) the device.")
    print("Press Ctrl+C to exit.\n")
    
    try:
        with AudioTx(config, device=args.output_device):
            time.sleep(config.settle_delay_sec)
            with AudioRx(config, device=args.input_device) as source:
                detector.run(source, ui, max_frames=args.frames)
    except KeyboardInterrupt:
        print("\n\nStopping...")


def cmd_tone(args):
    """Play the carrier until interrupted."""
    config = build_config(args)
    
    print(f"\nPlaying {config.carrier_freq:,.0f} Hz. Press Ctrl+C to stop.\n")
    try:
        with AudioTx(config, device=args.output_device):
            while True:
                time.sleep(0.5)
    except KeyboardInterrupt:
        print("\nStopping...")


def cmd_diagnose(args):
    """Hardware and carrier checks."""
    from soundwave.diagnostic import run_all_diagnostics
    
    ok = run_all_diagnostics(build_config(args))
    if not ok:
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="SoundWave - Doppler Push/Pull Gesture Sensing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py detect                    # Live detection
    python main.py detect --frames 500       # Stop after 500 frames
    python main.py detect --wav rec.wav      # Analyse a recording
    python main.py tone --freq 19000         # Play a different carrier
    python main.py diagnose                  # Check audio hardware
        """
    )
    
    subparsers = parser.add_subparsers(dest='command', help='Command')
    
    # Common arguments
    def add_common_args(p):
        p.add_argument('--freq', type=float, default=18500,
                      help='Carrier frequency in Hz (default: 18500)')
        p.add_argument('--rate', type=int, default=44100,
                      help='Sample rate in Hz (default: 44100)')
        p.add_argument('--fft-size', type=int, default=2048,
                      help='Frame / FFT length, power of 2 (default: 2048)')
        p.add_argument('--amplitude', type=float, default=1.0,
                      help='Tone amplitude 0-1 (default: 1.0)')
        p.add_argument('--blackman', action='store_true',
                      help='Apply a Blackman window before the FFT')
        p.add_argument('--partial', choices=['pad', 'skip'], default='pad',
                      help='Short reads: zero-pad or skip (default: pad)')
        p.add_argument('--input-device', type=int, default=None,
                      help='Input device index (default: system default)')
        p.add_argument('--output-device', type=int, default=None,
                      help='Output device index (default: system default)')
    
    p_detect = subparsers.add_parser('detect', help='Push/pull detection')
    add_common_args(p_detect)
    p_detect.add_argument('--wav', type=str, default=None,
                         help='Analyse a 16-bit mono WAV file instead of the mic')
    p_detect.add_argument('--frames', type=int, default=None,
                         help='Stop after this many frames')
    
    p_tone = subparsers.add_parser('tone', help='Play the carrier tone')
    add_common_args(p_tone)
    
    p_diag = subparsers.add_parser('diagnose', help='Audio hardware checks')
    add_common_args(p_diag)
    
    args = parser.parse_args(argv)
    
    if args.command is None:
        parser.print_help()
        sys.exit(1)
    
    commands = {
        'detect': cmd_detect,
        'tone': cmd_tone,
        'diagnose': cmd_diagnose,
    }
    
    try:
        commands[args.command](args)
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
