"""
cwdecode command line.

Usage:
    cwdecode decode recording.wav [-v] [--tone-hz 650] [--plot]
    cwdecode generate "CQ CQ DE W2ASM K" [out.wav] --wpm 12 --tone-hz 600 --snr-db 10
    cwdecode harness recordings/
    cwdecode devices
    cwdecode listen --device 2 --seconds 30
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from typing import List, Optional

import numpy as np

from . import __version__
from .config import DecoderConfig, load_config
from .decoder import CWDecoder, DecodeResult, runs_summary
from .errors import CWDecodeError
from .harness import format_summary, format_table, run_directory
from .synth import sample_filename, synthesize
from .wavfile import read_wav, write_wav


# ---------------------------------------------------------------------------
# Config from file + flags
# ---------------------------------------------------------------------------

def _add_decoder_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config",    default=None, help="JSON decoder config file")
    p.add_argument("--tone-hz",   type=float, default=None,
                   help="Fixed tone frequency (omit to scan)")
    p.add_argument("--envelope",  choices=("goertzel", "rms"), default=None)
    p.add_argument("--smooth",    type=int,   default=None, dest="smooth_radius",
                   help="Moving-average radius in windows (0 = off)")
    p.add_argument("--threshold", type=float, default=None, dest="threshold_ratio",
                   help="Keyed threshold as a fraction of the envelope peak")
    p.add_argument("--unit",      choices=("percentile", "minimum"), default=None,
                   dest="unit_method", help="Dot-length heuristic")


def _config_from_args(args) -> DecoderConfig:
    base = load_config(args.config) if args.config else DecoderConfig()
    return base.replace(
        tone_hz         = args.tone_hz,
        envelope        = args.envelope,
        smooth_radius   = args.smooth_radius,
        threshold_ratio = args.threshold_ratio,
        unit_method     = args.unit_method,
    )


# ---------------------------------------------------------------------------
# Plotting
# ---------------------------------------------------------------------------

def plot_result(samples: np.ndarray, sample_rate: float, result: DecodeResult,
                config: DecoderConfig, out_path: str = "") -> None:
    import matplotlib
    if out_path:
        matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    from .envelope import extract

    env = extract(samples, sample_rate, config.envelope, result.tone_hz,
                  config.window_seconds, config.smooth_radius)
    t = np.arange(len(env)) * config.window_seconds

    fig, ax = plt.subplots(figsize=(14, 4))
    ax.plot(t, env, color="tab:blue", linewidth=0.8, label="envelope")
    ax.axhline(result.threshold, color="tab:red", linestyle="--", linewidth=0.8,
               label=f"threshold ({config.threshold_ratio:.0%} of peak)")
    pos = 0
    for run in result.runs:
        if run.keyed:
            ax.axvspan(pos * config.window_seconds, (pos + run.length) * config.window_seconds,
                       color="tab:orange", alpha=0.15)
        pos += run.length
    tone = f"{result.tone_hz:.0f} Hz" if result.tone_hz else "rms"
    ax.set_title(f"{result.text!r}   tone {tone}   unit {result.unit_seconds * 1000:.0f} ms")
    ax.set_xlabel("Time (s)")
    ax.legend(loc="upper right")
    fig.tight_layout()

    if out_path:
        fig.savefig(out_path, dpi=100)
        plt.close(fig)
        print(f"Plot saved: {out_path}")
    else:
        plt.show()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_decode(args) -> int:
    config = _config_from_args(args)
    failed = 0
    for path in args.files:
        try:
            sample_rate, samples = read_wav(path)
        except CWDecodeError as e:
            print(f"Error: {e}", file=sys.stderr)
            failed += 1
            continue
        dec = CWDecoder(sample_rate, config)
        result = dec.decode_samples(samples)
        if len(args.files) > 1:
            print(f"{os.path.basename(path)}: {result.text}")
        else:
            print(result.text)
        if args.verbose:
            tone = f"{result.tone_hz:.0f} Hz" if result.tone_hz else "n/a (rms envelope)"
            print(f"  tone {tone}  unit {result.unit_seconds * 1000:.0f} ms "
                  f"({result.unit_windows} windows)  {len(result.runs)} runs")
            print(f"  runs: {runs_summary(list(result.runs))}")
        if args.plot is not None:
            plot_result(samples, sample_rate, result, config, args.plot)
    return 1 if failed else 0


def cmd_generate(args) -> int:
    out = args.out or sample_filename(args.text, args.wpm, args.tone_hz, args.snr_db)
    audio = synthesize(
        args.text,
        wpm         = args.wpm,
        tone_hz     = args.tone_hz,
        sample_rate = args.sample_rate,
        snr_db      = args.snr_db,
        seed        = args.seed,
        jitter      = args.jitter,
    )
    write_wav(out, audio, args.sample_rate)
    print(f"Written: {out}  ({len(audio) / args.sample_rate:.1f}s, "
          f"{args.wpm:.0f} WPM, {args.tone_hz:.0f} Hz)")
    return 0


def cmd_harness(args) -> int:
    config = _config_from_args(args)
    results = run_directory(args.dir, args.pattern, config)
    if not results:
        print(f"No WAV files found: {os.path.join(args.dir, args.pattern)}")
        return 1
    print(format_table(results))
    print()
    print(format_summary(results))
    return 0


def cmd_devices(args) -> int:
    from .capture import list_devices
    for idx, name, channels, rate in list_devices():
        print(f"Device {idx}: {name}  ({channels} in, {rate:.0f} Hz)")
    return 0


def cmd_listen(args) -> int:
    from .capture import LiveCapture
    config = _config_from_args(args)
    dec = CWDecoder(args.sample_rate, config, buffer_seconds=args.buffer)
    print("Listening... Press Ctrl+C to stop.")
    last = ""
    t_end = time.monotonic() + args.seconds if args.seconds else None
    with LiveCapture(dec, device=args.device) as cap:
        try:
            while t_end is None or time.monotonic() < t_end:
                time.sleep(args.interval)
                text = cap.decode().text
                if text != last:
                    print(text)
                    last = text
        except KeyboardInterrupt:
            pass
        if cap.overflows:
            print(f"{cap.overflows} input overflow(s)")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cwdecode",
        description="Decode Morse (CW) audio into text",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("decode", help="Decode WAV file(s)")
    p.add_argument("files", nargs="+", help="Input WAV file(s)")
    p.add_argument("-v", "--verbose", action="store_true", help="Show tone, unit and runs")
    p.add_argument("--plot", nargs="?", const="", default=None, metavar="PNG",
                   help="Plot the envelope (save to PNG if given)")
    _add_decoder_args(p)
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("generate", help="Write a synthetic Morse recording",
                       formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    p.add_argument("text", help="Text to encode")
    p.add_argument("out", nargs="?", default=None,
                   help="Output WAV (default: harness-style sample_... name)")
    p.add_argument("--wpm",         type=float, default=12.0)
    p.add_argument("--tone-hz",     type=float, default=600.0)
    p.add_argument("--sample-rate", type=int,   default=8000)
    p.add_argument("--snr-db",      type=float, default=None, help="Add noise at this SNR")
    p.add_argument("--jitter",      type=float, default=0.0,
                   help="Element timing jitter sigma (fraction of duration)")
    p.add_argument("--seed",        type=int,   default=48)
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("harness", help="Decode and score a directory of recordings")
    p.add_argument("dir", help="Root directory for WAV files")
    p.add_argument("--pattern", default="**/*.wav", help="Glob pattern for WAV files")
    _add_decoder_args(p)
    p.set_defaults(func=cmd_harness)

    p = sub.add_parser("devices", help="List audio input devices")
    p.set_defaults(func=cmd_devices)

    p = sub.add_parser("listen", help="Decode live audio from an input device")
    p.add_argument("--device",      default=None, help="Input device index or name")
    p.add_argument("--sample-rate", type=int,   default=8000)
    p.add_argument("--seconds",     type=float, default=0.0, help="Stop after N seconds (0 = run until Ctrl+C)")
    p.add_argument("--interval",    type=float, default=2.0, help="Seconds between decodes")
    p.add_argument("--buffer",      type=float, default=60.0, help="Seconds of audio kept")
    _add_decoder_args(p)
    p.set_defaults(func=cmd_listen)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    if getattr(args, "device", None) is not None and str(args.device).isdigit():
        args.device = int(args.device)
    try:
        return args.func(args)
    except CWDecodeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
