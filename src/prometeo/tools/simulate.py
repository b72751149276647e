"""Write a synthetic headset capture (sine + noise) for offline replay."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterator, Sequence

import numpy as np

from ..core.decoder import DeviceCommand, encode_command, encode_reading
from ..dataio.capture_loader import CapturedFrame, write_capture, write_capture_stream

logger = logging.getLogger(__name__)


def synthetic_frames(
    *,
    sample_rate_hz: float = 250.0,
    duration_s: float = 10.0,
    tone_hz: float = 10.0,
    amplitude: float = 40.0,
    noise: float = 5.0,
    baseline: float = 512.0,
    drop_rate: float = 0.0,
    start_ms: int = 0,
    seed: int | None = None,
    with_handshake: bool = True,
) -> Iterator[CapturedFrame]:
    """
    Yield frames of a single tone riding on ``baseline`` ADC counts.

    The counter keeps advancing for dropped packets so a replay sees the gap.
    With ``with_handshake`` the capture opens with the device's ``START`` echo.
    """
    if sample_rate_hz <= 0:
        raise ValueError(f"sample_rate_hz must be > 0, got {sample_rate_hz}")
    rng = np.random.default_rng(seed)
    n_samples = max(0, int(round(duration_s * sample_rate_hz)))
    t = np.arange(n_samples, dtype=float) / sample_rate_hz
    signal = baseline + amplitude * np.sin(2.0 * np.pi * tone_hz * t)
    if noise > 0:
        signal = signal + noise * rng.standard_normal(n_samples)
    adc = np.clip(np.round(signal), 0, 0xFFFF).astype(int)
    keep = rng.random(n_samples) >= max(0.0, min(1.0, drop_rate))

    if with_handshake:
        yield CapturedFrame(timestamp_ms=int(start_ms), payload=encode_command(DeviceCommand.START))

    for i in range(n_samples):
        if not keep[i]:
            continue
        timestamp_ms = int(start_ms + round(t[i] * 1000.0))
        yield CapturedFrame(timestamp_ms=timestamp_ms, payload=encode_reading(i, adc[i]))


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a synthetic Prometeo EEG capture")
    parser.add_argument(
        "output",
        nargs="?",
        type=Path,
        help="Capture file to write (JSON lines); stdout when omitted",
    )
    parser.add_argument("--fs", type=float, default=250.0, help="Sample rate in Hz")
    parser.add_argument("--duration", type=float, default=10.0, help="Length in seconds")
    parser.add_argument("--tone", type=float, default=10.0, help="Tone frequency in Hz")
    parser.add_argument("--amplitude", type=float, default=40.0, help="Tone amplitude in ADC counts")
    parser.add_argument("--noise", type=float, default=5.0, help="Gaussian noise sigma in ADC counts")
    parser.add_argument("--baseline", type=float, default=512.0, help="DC level in ADC counts")
    parser.add_argument("--drop-rate", type=float, default=0.0, help="Fraction of packets to drop")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible output")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    frames = synthetic_frames(
        sample_rate_hz=args.fs,
        duration_s=args.duration,
        tone_hz=args.tone,
        amplitude=args.amplitude,
        noise=args.noise,
        baseline=args.baseline,
        drop_rate=args.drop_rate,
        seed=args.seed,
    )
    if args.output is None:
        count = write_capture_stream(sys.stdout, frames)
    else:
        count = write_capture(args.output, frames)
        logger.info("Wrote %d frames to %s", count, args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
