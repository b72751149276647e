"""
Replay a recorded capture through the band-power pipeline.

Every frame is fed to :meth:`Pipeline.on_raw_frame` with its recorded
timestamp, so throttling and rate estimates behave exactly as they did live.
Each spectral update becomes one CSV row.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Iterable, List, Sequence

from ..config import PipelineConfig, load_config
from ..core.models import LinkStats
from ..core.pipeline import BandUpdate
from ..core.pipeline_wiring import build_pipeline
from ..dataio.capture_loader import CapturedFrame, load_capture
from ..dataio.csv_writer import write_band_table

logger = logging.getLogger(__name__)


def replay_frames(
    frames: Iterable[CapturedFrame],
    cfg: PipelineConfig | None = None,
) -> tuple[List[BandUpdate], LinkStats]:
    """Run ``frames`` through a fresh session; returns the updates and final link stats."""
    handles = build_pipeline(cfg, collect_updates=True)
    pipeline = handles.pipeline
    pipeline.start_session()
    for frame in frames:
        pipeline.on_raw_frame(frame.payload, frame.timestamp_ms)
    stats = pipeline.link_stats()
    pipeline.end_session()
    return handles.updates, stats


def update_rows(updates: Iterable[BandUpdate], band_names: Sequence[str]) -> List[list]:
    rows: List[list] = []
    for update in updates:
        row: list = [update.timestamp_ms]
        row.extend(round(update.band_powers.get(name, 0.0), 6) for name in band_names)
        row.extend(round(update.normalized.get(name, 0.0), 6) for name in band_names)
        control = update.control
        row.append(update.dominant or "")
        row.append("" if control is None else round(control.percentage, 2))
        row.append("" if control is None else int(control.active))
        rows.append(row)
    return rows


def _format_optional(value: float | None, fmt: str) -> str:
    return "n/a" if value is None else format(value, fmt)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Replay a Prometeo EEG capture")
    parser.add_argument("capture", type=Path, help="Capture file (JSON lines)")
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional YAML file describing PipelineConfig overrides",
    )
    parser.add_argument("--out", type=Path, help="CSV file receiving one row per band update")
    parser.add_argument(
        "--estimator",
        choices=["spectral", "rms"],
        help="Override the estimator variant without editing the YAML",
    )
    parser.add_argument(
        "--transform",
        choices=["fft", "dft"],
        help="Override the spectral transform without editing the YAML",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def _resolve_config(args: argparse.Namespace) -> PipelineConfig:
    cfg = load_config(args.config) if args.config else PipelineConfig()
    if args.estimator is not None:
        cfg.estimator = args.estimator
    if args.transform is not None:
        cfg.transform = args.transform
    return cfg.sanitized()


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if not args.capture.exists():
        logger.error("Capture file not found: %s", args.capture)
        return 1

    cfg = _resolve_config(args)
    frames = load_capture(args.capture)
    updates, stats = replay_frames(frames, cfg)

    logger.info(
        "Replayed %d frames: %d packets, %d lost (%s%%), fs=%s Hz, %d band updates",
        len(frames),
        stats.total_packets,
        stats.lost_packets,
        _format_optional(stats.loss_percent, ".2f"),
        _format_optional(stats.sample_rate_hz, ".1f"),
        len(updates),
    )

    if args.out is not None:
        band_names = list(cfg.bands.keys())
        count = write_band_table(args.out, band_names, update_rows(updates, band_names))
        logger.info("Wrote %d rows to %s", count, args.out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
