"""
Read and write recorded headset captures.

A capture is a JSON-lines file with one notification per line, in the shape
the browser client relays to the backend::

    {"type": "raw_eeg", "packet": [199, 124, 5, 2, 0, 1], "timestamp": 1718000000123}

Lines using ``{"timestamp_ms": ..., "hex": "c77c05020001"}`` are accepted as
well. Malformed lines are logged and skipped.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, TextIO

logger = logging.getLogger(__name__)

RAW_EEG_TYPE = "raw_eeg"


@dataclass(frozen=True, slots=True)
class CapturedFrame:
    timestamp_ms: int
    payload: bytes


def _coerce_timestamp(record: Mapping[str, Any]) -> Optional[int]:
    for key in ("timestamp_ms", "timestamp"):
        value = record.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
    return None


def _coerce_payload(record: Mapping[str, Any]) -> Optional[bytes]:
    packet = record.get("packet")
    if packet is not None:
        try:
            return bytes(int(b) for b in packet)
        except (TypeError, ValueError):
            return None
    hex_value = record.get("hex")
    if isinstance(hex_value, str):
        try:
            return bytes.fromhex(hex_value)
        except ValueError:
            return None
    return None


def parse_capture_line(line: str) -> Optional[CapturedFrame]:
    """Parse one capture line; returns ``None`` for blank or unusable lines."""
    stripped = line.strip()
    if not stripped:
        return None
    try:
        record = json.loads(stripped)
    except json.JSONDecodeError as exc:
        logger.warning("Dropping malformed capture line: %s (%s)", stripped, exc)
        return None
    if not isinstance(record, Mapping):
        logger.warning("Skipping non-object capture line: %r", record)
        return None
    msg_type = record.get("type", RAW_EEG_TYPE)
    if msg_type != RAW_EEG_TYPE:
        logger.debug("Skipping %r message", msg_type)
        return None

    timestamp = _coerce_timestamp(record)
    payload = _coerce_payload(record)
    if timestamp is None or payload is None:
        logger.warning("Capture line missing timestamp or packet: %r", record)
        return None
    return CapturedFrame(timestamp_ms=timestamp, payload=payload)


def iter_capture_lines(lines: Iterable[str]) -> Iterator[CapturedFrame]:
    for line in lines:
        frame = parse_capture_line(line)
        if frame is not None:
            yield frame


def load_capture(path: Path) -> list[CapturedFrame]:
    """Load every usable frame from the capture file at ``path``."""
    with Path(path).open("r", encoding="utf-8") as fh:
        return list(iter_capture_lines(fh))


def format_capture_line(frame: CapturedFrame) -> str:
    return json.dumps(
        {
            "type": RAW_EEG_TYPE,
            "packet": list(frame.payload),
            "timestamp": int(frame.timestamp_ms),
        }
    )


def write_capture_stream(stream: TextIO, frames: Iterable[CapturedFrame]) -> int:
    count = 0
    for frame in frames:
        stream.write(format_capture_line(frame))
        stream.write("\n")
        count += 1
    return count


def write_capture(path: Path, frames: Iterable[CapturedFrame]) -> int:
    """Write ``frames`` as JSON lines; directories are created as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        return write_capture_stream(fh, frames)
