"""
Classify raw notification payloads from the headset into typed frames.

Sample frames are six bytes::

    C7 7C <counter> <adc_hi> <adc_lo> 01

Anything else is either a device text response (``OK``, ``Prometeo v1`` ...)
or kept as :class:`Unknown` for diagnostics.
"""

from __future__ import annotations

import enum
from typing import Union

from .models import DecodedSample, Reading, TextEvent, Unknown

SYNC_BYTE_1 = 0xC7
SYNC_BYTE_2 = 0x7C
END_BYTE = 0x01
FRAME_LENGTH = 6

BytesLike = Union[bytes, bytearray, memoryview]


class DeviceCommand(str, enum.Enum):
    """ASCII commands understood by the headset firmware."""

    WHORU = "WHORU"
    START = "START"
    STOP = "STOP"


def encode_command(command: DeviceCommand | str) -> bytes:
    """Return the bytes a transport should write for ``command``."""
    if isinstance(command, DeviceCommand):
        text = command.value
    else:
        text = DeviceCommand(str(command).strip().upper()).value
    return text.encode("ascii")


def encode_reading(counter: int, adc_value: int, end_byte: int = END_BYTE) -> bytes:
    """Build a sample frame; counter wraps at 256, adc is clamped to 16 bits."""
    adc = max(0, min(0xFFFF, int(adc_value)))
    return bytes(
        (
            SYNC_BYTE_1,
            SYNC_BYTE_2,
            int(counter) & 0xFF,
            (adc >> 8) & 0xFF,
            adc & 0xFF,
            int(end_byte) & 0xFF,
        )
    )


def is_sample_frame(raw: bytes, *, require_end_byte: bool = False) -> bool:
    if len(raw) < FRAME_LENGTH:
        return False
    if raw[0] != SYNC_BYTE_1 or raw[1] != SYNC_BYTE_2:
        return False
    if require_end_byte and raw[5] != END_BYTE:
        return False
    return True


def _decode_text(raw: bytes) -> str | None:
    # Undecodable bytes become U+FFFD; only empty or blank replies yield None.
    text = raw.decode("utf-8", errors="replace").strip()
    return text or None


def decode(data: BytesLike, now_ms: int, *, require_end_byte: bool = False) -> DecodedSample:
    """
    Classify ``data`` into exactly one of :class:`Reading`, :class:`TextEvent`
    or :class:`Unknown`.

    The binary sync check always wins; text decoding is only attempted for
    frames that are not samples. Never raises for any byte input.
    """
    raw = bytes(data)
    timestamp_ms = int(now_ms)

    if is_sample_frame(raw, require_end_byte=require_end_byte):
        return Reading(
            counter=raw[2],
            adc_value=(raw[3] << 8) | raw[4],
            timestamp_ms=timestamp_ms,
            end_byte=raw[5],
            raw=raw,
        )

    text = _decode_text(raw)
    if text is not None:
        return TextEvent(text=text, timestamp_ms=timestamp_ms, raw=raw)

    return Unknown(raw=raw, size=len(raw), timestamp_ms=timestamp_ms)
