"""Core streaming pipeline: frame decoding, buffers, and session state.

Leaf building blocks (ring buffer, frame models, decoder) are re-exported
here. The pipeline itself lives in :mod:`prometeo.core.pipeline` and its
config-driven factory in :mod:`prometeo.core.pipeline_wiring`; they are not
imported eagerly because they depend on :mod:`prometeo.analysis`, which in
turn uses the models defined here.
"""

from .ringbuffer import RingBuffer
from .models import (
    BAND_NAMES,
    ControlSignal,
    DecodedSample,
    LinkStats,
    Reading,
    SignalQuality,
    TextEvent,
    Unknown,
)
from .decoder import DeviceCommand, decode, encode_command, encode_reading

__all__ = [
    "RingBuffer",
    "BAND_NAMES",
    "ControlSignal",
    "DecodedSample",
    "LinkStats",
    "Reading",
    "SignalQuality",
    "TextEvent",
    "Unknown",
    "DeviceCommand",
    "decode",
    "encode_command",
    "encode_reading",
]
