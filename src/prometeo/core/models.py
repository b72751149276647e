"""Shared dataclasses for decoded frames, link statistics, and outputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple, Union

DELTA = "delta"
THETA = "theta"
ALPHA = "alpha"
BETA = "beta"
GAMMA = "gamma"

# Priority order also used to break ties when picking the dominant band.
BAND_NAMES: Tuple[str, ...] = (DELTA, THETA, ALPHA, BETA, GAMMA)

BandPowerSet = Mapping[str, float]
NormalizedBands = Mapping[str, float]
ZoneIntensity = Tuple[float, float, float, float, float]


def _hex(raw: bytes) -> str:
    return raw.hex()


@dataclass(frozen=True, slots=True)
class Reading:
    """One binary sample frame: ``C7 7C counter adc_hi adc_lo end``."""

    counter: int
    adc_value: int
    timestamp_ms: int
    end_byte: int
    raw: bytes = b""

    @property
    def hex(self) -> str:
        return _hex(self.raw)


@dataclass(frozen=True, slots=True)
class TextEvent:
    """Status/ack message sent by the device as plain text."""

    text: str
    timestamp_ms: int
    raw: bytes = b""

    @property
    def hex(self) -> str:
        return _hex(self.raw)


@dataclass(frozen=True, slots=True)
class Unknown:
    """Frame that is neither a sample nor readable text; kept for diagnostics."""

    raw: bytes
    size: int
    timestamp_ms: int

    @property
    def hex(self) -> str:
        return _hex(self.raw)


DecodedSample = Union[Reading, TextEvent, Unknown]


@dataclass(frozen=True, slots=True)
class LinkStats:
    """Snapshot of packet sequence and rate tracking for diagnostics/UI."""

    total_packets: int
    lost_packets: int
    last_counter: Optional[int]
    packet_rate_hz: Optional[float]
    sample_rate_hz: Optional[float]
    loss_ratio: Optional[float]
    recent_packet_timestamps: Tuple[int, ...] = ()
    recent_sample_timestamps: Tuple[int, ...] = ()

    @property
    def loss_percent(self) -> Optional[float]:
        if self.loss_ratio is None:
            return None
        return self.loss_ratio * 100.0


@dataclass(frozen=True, slots=True)
class SignalQuality:
    mean: float
    std: float
    minimum: float
    maximum: float

    @property
    def range(self) -> float:
        return self.maximum - self.minimum


@dataclass(frozen=True, slots=True)
class ControlSignal:
    """Thresholded control output derived from a raw (non-normalized) band power."""

    value: float
    threshold: float
    active: bool
    percentage: float
    level: str


def as_band_dict(values: Mapping[str, float]) -> Dict[str, float]:
    """Return a plain dict copy ordered by :data:`BAND_NAMES` first."""
    ordered: Dict[str, float] = {}
    for name in BAND_NAMES:
        if name in values:
            ordered[name] = float(values[name])
    for name, value in values.items():
        if name not in ordered:
            ordered[name] = float(value)
    return ordered
