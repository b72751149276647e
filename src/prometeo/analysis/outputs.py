"""Map normalized band values onto visualization and control outputs."""

from __future__ import annotations

from typing import Mapping, Optional, Sequence, Tuple

from ..core.models import (
    ALPHA,
    BAND_NAMES,
    BETA,
    DELTA,
    GAMMA,
    THETA,
    ControlSignal,
    ZoneIntensity,
)

# (upper bound in percent, level name); last level has no upper bound.
FEEDBACK_LEVELS: Tuple[Tuple[float, str], ...] = (
    (20.0, "relaxed"),
    (40.0, "slightly_focused"),
    (60.0, "moderately_focused"),
    (80.0, "well_focused"),
    (float("inf"), "highly_focused"),
)

DEFAULT_CONTROL_THRESHOLD = 25.0


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def has_all_bands(values: Mapping[str, float]) -> bool:
    return all(name in values for name in BAND_NAMES)


def zone_intensities(bands: Mapping[str, float]) -> ZoneIntensity:
    """
    Five visualization zones, bottom to top.

    Zones 1 and 3 blend a neighbouring band in with weights summing to 1, so
    inputs in ``[0, 1]`` give outputs in ``[0, 1]``.
    """
    d = bands[DELTA]
    t = bands[THETA]
    a = bands[ALPHA]
    b = bands[BETA]
    g = bands[GAMMA]
    return (
        d,
        0.8 * t + 0.2 * d,
        a,
        0.8 * b + 0.2 * a,
        g,
    )


def zone_energy(zones: Sequence[float]) -> float:
    """Mean zone intensity, used for an overall glow level."""
    if not zones:
        return 0.0
    return sum(zones) / len(zones)


def dominant_band(bands: Mapping[str, float], order: Sequence[str] = BAND_NAMES) -> Optional[str]:
    """
    Band with the largest value; ties go to the earliest band in ``order``.

    Bands not listed in ``order`` are considered after it, in mapping order.
    Returns ``None`` for an empty mapping.
    """
    candidates = [name for name in order if name in bands]
    candidates.extend(name for name in bands if name not in candidates)
    best: Optional[str] = None
    for name in candidates:
        if best is None or bands[name] > bands[best]:
            best = name
    return best


def feedback_level(percentage: float) -> str:
    for upper, name in FEEDBACK_LEVELS:
        if percentage < upper:
            return name
    return FEEDBACK_LEVELS[-1][1]


def threshold_percentage(value: float, threshold: float) -> float:
    """``clamp(value / threshold, 0, 1) * 100``; 0 for a non-positive threshold."""
    if threshold <= 0:
        return 0.0
    return _clamp01(value / threshold) * 100.0


def control_signal(value: float, threshold: float = DEFAULT_CONTROL_THRESHOLD) -> ControlSignal:
    """Binary (``value > threshold``) plus graded feedback for a raw band power."""
    pct = threshold_percentage(value, threshold)
    return ControlSignal(
        value=float(value),
        threshold=float(threshold),
        active=float(value) > float(threshold),
        percentage=pct,
        level=feedback_level(pct),
    )
