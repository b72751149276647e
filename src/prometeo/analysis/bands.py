"""Frequency band definitions and log-compressed band integration."""

from __future__ import annotations

from typing import Dict, Mapping, Tuple

import numpy as np

from ..core.models import ALPHA, BETA, DELTA, GAMMA, THETA

BandRange = Tuple[float, float]

DEFAULT_BANDS: Dict[str, BandRange] = {
    DELTA: (0.5, 4.0),
    THETA: (4.0, 8.0),
    ALPHA: (8.0, 12.0),
    BETA: (12.0, 30.0),
    GAMMA: (30.0, 80.0),
}


def band_power(freqs: np.ndarray, power: np.ndarray, f_low: float, f_high: float) -> float:
    """
    ``log10(1 + sum(power[k]))`` over bins with ``f_low <= f(k) < f_high``.

    Always non-negative for non-negative ``power``; an empty band gives 0.0.
    """
    mask = (freqs >= f_low) & (freqs < f_high)
    total = float(np.sum(power[mask])) if np.any(mask) else 0.0
    return float(np.log10(1.0 + max(0.0, total)))


def band_powers(
    freqs: np.ndarray,
    power: np.ndarray,
    bands: Mapping[str, BandRange] = DEFAULT_BANDS,
) -> Dict[str, float]:
    """Integrate every configured band; keys keep the order of ``bands``."""
    freqs = np.asarray(freqs, dtype=float)
    power = np.asarray(power, dtype=float)
    if freqs.shape != power.shape:
        raise ValueError("freqs and power must have the same shape")
    return {name: band_power(freqs, power, lo, hi) for name, (lo, hi) in bands.items()}


def coerce_bands(raw: Mapping[str, object] | None) -> Dict[str, BandRange]:
    """
    Normalize a ``{name: [f1, f2]}`` mapping (e.g. from YAML).

    Entries that are not two numbers with ``0 <= f1 < f2`` are dropped; an
    empty or missing mapping falls back to :data:`DEFAULT_BANDS`.
    """
    if not raw:
        return dict(DEFAULT_BANDS)
    cleaned: Dict[str, BandRange] = {}
    for name, value in raw.items():
        try:
            lo, hi = value  # type: ignore[misc]
            lo_f, hi_f = float(lo), float(hi)
        except (TypeError, ValueError):
            continue
        if not (0.0 <= lo_f < hi_f):
            continue
        cleaned[str(name).strip().lower()] = (lo_f, hi_f)
    return cleaned or dict(DEFAULT_BANDS)
