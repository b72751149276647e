from __future__ import annotations

from typing import Dict, Iterable, Mapping

from ..core.models import BAND_NAMES
from ..core.ringbuffer import RingBuffer

DEFAULT_HISTORY_CAPACITY = 120
DEFAULT_MIN_HISTORY = 10
DEFAULT_FLAT_EPSILON = 1e-9


class AdaptiveNormalizer:
    """
    Rescale raw band powers into ``[0, 1]`` against a rolling per-band min/max.

    Callers push the fresh value first and normalize it afterwards, so the
    current value takes part in the window it is divided against. Fewer than
    ``min_history`` entries or a flat history both yield ``0.0``.
    """

    def __init__(
        self,
        bands: Iterable[str] = BAND_NAMES,
        *,
        capacity: int = DEFAULT_HISTORY_CAPACITY,
        min_history: int = DEFAULT_MIN_HISTORY,
        flat_epsilon: float = DEFAULT_FLAT_EPSILON,
    ) -> None:
        self._capacity = int(capacity)
        self._min_history = max(1, int(min_history))
        self._flat_epsilon = float(flat_epsilon)
        self._history: Dict[str, RingBuffer[float]] = {}
        for band in bands:
            self._ensure(band)

    def _ensure(self, band: str) -> RingBuffer[float]:
        # Bands outside the configured set get a history lazily.
        hist = self._history.get(band)
        if hist is None:
            hist = RingBuffer(self._capacity)
            self._history[band] = hist
        return hist

    def push(self, band: str, value: float) -> None:
        self._ensure(band).append(float(value))

    def history_length(self, band: str) -> int:
        hist = self._history.get(band)
        return 0 if hist is None else len(hist)

    def normalize(self, band: str, value: float) -> float:
        hist = self._history.get(band)
        if hist is None or len(hist) < self._min_history:
            return 0.0
        lo = min(hist)
        hi = max(hist)
        span = hi - lo
        if span < self._flat_epsilon:
            return 0.0
        scaled = (float(value) - lo) / span
        return max(0.0, min(1.0, scaled))

    def update(self, powers: Mapping[str, float]) -> Dict[str, float]:
        """Push every band of ``powers`` then return their normalized values."""
        for band, value in powers.items():
            self.push(band, value)
        return {band: self.normalize(band, value) for band, value in powers.items()}

    def reset(self) -> None:
        for hist in self._history.values():
            hist.clear()
