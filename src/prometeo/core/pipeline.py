"""Single-channel EEG pipeline: raw frames in, band powers and outputs out."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import numpy as np

from ..analysis.features import signal_quality
from ..analysis.normalizer import AdaptiveNormalizer
from ..analysis.outputs import control_signal, dominant_band, has_all_bands, zone_intensities
from ..analysis.rate import LinkTracker
from ..analysis.spectral import SpectralEstimator
from ..baseline import BaselineCalibrator
from ..config import PipelineConfig
from .decoder import BytesLike, decode
from .models import (
    BETA,
    ControlSignal,
    DecodedSample,
    LinkStats,
    Reading,
    TextEvent,
    Unknown,
    ZoneIntensity,
)
from .ringbuffer import RingBuffer

__all__ = [
    "BandUpdate",
    "Pipeline",
    "PipelineCallbacks",
    "PipelineState",
]

logger = logging.getLogger(__name__)

# Log a signal-quality summary every N spectral updates.
QUALITY_LOG_EVERY = 10


@dataclass(slots=True)
class PipelineCallbacks:
    """
    Optional output hooks, invoked synchronously from packet handling.

    Consumers must return quickly; anything slow (rendering, network relay)
    should hand the value off to its own queue.
    """

    on_band_powers: Optional[Callable[[Dict[str, float]], None]] = None
    on_normalized_bands: Optional[Callable[[Dict[str, float]], None]] = None
    on_zone_intensity: Optional[Callable[[ZoneIntensity], None]] = None
    on_link_stats: Optional[Callable[[LinkStats], None]] = None
    on_dominant_band: Optional[Callable[[str], None]] = None
    on_control_signal: Optional[Callable[[ControlSignal], None]] = None
    on_text_event: Optional[Callable[[TextEvent], None]] = None


@dataclass(slots=True)
class BandUpdate:
    """Everything derived from one throttled spectral update."""

    timestamp_ms: int
    band_powers: Dict[str, float]
    normalized: Dict[str, float]
    zones: Optional[ZoneIntensity] = None
    dominant: Optional[str] = None
    control: Optional[ControlSignal] = None


@dataclass
class PipelineState:
    """All per-session mutable state, owned by one :class:`Pipeline`."""

    tracker: LinkTracker
    calibrator: BaselineCalibrator
    samples: RingBuffer[float]
    estimator: SpectralEstimator
    normalizer: AdaptiveNormalizer
    last_update: Optional[BandUpdate] = field(default=None)

    @classmethod
    def fresh(cls, cfg: PipelineConfig) -> PipelineState:
        return cls(
            tracker=LinkTracker(
                packet_window_ms=cfg.packet_window_ms,
                packet_window_max=cfg.packet_window_max,
                sample_window_max=cfg.sample_window_max,
                min_packets_for_loss=cfg.min_packets_for_loss,
            ),
            calibrator=BaselineCalibrator(
                window_size=cfg.baseline_window,
                fallback=cfg.fallback_baseline,
            ),
            samples=RingBuffer(cfg.sample_capacity),
            estimator=SpectralEstimator(
                bands=dict(cfg.bands),
                window_length=cfg.window_length,
                update_interval_ms=cfg.update_interval_ms,
                min_sample_rate_hz=cfg.min_sample_rate_hz,
                estimator=cfg.estimator,
                transform=cfg.transform,
            ),
            normalizer=AdaptiveNormalizer(
                cfg.bands.keys(),
                capacity=cfg.history_capacity,
                min_history=cfg.min_history,
                flat_epsilon=cfg.flat_epsilon,
            ),
        )


class Pipeline:
    """
    Decode → track → calibrate → buffer → (throttled) estimate → normalize → map.

    Not thread-safe: exactly one caller (the transport's notification
    handler) drives :meth:`on_raw_frame`. Session changes must be serialized
    against frame delivery by the caller. Frames arriving while no session
    is active are decoded but leave the state untouched.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        callbacks: PipelineCallbacks | None = None,
    ) -> None:
        self.config = (config or PipelineConfig()).sanitized()
        self.callbacks = callbacks or PipelineCallbacks()
        self.state = PipelineState.fresh(self.config)
        self._active = False

    # ------------------------------------------------------------------ session
    @property
    def active(self) -> bool:
        return self._active

    def start_session(self) -> None:
        """Reset all state and begin accepting frames."""
        self.state = PipelineState.fresh(self.config)
        self._active = True
        logger.info("Session started")

    def end_session(self) -> None:
        """Stop accepting frames and discard all session state."""
        was_active = self._active
        stats = self.state.tracker.stats()
        self._active = False
        self.state = PipelineState.fresh(self.config)
        if was_active:
            logger.info(
                "Session ended: %d packets, %d lost",
                stats.total_packets,
                stats.lost_packets,
            )

    # ------------------------------------------------------------------ ingest
    def on_raw_frame(self, data: BytesLike, now_ms: int) -> DecodedSample:
        """Handle one transport notification; returns the decoded frame."""
        frame = decode(data, now_ms, require_end_byte=self.config.require_end_byte)
        if isinstance(frame, Reading):
            if self._active:
                self._handle_reading(frame)
            else:
                logger.debug("Dropping sample frame outside a session: %s", frame.hex)
        elif isinstance(frame, TextEvent):
            logger.debug("Device text: %r", frame.text)
            self._emit(self.callbacks.on_text_event, frame)
        elif isinstance(frame, Unknown):
            logger.debug("Unknown frame (%d bytes): %s", frame.size, frame.hex)
        else:  # pragma: no cover - DecodedSample is closed
            raise TypeError(f"unexpected frame type {type(frame).__name__}")
        return frame

    def _handle_reading(self, reading: Reading) -> None:
        state = self.state
        now_ms = reading.timestamp_ms

        state.tracker.on_packet(reading.counter, now_ms)
        stats = state.tracker.stats()
        self._emit(self.callbacks.on_link_stats, stats)

        state.calibrator.observe(reading.adc_value)
        state.samples.append(state.calibrator.center(reading.adc_value))

        if not state.estimator.ready(len(state.samples), stats.sample_rate_hz, now_ms):
            return
        window = state.samples.tail_array(state.estimator.window_length)
        powers = state.estimator.maybe_update(window, stats.sample_rate_hz, now_ms)
        if powers is not None:
            self._publish(powers, window, now_ms)

    def _publish(self, powers: Dict[str, float], window: np.ndarray, now_ms: int) -> None:
        state = self.state
        normalized = state.normalizer.update(powers)

        update = BandUpdate(timestamp_ms=now_ms, band_powers=dict(powers), normalized=normalized)
        if has_all_bands(normalized):
            update.zones = zone_intensities(normalized)
            update.dominant = dominant_band(normalized)
        if BETA in powers:
            update.control = control_signal(powers[BETA], self.config.control_threshold)
        state.last_update = update

        if state.estimator.update_count % QUALITY_LOG_EVERY == 0:
            quality = signal_quality(window)
            logger.debug(
                "Signal quality: mean=%.2f std=%.2f range=%.1f",
                quality.mean,
                quality.std,
                quality.range,
            )

        self._emit(self.callbacks.on_band_powers, update.band_powers)
        self._emit(self.callbacks.on_normalized_bands, update.normalized)
        if update.zones is not None:
            self._emit(self.callbacks.on_zone_intensity, update.zones)
        if update.dominant is not None:
            self._emit(self.callbacks.on_dominant_band, update.dominant)
        if update.control is not None:
            self._emit(self.callbacks.on_control_signal, update.control)

    @staticmethod
    def _emit(callback: Optional[Callable[..., None]], value: object) -> None:
        if callback is None:
            return
        try:
            callback(value)
        except Exception:
            logger.exception("Pipeline callback %r failed", callback)

    # ------------------------------------------------------------------ queries
    def link_stats(self) -> LinkStats:
        return self.state.tracker.stats()

    @property
    def last_update(self) -> Optional[BandUpdate]:
        return self.state.last_update
