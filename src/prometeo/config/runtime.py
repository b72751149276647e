"""Runtime configuration helpers for the band-power pipeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from ..analysis.bands import DEFAULT_BANDS, BandRange, coerce_bands
from ..analysis.fft import TRANSFORMS
from ..analysis.spectral import ESTIMATOR_SPECTRAL, ESTIMATORS

logger = logging.getLogger(__name__)

# YAML files may keep the knobs flat or under a ``pipeline:`` section.
CONFIG_SECTION = "pipeline"


@dataclass(slots=True)
class PipelineConfig:
    """
    Tuning knobs for decoding, calibration, spectral updates, and outputs.

    The defaults match the headset firmware (~250 Hz, one sample per packet)
    and a UI refreshing band bars four times per second.
    """

    # Spectral estimator
    update_interval_ms: int = 250
    window_length: int = 256
    min_sample_rate_hz: float = 20.0
    bands: Dict[str, BandRange] = field(default_factory=lambda: dict(DEFAULT_BANDS))
    estimator: str = ESTIMATOR_SPECTRAL
    transform: str = "fft"

    # Calibration and buffering
    baseline_window: int = 200
    fallback_baseline: float = 512.0
    sample_capacity: int = 2048

    # Normalization
    history_capacity: int = 120
    min_history: int = 10
    flat_epsilon: float = 1e-9

    # Link tracking
    packet_window_ms: int = 5000
    packet_window_max: int = 60
    sample_window_max: int = 600
    min_packets_for_loss: int = 10

    # Decoder / control output
    require_end_byte: bool = False
    control_threshold: float = 25.0

    def sanitized(self) -> PipelineConfig:
        """Return a copy with derived limits applied."""
        sample_capacity = max(2, int(self.sample_capacity))
        estimator = str(self.estimator or "").strip().lower()
        transform = str(self.transform or "").strip().lower()
        threshold = float(self.control_threshold)
        return PipelineConfig(
            update_interval_ms=max(0, int(self.update_interval_ms)),
            window_length=max(2, min(sample_capacity, int(self.window_length))),
            min_sample_rate_hz=max(0.0, float(self.min_sample_rate_hz)),
            bands=coerce_bands(self.bands),
            estimator=estimator if estimator in ESTIMATORS else ESTIMATOR_SPECTRAL,
            transform=transform if transform in TRANSFORMS else "fft",
            baseline_window=max(1, int(self.baseline_window)),
            fallback_baseline=float(self.fallback_baseline),
            sample_capacity=sample_capacity,
            history_capacity=max(1, int(self.history_capacity)),
            min_history=max(1, int(self.min_history)),
            flat_epsilon=max(0.0, float(self.flat_epsilon)),
            packet_window_ms=max(1, int(self.packet_window_ms)),
            packet_window_max=max(2, int(self.packet_window_max)),
            sample_window_max=max(2, int(self.sample_window_max)),
            min_packets_for_loss=max(1, int(self.min_packets_for_loss)),
            require_end_byte=bool(self.require_end_byte),
            control_threshold=threshold if threshold > 0 else 25.0,
        )

    def to_mapping(self) -> Dict[str, Any]:
        """Serialize into a mapping suitable for YAML."""
        data: Dict[str, Any] = {f.name: getattr(self, f.name) for f in fields(self)}
        data["bands"] = {name: [lo, hi] for name, (lo, hi) in self.bands.items()}
        return {CONFIG_SECTION: data}


def _flatten_section(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge the ``pipeline`` section into the top level; top-level keys win."""
    section = data.get(CONFIG_SECTION)
    flat: Dict[str, Any] = dict(section) if isinstance(section, Mapping) else {}
    flat.update((key, value) for key, value in data.items() if key != CONFIG_SECTION)
    return flat


def config_from_mapping(data: Mapping[str, Any] | None) -> PipelineConfig:
    """Build a sanitized :class:`PipelineConfig`; unknown keys are logged and ignored."""
    if not data:
        return PipelineConfig()
    flat = _flatten_section(data)
    accepted = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(str(key) for key in flat if key not in accepted)
    if unknown:
        logger.warning("Ignoring unknown pipeline settings: %s", ", ".join(unknown))
    overrides = {key: value for key, value in flat.items() if key in accepted}
    return PipelineConfig(**overrides).sanitized()


def load_config(path: str | Path | None) -> PipelineConfig:
    """
    Read a YAML pipeline configuration.

    ``None`` or a path that does not exist yields the defaults. A document
    that is not a mapping raises ``ValueError``.
    """
    if path is None or not Path(path).is_file():
        return PipelineConfig()
    text = Path(path).read_text(encoding="utf-8")
    document = yaml.safe_load(text)
    if document is None:
        return PipelineConfig()
    if not isinstance(document, Mapping):
        raise ValueError(f"{path}: expected a mapping, got {type(document).__name__}")
    return config_from_mapping(document)


def save_config(path: str | Path, cfg: PipelineConfig) -> None:
    """Write ``cfg`` as YAML, creating parent directories as needed."""
    cfg_path = Path(path)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    text = yaml.safe_dump(cfg.to_mapping(), default_flow_style=False, sort_keys=False)
    cfg_path.write_text(text, encoding="utf-8")


__all__ = ["PipelineConfig", "config_from_mapping", "load_config", "save_config"]
