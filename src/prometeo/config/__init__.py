"""Configuration objects and helpers for the band-power pipeline.

This package knows how to load/save the YAML file that tunes decoding,
calibration, spectral update cadence, band ranges, and normalization. The
resulting :class:`PipelineConfig` is what :func:`prometeo.core.pipeline_wiring.build_pipeline`
consumes.
"""

from .runtime import PipelineConfig, config_from_mapping, load_config, save_config

__all__ = ["PipelineConfig", "config_from_mapping", "load_config", "save_config"]
