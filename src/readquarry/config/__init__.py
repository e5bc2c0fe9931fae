"""Configuration models for ReadQuarry."""

from .config import (
    Config,
    ContentThresholds,
    ExtractionConfig,
    ImageConfig,
    LocatorConfig,
    MonitoringConfig,
    PatternConfig,
    ScoringConfig,
    SelectorConfig,
    find_config_file,
    load_config,
)

__all__ = [
    "Config",
    "ContentThresholds",
    "ExtractionConfig",
    "ImageConfig",
    "LocatorConfig",
    "MonitoringConfig",
    "PatternConfig",
    "ScoringConfig",
    "SelectorConfig",
    "find_config_file",
    "load_config",
]
