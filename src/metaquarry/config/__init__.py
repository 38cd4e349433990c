"""Configuration for MetaQuarry."""

from .config import (
    DEFAULT_RDFA_PREFIXES,
    FORMAT_NAMES,
    Config,
    ExtractionSettings,
    LazyConfig,
    MonitoringConfig,
    RdfaSettings,
    find_config_file,
    settings,
)

__all__ = [
    "Config",
    "ExtractionSettings",
    "RdfaSettings",
    "MonitoringConfig",
    "LazyConfig",
    "FORMAT_NAMES",
    "DEFAULT_RDFA_PREFIXES",
    "find_config_file",
    "settings",
]
