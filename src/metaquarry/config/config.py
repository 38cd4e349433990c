"""
Configuration management for MetaQuarry using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Optional, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Setup Logging ---
log = logging.getLogger(__name__)

FORMAT_NAMES: tuple[str, ...] = (
    "meta",
    "open_graph",
    "twitter",
    "json_ld",
    "microdata",
    "microformats",
    "rdfa",
    "dublin_core",
    "manifest",
    "oembed",
    "rel_links",
)

# Subset of the RDFa 1.1 initial context.
DEFAULT_RDFA_PREFIXES: Dict[str, str] = {
    "rdf": "http://www.w3.org/1999/02/22-rdf-syntax-ns#",
    "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
    "xsd": "http://www.w3.org/2001/XMLSchema#",
    "owl": "http://www.w3.org/2002/07/owl#",
    "rdfa": "http://www.w3.org/ns/rdfa#",
    "xhv": "http://www.w3.org/1999/xhtml/vocab#",
    "schema": "http://schema.org/",
    "foaf": "http://xmlns.com/foaf/0.1/",
    "dc": "http://purl.org/dc/terms/",
    "dcterms": "http://purl.org/dc/terms/",
    "dc11": "http://purl.org/dc/elements/1.1/",
    "og": "http://ogp.me/ns#",
    "skos": "http://www.w3.org/2004/02/skos/core#",
    "cc": "http://creativecommons.org/ns#",
    "sioc": "http://rdfs.org/sioc/ns#",
    "vcard": "http://www.w3.org/2006/vcard/ns#",
}

# --- Nested Configuration Models ---


class ExtractionSettings(BaseModel):
    """Configuration for the per-format extraction run."""

    html_parser: str = Field(default="html.parser", description="BeautifulSoup tree builder to use.")
    enabled_formats: List[str] = Field(
        default_factory=lambda: list(FORMAT_NAMES),
        description="Formats extract_all runs; the rest are reported as absent.",
    )
    json_indent: Optional[int] = Field(default=None, description="Indentation for JSON output; None is compact.")

    @field_validator("enabled_formats")
    @classmethod
    def validate_formats(cls, v: List[str]) -> List[str]:
        unknown = [name for name in v if name not in FORMAT_NAMES]
        if unknown:
            raise ValueError(f"Unknown formats in enabled_formats: {unknown}. Available formats: {list(FORMAT_NAMES)}")
        return v

    @field_validator("json_indent")
    @classmethod
    def validate_indent(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("json_indent must be non-negative")
        return v


class RdfaSettings(BaseModel):
    """Initial CURIE prefix mappings for RDFa processing."""

    default_prefixes: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_RDFA_PREFIXES))

    @field_validator("default_prefixes")
    @classmethod
    def lowercase_prefixes(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {prefix.lower(): iri for prefix, iri in v.items()}


class MonitoringConfig(BaseModel):
    """Logging and metrics configuration."""

    log_level: str = Field(default="WARNING", description="Log level for the console or log file.")
    log_file: Optional[Path] = Field(default=None, description="Write JSON logs to this file instead of stderr.")
    metrics_enabled: bool = Field(default=True, description="Record Prometheus extraction metrics.")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: Any) -> Optional[Path]:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path


class Config(BaseSettings):
    project_name: str = "MetaQuarry"
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    rdfa: RdfaSettings = Field(default_factory=RdfaSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="METAQUARRY_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "metaquarry.yaml", current_dir / "metaquarry.yml"):
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed. This prevents configuration errors
    from crashing the application on import.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    @classmethod
    def install(cls, config: Config) -> None:
        """Replace the active configuration (used by the CLI and tests)."""
        with cls._lock:
            cls._config = config

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._config = None

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except (ValidationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. "
                    "Falling back to default settings. Please check your config file.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.debug("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise RuntimeError(f"Default configuration is invalid, cannot start: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
