"""Configuration system for mulawkit.

Supports loading from YAML files, dicts, or programmatic construction via
Pydantic models. The config drives validation strictness, batching, the
output container and the optional HTTP server.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


class ConversionConfig(BaseModel):
    """Conversion pipeline settings."""

    # Reject fmt chunks that are not exactly 16 bytes
    strict_fmt_chunk: bool = False
    # Output samples produced between cooperative yields
    batch_size: int = Field(default=4096, ge=1)
    smoothing_window: int = Field(default=5, ge=1)


class OutputConfig(BaseModel):
    """Output container settings."""

    container: Literal["raw", "wav"] = "raw"
    raw_suffix: str = ".ulaw"
    wav_suffix: str = ".ulaw.wav"

    @property
    def suffix(self) -> str:
        return self.wav_suffix if self.container == "wav" else self.raw_suffix


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = 8080
    max_upload_bytes: int = 100 * 1024 * 1024


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"


class ConverterConfig(BaseModel):
    """Top-level mulawkit configuration.

    Examples:
        # Programmatic
        config = ConverterConfig(output=OutputConfig(container="wav"))

        # From YAML
        config = ConverterConfig.from_yaml("mulawkit.yaml")

        # Shorthand
        config = ConverterConfig.from_dict({"container": "wav", "strict": True})
    """

    conversion: ConversionConfig = Field(default_factory=ConversionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ConverterConfig:
        """Load configuration from a YAML file."""
        path = Path(path)
        with path.open() as f:
            data = yaml.safe_load(f) or {}
        return cls._from_raw(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConverterConfig:
        """Load configuration from a dictionary.

        Supports both the full nested format and a flat shorthand format:

        Full format:
            {"conversion": {"strict_fmt_chunk": True}, "output": {"container": "wav"}}

        Shorthand format:
            {"strict": True, "container": "wav", "log_level": "DEBUG"}
        """
        return cls._from_raw(dict(data))

    @classmethod
    def _from_raw(cls, data: dict[str, Any]) -> ConverterConfig:
        """Normalize and construct config from a raw dict."""
        flat_mappings = {
            "strict": ("conversion", "strict_fmt_chunk"),
            "batch_size": ("conversion", "batch_size"),
            "smoothing_window": ("conversion", "smoothing_window"),
            "container": ("output", "container"),
            "host": ("server", "host"),
            "port": ("server", "port"),
            "log_level": ("logging", "level"),
        }

        for flat_key, (section, nested_key) in flat_mappings.items():
            if flat_key in data:
                if section not in data:
                    data[section] = {}
                data[section][nested_key] = data.pop(flat_key)

        return cls(**data)


def load_config(source: str | Path | dict[str, Any] | ConverterConfig | None = None) -> ConverterConfig:
    """Load a ConverterConfig from any supported source.

    Args:
        source: A YAML file path (str/Path), a dict, an existing
            ConverterConfig, or None for defaults.

    Returns:
        A ConverterConfig instance.
    """
    if source is None:
        return ConverterConfig()
    if isinstance(source, ConverterConfig):
        return source
    if isinstance(source, dict):
        return ConverterConfig.from_dict(source)
    if isinstance(source, (str, Path)):
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        return ConverterConfig.from_yaml(path)
    raise TypeError(f"Cannot load config from {type(source)}")


# Default YAML template for `mulawkit init`
DEFAULT_CONFIG_YAML = """\
# mulawkit configuration

conversion:
  strict_fmt_chunk: false   # reject WAV files whose fmt chunk is not 16 bytes
  batch_size: 4096          # samples encoded between cooperative yields
  smoothing_window: 5       # moving-average length in input frames

output:
  container: raw            # raw | wav
  raw_suffix: .ulaw
  wav_suffix: .ulaw.wav

server:
  host: 0.0.0.0
  port: 8080
  max_upload_bytes: 104857600

logging:
  level: INFO
"""
