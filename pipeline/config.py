"""Configuration management for the scaffold pipeline.

Loads configuration from:
1. config.toml (defaults)
2. Environment variables (overrides)
"""

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class PollingConfig:
    """Completion wait for the external scaffold tool."""

    marker_file: str = "package.json"
    max_wait_ms: int = 180_000
    poll_interval_ms: int = 2_000
    progress_every_ms: int = 10_000  # "still creating" cadence
    stabilize_ms: int = 500  # re-check delay once the marker appears


@dataclass
class PipelineConfig:
    """Pipeline execution configuration."""

    log_level: str = "INFO"
    error_detail_limit: int = 200  # max chars of a stage error in progress events


@dataclass
class QualityGateConfig:
    """Static checks run by the quality gate stage."""

    checks: list[str] = field(default_factory=lambda: ["tsc", "eslint", "build"])
    timeout: int = 300  # seconds per check


@dataclass
class EventLogConfig:
    """Event log persistence."""

    jsonl_path: str = ""  # empty = in-memory only


@dataclass
class LocalStorageConfig:
    """Local git versioning of pipeline stages."""

    auto_commit: bool = True
    commit_prefix: str = "[scaffold]"


@dataclass
class Config:
    """Main configuration container."""

    polling: PollingConfig = field(default_factory=PollingConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    quality_gate: QualityGateConfig = field(default_factory=QualityGateConfig)
    event_log: EventLogConfig = field(default_factory=EventLogConfig)
    local_storage: LocalStorageConfig = field(default_factory=LocalStorageConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        return cls(
            polling=PollingConfig(**data.get("polling", {})),
            pipeline=PipelineConfig(**data.get("pipeline", {})),
            quality_gate=QualityGateConfig(**data.get("quality_gate", {})),
            event_log=EventLogConfig(**data.get("event_log", {})),
            local_storage=LocalStorageConfig(**data.get("local_storage", {})),
        )


def find_config_file() -> Path | None:
    """Find config.toml in current or parent directories.

    Returns:
        Path to config.toml or None if not found.
    """
    current = Path.cwd()

    for directory in [current, *current.parents]:
        config_path = directory / "config.toml"
        if config_path.exists():
            return config_path

    return None


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from file and environment.

    Args:
        config_path: Optional explicit path to config.toml

    Returns:
        Config object with merged settings.
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        config_path = find_config_file()

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path, "rb") as f:
                config_data = tomllib.load(f)

    env_overrides = {
        "polling": {
            "marker_file": os.getenv("SCAFFOLD_MARKER_FILE"),
            "max_wait_ms": _int_or_none(os.getenv("SCAFFOLD_MAX_WAIT_MS")),
            "poll_interval_ms": _int_or_none(os.getenv("SCAFFOLD_POLL_INTERVAL_MS")),
        },
        "pipeline": {
            "log_level": os.getenv("LOG_LEVEL"),
        },
        "event_log": {
            "jsonl_path": os.getenv("SCAFFOLD_EVENT_LOG"),
        },
    }

    # Merge env overrides (only non-None values)
    for section, values in env_overrides.items():
        if section not in config_data:
            config_data[section] = {}
        for key, value in values.items():
            if value is not None:
                config_data[section][key] = value

    return Config.from_dict(config_data)


def _int_or_none(value: str | None) -> int | None:
    """Convert string to int, or return None."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config object (loaded once, cached).
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config() -> Config:
    """Force reload of configuration.

    Returns:
        Freshly loaded Config object.
    """
    global _config
    _config = load_config()
    return _config
