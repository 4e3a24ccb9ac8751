"""Configuration helpers for the ssage keyword engine and service."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final, Mapping

import yaml
from dotenv import load_dotenv

from .weight import MAX_THRESHOLD, MIN_THRESHOLD

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from .observability import MetricsRecorder

load_dotenv()

_DEFAULT_THRESHOLD: Final[int] = 1
_DEFAULT_TAKE_WORDS_MIN: Final[int] = 3
_DEFAULT_TAKE_WORDS_MAX: Final[int] = 30
_DEFAULT_TAKE_WORDS_PERCENTAGE: Final[int] = 10
_DEFAULT_MIN_WORD_LENGTH: Final[int] = 4
_DEFAULT_LEGACY_WINDOW_FLOOR: Final[bool] = True
_DEFAULT_MAX_CONVERSATIONS: Final[int] = 1024
_DEFAULT_LOG_LEVEL: Final[str] = "INFO"
_DEFAULT_METRICS_NAMESPACE: Final[str] = "ssage"
_DEFAULT_HOST: Final[str] = "127.0.0.1"
_DEFAULT_PORT: Final[int] = 8000


class ConfigurationLoadError(RuntimeError):
    """Raised when a configuration file cannot be interpreted."""


def _env_optional_bool(name: str) -> bool | None:
    """Read an optional boolean environment variable."""

    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    msg = f"Environment variable {name} must be a boolean value (true/false)."
    raise ValueError(msg)


def _env_optional_int(name: str) -> int | None:
    """Read an optional integer environment variable."""

    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {name} must be an integer") from exc


def _env_int(name: str, default: int) -> int:
    value = _env_optional_int(name)
    return default if value is None else value


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable with a fallback."""

    value = _env_optional_bool(name)
    if value is None:
        return default
    return value


@dataclass(slots=True, frozen=True)
class Configuration:
    """Tunable bounds consumed by the keyword engine.

    ``legacy_window_floor`` keeps the historical behaviour of flooring an
    extraction window at ``min_word_length``; disable it to floor at
    ``take_words_min`` instead.
    """

    threshold: int = _DEFAULT_THRESHOLD
    take_words_min: int = _DEFAULT_TAKE_WORDS_MIN
    take_words_max: int = _DEFAULT_TAKE_WORDS_MAX
    take_words_percentage: int = _DEFAULT_TAKE_WORDS_PERCENTAGE
    min_word_length: int = _DEFAULT_MIN_WORD_LENGTH
    legacy_window_floor: bool = _DEFAULT_LEGACY_WINDOW_FLOOR
    history_limit: int | None = None

    def __post_init__(self) -> None:
        if not MIN_THRESHOLD <= self.threshold <= MAX_THRESHOLD:
            msg = f"threshold must be between {MIN_THRESHOLD} and {MAX_THRESHOLD} (got {self.threshold})"
            raise ValueError(msg)
        for name in ("take_words_min", "take_words_max", "take_words_percentage", "min_word_length"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if self.take_words_min > self.take_words_max:
            msg = (
                f"take_words_min ({self.take_words_min}) must not exceed "
                f"take_words_max ({self.take_words_max})"
            )
            raise ValueError(msg)
        if self.history_limit is not None and self.history_limit < 0:
            raise ValueError("history_limit must be non-negative")

    @property
    def window_floor(self) -> int:
        """Smallest window an extraction request is widened to."""

        if self.legacy_window_floor:
            return self.min_word_length
        return self.take_words_min

    @classmethod
    def from_env(cls) -> "Configuration":
        """Create a configuration by reading ``SSAGE_*`` environment variables."""

        return cls(
            threshold=_env_int("SSAGE_THRESHOLD", _DEFAULT_THRESHOLD),
            take_words_min=_env_int("SSAGE_TAKE_WORDS_MIN", _DEFAULT_TAKE_WORDS_MIN),
            take_words_max=_env_int("SSAGE_TAKE_WORDS_MAX", _DEFAULT_TAKE_WORDS_MAX),
            take_words_percentage=_env_int("SSAGE_TAKE_WORDS_PERCENTAGE", _DEFAULT_TAKE_WORDS_PERCENTAGE),
            min_word_length=_env_int("SSAGE_MIN_WORD_LENGTH", _DEFAULT_MIN_WORD_LENGTH),
            legacy_window_floor=_env_bool("SSAGE_LEGACY_WINDOW_FLOOR", _DEFAULT_LEGACY_WINDOW_FLOOR),
            history_limit=_env_optional_int("SSAGE_HISTORY_LIMIT"),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Configuration":
        known = {item.name for item in fields(cls)}
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            raise ConfigurationLoadError(f"Unknown configuration keys: {', '.join(unknown)}")
        try:
            return cls(**dict(data))
        except (TypeError, ValueError) as exc:
            raise ConfigurationLoadError(f"Invalid configuration: {exc}") from exc


def load_configuration(path: str | Path) -> Configuration:
    """Load engine configuration from a YAML mapping; defaults if the file is missing."""

    config_path = Path(path)
    if not config_path.exists():
        return Configuration()

    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigurationLoadError(f"Configuration file {config_path} must contain a mapping")
    return Configuration.from_mapping(data)


@dataclass(slots=True)
class Settings:
    """Runtime settings for the HTTP service, loaded from environment variables."""

    configuration: Configuration = field(default_factory=Configuration)
    configuration_path: str | None = None
    max_conversations: int = _DEFAULT_MAX_CONVERSATIONS
    log_level: str = _DEFAULT_LOG_LEVEL
    observability_metrics_enabled: bool = True
    observability_namespace: str = _DEFAULT_METRICS_NAMESPACE
    observability_prometheus_enabled: bool = False
    host: str = _DEFAULT_HOST
    port: int = _DEFAULT_PORT

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings by reading environment variables."""

        configuration_path = os.getenv("SSAGE_CONFIG_PATH")
        if configuration_path:
            configuration = load_configuration(configuration_path)
        else:
            configuration = Configuration.from_env()

        max_conversations = _env_int("SSAGE_MAX_CONVERSATIONS", _DEFAULT_MAX_CONVERSATIONS)
        if max_conversations < 1:
            raise ValueError("SSAGE_MAX_CONVERSATIONS must be at least 1")

        return cls(
            configuration=configuration,
            configuration_path=configuration_path,
            max_conversations=max_conversations,
            log_level=os.getenv("SSAGE_LOG_LEVEL", _DEFAULT_LOG_LEVEL).strip().upper() or _DEFAULT_LOG_LEVEL,
            observability_metrics_enabled=_env_bool("OBSERVABILITY_METRICS_ENABLED", True),
            observability_namespace=os.getenv("OBSERVABILITY_NAMESPACE", _DEFAULT_METRICS_NAMESPACE),
            observability_prometheus_enabled=_env_bool("OBSERVABILITY_PROMETHEUS_ENABLED", False),
            host=os.getenv("SSAGE_HOST", _DEFAULT_HOST),
            port=_env_int("SSAGE_PORT", _DEFAULT_PORT),
        )

    def build_metrics_recorder(self) -> "MetricsRecorder":
        """Instantiate the configured metrics recorder."""

        from .observability import MetricsRecorder

        return MetricsRecorder(
            enabled=self.observability_metrics_enabled,
            namespace=self.observability_namespace,
            prometheus_enabled=self.observability_prometheus_enabled,
        )


__all__ = [
    "Configuration",
    "ConfigurationLoadError",
    "Settings",
    "load_configuration",
]
