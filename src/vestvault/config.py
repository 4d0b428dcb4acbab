"""
vestvault Configuration

Loads settings with this precedence (highest first):
1. Explicit overrides passed by the caller (CLI flags)
2. Environment variables (VESTVAULT_SECTION_KEY), after loading a .env file
3. YAML config file
4. Built-in defaults
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "VESTVAULT_"
CONFIG_PATH_ENV = "VESTVAULT_CONFIG"


class Environment(Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


@dataclass
class EngineConfig:
    """Ledger identity of the engine and its privileged owner."""
    address: str = "vestvault"
    owner: str = ""

    def validate(self):
        if not self.address:
            raise ConfigurationError("engine.address cannot be empty")


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = ""
    json_format: bool = True

    def validate(self):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise ConfigurationError(f"Invalid log level: {self.level}. Must be one of {valid_levels}")


@dataclass
class MetricsConfig:
    enabled: bool = True


@dataclass
class VestVaultConfig:
    environment: Environment = Environment.DEVELOPMENT
    engine: EngineConfig = field(default_factory=EngineConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    def validate(self):
        self.engine.validate()
        self.logging.validate()
        if self.environment is Environment.PRODUCTION and not self.engine.owner:
            raise ConfigurationError("engine.owner is required in production")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["environment"] = self.environment.value
        return data


_SECTIONS = {
    "engine": EngineConfig,
    "logging": LoggingConfig,
    "metrics": MetricsConfig,
}


def _parse_value(raw: Any, default: Any, key: str) -> Any:
    """Coerce ``raw`` to the type of the field's default."""
    if isinstance(default, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in ("true", "yes", "1", "on"):
            return True
        if text in ("false", "no", "0", "off"):
            return False
        raise ConfigurationError(f"Invalid boolean for {key}: {raw!r}")
    if isinstance(default, int):
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid integer for {key}: {raw!r}") from exc
    return "" if raw is None else str(raw)


def _parse_environment(value: Optional[str]) -> Environment:
    mapping = {
        "dev": Environment.DEVELOPMENT,
        "development": Environment.DEVELOPMENT,
        "staging": Environment.STAGING,
        "stage": Environment.STAGING,
        "prod": Environment.PRODUCTION,
        "production": Environment.PRODUCTION,
    }
    env = mapping.get((value or "development").strip().lower())
    if env is None:
        raise ConfigurationError(f"Unknown environment: {value}")
    return env


def _load_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides() -> Dict[str, Dict[str, str]]:
    """Collects VESTVAULT_SECTION_KEY variables into {section: {key: value}}."""
    result: Dict[str, Dict[str, str]] = {}
    for name, value in os.environ.items():
        if not name.startswith(ENV_PREFIX) or name in (CONFIG_PATH_ENV, "VESTVAULT_ENVIRONMENT"):
            continue
        parts = name[len(ENV_PREFIX):].lower().split("_", 1)
        if len(parts) != 2 or parts[0] not in _SECTIONS:
            continue
        result.setdefault(parts[0], {})[parts[1]] = value
    return result


def _build_section(name: str, raw: Dict[str, Any]) -> Any:
    cls = _SECTIONS[name]
    defaults = cls()
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigurationError(f"Unknown {name} settings: {sorted(unknown)}")
    values = {key: _parse_value(value, getattr(defaults, key), f"{name}.{key}") for key, value in raw.items()}
    return cls(**values)


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    load_env_file: bool = True,
) -> VestVaultConfig:
    """
    Builds a validated configuration.

    Args:
        path: YAML file; falls back to $VESTVAULT_CONFIG when omitted
        overrides: dotted keys such as {"logging.level": "DEBUG"}
        load_env_file: read a .env file into the environment first

    Raises:
        ConfigurationError: unreadable file, unknown keys or invalid values
    """
    if load_env_file:
        load_dotenv()

    config_path = path or os.getenv(CONFIG_PATH_ENV, "").strip()
    raw: Dict[str, Any] = _load_file(Path(config_path)) if config_path else {}

    environment = os.getenv("VESTVAULT_ENVIRONMENT") or raw.pop("environment", None)
    raw.pop("environment", None)
    unknown = set(raw) - set(_SECTIONS)
    if unknown:
        raise ConfigurationError(f"Unknown config sections: {sorted(unknown)}")

    merged: Dict[str, Dict[str, Any]] = {name: dict(raw.get(name) or {}) for name in _SECTIONS}
    for section, values in _env_overrides().items():
        merged[section].update(values)

    for dotted, value in (overrides or {}).items():
        if dotted == "environment":
            environment = value
            continue
        section, _, key = dotted.partition(".")
        if section not in _SECTIONS or not key:
            raise ConfigurationError(f"Invalid override key: {dotted}")
        merged[section][key] = value

    config = VestVaultConfig(
        environment=_parse_environment(environment),
        engine=_build_section("engine", merged["engine"]),
        logging=_build_section("logging", merged["logging"]),
        metrics=_build_section("metrics", merged["metrics"]),
    )
    config.validate()
    logger.debug("Configuration loaded", extra={"event": "config.loaded", "config_path": config_path or None})
    return config
