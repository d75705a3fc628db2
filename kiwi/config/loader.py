"""YAML config loader with environment overrides and runtime get/set."""

import hashlib
import json
import os
from pathlib import Path
from typing import Any

import yaml

from kiwi.config.schema import KiwiConfig
from kiwi.ingest.owm_client import API_KEY_ENV


class ConfigError(ValueError):
    """The config file is not a YAML mapping of sections."""


def load_config(path: str | Path) -> KiwiConfig:
    """Load and validate config from a YAML file.

    A missing or empty file yields the defaults, as does an empty section
    such as a bare ``api:`` line. ``KIWI_API_KEY`` in the environment takes
    precedence over ``api.api_key``.
    """
    path = Path(path)
    raw: dict[str, Any] = {}
    if path.exists():
        with open(path) as f:
            loaded = yaml.safe_load(f)
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"Config root must be a mapping: {path}")
        raw = {
            section: {} if value is None else value
            for section, value in (loaded or {}).items()
        }

    env_key = os.environ.get(API_KEY_ENV)
    if env_key:
        api = raw.get("api") or {}
        if not isinstance(api, dict):
            raise ConfigError(f"Config section 'api' must be a mapping: {path}")
        raw["api"] = {**api, "api_key": env_key}

    return KiwiConfig(**raw)


def config_hash(config: KiwiConfig) -> str:
    """Compute a deterministic SHA256 hash of the config, ignoring the API key."""
    data = config.model_dump_json(indent=None, exclude={"api": {"api_key"}})
    return hashlib.sha256(data.encode()).hexdigest()[:16]


def save_config(config: KiwiConfig, path: str | Path) -> None:
    """Write config back to YAML.

    A key that came from ``KIWI_API_KEY`` is not written to the file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = json.loads(config.model_dump_json())
    env_key = os.environ.get(API_KEY_ENV)
    if not data["api"]["api_key"] or data["api"]["api_key"] == env_key:
        data["api"].pop("api_key")
    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)


def get_config_value(config: KiwiConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'notifications.daily_hour'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: KiwiConfig, dotted_key: str, value: Any) -> KiwiConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new KiwiConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        if part not in target:
            raise KeyError(f"Config key not found: {dotted_key}")
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    # Attempt type coercion for common cases
    old_value = target.get(parts[-1])
    if isinstance(value, str):
        if isinstance(old_value, bool):
            value = _parse_bool(value)
        elif isinstance(old_value, int):
            value = int(value)
        elif isinstance(old_value, float):
            value = float(value)
    target[parts[-1]] = value
    return KiwiConfig(**data)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("true", "yes", "on", "1"):
        return True
    if lowered in ("false", "no", "off", "0"):
        return False
    raise ValueError(f"Not a boolean: {value!r}")
