# dialect_bridge/config/loader.py
"""
Configuration loading with auto-creation of defaults.

Uses platformdirs for cross-platform config directory management.
Precedence (highest first): explicit overrides, environment, YAML file, defaults.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from platformdirs import user_config_path

from .schema import BridgeConfig

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}

# env var -> (config path, converter)
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], type]] = {
    "OLLAMA_BASE_URL": (("base_url",), str),
    "OLLAMA_MODEL": (("default_model",), str),
    "OLLAMA_TIMEOUT": (("timeout_ms",), int),
    "OLLAMA_TEMPERATURE": (("generation", "temperature"), float),
    "OLLAMA_TOP_P": (("generation", "top_p"), float),
    "OLLAMA_MAX_TOKENS": (("generation", "max_tokens"), int),
}


def get_config_path() -> Path:
    """Get path to config file, ensuring config directory exists."""
    config_dir = user_config_path("dialect-bridge", ensure_exists=True)
    return config_dir / "config.yaml"


def _deep_merge(base: dict[str, Any], updates: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _set_path(data: dict[str, Any], path: tuple[str, ...], value: Any) -> None:
    for key in path[:-1]:
        data = data.setdefault(key, {})
    data[path[-1]] = value


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """
    Collect config values from OLLAMA_* environment variables.

    Unparseable values are logged and ignored.
    """
    environ = os.environ if environ is None else environ
    result: dict[str, Any] = {}
    for name, (path, convert) in ENV_OVERRIDES.items():
        raw = environ.get(name)
        if raw is None or raw.strip() == "":
            continue
        try:
            value = convert(raw.strip())
        except ValueError:
            logger.warning(f"Ignoring invalid {name}={raw!r}")
            continue
        _set_path(result, path, value)

    skip = environ.get("OLLAMA_SKIP_CONNECTION_TEST")
    if skip is not None and skip.strip():
        result["connection_test_enabled"] = skip.strip().lower() not in _TRUE_VALUES
    return result


def load_config(
    path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> BridgeConfig:
    """
    Load configuration from YAML file.

    If the config file doesn't exist, creates it with defaults. Environment
    variables and explicit overrides are layered on top.

    Args:
        path: Config file (defaults to the per-user config location)
        overrides: Explicit values, e.g. from CLI flags
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Validated BridgeConfig
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        default_config = BridgeConfig()
        config_dict = default_config.model_dump(mode="json")

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Created default config at {config_path}")
        file_data: dict[str, Any] = {}
    else:
        with config_path.open("r") as f:
            file_data = yaml.safe_load(f) or {}
        logger.info(f"Loaded config from {config_path}")

    data = _deep_merge(file_data, env_overrides(environ))
    data = _deep_merge(data, overrides or {})
    return BridgeConfig(**data)
