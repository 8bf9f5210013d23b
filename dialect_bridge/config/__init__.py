# dialect_bridge/config/__init__.py
"""Configuration system for dialect-bridge."""

from .loader import env_overrides, get_config_path, load_config
from .schema import BridgeConfig, CapabilityOverride, GenerationDefaults, ValidatorConfig
from .validation import ValidationReport, check_setup, ensure_valid, validate_config

__all__ = [
    "BridgeConfig",
    "CapabilityOverride",
    "GenerationDefaults",
    "ValidatorConfig",
    "ValidationReport",
    "check_setup",
    "ensure_valid",
    "env_overrides",
    "get_config_path",
    "load_config",
    "validate_config",
]
