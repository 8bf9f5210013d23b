# dialect_bridge/config/validation.py
"""Configuration sanity checks, with optional live checks against the server."""

import logging
from dataclasses import dataclass, field
from urllib.parse import urlparse

from dialect_bridge.backend.discovery import ModelDiscovery
from dialect_bridge.errors import ConfigurationError, ConnectivityError

from .schema import BridgeConfig

logger = logging.getLogger(__name__)

LONG_SYSTEM_PROMPT_CHARS = 10_000


@dataclass
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def validate_config(config: BridgeConfig) -> ValidationReport:
    """Check settings without touching the network."""
    report = ValidationReport()

    parsed = urlparse(config.base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        report.errors.append(
            f"Invalid base_url {config.base_url!r}: must be an http:// or https:// URL"
        )

    if not config.default_model.strip():
        report.errors.append("default_model cannot be empty")

    if config.timeout_ms <= 0:
        report.errors.append("timeout_ms must be positive")
    elif config.timeout_ms < 5000:
        report.warnings.append(
            f"timeout_ms={config.timeout_ms} is short; local models may need longer to load"
        )

    if config.max_retries < 0:
        report.errors.append("max_retries cannot be negative")
    elif config.max_retries > 10:
        report.warnings.append(f"max_retries={config.max_retries} may cause long delays")

    if config.backoff_cap_ms < config.backoff_base_ms:
        report.warnings.append("backoff_cap_ms is below backoff_base_ms; every wait is capped")

    gen = config.generation
    if not 0.0 <= gen.temperature <= 2.0:
        report.errors.append("generation.temperature must be between 0 and 2")
    if not 0.0 <= gen.top_p <= 1.0:
        report.errors.append("generation.top_p must be between 0 and 1")
    if gen.max_tokens < 1:
        report.errors.append("generation.max_tokens must be at least 1")
    if len(gen.system_prompt) > LONG_SYSTEM_PROMPT_CHARS:
        report.warnings.append("generation.system_prompt is very long and may reduce performance")

    return report


def ensure_valid(config: BridgeConfig) -> BridgeConfig:
    """
    Raise on invalid configuration; log warnings.

    Raises:
        ConfigurationError: Listing every error found
    """
    report = validate_config(config)
    for warning in report.warnings:
        logger.warning(warning)
    if report.errors:
        raise ConfigurationError(
            "Invalid configuration: " + "; ".join(report.errors),
            details={"errors": report.errors},
        )
    return config


async def check_setup(
    config: BridgeConfig, discovery: ModelDiscovery | None = None
) -> ValidationReport:
    """
    Static validation plus a connection test and model availability check.

    The live checks are skipped when the static checks fail or
    connection_test_enabled is off.
    """
    report = validate_config(config)
    if not report.is_valid or not config.connection_test_enabled:
        return report

    discovery = discovery or ModelDiscovery(config.base_url)
    try:
        available = await discovery.is_model_available(config.default_model)
    except ConnectivityError as e:
        report.errors.append(f"Cannot connect to {config.base_url}: {e.hint}")
        return report

    if not available:
        report.errors.append(
            f"Model {config.default_model!r} is not installed. "
            f"Run: ollama pull {config.default_model}"
        )
    return report
