# dialect_bridge/backend/factory.py
"""Factories building configured components from BridgeConfig."""

from dialect_bridge.capabilities import CapabilityRegistry
from dialect_bridge.config.schema import BridgeConfig
from dialect_bridge.translation.orchestrator import TranslationOrchestrator
from dialect_bridge.translation.validator import ResponseValidator, ValidatorSettings

from .client import Transport
from .discovery import ModelDiscovery


def create_transport(config: BridgeConfig) -> Transport:
    return Transport(
        base_url=config.base_url,
        api_prefix=config.api_prefix,
        timeout_ms=config.timeout_ms,
        max_retries=config.max_retries,
        backoff_base_ms=config.backoff_base_ms,
        backoff_cap_ms=config.backoff_cap_ms,
    )


def create_registry(config: BridgeConfig) -> CapabilityRegistry:
    """Built-in capability table with the config's overrides applied."""
    overrides = {
        model_id: override.model_dump(exclude_none=True)
        for model_id, override in config.capability_overrides.items()
    }
    return CapabilityRegistry(overrides=overrides)


def create_discovery(config: BridgeConfig) -> ModelDiscovery:
    return ModelDiscovery(base_url=config.base_url)


def create_orchestrator(
    config: BridgeConfig, transport: Transport | None = None
) -> TranslationOrchestrator:
    """
    Create a ready-to-use orchestrator.

    Args:
        config: Root BridgeConfig
        transport: Optional pre-built transport (defaults to one built from config)

    Returns:
        TranslationOrchestrator sharing one registry for all its calls
    """
    settings = ValidatorSettings(
        poor_multi_turn_heuristic=config.validator.poor_multi_turn_heuristic,
        suspicious_name_tokens=tuple(config.validator.suspicious_name_tokens),
    )
    return TranslationOrchestrator(
        transport=transport or create_transport(config),
        registry=create_registry(config),
        generation=config.generation,
        validator=ResponseValidator(settings),
    )
