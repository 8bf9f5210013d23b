# dialect_bridge/capabilities/__init__.py
"""Model capability detection."""

from .models import (
    DEFAULT_CAPABILITIES,
    Dialect,
    ModelAnalysis,
    ModelCapabilities,
    MultiTurnQuality,
    PromptStyle,
)
from .registry import (
    CapabilityRegistry,
    canonical_model_id,
    normalize_model_id,
    tool_call_options,
)
from .table import BUILTIN_CAPABILITIES

__all__ = [
    "BUILTIN_CAPABILITIES",
    "CapabilityRegistry",
    "DEFAULT_CAPABILITIES",
    "Dialect",
    "ModelAnalysis",
    "ModelCapabilities",
    "MultiTurnQuality",
    "PromptStyle",
    "canonical_model_id",
    "normalize_model_id",
    "tool_call_options",
]
