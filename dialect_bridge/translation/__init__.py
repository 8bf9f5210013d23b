# dialect_bridge/translation/__init__.py
"""Tool translation, prompt augmentation, response validation and orchestration."""

from .dialects import DialectStrategy, resolve_dialect, sanitize_description
from .orchestrator import PreparedRequest, TranslationOrchestrator
from .prompts import PromptAugmenter
from .tools import ToolTranslation, ToolTranslator
from .validator import (
    RawResponse,
    ResponseValidator,
    ValidationResult,
    ValidatorSettings,
    parse_frame,
)

__all__ = [
    "DialectStrategy",
    "PreparedRequest",
    "PromptAugmenter",
    "RawResponse",
    "ResponseValidator",
    "ToolTranslation",
    "ToolTranslator",
    "TranslationOrchestrator",
    "ValidationResult",
    "ValidatorSettings",
    "parse_frame",
    "resolve_dialect",
    "sanitize_description",
]
