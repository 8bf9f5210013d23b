# dialect_bridge/capabilities/models.py
"""Capability value types: what a backend model can do with tools and how to prompt it."""

from dataclasses import dataclass, field
from enum import Enum


class Dialect(Enum):
    """Tool-calling JSON shape a model family expects."""

    OPENAI = "openai"
    HERMES = "hermes"
    CUSTOM = "custom"


class PromptStyle(Enum):
    STANDARD = "standard"
    HERMES = "hermes"
    AGENTIC = "agentic"


class MultiTurnQuality(Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    POOR = "poor"


@dataclass(frozen=True)
class ModelCapabilities:
    """
    Tool-calling capabilities of one model family.

    Looked up per request and never mutated, so instances behave as values.
    """

    supports_tools: bool
    dialect: Dialect = Dialect.OPENAI
    max_tools: int = 0
    supports_parallel_calls: bool = False
    supports_streaming: bool = False
    prompt_style: PromptStyle = PromptStyle.STANDARD
    multi_turn_quality: MultiTurnQuality = MultiTurnQuality.POOR
    custom_parser_id: str | None = None
    timeout_ms: int | None = None
    context_size_hint: int | None = None
    requires_explicit_tool_choice: bool = False
    version: str | None = None

    def __post_init__(self) -> None:
        if self.max_tools < 0:
            raise ValueError(f"max_tools must be >= 0, got {self.max_tools}")


DEFAULT_CAPABILITIES = ModelCapabilities(supports_tools=False)


@dataclass
class ModelAnalysis:
    """Human-oriented summary of a model's tool-calling fitness."""

    model_id: str
    capabilities: ModelCapabilities
    recommendations: list[str] = field(default_factory=list)
    limitations: list[str] = field(default_factory=list)
    best_practices: list[str] = field(default_factory=list)
