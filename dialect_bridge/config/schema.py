# dialect_bridge/config/schema.py
"""
Pydantic configuration models for dialect-bridge.

All models use extra="ignore" to allow unknown YAML keys without crashing.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class GenerationDefaults(BaseModel):
    """Generation options applied when a request does not set them."""

    model_config = ConfigDict(extra="ignore")

    temperature: float = Field(default=0.7, description="Sampling temperature")
    top_p: float = Field(default=0.9, description="Nucleus sampling probability mass")
    max_tokens: int = Field(default=4096, description="Maximum tokens to generate")
    system_prompt: str = Field(
        default="", description="System prompt used when a request carries none"
    )
    custom_options: dict[str, Any] = Field(
        default_factory=dict,
        description="Extra backend options (lowest precedence, e.g. num_ctx, seed)",
    )
    augment_user_message: bool = Field(
        default=False,
        description="Reframe the last user message for agentic and poor multi-turn models",
    )


class ValidatorConfig(BaseModel):
    """Response validation heuristics."""

    model_config = ConfigDict(extra="ignore")

    poor_multi_turn_heuristic: bool = Field(
        default=True,
        description="Drop calls whose names look like follow-ups for poor multi-turn models",
    )
    suspicious_name_tokens: list[str] = Field(
        default_factory=lambda: ["follow", "next"],
        description="Name fragments treated as hallucinated follow-up calls",
    )


class CapabilityOverride(BaseModel):
    """Partial capability row; unset fields inherit from the built-in table."""

    model_config = ConfigDict(extra="ignore")

    supports_tools: bool | None = None
    dialect: Literal["openai", "hermes", "custom"] | None = None
    max_tools: int | None = Field(default=None, ge=0)
    supports_parallel_calls: bool | None = None
    supports_streaming: bool | None = None
    prompt_style: Literal["standard", "hermes", "agentic"] | None = None
    multi_turn_quality: Literal["excellent", "good", "poor"] | None = None
    custom_parser_id: str | None = None
    timeout_ms: int | None = Field(default=None, gt=0)
    context_size_hint: int | None = Field(default=None, gt=0)
    requires_explicit_tool_choice: bool | None = None
    version: str | None = None


class BridgeConfig(BaseModel):
    """Root configuration for dialect-bridge."""

    model_config = ConfigDict(extra="ignore")

    base_url: str = Field(
        default="http://localhost:11434", description="Backend server base URL"
    )
    api_prefix: str = Field(default="/api", description="Path prefix for API routes")
    default_model: str = Field(
        default="qwen2.5-coder:32b", description="Model used when none is given"
    )
    timeout_ms: int = Field(default=120_000, description="Per-attempt request timeout in ms")
    max_retries: int = Field(default=3, description="Retries after the first attempt")
    backoff_base_ms: int = Field(default=1000, ge=0, description="First retry wait in ms")
    backoff_cap_ms: int = Field(default=10_000, ge=0, description="Maximum retry wait in ms")
    connection_test_enabled: bool = Field(
        default=True, description="Probe the server during setup checks"
    )
    generation: GenerationDefaults = Field(default_factory=GenerationDefaults)
    validator: ValidatorConfig = Field(default_factory=ValidatorConfig)
    capability_overrides: dict[str, CapabilityOverride] = Field(
        default_factory=dict,
        description="Per-model capability rows replacing or extending the built-in table",
    )
