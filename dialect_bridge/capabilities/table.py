# dialect_bridge/capabilities/table.py
"""Built-in capability rows for known local model families."""

from types import MappingProxyType

from .models import Dialect, ModelCapabilities, MultiTurnQuality, PromptStyle

_QWEN_CODER = dict(
    supports_tools=True,
    dialect=Dialect.HERMES,
    supports_streaming=True,
    custom_parser_id="qwen3coder",
    prompt_style=PromptStyle.HERMES,
    multi_turn_quality=MultiTurnQuality.GOOD,
)

# Iteration order matters for family matching: earlier rows win ties.
BUILTIN_CAPABILITIES: MappingProxyType[str, ModelCapabilities] = MappingProxyType(
    {
        "qwen2.5-coder:32b": ModelCapabilities(
            **_QWEN_CODER,
            max_tools=64,
            supports_parallel_calls=True,
            context_size_hint=32768,
            timeout_ms=60_000,
        ),
        "qwen2.5-coder:14b": ModelCapabilities(
            **_QWEN_CODER,
            max_tools=32,
            supports_parallel_calls=True,
            context_size_hint=32768,
            timeout_ms=45_000,
        ),
        "qwen2.5-coder:7b": ModelCapabilities(
            **_QWEN_CODER,
            max_tools=16,
            supports_parallel_calls=False,
            timeout_ms=30_000,
        ),
        "qwen3-coder": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.CUSTOM,
            max_tools=32,
            supports_parallel_calls=True,
            supports_streaming=True,
            custom_parser_id="qwen3coder",
            prompt_style=PromptStyle.HERMES,
            multi_turn_quality=MultiTurnQuality.GOOD,
            context_size_hint=65536,
            timeout_ms=60_000,
        ),
        "mistral:latest": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=128,
            supports_parallel_calls=True,
            supports_streaming=False,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.EXCELLENT,
            requires_explicit_tool_choice=True,
            timeout_ms=45_000,
        ),
        "mistral-nemo": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=64,
            supports_parallel_calls=True,
            supports_streaming=False,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.EXCELLENT,
            timeout_ms=35_000,
        ),
        "codestral": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=32,
            supports_parallel_calls=True,
            supports_streaming=False,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.GOOD,
            timeout_ms=30_000,
        ),
        "deepseek-chat": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=128,
            supports_parallel_calls=True,
            supports_streaming=False,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.POOR,
            requires_explicit_tool_choice=True,
            timeout_ms=50_000,
        ),
        "deepseek-reasoner": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=64,
            supports_parallel_calls=True,
            supports_streaming=False,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.POOR,
            version="R1-0528",
            timeout_ms=55_000,
        ),
        "kimi-k2": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=64,
            supports_parallel_calls=True,
            supports_streaming=True,
            prompt_style=PromptStyle.AGENTIC,
            multi_turn_quality=MultiTurnQuality.EXCELLENT,
            context_size_hint=128_000,
            timeout_ms=40_000,
        ),
        "llama3.1:latest": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=32,
            supports_parallel_calls=True,
            supports_streaming=True,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.GOOD,
            timeout_ms=35_000,
        ),
        "llama3.2:latest": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=16,
            supports_parallel_calls=False,
            supports_streaming=True,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.GOOD,
            timeout_ms=30_000,
        ),
        "firefunction-v2": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=64,
            supports_parallel_calls=True,
            supports_streaming=False,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.GOOD,
            timeout_ms=35_000,
        ),
        "command-r-plus": ModelCapabilities(
            supports_tools=True,
            dialect=Dialect.OPENAI,
            max_tools=32,
            supports_parallel_calls=True,
            supports_streaming=False,
            prompt_style=PromptStyle.STANDARD,
            multi_turn_quality=MultiTurnQuality.GOOD,
            timeout_ms=40_000,
        ),
    }
)
