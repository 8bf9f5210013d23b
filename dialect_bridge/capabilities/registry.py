# dialect_bridge/capabilities/registry.py
"""
Capability lookup by model id.

Lookup order:
1. Exact match against the table
2. Canonical match (lower-case, ':'/'@' -> '-', tag suffixes stripped)
3. Normalized match (canonical form with trailing size suffix stripped too)
4. Family match (normalized id contains, or is contained by, a normalized key)
5. All-disabled default

The table is immutable after construction, so a single registry can be shared
by concurrent requests without locking.
"""

import dataclasses
import logging
import re
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from .models import (
    DEFAULT_CAPABILITIES,
    Dialect,
    ModelAnalysis,
    ModelCapabilities,
    MultiTurnQuality,
    PromptStyle,
)
from .table import BUILTIN_CAPABILITIES

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 30_000
HERMES_TOOL_TEMPERATURE = 0.1

_TAG_SUFFIXES = ("-instruct", "-chat", "-latest")
_SIZE_SUFFIX = re.compile(r"-\d+(\.\d+)?[bm]$")


def _strip_tags(name: str) -> str:
    changed = True
    while changed:
        changed = False
        for suffix in _TAG_SUFFIXES:
            if name.endswith(suffix):
                name = name[: -len(suffix)]
                changed = True
    return name


def canonical_model_id(model_id: str) -> str:
    """Lower-case, unify separators and drop -instruct/-chat/-latest tags (size kept)."""
    return _strip_tags(re.sub(r"[:@]", "-", model_id.strip().lower()))


def normalize_model_id(model_id: str) -> str:
    """
    Normalize a model id for family matching.

    Examples:
        "Qwen2.5-Coder:32B-Instruct" -> "qwen2.5-coder"
        "mistral:latest"             -> "mistral"
        "foo-bar:9b"                 -> "foo-bar"
    """
    name = canonical_model_id(model_id)
    while True:
        stripped = _strip_tags(_SIZE_SUFFIX.sub("", name))
        if stripped == name:
            return name
        name = stripped


def _coerce_field(name: str, value: Any) -> Any:
    enums = {
        "dialect": Dialect,
        "prompt_style": PromptStyle,
        "multi_turn_quality": MultiTurnQuality,
    }
    if name in enums and not isinstance(value, enums[name]):
        return enums[name](value)
    return value


def tool_call_options(capabilities: ModelCapabilities) -> dict[str, Any]:
    """
    Backend options a model needs whenever tools are sent.

    `temperature` is an upper bound: callers keep a lower requested value.
    """
    options: dict[str, Any] = {}
    if capabilities.context_size_hint:
        options["num_ctx"] = capabilities.context_size_hint
    if capabilities.requires_explicit_tool_choice:
        options["tool_choice"] = "auto"
    if capabilities.supports_parallel_calls:
        options["parallel_tool_calls"] = True
    if capabilities.dialect is Dialect.HERMES:
        options["temperature"] = HERMES_TOOL_TEMPERATURE
    return options


class CapabilityRegistry:
    """Immutable model-id -> ModelCapabilities lookup. `get` never raises."""

    def __init__(
        self,
        table: Mapping[str, ModelCapabilities] = BUILTIN_CAPABILITIES,
        overrides: Mapping[str, Mapping[str, Any]] | None = None,
    ):
        """
        Build the registry.

        Args:
            table: Base capability rows (iteration order decides family-match ties)
            overrides: Partial rows keyed by model id. Fields not given inherit
                from the table row with the same id, or from the all-disabled
                default for ids the table does not know. New ids are placed
                ahead of the base table so they win family matches.
        """
        rows: dict[str, ModelCapabilities] = {}
        merged = dict(table)
        for model_id, fields in (overrides or {}).items():
            base = merged.get(model_id, DEFAULT_CAPABILITIES)
            values = {k: _coerce_field(k, v) for k, v in fields.items() if v is not None}
            row = dataclasses.replace(base, **values)
            if model_id in merged:
                merged[model_id] = row
            else:
                rows[model_id] = row
        rows.update(merged)

        self._table: MappingProxyType[str, ModelCapabilities] = MappingProxyType(rows)

        canonical: dict[str, ModelCapabilities] = {}
        normalized: dict[str, ModelCapabilities] = {}
        for key, caps in rows.items():
            canonical.setdefault(canonical_model_id(key), caps)
            normalized.setdefault(normalize_model_id(key), caps)
        self._canonical = MappingProxyType(canonical)
        self._normalized = MappingProxyType(normalized)

    @property
    def table(self) -> Mapping[str, ModelCapabilities]:
        return self._table

    def get(self, model_id: str) -> ModelCapabilities:
        """Return capabilities for `model_id`, falling back to tools-disabled defaults."""
        if not model_id:
            return DEFAULT_CAPABILITIES

        if model_id in self._table:
            return self._table[model_id]

        canonical = canonical_model_id(model_id)
        if canonical in self._canonical:
            return self._canonical[canonical]

        normalized = normalize_model_id(model_id)
        if not normalized:
            return DEFAULT_CAPABILITIES
        if normalized in self._normalized:
            return self._normalized[normalized]

        for key, caps in self._normalized.items():
            if key and (key in normalized or normalized in key):
                return caps

        logger.debug(f"Unknown model {model_id!r}; tool calling disabled")
        return DEFAULT_CAPABILITIES

    def supports_tools(self, model_id: str) -> bool:
        return self.get(model_id).supports_tools

    def recommended_timeout_ms(self, model_id: str) -> int:
        return self.get(model_id).timeout_ms or DEFAULT_TIMEOUT_MS

    def recommended_options(self, model_id: str) -> dict[str, Any]:
        """Backend options that tend to improve tool calling for this model."""
        return tool_call_options(self.get(model_id))

    def analyze(self, model_id: str) -> ModelAnalysis:
        """Summarize strengths and limitations for diagnostics output."""
        caps = self.get(model_id)
        analysis = ModelAnalysis(model_id=model_id, capabilities=caps)

        if not caps.supports_tools:
            analysis.limitations.append("Model does not support tool calling")
            analysis.recommendations.append("Consider using a model with tool calling support")
            return analysis

        if caps.max_tools >= 32:
            analysis.recommendations.append("Model supports a good number of tools")
        else:
            analysis.limitations.append(f"Limited to {caps.max_tools} tools")
            analysis.recommendations.append("Prioritize the most essential tools")

        if caps.supports_parallel_calls:
            analysis.best_practices.append("Can execute multiple tools in one turn")
        else:
            analysis.limitations.append("No parallel tool execution")
            analysis.best_practices.append("Design sequential tool workflows")

        if not caps.supports_streaming:
            analysis.limitations.append("Tool calls cannot be streamed")

        if caps.multi_turn_quality is MultiTurnQuality.POOR:
            analysis.limitations.append("Poor multi-turn tool calling support")
            analysis.best_practices.append("Complete tasks in single comprehensive responses")

        style_practices = {
            PromptStyle.HERMES: "Use clear step-by-step reasoning before tool calls",
            PromptStyle.AGENTIC: "Leverage autonomous task orchestration capabilities",
            PromptStyle.STANDARD: "Use standard function calling patterns",
        }
        analysis.best_practices.append(style_practices[caps.prompt_style])
        return analysis
