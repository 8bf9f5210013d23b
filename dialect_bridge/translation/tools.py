# dialect_bridge/translation/tools.py
"""Canonical tool list -> dialect tool schemas, within each model's limits."""

from dataclasses import dataclass, field
from typing import Any

from dialect_bridge.capabilities import ModelCapabilities
from dialect_bridge.types import CanonicalTool

from .dialects import resolve_dialect


@dataclass
class ToolTranslation:
    translated: list[dict[str, Any]] = field(default_factory=list)
    invalid: list[CanonicalTool] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    offered: int = 0  # callable tools before truncation


def has_callable_shape(tool: CanonicalTool) -> bool:
    return bool(tool.name) and isinstance(tool.parameter_schema, dict)


class ToolTranslator:
    """Converts canonical tools into the dialect a model expects."""

    def translate(
        self, tools: list[CanonicalTool], capabilities: ModelCapabilities
    ) -> ToolTranslation:
        """
        Translate tools for one model.

        Tools without a callable shape are rejected into `invalid`. The
        remaining list is truncated to `capabilities.max_tools` in its
        original order, then mapped by the dialect strategy.

        Returns:
            ToolTranslation whose `translated` never exceeds max_tools
        """
        result = ToolTranslation()
        if not capabilities.supports_tools:
            if tools:
                result.warnings.append(
                    f"Model does not support tool calling; {len(tools)} tool(s) not sent"
                )
            else:
                result.warnings.append("Model does not support tool calling")
            return result

        callable_tools = []
        for tool in tools:
            if has_callable_shape(tool):
                callable_tools.append(tool)
            else:
                result.invalid.append(tool)
                result.warnings.append(
                    f"Tool {tool.name or '<unnamed>'!r} has no callable declaration; skipped"
                )
        result.offered = len(callable_tools)

        limited = callable_tools[: capabilities.max_tools]
        if len(callable_tools) > len(limited):
            dropped = len(callable_tools) - len(limited)
            result.warnings.append(
                f"Model supports max {capabilities.max_tools} tools, got {len(callable_tools)}. "
                f"Truncated {dropped} tool(s)."
            )

        strategy = resolve_dialect(capabilities)
        result.translated = [strategy.translate_tool(tool) for tool in limited]
        return result
