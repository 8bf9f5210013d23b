# dialect_bridge/translation/dialects.py
"""
Per-dialect tool translation strategies.

Each strategy knows how one model family wants tools described and which
artifacts in its output are known to be bogus. Strategies are selected by the
capability's dialect tag; the custom dialect sub-dispatches by parser id.
Adding a dialect means registering a new strategy, not editing existing ones.
"""

import copy
import re
from typing import Any

from dialect_bridge.capabilities import Dialect, ModelCapabilities
from dialect_bridge.types import CanonicalTool

PLACEHOLDER_DESCRIPTION = "No description provided"
DEFAULT_DESCRIPTION_LIMIT = 500
CUSTOM_DESCRIPTION_LIMIT = 200
USAGE_PHRASE_LIMIT = 60

_BLANK_LINES = re.compile(r"\n\s*\n")
_WRAPPER_KEYS = ("parameters", "arguments")


def sanitize_description(text: str | None, max_length: int = DEFAULT_DESCRIPTION_LIMIT) -> str:
    """
    Clean a tool description for model consumption.

    Strips angle brackets, collapses blank lines, trims, and truncates to
    `max_length` (ellipsis included). Empty input becomes a fixed placeholder.
    """
    cleaned = (text or "").replace("<", "").replace(">", "")
    cleaned = _BLANK_LINES.sub("\n", cleaned).strip()
    if not cleaned:
        return PLACEHOLDER_DESCRIPTION
    if len(cleaned) > max_length:
        cleaned = cleaned[: max(max_length - 3, 0)].rstrip() + "..."
        cleaned = cleaned[:max_length]
    return cleaned


def _usage_phrase(description: str) -> str:
    """First line of the description as a lower-cased verb phrase, bounded in length."""
    lines = description.strip().rstrip(".").splitlines()
    phrase = lines[0].strip().rstrip(".") if lines else ""
    if len(phrase) > USAGE_PHRASE_LIMIT:
        cut = phrase[:USAGE_PHRASE_LIMIT]
        phrase = (cut.rsplit(" ", 1)[0] if " " in cut else cut).rstrip(" ,;:.")
    if not phrase:
        return "perform this action"
    return phrase[:1].lower() + phrase[1:]


class DialectStrategy:
    """OpenAI-compatible function schema; the base every other dialect builds on."""

    name = "openai"
    description_limit = DEFAULT_DESCRIPTION_LIMIT
    rejects_markup_names = False

    def usage_hint(self, description: str) -> str:
        """Text appended to the sanitized description; empty for none."""
        return ""

    def convert_properties(self, properties: dict[str, Any]) -> dict[str, Any]:
        return properties

    def translate_tool(self, tool: CanonicalTool) -> dict[str, Any]:
        """Map a canonical tool to this dialect's tool schema."""
        description = sanitize_description(tool.description, self.description_limit)
        hint = "" if description == PLACEHOLDER_DESCRIPTION else self.usage_hint(description)
        if hint:
            # the base gives up room so the hint is never truncated away
            room = max(self.description_limit - len(hint), 0)
            base = sanitize_description(tool.description, room)
            description = sanitize_description(base + hint, self.description_limit)

        schema = tool.parameter_schema or {}
        properties = copy.deepcopy(schema.get("properties") or {})
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": description,
                "parameters": {
                    "type": "object",
                    "properties": self.convert_properties(properties),
                    "required": list(schema.get("required") or []),
                },
            },
        }

    def unwrap_arguments(self, args: dict[str, Any]) -> dict[str, Any]:
        """Undo argument wrapping the dialect is known to produce."""
        return args

    def is_suspicious_name(self, name: str) -> bool:
        return self.rejects_markup_names and ("<" in name or ">" in name)


class OpenAIDialect(DialectStrategy):
    pass


class _UnwrapsArguments:
    def unwrap_arguments(self, args: dict[str, Any]) -> dict[str, Any]:
        # {"parameters": {...}} or {"arguments": {...}} as the sole key
        if len(args) == 1:
            key = next(iter(args))
            if key in _WRAPPER_KEYS and isinstance(args[key], dict):
                return args[key]
        return args


class HermesDialect(_UnwrapsArguments, DialectStrategy):
    """Hermes-style models want explicit usage hints and labelled parameters."""

    name = "hermes"

    def usage_hint(self, description: str) -> str:
        return f"\n\nUse this tool when you need to {_usage_phrase(description)}."

    def convert_properties(self, properties: dict[str, Any]) -> dict[str, Any]:
        for prop in properties.values():
            if isinstance(prop, dict) and prop.get("description"):
                text = str(prop["description"])
                if not text.startswith("Parameter:"):
                    prop["description"] = f"Parameter: {text}"
        return properties


class CustomFallbackDialect(OpenAIDialect):
    """Custom dialect with an unrecognized parser: OpenAI mapping, custom limits."""

    name = "custom"
    description_limit = CUSTOM_DESCRIPTION_LIMIT
    rejects_markup_names = True


class QwenCoderDialect(_UnwrapsArguments, DialectStrategy):
    """Qwen coder parser: terse descriptions with step-by-step guidance."""

    name = "qwen3coder"
    description_limit = CUSTOM_DESCRIPTION_LIMIT
    rejects_markup_names = True

    def usage_hint(self, description: str) -> str:
        return (
            "\n\n"
            f"Usage: Call this function when you need to {_usage_phrase(description)}.\n"
            f"Think step by step before calling this function."
        )


class QwenHermesDialect(HermesDialect):
    """Hermes schema for models whose output goes through the qwen coder parser."""

    name = "hermes+qwen3coder"
    rejects_markup_names = True


CUSTOM_PARSERS: dict[str, DialectStrategy] = {
    "qwen3coder": QwenCoderDialect(),
}

DIALECTS: dict[Dialect, DialectStrategy] = {
    Dialect.OPENAI: OpenAIDialect(),
    Dialect.HERMES: HermesDialect(),
    Dialect.CUSTOM: CustomFallbackDialect(),
}

_QWEN_HERMES = QwenHermesDialect()


def resolve_dialect(capabilities: ModelCapabilities) -> DialectStrategy:
    """Pick the strategy for a capability row."""
    if capabilities.dialect is Dialect.CUSTOM:
        return CUSTOM_PARSERS.get(capabilities.custom_parser_id or "", DIALECTS[Dialect.CUSTOM])
    if capabilities.dialect is Dialect.HERMES and capabilities.custom_parser_id == "qwen3coder":
        return _QWEN_HERMES
    return DIALECTS[capabilities.dialect]
