# dialect_bridge/translation/validator.py
"""
Backend response validation and conversion to the canonical shape.

Tool calls emitted by a model are untrusted. Each one passes three checks in
order and is dropped at the first failure:

1. Existence: the name must be a registered tool
2. Argument shape: arguments must be (or parse to) a JSON object
3. Dialect heuristics: known artifacts of specific model families

Drops are reported through TranslationStats, never raised.
"""

import copy
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from dialect_bridge.capabilities import ModelCapabilities, MultiTurnQuality
from dialect_bridge.errors import ProtocolError
from dialect_bridge.types import (
    BackendToolCall,
    CanonicalResponse,
    CanonicalTool,
    CanonicalToolCall,
    FinishReason,
    TranslationStats,
    Usage,
)

from .dialects import resolve_dialect

logger = logging.getLogger(__name__)

DEFAULT_SUSPICIOUS_TOKENS = ("follow", "next")

_DONE_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.MAX_TOKENS,
}


@dataclass
class RawResponse:
    """One backend frame, decoded but not yet trusted."""

    text: str = ""
    tool_calls: list[BackendToolCall] = field(default_factory=list)
    done: bool = False
    done_reason: str | None = None
    prompt_eval_count: int = 0
    eval_count: int = 0
    model_id: str = ""


@dataclass
class ValidationResult:
    response: CanonicalResponse
    stats: TranslationStats


@dataclass(frozen=True)
class ValidatorSettings:
    """
    Heuristic switches.

    The poor-multi-turn name check is a speculative signal: it rejects calls
    whose name contains one of `suspicious_name_tokens`, which will also hit
    legitimately named tools (e.g. "next_page"). Disable it when that matters.
    """

    poor_multi_turn_heuristic: bool = True
    suspicious_name_tokens: tuple[str, ...] = DEFAULT_SUSPICIOUS_TOKENS


def _as_int(value: Any) -> int:
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


def parse_frame(obj: Any) -> RawResponse:
    """
    Convert one decoded backend JSON object to a RawResponse.

    Raises:
        ProtocolError: If the object is not a chat frame or reports an error
    """
    if not isinstance(obj, dict):
        raise ProtocolError(f"Expected a JSON object frame, got {type(obj).__name__}")
    if "error" in obj:
        raise ProtocolError(f"Backend reported an error: {obj['error']}")

    message = obj.get("message") or {}
    if not isinstance(message, dict):
        raise ProtocolError(f"Frame 'message' must be an object, got {type(message).__name__}")

    tool_calls = []
    for entry in message.get("tool_calls") or []:
        function = entry.get("function") if isinstance(entry, dict) else None
        if not isinstance(function, dict):
            function = {}
        tool_calls.append(
            BackendToolCall(
                name=str(function.get("name") or ""),
                arguments=function.get("arguments"),
            )
        )

    content = message.get("content")
    return RawResponse(
        text=content if isinstance(content, str) else "",
        tool_calls=tool_calls,
        done=bool(obj.get("done", False)),
        done_reason=obj.get("done_reason"),
        prompt_eval_count=_as_int(obj.get("prompt_eval_count")),
        eval_count=_as_int(obj.get("eval_count")),
        model_id=str(obj.get("model") or ""),
    )


def finish_reason_for(raw: RawResponse) -> FinishReason | None:
    if not raw.done:
        return None
    if not raw.done_reason:
        return FinishReason.STOP
    return _DONE_REASONS.get(raw.done_reason, FinishReason.OTHER)


def _registered_names(registered_tools: Iterable[CanonicalTool]) -> set[str]:
    return {tool.name for tool in registered_tools if tool.name}


class ResponseValidator:
    """Filters hallucinated tool calls and builds canonical responses."""

    def __init__(self, settings: ValidatorSettings | None = None):
        self.settings = settings or ValidatorSettings()

    def validate(
        self,
        raw: RawResponse,
        capabilities: ModelCapabilities,
        registered_tools: Iterable[CanonicalTool],
    ) -> ValidationResult:
        """
        Validate one backend frame against the registered tool set.

        `raw` is not modified; its tool calls are deep-copied before any
        parsing or unwrapping.

        Returns:
            ValidationResult with the canonical response and per-frame stats.
            `response.stats` is the same object as the returned stats.
        """
        stats = TranslationStats()
        names = _registered_names(registered_tools)
        strategy = resolve_dialect(capabilities)
        calls = copy.deepcopy(raw.tool_calls)

        accepted: list[CanonicalToolCall] = []
        stats.total = len(calls)
        for call in calls:
            if call.name not in names:
                stats.unknown_tool += 1
                stats.warnings.append(f"Unknown tool called: {call.name!r}")
                logger.debug(f"Dropped call to unregistered tool {call.name!r}")
                continue

            args, error = self._parse_arguments(call.arguments)
            if args is None:
                stats.invalid_json += 1
                stats.warnings.append(f"Invalid JSON in tool call arguments for {call.name}: {error}")
                logger.debug(f"Dropped call to {call.name!r}: {error}")
                continue

            reason = self._heuristic_rejection(call.name, capabilities, strategy)
            if reason:
                stats.warnings.append(reason)
                logger.debug(f"Dropped call to {call.name!r}: {reason}")
                continue

            accepted.append(CanonicalToolCall(name=call.name, args=strategy.unwrap_arguments(args)))

        stats.valid = len(accepted)
        stats.hallucinated = stats.total - stats.valid
        if stats.hallucinated:
            stats.warnings.append(
                f"Filtered {stats.hallucinated} hallucinated tool call(s) from "
                f"{raw.model_id or 'model'}"
            )
        stats.model_issues.extend(self.detect_response_issues(raw, capabilities))

        text_parts = [raw.text] if raw.text else []
        if not text_parts and not accepted:
            text_parts = [""]

        prompt_tokens = raw.prompt_eval_count
        completion_tokens = raw.eval_count
        response = CanonicalResponse(
            text_parts=text_parts,
            tool_calls=accepted,
            finish_reason=finish_reason_for(raw),
            usage=Usage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
            model_id=raw.model_id,
            stats=stats,
        )
        return ValidationResult(response=response, stats=stats)

    @staticmethod
    def _parse_arguments(arguments: Any) -> tuple[dict[str, Any] | None, str]:
        if isinstance(arguments, str):
            try:
                parsed = json.loads(arguments)
            except json.JSONDecodeError as e:
                return None, str(e)
            if not isinstance(parsed, dict):
                return None, f"expected a JSON object, got {type(parsed).__name__}"
            return parsed, ""
        if arguments is None:
            return None, "arguments cannot be null"
        if isinstance(arguments, dict):
            return arguments, ""
        return None, f"invalid arguments type: {type(arguments).__name__}"

    def _heuristic_rejection(self, name, capabilities, strategy) -> str | None:
        if strategy.is_suspicious_name(name):
            return f"Tool name contains markup artifacts: {name!r}"
        if (
            self.settings.poor_multi_turn_heuristic
            and capabilities.multi_turn_quality is MultiTurnQuality.POOR
        ):
            lowered = name.lower()
            for token in self.settings.suspicious_name_tokens:
                if token in lowered:
                    return f"Possible hallucinated follow-up call: {name!r}"
        return None

    @staticmethod
    def detect_response_issues(raw: RawResponse, capabilities: ModelCapabilities) -> list[str]:
        """Soft diagnostics about the frame; nothing is dropped because of them."""
        issues = []
        content = raw.text.lower()
        if "i need to call" in content or "i should use" in content:
            issues.append("Model is describing tool usage instead of calling tools")
        if "function_" in content or "tool_" in content:
            issues.append("Model may be referencing non-existent tools")
        if capabilities.multi_turn_quality is MultiTurnQuality.POOR and len(raw.tool_calls) > 3:
            issues.append(
                f"Model with poor multi-turn support made {len(raw.tool_calls)} tool calls "
                f"(may be hallucinating)"
            )
        return issues
