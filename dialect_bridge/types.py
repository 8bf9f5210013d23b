# dialect_bridge/types.py
"""Canonical request/response types shared by every dialect."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class CanonicalTool:
    """A tool offered by the caller, independent of any backend dialect."""

    name: str
    description: str = ""
    parameter_schema: dict[str, Any] | None = None  # None = no callable shape declared


@dataclass
class Message:
    role: Role
    content: str


@dataclass
class GenerationOptions:
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    top_k: int | None = None


@dataclass
class CanonicalRequest:
    """Caller request: ordered messages, optional tool list, generation options."""

    messages: list[Message]
    tools: list[CanonicalTool] | None = None
    options: GenerationOptions = field(default_factory=GenerationOptions)

    @property
    def system_prompt(self) -> str | None:
        """Text of all system messages joined by newlines (None if there are none)."""
        parts = [m.content for m in self.messages if m.role == "system" and m.content]
        return "\n".join(parts) if parts else None


@dataclass
class BackendToolCall:
    """Tool call exactly as a backend emitted it. Untrusted."""

    name: str
    arguments: Any  # str, dict, or whatever the model produced


@dataclass
class CanonicalToolCall:
    """Validated tool call whose name is a registered tool."""

    name: str
    args: dict[str, Any]


class FinishReason(Enum):
    STOP = "stop"
    MAX_TOKENS = "max_tokens"
    OTHER = "other"


@dataclass
class Usage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class TranslationStats:
    """Per-response validation counters plus human-readable warnings."""

    total: int = 0
    valid: int = 0
    hallucinated: int = 0
    invalid_json: int = 0
    unknown_tool: int = 0
    warnings: list[str] = field(default_factory=list)
    model_issues: list[str] = field(default_factory=list)


@dataclass
class CanonicalResponse:
    text_parts: list[str]
    tool_calls: list[CanonicalToolCall]
    finish_reason: FinishReason | None
    usage: Usage
    model_id: str
    stats: TranslationStats = field(default_factory=TranslationStats)

    @property
    def text(self) -> str:
        return "".join(self.text_parts)
