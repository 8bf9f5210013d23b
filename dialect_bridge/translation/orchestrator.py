# dialect_bridge/translation/orchestrator.py
"""
Request/response pipelines tying capability lookup, translation, transport and
validation together.

One call:
    capabilities = registry.get(model_id)          (looked up once)
    payload      = tools + augmented system prompt + merged options
    frame(s)     = transport.request / transport.stream
    response(s)  = validator.validate(frame, capabilities, registered_tools)
"""

import logging
import math
from collections.abc import AsyncIterator, Iterable
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import Any

from dialect_bridge.backend.client import Transport
from dialect_bridge.capabilities import CapabilityRegistry, ModelCapabilities, tool_call_options
from dialect_bridge.config.schema import GenerationDefaults
from dialect_bridge.errors import ConfigurationError, ProtocolError, UnsupportedOperationError
from dialect_bridge.types import CanonicalRequest, CanonicalResponse, CanonicalTool

from .prompts import PromptAugmenter
from .tools import ToolTranslator
from .validator import ResponseValidator, parse_frame

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4


@dataclass
class PreparedRequest:
    """Outbound payload plus what was learned while building it."""

    payload: dict[str, Any]
    capabilities: ModelCapabilities
    warnings: list[str] = field(default_factory=list)
    tools_sent: bool = False


class TranslationOrchestrator:
    """
    Canonical requests in, validated canonical responses out.

    Translated tools come from `request.tools` when given, otherwise from
    `registered_tools`; returned tool calls are always validated against
    `registered_tools`.
    """

    def __init__(
        self,
        transport: Transport,
        registry: CapabilityRegistry | None = None,
        *,
        generation: GenerationDefaults | None = None,
        validator: ResponseValidator | None = None,
        translator: ToolTranslator | None = None,
        augmenter: PromptAugmenter | None = None,
    ):
        self.transport = transport
        self.registry = registry or CapabilityRegistry()
        self.generation = generation or GenerationDefaults()
        self.validator = validator or ResponseValidator()
        self.translator = translator or ToolTranslator()
        self.augmenter = augmenter or PromptAugmenter()

    async def __aenter__(self) -> "TranslationOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    def build_payload(
        self,
        request: CanonicalRequest,
        model_id: str,
        registered_tools: Iterable[CanonicalTool] = (),
        *,
        stream: bool = False,
    ) -> PreparedRequest:
        """
        Build the backend chat payload for one request.

        Raises:
            ConfigurationError: If model_id is empty
        """
        if not model_id or not model_id.strip():
            raise ConfigurationError("Model id cannot be empty")

        capabilities = self.registry.get(model_id)
        offered = list(request.tools) if request.tools is not None else list(registered_tools)

        warnings: list[str] = []
        translated: list[dict[str, Any]] = []
        if offered:
            translation = self.translator.translate(offered, capabilities)
            translated = translation.translated
            warnings.extend(translation.warnings)
        tools_sent = bool(translated)

        messages = [
            {"role": m.role, "content": m.content} for m in request.messages if m.role != "system"
        ]
        if tools_sent and self.generation.augment_user_message:
            for message in reversed(messages):
                if message["role"] == "user":
                    message["content"] = self.augmenter.augment_user_message(
                        message["content"], capabilities, offered
                    )
                    break

        base_prompt = request.system_prompt or self.generation.system_prompt
        system_prompt = base_prompt
        if tools_sent:
            system_prompt = self.augmenter.augment(base_prompt, capabilities, offered, model_id)
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})

        payload: dict[str, Any] = {
            "model": model_id,
            "messages": messages,
            "stream": stream,
            "options": self._merge_options(request, capabilities, tools_sent),
        }
        if tools_sent:
            payload["tools"] = translated

        return PreparedRequest(
            payload=payload,
            capabilities=capabilities,
            warnings=warnings,
            tools_sent=tools_sent,
        )

    def _merge_options(
        self, request: CanonicalRequest, capabilities: ModelCapabilities, tools_sent: bool
    ) -> dict[str, Any]:
        # precedence: request > configured defaults > custom options
        gen = self.generation
        options: dict[str, Any] = dict(gen.custom_options)
        options.update(
            {"temperature": gen.temperature, "top_p": gen.top_p, "max_tokens": gen.max_tokens}
        )
        requested = request.options
        for key in ("temperature", "top_p", "max_tokens", "top_k"):
            value = getattr(requested, key)
            if value is not None:
                options[key] = value

        if tools_sent:
            recommended = tool_call_options(capabilities)
            ceiling = recommended.pop("temperature", None)
            options.update(recommended)
            if ceiling is not None:
                options["temperature"] = min(options.get("temperature", ceiling), ceiling)
        return options

    async def send(
        self,
        request: CanonicalRequest,
        model_id: str,
        registered_tools: Iterable[CanonicalTool] = (),
    ) -> CanonicalResponse:
        """
        Run one non-streaming request.

        Raises:
            ConfigurationError: Empty model id (before any network call)
            ConnectivityError: Backend unreachable or non-2xx after retries
            ProtocolError: Backend body is not a chat response
        """
        registered = list(registered_tools)
        prepared = self.build_payload(request, model_id, registered, stream=False)
        return await self._complete(prepared, registered)

    async def _complete(
        self, prepared: PreparedRequest, registered: list[CanonicalTool]
    ) -> CanonicalResponse:
        body = await self.transport.request(prepared.payload)
        raw = parse_frame(body)
        response = self.validator.validate(raw, prepared.capabilities, registered).response
        return self._finish(response, prepared, prepared.warnings)

    def _finish(
        self, response: CanonicalResponse, prepared: PreparedRequest, pending: list[str]
    ) -> CanonicalResponse:
        if not response.model_id:
            response.model_id = prepared.payload["model"]
        if pending:
            response.stats.warnings[:0] = pending
        if response.stats.hallucinated:
            logger.warning(
                f"Filtered {response.stats.hallucinated} of {response.stats.total} "
                f"tool call(s) from {response.model_id}"
            )
        return response

    async def stream(
        self,
        request: CanonicalRequest,
        model_id: str,
        registered_tools: Iterable[CanonicalTool] = (),
    ) -> AsyncIterator[CanonicalResponse]:
        """
        Run one streaming request, yielding a validated response per frame.

        Lazy: nothing is sent until the first item is requested, and each
        frame is validated and yielded before the next is read. Request-side
        warnings ride on the first item. Frames that are not chat frames are
        logged and skipped.

        Models that cannot stream tool calls get a single non-streaming
        request instead; its response is yielded as the only (terminal) item.
        """
        registered = list(registered_tools)
        prepared = self.build_payload(request, model_id, registered, stream=True)

        if prepared.tools_sent and not prepared.capabilities.supports_streaming:
            logger.debug(f"{model_id} cannot stream tool calls; using a single request")
            yield await self._complete(prepared, registered)
            return

        pending = list(prepared.warnings)
        async with aclosing(self.transport.stream(prepared.payload)) as frames:
            async for frame in frames:
                try:
                    raw = parse_frame(frame)
                except ProtocolError as e:
                    logger.warning(f"Skipping stream frame from {model_id}: {e}")
                    continue
                response = self.validator.validate(raw, prepared.capabilities, registered).response
                yield self._finish(response, prepared, pending)
                pending = []

    def count_tokens(self, request: CanonicalRequest) -> int:
        """Rough token estimate (about four characters per token)."""
        chars = sum(len(m.content) for m in request.messages)
        for tool in request.tools or []:
            chars += len(tool.name) + len(tool.description or "")
        return math.ceil(chars / CHARS_PER_TOKEN)

    async def embed(self, texts: list[str], model_id: str) -> list[list[float]]:
        raise UnsupportedOperationError(
            "Embeddings are not supported by the chat translation backend",
            details={"model": model_id, "inputs": len(texts)},
        )
