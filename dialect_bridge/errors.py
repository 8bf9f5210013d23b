# dialect_bridge/errors.py
"""
Error taxonomy for the translation layer.

Configuration and connectivity failures abort the current turn and carry
enough context (server, model, remedy) for an actionable message. Validation
problems with model output are never raised; they travel in TranslationStats.
"""

from typing import Any


class BridgeError(Exception):
    """Base class for all dialect-bridge errors."""

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})

    def __str__(self) -> str:
        return self.message or self.__class__.__name__


class ConfigurationError(BridgeError):
    """Invalid base URL, empty model id, or other bad settings. Never retried."""


class ConnectivityError(BridgeError):
    """
    Network failure or non-2xx status, raised once retries are exhausted.

    Attributes:
        server_url: Backend base URL that was contacted
        model: Model id from the request payload (None for model-less calls)
        operation: Logical operation ("chat", "chat_stream", "tags")
        attempts: Number of attempts made before giving up
        status_code: Last HTTP status, if the server answered at all
    """

    def __init__(
        self,
        *,
        server_url: str,
        model: str | None,
        operation: str,
        attempts: int,
        cause: BaseException | None = None,
        status_code: int | None = None,
    ):
        self.server_url = server_url
        self.model = model
        self.operation = operation
        self.attempts = attempts
        self.cause = cause
        self.status_code = status_code
        message = (
            f"{operation} request to {server_url} failed after {attempts} attempt(s)"
            f" (model: {model or 'n/a'}): {cause}. {self.hint}"
        )
        super().__init__(
            message,
            details={
                "server_url": server_url,
                "model": model,
                "operation": operation,
                "attempts": attempts,
                "status_code": status_code,
            },
        )

    @property
    def hint(self) -> str:
        """Suggested remedy based on what failed."""
        cause_text = str(self.cause).lower() if self.cause else ""
        if self.status_code == 404 or ("model" in cause_text and "not found" in cause_text):
            return f"Check that the model is available, e.g. 'ollama pull {self.model}'."
        if "timeout" in type(self.cause).__name__.lower() or "timed out" in cause_text:
            return "The server did not answer in time; consider increasing timeout_ms."
        if self.status_code is None:
            return f"Ensure the server is running and reachable at {self.server_url}."
        return "Check the server logs for details."


class ProtocolError(BridgeError):
    """Backend sent a body that is not the expected JSON shape."""

    def __init__(self, message: str, *, raw: str | None = None):
        super().__init__(message, details={"raw": raw[:200] if raw else raw})
        self.raw = raw


class UnsupportedOperationError(BridgeError):
    """Operation the backend family cannot perform at all (e.g. embeddings)."""
