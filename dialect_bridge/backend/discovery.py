# dialect_bridge/backend/discovery.py
"""Model listing, health checks and availability checks via the ollama client."""

import logging
from dataclasses import dataclass

import httpx
from ollama import AsyncClient, ResponseError

from dialect_bridge.errors import ConnectivityError

logger = logging.getLogger(__name__)


@dataclass
class ModelInfo:
    name: str
    size: int | None = None
    family: str | None = None
    parameter_size: str | None = None


class ModelDiscovery:
    """
    Read-only view of the models a server has installed.

    Uses the server's tags endpoint through ollama.AsyncClient, which always
    talks to the standard /api routes regardless of the transport's prefix.
    """

    def __init__(self, base_url: str, timeout_ms: int = 10_000, client: AsyncClient | None = None):
        self.base_url = base_url
        self.client = client or AsyncClient(host=base_url, timeout=httpx.Timeout(timeout_ms / 1000))

    async def list_models(self) -> list[ModelInfo]:
        """
        List installed models.

        Raises:
            ConnectivityError: If the server cannot be reached or answers with an error
        """
        try:
            response = await self.client.list()
        except ResponseError as e:
            raise ConnectivityError(
                server_url=self.base_url,
                model=None,
                operation="tags",
                attempts=1,
                cause=e,
                status_code=e.status_code,
            ) from e
        except (ConnectionError, httpx.HTTPError) as e:
            raise ConnectivityError(
                server_url=self.base_url, model=None, operation="tags", attempts=1, cause=e
            ) from e

        models = []
        for entry in response.models:
            if not entry.model:
                continue
            details = entry.details
            models.append(
                ModelInfo(
                    name=entry.model,
                    size=entry.size,
                    family=details.family if details else None,
                    parameter_size=details.parameter_size if details else None,
                )
            )
        logger.debug(f"Discovered {len(models)} model(s) at {self.base_url}")
        return models

    async def health_check(self) -> bool:
        """
        Check that the server answers.

        Returns:
            True if the tags endpoint is reachable, False otherwise.
        """
        try:
            await self.list_models()
        except ConnectivityError as e:
            logger.error(f"Health check failed: {e}")
            return False
        return True

    async def is_model_available(self, model_id: str) -> bool:
        """
        Check whether `model_id` is installed.

        An untagged id matches its ":latest" tag; an id with a tag must match exactly.

        Raises:
            ConnectivityError: If the server cannot be reached
        """
        names = {m.name for m in await self.list_models()}
        if model_id in names:
            return True
        return ":" not in model_id and f"{model_id}:latest" in names
