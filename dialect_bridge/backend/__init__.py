# dialect_bridge/backend/__init__.py
"""HTTP transport, stream framing, retry policy and model discovery."""

from .client import Transport
from .discovery import ModelDiscovery, ModelInfo
from .frames import FrameReader
from .retry import build_retrying, is_retryable

__all__ = [
    "FrameReader",
    "ModelDiscovery",
    "ModelInfo",
    "Transport",
    "build_retrying",
    "is_retryable",
]
