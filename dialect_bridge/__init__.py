# dialect_bridge/__init__.py
"""Model-aware translation between a canonical chat API and local model dialects."""

__version__ = "0.1.0"
