# dialect_bridge/prompts/__init__.py
"""Prompt template loading for tool-usage instructions."""

from functools import lru_cache
from pathlib import Path


@lru_cache(maxsize=None)
def load_prompt(name: str) -> str:
    """Load a prompt template by name.

    Args:
        name: Template filename without .txt extension
              (e.g., 'standard', 'hermes', 'agentic')

    Returns:
        Template content with surrounding whitespace stripped

    Raises:
        FileNotFoundError: If the template doesn't exist
    """
    prompt_path = Path(__file__).parent / f"{name}.txt"
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt not found: {prompt_path}")

    return prompt_path.read_text(encoding="utf-8").strip()


__all__ = ["load_prompt"]
