# dialect_bridge/__main__.py
"""Allow running as: python -m dialect_bridge"""

from dialect_bridge.cli import app

app()
