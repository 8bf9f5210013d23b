# dialect_bridge/backend/frames.py
"""
Newline-delimited JSON frame reader for streamed chat responses.

Pure and synchronous: bytes in, decoded frames out. The buffer holds the
trailing partial line between chunks, and UTF-8 is decoded incrementally so a
multi-byte character split across chunks survives.
"""

import codecs
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)


class FrameReader:
    """Accumulates stream chunks and yields one dict per complete JSON line."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.skipped = 0

    def feed(self, chunk: bytes | str) -> list[dict[str, Any]]:
        """Add a chunk; return frames for every line it completed."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk
        *lines, self._buffer = self._buffer.split("\n")
        return self._parse(lines)

    def finish(self) -> list[dict[str, Any]]:
        """Flush the decoder and parse a trailing unterminated line, if any."""
        self._buffer += self._decoder.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        return self._parse([tail])

    def _parse(self, lines: list[str]) -> list[dict[str, Any]]:
        frames = []
        for line in lines:
            line = line.strip()
            if not line:
                continue
            try:
                obj = json.loads(line)
            except json.JSONDecodeError as e:
                self.skipped += 1
                logger.warning(f"Skipping malformed stream line ({e}): {line[:80]!r}")
                continue
            if not isinstance(obj, dict):
                self.skipped += 1
                logger.warning(f"Skipping non-object stream frame: {line[:80]!r}")
                continue
            frames.append(obj)
        return frames
