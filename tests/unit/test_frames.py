# tests/unit/test_frames.py
"""Tests for the NDJSON FrameReader."""

import logging

from dialect_bridge.backend.frames import FrameReader


class TestFrameReader:
    def test_complete_lines(self):
        reader = FrameReader()
        frames = reader.feed(b'{"a": 1}\n{"b": 2}\n')
        assert frames == [{"a": 1}, {"b": 2}]
        assert reader.finish() == []

    def test_partial_line_buffered_across_chunks(self):
        reader = FrameReader()
        assert reader.feed(b'{"message": {"con') == []
        assert reader.feed(b'tent": "hi"}}\n') == [{"message": {"content": "hi"}}]

    def test_multibyte_character_split_across_chunks(self):
        encoded = '{"text": "café ✓"}\n'.encode("utf-8")
        split = encoded.index(b"\xc3") + 1
        reader = FrameReader()
        assert reader.feed(encoded[:split]) == []
        assert reader.feed(encoded[split:]) == [{"text": "café ✓"}]

    def test_malformed_middle_line_skipped(self, caplog):
        reader = FrameReader()
        body = b'{"n": 1}\n{not json\n{"n": 3, "done": true}\n'

        with caplog.at_level(logging.WARNING, logger="dialect_bridge.backend.frames"):
            frames = reader.feed(body)

        assert frames == [{"n": 1}, {"n": 3, "done": True}]
        assert reader.skipped == 1
        assert "Skipping malformed stream line" in caplog.text

    def test_non_object_line_skipped(self):
        reader = FrameReader()
        assert reader.feed(b"[1, 2]\n") == []
        assert reader.skipped == 1

    def test_trailing_unterminated_line_parsed_on_finish(self):
        reader = FrameReader()
        assert reader.feed(b'{"a": 1}\n{"done": true}') == [{"a": 1}]
        assert reader.finish() == [{"done": True}]

    def test_blank_lines_and_crlf_ignored(self):
        reader = FrameReader()
        assert reader.feed(b'\r\n{"a": 1}\r\n\n') == [{"a": 1}]
        assert reader.skipped == 0

    def test_str_chunks(self):
        reader = FrameReader()
        assert reader.feed('{"a": 1}\n') == [{"a": 1}]
