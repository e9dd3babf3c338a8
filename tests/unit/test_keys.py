"""
Unit tests for object key generation and inspection.

Pure functions: no filesystem, no network.
"""

import re

import pytest

from src.core.storage.keys import is_blank_key, is_video_key, new_object_key

UUID_PREFIX = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[0-9a-f]{4}-[0-9a-f]{12}_")


class TestObjectKeys:
    """Tests for key generation and inspection."""

    def test_key_is_uuid_then_original_name(self):
        """Keys keep the original name after a random UUID prefix."""
        key = new_object_key("lecture 1.mp4")

        assert UUID_PREFIX.match(key)
        assert key.endswith("_lecture 1.mp4")

    def test_keys_for_same_name_differ(self):
        """Two uploads of the same file never share a key."""
        assert new_object_key("notes.pdf") != new_object_key("notes.pdf")

    def test_missing_name_still_produces_key(self):
        assert UUID_PREFIX.match(new_object_key(None))

    @pytest.mark.parametrize("key", [None, "", "   "])
    def test_blank_keys(self, key):
        assert is_blank_key(key)

    @pytest.mark.parametrize("key", ["a.mp4", "a.MOV", "x_y.mkv", "clip.webm"])
    def test_video_extensions_detected(self, key):
        assert is_video_key(key)

    @pytest.mark.parametrize("key", ["a.png", "a.pdf", "mp4", "video.mp4.txt"])
    def test_other_extensions_are_not_video(self, key):
        assert not is_video_key(key)
