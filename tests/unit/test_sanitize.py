"""Unit tests for filename and Markdown sanitizers."""

import pytest

from torrent_bridge.lib.sanitize import safe_filename, strip_markdown


class TestSafeFilename:
    """Tests for safe_filename."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("ubuntu-24.04.torrent", "ubuntu-24.04.torrent"),
            ("my movie (2024).mkv", "my_movie__2024_.mkv"),
            ("../../etc/passwd", ".._.._etc_passwd"),
        ],
    )
    def test_replaces_unsafe_characters(self, name, expected):
        assert safe_filename(name) == expected

    @pytest.mark.parametrize("name", ["", ".", ".."])
    def test_degenerate_names_fall_back(self, name):
        assert safe_filename(name) == "file"

    def test_result_never_contains_separator(self):
        assert "/" not in safe_filename("a/b/c")


class TestStripMarkdown:
    """Tests for strip_markdown."""

    def test_removes_breaking_characters(self):
        assert strip_markdown("Some_Movie*2024`x") == "SomeMovie2024x"

    def test_plain_text_unchanged(self):
        assert strip_markdown("Ubuntu 24.04") == "Ubuntu 24.04"
