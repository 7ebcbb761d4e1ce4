"""Tests for slug encoding."""

import pytest
from pagecreator.core.slug import safe_slugify, slugify, strip_trailing_slash


class TestSlugify:
    """Tests for slugify()."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Blue Hat", "blue-hat"),
            ("a.md", "a-md"),
            ("fooBar", "foo-bar"),
            ("HTMLParser", "html-parser"),
            ("Café à Paris", "cafe-a-paris"),
            ("Salt & Pepper", "salt-and-pepper"),
            ("it's here", "its-here"),
            ("it’s here", "its-here"),
            ("Café & Crème", "cafe-and-creme"),
            ("  --Hello,   World!--  ", "hello-world"),
            ("2023", "2023"),
        ],
    )
    def test__converts_text(self, text: str, expected: str) -> None:
        assert slugify(text) == expected

    @pytest.mark.parametrize("text", ["blue-hat", "posts", "a-1-b", "2023"])
    def test__already_slugified__idempotent(self, text: str) -> None:
        assert slugify(slugify(text)) == slugify(text) == text

    def test__only_symbols__returns_empty(self) -> None:
        assert slugify("!!!") == ""


class TestSafeSlugify:
    """Tests for safe_slugify()."""

    def test__keeps_slashes(self) -> None:
        assert safe_slugify("posts/2023/a.md") == "posts/2023/a-md"

    def test__number__coerced(self) -> None:
        assert safe_slugify(42) == "42"

    @pytest.mark.parametrize("value", ["foo/bar", "a/b/c", "/leading", "Trailing/", "x//y"])
    def test__part_count__preserved(self, value: str) -> None:
        """Every /-delimited part survives encoding."""
        assert len(safe_slugify(value).split("/")) == len(value.split("/"))


class TestStripTrailingSlash:
    def test__trailing_slash__removed(self) -> None:
        assert strip_trailing_slash("foo/bar/") == "foo/bar"

    def test__no_trailing_slash__unchanged(self) -> None:
        assert strip_trailing_slash("foo/bar") == "foo/bar"
