"""Tests for URL path helpers."""

import pytest
from pagecreator.core.paths import create_path, get_match_path, reverse_lookup_params


class TestCreatePath:
    """Tests for create_path()."""

    @pytest.mark.parametrize(
        ("derived", "expected"),
        [
            ("product/blue-hat", "/product/blue-hat"),
            ("/product/blue-hat", "/product/blue-hat"),
            ("product/blue-hat/", "/product/blue-hat"),
            ("blog/index", "/blog"),
            ("index", "/"),
            ("", "/"),
            ("a//b", "/a/b"),
            ("docs\\guide", "/docs/guide"),
        ],
    )
    def test__normalizes(self, derived: str, expected: str) -> None:
        assert create_path(derived) == expected

    def test__index_inside_name__kept(self) -> None:
        """Only a whole trailing index segment is dropped."""
        assert create_path("blog/reindex") == "/blog/reindex"


class TestGetMatchPath:
    """Tests for get_match_path()."""

    def test__static_path__returns_none(self) -> None:
        assert get_match_path("/product/blue-hat") is None

    def test__param_segment__converted(self) -> None:
        assert get_match_path("/product/blue-hat/[tab]") == "/product/blue-hat/:tab"

    def test__splat_segment__converted(self) -> None:
        assert get_match_path("/docs/[...rest]") == "/docs/*rest"


class TestReverseLookupParams:
    """Tests for reverse_lookup_params()."""

    def test__collects_raw_values(self) -> None:
        record = {"id": "p1", "sku": {"en": "Blue Hat"}}

        params = reverse_lookup_params(record, "product/{Product.sku__en}")

        assert params == {"id": "p1", "sku__en": "Blue Hat"}

    def test__union_field__keyed_without_fragment(self) -> None:
        record = {"parent": {"relativePath": "a.md"}}

        params = reverse_lookup_params(record, "blog/{MarkdownRemark.parent__(File)__relativePath}")

        assert params == {"parent__relativePath": "a.md"}

    def test__missing_values__skipped(self) -> None:
        assert reverse_lookup_params({}, "product/{Product.sku}") == {}
