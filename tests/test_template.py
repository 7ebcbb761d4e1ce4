"""Tests for path template parsing."""

from pagecreator.core.template import (
    extract_placeholders,
    has_placeholders,
    is_valid_collection_pattern,
    strip_extension,
)
from pagecreator.reporter import ErrorCode, Reporter


class TestExtractPlaceholders:
    """Tests for extract_placeholders()."""

    def test__single_placeholder__returns_text_and_expression(self) -> None:
        """Extract the placeholder with its braces and inner expression."""
        placeholders = extract_placeholders("product/{Product.sku__en}")

        assert len(placeholders) == 1
        assert placeholders[0].text == "{Product.sku__en}"
        assert placeholders[0].expression == "Product.sku__en"
        assert placeholders[0].model == "Product"

    def test__offsets__point_at_placeholder(self) -> None:
        """Offsets slice the placeholder out of the pattern."""
        pattern = "product/{Product.sku}/info"
        placeholder = extract_placeholders(pattern)[0]

        assert pattern[placeholder.start : placeholder.end] == "{Product.sku}"

    def test__multiple_placeholders__keeps_pattern_order(self) -> None:
        """Return placeholders in first-occurrence order."""
        placeholders = extract_placeholders("{Product.brand}/{Product.name}-{Product.id}")

        assert [p.expression for p in placeholders] == [
            "Product.brand",
            "Product.name",
            "Product.id",
        ]

    def test__duplicate_placeholders__reported_each_time(self) -> None:
        """Duplicates are not de-duplicated."""
        placeholders = extract_placeholders("{Product.id}/{Product.id}")

        assert len(placeholders) == 2
        assert placeholders[0].start != placeholders[1].start

    def test__union_placeholder__kept_whole(self) -> None:
        """Parenthesized fragments are part of the expression."""
        placeholders = extract_placeholders("blog/{MarkdownRemark.parent__(File)__relativePath}")

        assert placeholders[0].expression == "MarkdownRemark.parent__(File)__relativePath"

    def test__no_placeholders__returns_empty(self) -> None:
        """A static path has no placeholders."""
        assert extract_placeholders("about/team") == []

    def test__empty_braces__not_a_placeholder(self) -> None:
        """Empty braces carry no field expression."""
        assert extract_placeholders("about/{}") == []

    def test__has_placeholders(self) -> None:
        assert has_placeholders("product/{Product.id}.html")
        assert not has_placeholders("product/index.html")


class TestStripExtension:
    """Tests for strip_extension()."""

    def test__file_extension__removed(self) -> None:
        assert strip_extension("product/{Product.sku}.html") == "product/{Product.sku}"

    def test__placeholder_last__untouched(self) -> None:
        """A period inside the final placeholder is not an extension."""
        assert strip_extension("product/{Product.sku}") == "product/{Product.sku}"

    def test__backslashes__normalized(self) -> None:
        assert strip_extension("product\\{Product.sku}.js") == "product/{Product.sku}"


class TestIsValidCollectionPattern:
    """Tests for is_valid_collection_pattern()."""

    def test__model_and_field__valid(self, reporter: Reporter) -> None:
        assert is_valid_collection_pattern("product/{Product.sku__en}", reporter)
        assert reporter.errors == []

    def test__union_field__valid(self, reporter: Reporter) -> None:
        pattern = "blog/{MarkdownRemark.parent__(File)__relativePath}"

        assert is_valid_collection_pattern(pattern, reporter)

    def test__missing_model__invalid(self, reporter: Reporter) -> None:
        """A placeholder without a model qualifier is rejected."""
        assert not is_valid_collection_pattern("product/{sku}", reporter)
        assert len(reporter.errors) == 1
        assert reporter.errors[0].code == ErrorCode.CollectionPath
        assert "{sku}" in reporter.errors[0].source_message

    def test__period_in_field__invalid(self, reporter: Reporter) -> None:
        """Nested fields must use __, periods are reserved."""
        assert not is_valid_collection_pattern("product/{Product.sku.en}", reporter)
        assert len(reporter.errors) == 1

    def test__unbalanced_braces__invalid(self, reporter: Reporter) -> None:
        assert not is_valid_collection_pattern("product/{Product.sku", reporter)
        assert len(reporter.errors) == 1

    def test__no_placeholders__invalid_without_report(self, reporter: Reporter) -> None:
        """A static path is simply not a collection."""
        assert not is_valid_collection_pattern("about/team", reporter)
        assert reporter.errors == []
