"""Path template parsing.

A collection pattern is a file path relative to the pages directory in
which some segments are field placeholders:

    product/{Product.sku__en}.html
    blog/{MarkdownRemark.parent__(File)__relativePath}.html

Placeholders are delimited by braces and contain a field expression of the
form ``Model.field``, where ``__`` separates nested field names.
"""

import re
from dataclasses import dataclass

from pagecreator.reporter import ErrorCode, ErrorReport, Reporter

PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")
EXTENSION_RE = re.compile(r"\.[^/.{}]+$")


@dataclass(frozen=True)
class Placeholder:
    """A placeholder occurrence inside a pattern."""

    text: str
    expression: str
    start: int
    end: int

    @property
    def model(self) -> str:
        """Model qualifier (e.g., "Product" for "Product.sku__en")."""
        return self.expression.split(".", 1)[0]


def extract_placeholders(pattern: str) -> list[Placeholder]:
    """Extract every placeholder from a pattern.

    Occurrences are returned in pattern order and duplicates are kept, since
    each occurrence is its own substitution point.

    Args:
        pattern: Templated path (e.g., "product/{Product.sku}")

    Returns:
        List of placeholders, empty for a static path
    """
    return [
        Placeholder(
            text=match.group(0),
            expression=match.group(1),
            start=match.start(),
            end=match.end(),
        )
        for match in PLACEHOLDER_RE.finditer(pattern)
    ]


def has_placeholders(pattern: str) -> bool:
    return PLACEHOLDER_RE.search(pattern) is not None


def strip_extension(file_path: str) -> str:
    """Remove the file extension unless it belongs to a placeholder.

    Args:
        file_path: Pattern file path (e.g., "product/{Product.sku}.html")

    Returns:
        Path without extension (e.g., "product/{Product.sku}")
    """
    return EXTENSION_RE.sub("", file_path.replace("\\", "/"))


def is_valid_collection_pattern(pattern: str, reporter: Reporter) -> bool:
    """Check that a pattern is a usable collection template.

    Every placeholder must name a model and a field (``Model.field``), and
    the field path may not contain further periods, which are reserved for
    runtime lookups. Problems are reported and the pattern is rejected.

    Args:
        pattern: Templated path
        reporter: Reporter for diagnostics

    Returns:
        True if the pattern can be used to create pages
    """
    if pattern.count("{") != pattern.count("}"):
        reporter.error(
            ErrorReport(
                ErrorCode.CollectionPath,
                f"Collection page path has unbalanced braces: {pattern}",
            )
        )
        return False

    placeholders = extract_placeholders(pattern)
    if not placeholders:
        return False

    for placeholder in placeholders:
        model, _, field = placeholder.expression.partition(".")
        if not model or not field or "." in field:
            reporter.error(
                ErrorReport(
                    ErrorCode.CollectionPath,
                    f"Collection page path segment {placeholder.text} is invalid. "
                    "Segments must look like {Model.field}, with nested fields "
                    "separated by __ (e.g., {Product.sku__en}).",
                )
            )
            return False

    return True
