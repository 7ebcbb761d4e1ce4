"""Field lookup for placeholder expressions.

Placeholder expressions use ``__`` between nested field names and may carry
a parenthesized type fragment for union fields:

    Product.sku__en                          -> sku.en
    MarkdownRemark.parent__(File)__relativePath -> parent.relativePath
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

from pagecreator.core.types import MISSING, Record

UNION_RE = re.compile(r"\(.*?\)__")
FIELD_DELIMITER = "__"
KEY_DELIMITER = "."


def strip_union(expression: str) -> str:
    """Remove union type fragments from a field expression."""
    return UNION_RE.sub("", expression)


def field_path(expression: str) -> str:
    """Return the ``__`` delimited field path without model or union.

    Args:
        expression: Placeholder expression (e.g., "Product.sku__en")

    Returns:
        Field path (e.g., "sku__en")
    """
    cleaned = strip_union(expression)
    _, _, field = cleaned.partition(".")
    return field or cleaned


def to_record_key(expression: str) -> str:
    """Convert a placeholder expression into a dotted record key."""
    return field_path(expression).replace(FIELD_DELIMITER, KEY_DELIMITER)


def safe_get(record: Record, key: str) -> Any:
    """Look up a dotted key in a nested record.

    Mappings are indexed by name and lists by numeric segment. Any absent
    level yields MISSING instead of an exception.

    Args:
        record: Query result record
        key: Dotted key (e.g., "parent.relativePath")

    Returns:
        The value found, or MISSING
    """
    current: Any = record
    for part in key.split(KEY_DELIMITER):
        if isinstance(current, Mapping):
            if part not in current:
                return MISSING
            current = current[part]
        elif isinstance(current, Sequence) and not isinstance(current, str):
            if not part.isdigit() or int(part) >= len(current):
                return MISSING
            current = current[int(part)]
        else:
            return MISSING
    return current


def is_path_value(value: Any) -> bool:
    """Check whether a resolved value can become a URL segment.

    Strings and numbers qualify. None, nested mappings and lists do not.
    """
    if value is MISSING or value is None:
        return False
    return isinstance(value, (str, int, float))
