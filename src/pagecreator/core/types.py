"""Core type definitions."""

from collections.abc import Mapping
from typing import Any, NewType

# URL path for a registered page (e.g., "/product/blue-hat")
# Distinct from filesystem Path and from raw templated patterns
URLPath = NewType("URLPath", str)

# One query result record. Shape is not known statically: values are
# scalars, nested mappings or lists of either.
Record = Mapping[str, Any]


class _Missing:
    """Sentinel for a field that could not be found in a record."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()
