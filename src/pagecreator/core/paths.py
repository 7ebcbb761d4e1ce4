"""URL helpers for registered pages."""

import re
from typing import Any

from pagecreator.core.fields import field_path, is_path_value, safe_get, to_record_key
from pagecreator.core.template import extract_placeholders
from pagecreator.core.types import Record, URLPath

INDEX_RE = re.compile(r"(^|/)index$")
DOUBLE_SLASH_RE = re.compile(r"//+")
SPLAT_RE = re.compile(r"\[\.\.\.([^\]]*)\]")
PARAM_RE = re.compile(r"\[([^\]]+)\]")


def create_path(derived_path: str) -> URLPath:
    """Turn a derived path into the URL path a page is registered under.

    Examples:
        >>> create_path("product/blue-hat")
        '/product/blue-hat'
        >>> create_path("blog/index")
        '/blog'
    """
    path = INDEX_RE.sub("", derived_path.replace("\\", "/"))
    path = DOUBLE_SLASH_RE.sub("/", f"/{path}")
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return URLPath(path)


def get_match_path(path: str) -> str | None:
    """Build a client-side match path for ``[param]`` segments.

    Returns None when the path has no parameterized segment, e.g.
    ``/product/blue-hat/[tab]`` becomes ``/product/blue-hat/:tab`` and
    ``/docs/[...rest]`` becomes ``/docs/*rest``.
    """
    if "[" not in path:
        return None
    return PARAM_RE.sub(r":\1", SPLAT_RE.sub(r"*\1", path))


def reverse_lookup_params(record: Record, pattern: str) -> dict[str, Any]:
    """Collect the original field values used by a pattern.

    The values are keyed by field path (``sku__en``) so the page component's
    own query can select the same record again. The record ``id`` is always
    included when present.

    Args:
        record: Query result record
        pattern: Templated path

    Returns:
        Mapping of field path to raw record value
    """
    params: dict[str, Any] = {}
    if "id" in record:
        params["id"] = record["id"]

    for placeholder in extract_placeholders(pattern):
        value = safe_get(record, to_record_key(placeholder.expression))
        if is_path_value(value):
            params[field_path(placeholder.expression)] = value

    return params
