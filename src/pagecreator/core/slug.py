"""URL-safe slug encoding."""

import re

from slugify import slugify as _slugify
from unidecode import unidecode

CAMEL_BOUNDARY_RE = re.compile(r"([a-z\d])([A-Z])")
ACRONYM_BOUNDARY_RE = re.compile(r"([A-Z]+)([A-Z][a-z\d]+)")
# Applied before python-slugify, which would otherwise turn quotes into separators
REPLACEMENTS = [["&", " and "], ["'", ""], ["’", ""]]


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen separated slug.

    Words of camelCase and acronym-prefixed names are split before
    python-slugify does the rest.

    Examples:
        >>> slugify("Blue Hat")
        'blue-hat'
        >>> slugify("fooBar")
        'foo-bar'
        >>> slugify("Café & Crème")
        'cafe-and-creme'
    """
    text = unidecode(text)
    text = ACRONYM_BOUNDARY_RE.sub(r"\1 \2", text)
    text = CAMEL_BOUNDARY_RE.sub(r"\1 \2", text)
    return _slugify(text, replacements=REPLACEMENTS)


def safe_slugify(value: object) -> str:
    """Slugify a field value while keeping its ``/`` structure.

    A value like "posts/2023/a.md" is meant to span several URL segments,
    so each part is slugified on its own.
    """
    return "/".join(slugify(part) for part in str(value).split("/"))


def strip_trailing_slash(text: str) -> str:
    return text[:-1] if text.endswith("/") else text
