"""Path derivation from a pattern and a record.

    product/{Product.id}        + {"id": 3}                        -> product/3
    product/{Product.sku__en}   + {"sku": {"en": "Blue Hat"}}      -> product/blue-hat
    blog/{MarkdownRemark.parent__(File)__relativePath}
                                + {"parent": {"relativePath": "posts/a.md"}}
                                                                   -> blog/posts/a-md
"""

import json
import re
from dataclasses import dataclass, field

from pagecreator.core.fields import field_path, is_path_value, safe_get, to_record_key
from pagecreator.core.slug import safe_slugify, strip_trailing_slash
from pagecreator.core.template import extract_placeholders
from pagecreator.core.types import Record
from pagecreator.reporter import Reporter

DOUBLE_SLASH_RE = re.compile(r"//+")


@dataclass(frozen=True)
class Derivation:
    """Result of deriving one record's path.

    ``errors`` counts the placeholders that could not be resolved. Their
    literal text stays in ``derived_path``, which never ends in a separator
    (a bare "/" excepted). ``params`` maps the field path of
    every resolved placeholder to its encoded value.
    """

    derived_path: str
    errors: int
    params: dict[str, str] = field(default_factory=dict)


def derive_path(
    pattern: str,
    record: Record,
    reporter: Reporter | None = None,
) -> Derivation:
    """Derive the concrete path for a record.

    Each placeholder is handled independently, so a missing field does not
    block the others. The caller aggregates ``errors`` across records and
    reports once.

    Args:
        pattern: Templated path (e.g., "product/{Product.sku__en}")
        record: Query result record
        reporter: Optional reporter for verbose lookup diagnostics

    Returns:
        Derivation with the derived path, error count and route params
    """
    errors = 0
    params: dict[str, str] = {}
    parts: list[str] = []
    cursor = 0

    for placeholder in extract_placeholders(pattern):
        parts.append(pattern[cursor : placeholder.start])
        cursor = placeholder.end

        key = to_record_key(placeholder.expression)
        value = safe_get(record, key)

        if not is_path_value(value):
            if reporter is not None and reporter.is_verbose:
                reporter.verbose(
                    f"Could not find value in the following node for key "
                    f"{placeholder.text} (transformed to {key}) for node:\n\n"
                    f"{json.dumps(record, indent=2, default=str)}"
                )
            errors += 1
            parts.append(placeholder.text)
            continue

        encoded = strip_trailing_slash(safe_slugify(value))
        params[field_path(placeholder.expression)] = encoded
        parts.append(encoded)

    parts.append(pattern[cursor:])
    derived_path = DOUBLE_SLASH_RE.sub("/", "".join(parts))
    derived_path = derived_path.rstrip("/") or derived_path

    return Derivation(derived_path=derived_path, errors=errors, params=params)
