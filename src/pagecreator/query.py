"""Query collaborators: query extraction and a JSON-backed query engine.

The builder only depends on two callables:

    extract_query(absolute_path, pattern, reporter) -> str | None
    await execute(query_string) -> QueryResult

The implementations here cover what a pages directory backed by a folder of
JSON files needs. Queries are generated from the pattern placeholders:

    product/{Product.sku__en}.html
    -> { allProduct { nodes { id sku { en } } } }

A source file may also declare its own single-line query, e.g. to group
records instead of listing them:

    <!-- @collection-query { allProduct { group(field: category) { fieldValue } } } -->
"""

import asyncio
import hashlib
import json
import logging
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pagecreator.core.fields import FIELD_DELIMITER, safe_get
from pagecreator.core.template import extract_placeholders
from pagecreator.core.types import MISSING
from pagecreator.reporter import Reporter

logger = logging.getLogger(__name__)

QUERY_DIRECTIVE_RE = re.compile(r"@collection-query[ \t]+(\{.*\})", re.MULTILINE)
ROOT_QUERY_RE = re.compile(
    r"^\{\s*all(?P<model>\w+)\s*\{\s*"
    r"(?:(?P<nodes>nodes)|group\s*\(\s*field:\s*(?P<field>[\w.]+)\s*\))"
    r"\s*(?:\{.*\}\s*)?\}\s*\}$",
    re.DOTALL,
)
UNION_SEGMENT_RE = re.compile(r"^\((\w+)\)$")


@dataclass(frozen=True)
class QueryError:
    """An error returned by the query engine."""

    message: str


@dataclass(frozen=True)
class QueryResult:
    """Query engine response: data and optional errors."""

    data: dict[str, Any] | None
    errors: list[QueryError] = field(default_factory=list)


QueryExecutor = Callable[[str], Awaitable[QueryResult]]
QueryExtractor = Callable[[Path, str, Reporter], str | None]


def extract_query_string(absolute_path: Path, pattern: str, reporter: Reporter) -> str | None:
    """Find the query a collection source file needs.

    Args:
        absolute_path: Absolute path of the collection source file
        pattern: Templated path relative to the pages directory
        reporter: Reporter for diagnostics

    Returns:
        Query string, or None if no query can be located yet
    """
    try:
        source = absolute_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        reporter.verbose(f"PageCreator: could not read {absolute_path}: {e}")
        return None

    directive = QUERY_DIRECTIVE_RE.search(source)
    if directive is not None:
        return directive.group(1).strip()

    placeholders = extract_placeholders(pattern)
    models = {placeholder.model for placeholder in placeholders}
    if len(models) != 1:
        reporter.verbose(
            f"PageCreator: cannot build a query for {absolute_path}, "
            f"expected one model but found {sorted(models)}"
        )
        return None

    tree: dict[str, Any] = {"id": {}}
    for placeholder in placeholders:
        _, _, field_expr = placeholder.expression.partition(".")
        node = tree
        for part in field_expr.split(FIELD_DELIMITER):
            node = node.setdefault(part, {})

    return f"{{ all{models.pop()} {{ nodes {{ {_render_selection(tree)} }} }} }}"


def _render_selection(tree: dict[str, Any]) -> str:
    parts: list[str] = []
    for name, children in tree.items():
        union = UNION_SEGMENT_RE.match(name)
        if union is not None:
            parts.append(f"... on {union.group(1)} {{ {_render_selection(children)} }}")
        elif children:
            parts.append(f"{name} {{ {_render_selection(children)} }}")
        else:
            parts.append(name)
    return " ".join(parts)


def fingerprint(result: QueryResult) -> str:
    """Stable digest of a query result, used to detect material changes."""
    payload = {
        "data": result.data,
        "errors": [error.message for error in result.errors],
    }
    content = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(content.encode()).hexdigest()


class JsonQueryEngine:
    """Executes collection queries against a directory of JSON files.

    Each model lives in ``<data_dir>/<Model>.json`` as a list of records.
    The selection set of a query is not used for projection: whole records
    are returned, which is a superset of what any placeholder needs.
    """

    def __init__(self, data_dir: Path) -> None:
        """Initialize engine.

        Args:
            data_dir: Directory containing one JSON file per model
        """
        self._data_dir = data_dir

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    async def __call__(self, query_string: str) -> QueryResult:
        return await asyncio.to_thread(self.execute, query_string)

    def execute(self, query_string: str) -> QueryResult:
        """Execute a query synchronously.

        Args:
            query_string: Query (e.g., "{ allProduct { nodes { id } } }")

        Returns:
            QueryResult with data or errors
        """
        match = ROOT_QUERY_RE.match(query_string.strip())
        if match is None:
            return QueryResult(
                data=None,
                errors=[QueryError(f"Syntax Error: cannot parse query: {query_string}")],
            )

        model = match.group("model")
        records, error = self._load_records(model)
        if error is not None:
            return QueryResult(data=None, errors=[error])

        root = f"all{model}"
        if match.group("nodes"):
            return QueryResult(data={root: {"nodes": records}})

        return QueryResult(data={root: {"group": _group(records, match.group("field"))}})

    def _load_records(self, model: str) -> tuple[list[dict[str, Any]], QueryError | None]:
        path = self._data_dir / f"{model}.json"
        if not path.exists():
            return [], QueryError(f'Cannot query field "all{model}" on type "Query".')

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            return [], QueryError(f'Could not read data for "{model}": {e}')

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            return [], QueryError(f'Data for "{model}" must be a list of objects')

        logger.debug("Loaded %d %s records from %s", len(data), model, path)
        return data, None


def _group(records: list[dict[str, Any]], field_name: str) -> list[dict[str, Any]]:
    counts: dict[str, int] = {}
    for record in records:
        value = safe_get(record, field_name)
        if value is MISSING or value is None:
            continue
        values = value if isinstance(value, list) else [value]
        for item in values:
            key = str(item)
            counts[key] = counts.get(key, 0) + 1

    return [
        {"field": field_name, "fieldValue": value, "totalCount": count}
        for value, count in counts.items()
    ]
