"""Collection page builder.

Creates one page per query result record for every collection source file
(a file whose path contains ``{Model.field}`` placeholders), then arms the
watch coordinator so later changes to the file or its data rebuild the
pages:

    ValidatingPattern -> ExtractingQuery -> ExecutingQuery -> MappingRecords
        -> Registering -> Reporting -> Watching

Every cycle ends in Watching, whatever happened before it.
"""

import asyncio
import functools
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pagecreator.core.derive import derive_path
from pagecreator.core.paths import create_path, get_match_path, reverse_lookup_params
from pagecreator.core.registry import Page, PageRegistry
from pagecreator.core.template import has_placeholders, is_valid_collection_pattern, strip_extension
from pagecreator.core.types import Record, URLPath
from pagecreator.errors import QueryShapeError
from pagecreator.query import (
    QueryError,
    QueryExecutor,
    QueryExtractor,
    QueryResult,
    extract_query_string,
    fingerprint,
)
from pagecreator.reporter import ErrorCode, ErrorReport, Reporter

PARAMS_CONTEXT_KEY = "__params"
GROUP_KEYS = frozenset({"field", "fieldValue", "totalCount"})


class BuildState(Enum):
    """Stages of one collection build cycle."""

    VALIDATING_PATTERN = "ValidatingPattern"
    EXTRACTING_QUERY = "ExtractingQuery"
    EXECUTING_QUERY = "ExecutingQuery"
    MAPPING_RECORDS = "MappingRecords"
    REGISTERING = "Registering"
    REPORTING = "Reporting"
    WATCHING = "Watching"


class WatchArmer(Protocol):
    """What the builder needs from the watch coordinator."""

    def arm(
        self,
        pattern_id: Path,
        query: str,
        paths: Sequence[str],
        callback: Callable[[], Awaitable[Any]],
        *,
        digest: str | None = None,
    ) -> None: ...


@dataclass(frozen=True)
class Records:
    """Flat list of records (``nodes`` query)."""

    items: list[Record]


@dataclass(frozen=True)
class Groups:
    """Grouped aggregation (``group`` query) of ``{field, fieldValue, totalCount}``."""

    items: list[Record]


@dataclass
class CycleResult:
    """Outcome of one build cycle."""

    file_path: str
    halted_at: BuildState
    query: str = ""
    paths: list[URLPath] = field(default_factory=list)
    errors: int = 0


def parse_query_result(data: object) -> Records | Groups:
    """Extract the record list from query result data.

    Data must be ``{root: {"nodes": [...]}}`` or ``{root: {"group": [...]}}``
    with exactly one root field.

    Raises:
        QueryShapeError: If data does not have that shape
    """
    if not isinstance(data, Mapping) or len(data) != 1:
        keys = sorted(data) if isinstance(data, Mapping) else type(data).__name__
        raise QueryShapeError(f"Expected query data with exactly one root field, got {keys}", data)

    root = next(iter(data.values()))
    if not isinstance(root, Mapping) or len(root) != 1:
        keys = sorted(root) if isinstance(root, Mapping) else type(root).__name__
        raise QueryShapeError(f'Expected "nodes" or "group" under the root field, got {keys}', data)

    kind, items = next(iter(root.items()))
    if kind not in ("nodes", "group"):
        raise QueryShapeError(f'Expected "nodes" or "group" under the root field, got "{kind}"', data)

    if not isinstance(items, list) or not all(isinstance(item, Mapping) for item in items):
        raise QueryShapeError(f'Expected "{kind}" to be a list of objects', data)

    if kind == "nodes":
        return Records(items)

    for item in items:
        missing = GROUP_KEYS - set(item)
        if missing:
            raise QueryShapeError(f"Group entry is missing {sorted(missing)}", data)
    return Groups(items)


def discover_collection_files(pages_dir: Path) -> list[str]:
    """Find collection source files under a pages directory.

    Returns:
        Sorted posix paths relative to pages_dir
    """
    if not pages_dir.is_dir():
        return []

    found: list[str] = []
    for path in pages_dir.rglob("*"):
        relative = path.relative_to(pages_dir)
        if any(part.startswith(".") for part in relative.parts) or not path.is_file():
            continue
        if has_placeholders(relative.as_posix()):
            found.append(relative.as_posix())
    return sorted(found)


class CollectionBuilder:
    """Creates pages from collection source files."""

    def __init__(
        self,
        pages_dir: Path,
        registry: PageRegistry,
        execute: QueryExecutor,
        coordinator: WatchArmer,
        reporter: Reporter,
        *,
        extract_query: QueryExtractor = extract_query_string,
    ) -> None:
        """Initialize builder.

        Args:
            pages_dir: Directory collection file paths are relative to
            registry: Registry pages are created in
            execute: Async query executor
            coordinator: Watch coordinator armed at the end of every cycle
            reporter: Reporter for build diagnostics
            extract_query: Locates the query of a collection source file
        """
        self._pages_dir = pages_dir
        self._registry = registry
        self._execute = execute
        self._coordinator = coordinator
        self._reporter = reporter
        self._extract_query = extract_query

    @property
    def pages_dir(self) -> Path:
        return self._pages_dir

    def absolute_path(self, file_path: str) -> Path:
        return (self._pages_dir / file_path).resolve()

    async def build_all(self, file_paths: Iterable[str]) -> list[CycleResult]:
        """Build every collection file; cycles run concurrently."""
        return list(await asyncio.gather(*(self.build(path) for path in file_paths)))

    async def build(self, file_path: str) -> CycleResult:
        """Run one build cycle for a collection source file.

        Args:
            file_path: Path relative to pages_dir (e.g., "product/{Product.sku}.html")

        Returns:
            CycleResult describing where the cycle stopped and what it produced
        """
        absolute_path = self.absolute_path(file_path)
        pattern = strip_extension(file_path)

        if not is_valid_collection_pattern(pattern, self._reporter):
            self._watch(file_path, absolute_path, "", [])
            return CycleResult(file_path, BuildState.VALIDATING_PATTERN)

        query = self._extract_query(absolute_path, pattern, self._reporter)
        if not query:
            self._watch(file_path, absolute_path, "", [])
            return CycleResult(file_path, BuildState.EXTRACTING_QUERY)

        result = await self._run_query(query)
        if result.data is None or result.errors:
            messages = "\n".join(error.message for error in result.errors)
            self._reporter.error(
                ErrorReport(
                    ErrorCode.CollectionBuilder,
                    (
                        "Tried to create pages from the collection builder.\n"
                        "Unfortunately, the query came back empty. "
                        f"There may be an error in your query:\n\n{messages}"
                    ).strip(),
                    absolute_path,
                )
            )
            self._watch(file_path, absolute_path, query, [], fingerprint(result))
            return CycleResult(file_path, BuildState.EXECUTING_QUERY, query)

        try:
            records = parse_query_result(result.data)
        except QueryShapeError as e:
            self._reporter.error(ErrorReport(ErrorCode.QueryShape, str(e), absolute_path))
            self._watch(file_path, absolute_path, query, [], fingerprint(result))
            return CycleResult(file_path, BuildState.MAPPING_RECORDS, query)

        count = len(records.items)
        self._reporter.verbose(
            f"   PageCreator: Creating {count} page{'s' if count != 1 else ''} from {file_path}"
        )

        paths: list[URLPath] = []
        derive_errors = 0
        for record in records.items:
            derivation = derive_path(pattern, record, self._reporter)
            path = create_path(derivation.derived_path)
            context = {
                **reverse_lookup_params(record, pattern),
                PARAMS_CONTEXT_KEY: derivation.params,
            }
            self._registry.create_page(
                Page(
                    path=path,
                    component=absolute_path,
                    context=context,
                    match_path=get_match_path(path),
                )
            )
            derive_errors += derivation.errors
            paths.append(path)

        if derive_errors > 0:
            self._reporter.panic_on_build(
                ErrorReport(
                    ErrorCode.GeneratePath,
                    f"Could not find a value in the node for {file_path}. "
                    "Please make sure that the syntax is correct and supported.",
                    absolute_path,
                )
            )

        self._watch(file_path, absolute_path, query, paths, fingerprint(result))
        return CycleResult(file_path, BuildState.WATCHING, query, paths, derive_errors)

    async def _run_query(self, query: str) -> QueryResult:
        try:
            return await self._execute(query)
        except Exception as e:
            return QueryResult(data=None, errors=[QueryError(f"{type(e).__name__}: {e}")])

    def _watch(
        self,
        file_path: str,
        absolute_path: Path,
        query: str,
        paths: list[URLPath],
        digest: str | None = None,
    ) -> None:
        self._coordinator.arm(
            absolute_path,
            query,
            tuple(paths),
            functools.partial(self.build, file_path),
            digest=digest,
        )
