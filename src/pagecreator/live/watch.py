"""Watch coordination for collection pages.

Keeps, per collection source file, the query and paths produced by its last
build together with a callback that starts a fresh build. File system
events for the pages and data directories are turned into rebuilds, and
pages that a rebuild no longer produces are removed from the registry.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

from pagecreator.core.registry import PageRegistry
from pagecreator.core.template import strip_extension
from pagecreator.query import QueryExecutor, QueryExtractor, fingerprint
from pagecreator.reporter import Reporter

logger = logging.getLogger(__name__)

RebuildCallback = Callable[[], Awaitable[Any]]


@dataclass
class WatchState:
    """What the last build of one collection file produced."""

    query: str
    paths: tuple[str, ...]
    callback: RebuildCallback
    digest: str | None = None


class WatchCoordinator:
    """Rebuilds collection pages when their source file or data changes.

    Rebuilds are submitted as new asyncio tasks rather than called
    recursively, so a long-lived process can go through any number of
    rebuild cycles.
    """

    def __init__(
        self,
        registry: PageRegistry,
        reporter: Reporter,
        *,
        pages_dir: Path | None = None,
        data_dir: Path | None = None,
        extract_query: QueryExtractor | None = None,
        execute: QueryExecutor | None = None,
        on_added: Callable[[Path], Awaitable[Any]] | None = None,
        on_settled: Callable[[], Any] | None = None,
        debounce_ms: int = 1600,
    ) -> None:
        """Initialize the coordinator.

        Args:
            registry: Registry stale pages are removed from
            reporter: Reporter for diagnostics
            pages_dir: Directory holding collection source files
            data_dir: Directory holding the data the queries read
            extract_query: Re-extracts a source file's query after it changes.
                           Without it every source change triggers a rebuild.
            execute: Re-executes armed queries after data changes. Without it
                     every data change triggers a rebuild.
            on_added: Called for existing files in pages_dir that are not armed yet
            on_settled: Called once the rebuilds caused by a batch of changes finished
            debounce_ms: Debounce passed to the file watcher
        """
        self._registry = registry
        self._reporter = reporter
        self._pages_dir = pages_dir.resolve() if pages_dir is not None else None
        self._data_dir = data_dir.resolve() if data_dir is not None else None
        self._extract_query = extract_query
        self._execute = execute
        self._on_added = on_added
        self._on_settled = on_settled
        self._debounce_ms = debounce_ms
        self._states: dict[Path, WatchState] = {}
        self._tasks: set[asyncio.Task[Any]] = set()
        self._watch_task: asyncio.Task[None] | None = None

    def __contains__(self, pattern_id: object) -> bool:
        return pattern_id in self._states

    def get_state(self, pattern_id: Path) -> WatchState | None:
        return self._states.get(pattern_id)

    def arm(
        self,
        pattern_id: Path,
        query: str,
        paths: Sequence[str],
        callback: RebuildCallback,
        *,
        digest: str | None = None,
    ) -> None:
        """Record the outcome of a build and reconcile stale pages.

        Pages produced by the previous build of ``pattern_id`` that the new
        build did not produce again are deleted. Arming again with the same
        query and paths changes nothing but the digest.

        Args:
            pattern_id: Absolute path of the collection source file
            query: Query the build used ("" if none could be located)
            paths: Paths of the pages the build created
            callback: Starts a fresh build of the same file
            digest: Fingerprint of the query result the build used
        """
        produced = tuple(paths)
        previous = self._states.get(pattern_id)

        if previous is not None:
            if previous.query == query and previous.paths == produced:
                if digest is not None:
                    previous.digest = digest
                return
            self._remove_stale(pattern_id, previous.paths, produced)

        if digest is None and previous is not None and previous.query == query:
            digest = previous.digest
        self._states[pattern_id] = WatchState(query, produced, callback, digest)

    def trigger(self, pattern_id: Path) -> asyncio.Task[Any] | None:
        """Submit a fresh build of an armed collection file.

        Returns:
            The rebuild task, or None if the file is not armed
        """
        state = self._states.get(pattern_id)
        if state is None:
            return None

        self._reporter.verbose(f"PageCreator: rebuilding pages for {pattern_id}")
        return self._submit(state.callback(), pattern_id)

    def source_changed(self, pattern_id: Path) -> bool:
        """Handle a modified collection source file.

        A rebuild is triggered when the file's query changed, or when the
        last build could not locate a query at all.

        Returns:
            True if a rebuild was triggered
        """
        state = self._states.get(pattern_id)
        if state is None:
            return False

        if self._extract_query is not None and state.query:
            query = self._extract_query(pattern_id, self._pattern_for(pattern_id), self._reporter)
            if (query or "") == state.query:
                return False

        return self.trigger(pattern_id) is not None

    def source_removed(self, pattern_id: Path) -> None:
        """Delete every page of a removed collection source file."""
        state = self._states.pop(pattern_id, None)
        if state is None:
            return
        self._remove_stale(pattern_id, state.paths, ())

    async def data_changed(self) -> list[Path]:
        """Handle a change in the data directory.

        Every armed query is executed again and the files whose result
        changed are rebuilt. A state armed without a digest has nothing to
        compare with and is always rebuilt.

        Returns:
            Collection files a rebuild was triggered for
        """
        triggered: list[Path] = []
        for pattern_id, state in list(self._states.items()):
            if not state.query:
                continue

            if self._execute is not None:
                try:
                    result = await self._execute(state.query)
                except Exception:
                    logger.exception("Query failed while checking %s for changes", pattern_id)
                else:
                    digest = fingerprint(result)
                    if digest == state.digest:
                        continue
                    state.digest = digest

            if self.trigger(pattern_id) is not None:
                triggered.append(pattern_id)
        return triggered

    async def handle_changes(self, changes: Iterable[tuple[Change, str]]) -> None:
        """Dispatch one batch of file system changes."""
        data_touched = False
        changed: dict[Path, Change] = {}

        for change_type, path_str in changes:
            path = Path(path_str).resolve()
            if self._data_dir is not None and path.is_relative_to(self._data_dir):
                data_touched = True
            else:
                changed[path] = change_type

        # A batch may hold both added and deleted for one path (atomic saves),
        # so the file system decides whether a source is gone.
        for path, change_type in changed.items():
            if change_type == Change.deleted and not path.exists():
                self.source_removed(path)
            elif path in self._states:
                self.source_changed(path)
            elif self._on_added is not None and path.is_file():
                self._submit(self._on_added(path), path)

        if data_touched:
            await self.data_changed()

    async def start(self) -> None:
        """Start the file watcher."""
        if self._watch_task is not None:
            return
        self._watch_task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Stop the file watcher and wait for running rebuilds."""
        if self._watch_task is not None:
            self._watch_task.cancel()
            try:
                await self._watch_task
            except asyncio.CancelledError:
                pass
            self._watch_task = None

        await self.wait_idle()

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        """Watch the pages and data directories until stopped."""
        watch_paths = [p for p in (self._pages_dir, self._data_dir) if p is not None and p.exists()]
        if not watch_paths:
            logger.warning("Nothing to watch: no pages or data directory exists")
            return

        async for changes in awatch(*watch_paths, stop_event=stop_event, debounce=self._debounce_ms):
            await self.handle_changes(changes)
            if self._on_settled is not None:
                await self.wait_idle()
                self._on_settled()

    async def wait_idle(self) -> None:
        """Wait until no rebuild is running, including rebuilds they trigger."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _submit(self, coro: Awaitable[Any], pattern_id: Path) -> asyncio.Task[Any]:
        task = asyncio.ensure_future(self._guard(coro, pattern_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guard(self, coro: Awaitable[Any], pattern_id: Path) -> Any:
        try:
            return await coro
        except Exception:
            logger.exception("Rebuild failed for %s", pattern_id)
            return None

    def _remove_stale(self, pattern_id: Path, old: Iterable[str], new: Iterable[str]) -> None:
        keep = set(new)
        removed = [path for path in old if path not in keep and self._registry.delete_page(path, pattern_id)]
        if removed:
            self._reporter.verbose(
                f"PageCreator: removed {len(removed)} stale page{'s' if len(removed) != 1 else ''} "
                f"for {pattern_id}"
            )

    def _pattern_for(self, pattern_id: Path) -> str:
        if self._pages_dir is not None and pattern_id.is_relative_to(self._pages_dir):
            return strip_extension(pattern_id.relative_to(self._pages_dir).as_posix())
        return strip_extension(pattern_id.name)
