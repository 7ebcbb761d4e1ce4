"""Build session wiring.

Creates the registry, reporter, query engine, watch coordinator and
builder for one configuration, and runs builds with them.
"""

import logging
from pathlib import Path

from pagecreator.builder import CollectionBuilder, CycleResult, discover_collection_files
from pagecreator.config import Config
from pagecreator.core.registry import PageManifest, PageRegistry
from pagecreator.core.template import has_placeholders
from pagecreator.live import WatchCoordinator
from pagecreator.query import JsonQueryEngine, extract_query_string
from pagecreator.reporter import Reporter, ReporterConfig

logger = logging.getLogger(__name__)


class BuildSession:
    """All collaborators of one build, configured from Config."""

    def __init__(self, config: Config) -> None:
        self.config = config
        self.reporter = Reporter(ReporterConfig(verbose=config.logging.verbose))
        self.registry = PageRegistry()
        self.engine = JsonQueryEngine(config.data.source_dir)
        self.manifest = PageManifest(config.output.dir)
        self.coordinator = WatchCoordinator(
            self.registry,
            self.reporter,
            pages_dir=config.pages.source_dir,
            data_dir=config.data.source_dir,
            extract_query=extract_query_string,
            execute=self.engine,
            on_added=self._on_added,
            on_settled=self.write_manifest,
            debounce_ms=config.watch.debounce_ms,
        )
        self.builder = CollectionBuilder(
            config.pages.source_dir,
            self.registry,
            self.engine,
            self.coordinator,
            self.reporter,
        )

    async def build(self) -> list[CycleResult]:
        """Build every collection file and write the manifest."""
        file_paths = discover_collection_files(self.config.pages.source_dir)
        if not file_paths:
            self.reporter.warn(f"No collection files found in {self.config.pages.source_dir}")

        results = await self.builder.build_all(file_paths)
        self.write_manifest()
        return results

    def write_manifest(self) -> Path | None:
        try:
            return self.manifest.write(self.registry)
        except OSError as e:
            logger.error("Could not write page manifest %s: %s", self.manifest.path, e)
            return None

    async def _on_added(self, path: Path) -> None:
        pages_dir = self.config.pages.source_dir.resolve()
        if not path.is_file() or not path.is_relative_to(pages_dir):
            return

        relative = path.relative_to(pages_dir).as_posix()
        if has_placeholders(relative):
            await self.builder.build(relative)
