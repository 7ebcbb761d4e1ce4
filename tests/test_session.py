"""Tests for build sessions."""

import json
from pathlib import Path

import pytest
from pagecreator.builder import BuildState
from pagecreator.config import Config
from pagecreator.session import BuildSession
from watchfiles import Change

from tests.helpers import write_collection, write_data


class TestBuildSession:
    """Tests for BuildSession."""

    @pytest.mark.asyncio
    async def test__build__creates_pages_and_manifest(self, test_config: Config) -> None:
        write_collection(test_config.pages.source_dir, "product/{Product.sku__en}.html")
        write_data(test_config.data.source_dir, "Product", [{"id": "p1", "sku": {"en": "Blue Hat"}}])
        session = BuildSession(test_config)

        results = await session.build()

        assert [r.halted_at for r in results] == [BuildState.WATCHING]
        assert "/product/blue-hat" in session.registry
        manifest = json.loads(session.manifest.path.read_text())
        assert [page["path"] for page in manifest] == ["/product/blue-hat"]

    @pytest.mark.asyncio
    async def test__build__arms_coordinator(self, test_config: Config) -> None:
        source = write_collection(test_config.pages.source_dir, "product/{Product.id}.html")
        write_data(test_config.data.source_dir, "Product", [{"id": "p1"}])
        session = BuildSession(test_config)

        await session.build()

        assert source.resolve() in session.coordinator

    @pytest.mark.asyncio
    async def test__no_collection_files__writes_empty_manifest(self, test_config: Config) -> None:
        session = BuildSession(test_config)

        results = await session.build()

        assert results == []
        assert json.loads(session.manifest.path.read_text()) == []

    @pytest.mark.asyncio
    async def test__data_change__rebuilds_and_removes_stale_pages(
        self, test_config: Config
    ) -> None:
        write_collection(test_config.pages.source_dir, "product/{Product.id}.html")
        write_data(test_config.data.source_dir, "Product", [{"id": "a"}, {"id": "b"}])
        session = BuildSession(test_config)
        await session.build()

        write_data(test_config.data.source_dir, "Product", [{"id": "a"}])
        await session.coordinator.data_changed()
        await session.coordinator.wait_idle()

        assert [page.path for page in session.registry.pages()] == ["/product/a"]

    @pytest.mark.asyncio
    async def test__data_change__rebuilds_only_affected_collections(
        self, test_config: Config
    ) -> None:
        write_collection(test_config.pages.source_dir, "product/{Product.id}.html")
        blog = write_collection(test_config.pages.source_dir, "blog/{Post.slug}.html")
        write_data(test_config.data.source_dir, "Product", [{"id": "a"}])
        write_data(test_config.data.source_dir, "Post", [{"slug": "hello"}])
        session = BuildSession(test_config)
        await session.build()

        write_data(test_config.data.source_dir, "Post", [{"slug": "hello"}, {"slug": "again"}])
        triggered = await session.coordinator.data_changed()
        await session.coordinator.wait_idle()

        assert triggered == [blog.resolve()]
        assert "/blog/again" in session.registry

    @pytest.mark.asyncio
    async def test__atomic_save_of_source__keeps_pages(self, test_config: Config) -> None:
        source = write_collection(test_config.pages.source_dir, "product/{Product.id}.html")
        write_data(test_config.data.source_dir, "Product", [{"id": "a"}])
        session = BuildSession(test_config)
        await session.build()

        await session.coordinator.handle_changes(
            [(Change.added, str(source)), (Change.deleted, str(source))]
        )
        await session.coordinator.wait_idle()

        assert "/product/a" in session.registry
        assert source.resolve() in session.coordinator

    @pytest.mark.asyncio
    async def test__added_collection_file__built(self, test_config: Config) -> None:
        write_data(test_config.data.source_dir, "Post", [{"slug": "hello"}])
        session = BuildSession(test_config)
        await session.build()

        source = write_collection(test_config.pages.source_dir, "blog/{Post.slug}.html")
        await session._on_added(source.resolve())

        assert "/blog/hello" in session.registry

    @pytest.mark.asyncio
    async def test__added_static_file__ignored(self, test_config: Config) -> None:
        session = BuildSession(test_config)

        source = write_collection(test_config.pages.source_dir, "about.html")
        await session._on_added(source.resolve())

        assert len(session.registry) == 0

    def test__write_manifest__unwritable__returns_none(
        self, test_config: Config, tmp_path: Path
    ) -> None:
        blocker = tmp_path / "blocked"
        blocker.write_text("")
        session = BuildSession(test_config.with_overrides(output_dir=blocker / "public"))

        assert session.write_manifest() is None
