"""Shared test fixtures."""

from pathlib import Path

import pytest
from pagecreator.config import (
    Config,
    DataConfig,
    LoggingConfig,
    OutputConfig,
    PagesConfig,
    ServerConfig,
    WatchConfig,
)
from pagecreator.core.registry import PageRegistry
from pagecreator.reporter import Reporter, ReporterConfig

from tests.helpers import RecordingCoordinator


@pytest.fixture
def reporter() -> Reporter:
    return Reporter(ReporterConfig(verbose=False))


@pytest.fixture
def registry() -> PageRegistry:
    return PageRegistry()


@pytest.fixture
def coordinator() -> RecordingCoordinator:
    return RecordingCoordinator()


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with tmp_path directories.

    Creates pages and data directories and returns a Config instance
    suitable for testing.
    """
    pages_dir = tmp_path / "pages"
    pages_dir.mkdir(exist_ok=True)
    data_dir = tmp_path / "data"
    data_dir.mkdir(exist_ok=True)

    return Config(
        pages=PagesConfig(source_dir=pages_dir),
        data=DataConfig(source_dir=data_dir),
        output=OutputConfig(dir=tmp_path / "public"),
        server=ServerConfig(),
        watch=WatchConfig(enabled=False),
        logging=LoggingConfig(),
    )
