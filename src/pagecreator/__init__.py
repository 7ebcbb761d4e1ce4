"""pagecreator - Create static pages from data collections.

Derives page paths from templated file paths such as
``product/{Product.sku__en}.html`` and keeps the created pages in sync as
the collection files and their data change.
"""

from pagecreator.builder import CollectionBuilder, CycleResult, parse_query_result
from pagecreator.core.derive import Derivation, derive_path
from pagecreator.core.registry import Page, PageRegistry
from pagecreator.live import WatchCoordinator
from pagecreator.reporter import Reporter, ReporterConfig

__all__ = [
    "CollectionBuilder",
    "CycleResult",
    "Derivation",
    "Page",
    "PageRegistry",
    "Reporter",
    "ReporterConfig",
    "WatchCoordinator",
    "derive_path",
    "parse_query_result",
]
