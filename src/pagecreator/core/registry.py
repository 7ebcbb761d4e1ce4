"""Registered pages.

Holds the pages created from collection patterns with O(1) path lookups,
and writes them to a JSON manifest:

    public/
    └── pages.json       # [{"path": ..., "matchPath": ..., "component": ..., "context": ...}]
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypedDict

from pagecreator.core.types import URLPath


class PageDict(TypedDict):
    """Dictionary representation of a page."""

    path: str
    matchPath: str | None
    component: str
    context: dict[str, Any]


@dataclass(frozen=True)
class Page:
    """A page created from a collection pattern."""

    path: URLPath
    component: Path
    context: dict[str, Any] = field(default_factory=dict)
    match_path: str | None = None

    def to_dict(self) -> PageDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.path,
            "matchPath": self.match_path,
            "component": str(self.component),
            "context": self.context,
        }


class PageRegistry:
    """Pages keyed by URL path.

    Creating a page at an existing path replaces it, which makes repeated
    builds of the same pattern idempotent.
    """

    __slots__ = ("_pages",)

    def __init__(self) -> None:
        self._pages: dict[str, Page] = {}

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, path: object) -> bool:
        return path in self._pages

    def create_page(self, page: Page) -> None:
        """Register a page, replacing any page at the same path."""
        self._pages[page.path] = page

    def delete_page(self, path: str, component: Path) -> bool:
        """Remove a page created by ``component``.

        Args:
            path: URL path of the page
            component: Component the page was created for

        Returns:
            True if a page was removed
        """
        page = self._pages.get(self._normalize_path(path))
        if page is None or page.component != component:
            return False
        del self._pages[page.path]
        return True

    def get_page(self, path: str) -> Page | None:
        """Get page by path.

        Args:
            path: URL path (e.g., "product/blue-hat" or "/product/blue-hat")

        Returns:
            Page if found, None otherwise
        """
        return self._pages.get(self._normalize_path(path))

    def pages(self) -> list[Page]:
        """All pages, sorted by path."""
        return [self._pages[path] for path in sorted(self._pages)]

    def _normalize_path(self, path: str) -> str:
        """Normalize path to have leading slash."""
        return path if path.startswith("/") else f"/{path}"


class PageManifest:
    """JSON manifest of registered pages."""

    FILENAME = "pages.json"

    def __init__(self, output_dir: Path) -> None:
        """Initialize manifest with its output directory.

        Args:
            output_dir: Directory the manifest is written to (e.g., public/)
        """
        self._output_dir = output_dir

    @property
    def path(self) -> Path:
        return self._output_dir / self.FILENAME

    def write(self, registry: PageRegistry) -> Path:
        """Write every registered page to the manifest.

        Returns:
            Path of the written manifest
        """
        self._output_dir.mkdir(parents=True, exist_ok=True)
        data = [page.to_dict() for page in registry.pages()]
        self.path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
        return self.path
