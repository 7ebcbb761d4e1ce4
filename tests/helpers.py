"""Test helpers shared across test modules."""

import json
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class ArmCall:
    """One recorded call to a watch coordinator's arm()."""

    pattern_id: Path
    query: str
    paths: tuple[str, ...]
    callback: Callable[[], Awaitable[Any]]
    digest: str | None = None


@dataclass
class RecordingCoordinator:
    """Watch coordinator double that records arm() calls."""

    calls: list[ArmCall] = field(default_factory=list)

    def arm(
        self,
        pattern_id: Path,
        query: str,
        paths: Sequence[str],
        callback: Callable[[], Awaitable[Any]],
        *,
        digest: str | None = None,
    ) -> None:
        self.calls.append(ArmCall(pattern_id, query, tuple(paths), callback, digest))


def write_collection(
    pages_dir: Path,
    file_path: str,
    content: str = "<h1>{{ title }}</h1>\n",
) -> Path:
    """Create a collection source file under pages_dir."""
    path = pages_dir / file_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_data(data_dir: Path, model: str, records: list[dict[str, Any]]) -> Path:
    """Write the records of a model as JSON."""
    path = data_dir / f"{model}.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path
