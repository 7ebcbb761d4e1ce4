"""Build-time reporting.

The reporter is the only channel the build pipeline uses to talk to the
user. Verbosity is configured per build session through ReporterConfig
rather than through process-wide flags.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

logger = logging.getLogger("pagecreator")

ERROR_PREFIX = "pagecreator"


class ErrorCode(Enum):
    """Error identifiers surfaced in build reports."""

    CollectionPath = "12105"
    CollectionBuilder = "12103"
    GeneratePath = "12104"
    QueryShape = "12111"

    @property
    def id(self) -> str:
        """Prefixed error id (e.g., "pagecreator_12104")."""
        return f"{ERROR_PREFIX}_{self.value}"


@dataclass(frozen=True)
class ErrorReport:
    """A structured build error."""

    code: ErrorCode
    source_message: str
    file_path: Path | None = None

    @property
    def id(self) -> str:
        return self.code.id

    def format(self) -> str:
        """Render the report as a single log message."""
        location = f" ({self.file_path})" if self.file_path is not None else ""
        return f"[{self.id}]{location} {self.source_message}"


@dataclass
class ReporterConfig:
    """Reporter configuration for one build session."""

    verbose: bool = False


@dataclass
class Reporter:
    """Collects and logs build diagnostics.

    ``error`` is recoverable: the build continues. ``panic_on_build`` marks
    the whole build as failed but never raises, so the current cycle can
    still arm its watch. The host decides how to exit based on
    ``has_panicked``.
    """

    config: ReporterConfig = field(default_factory=ReporterConfig)
    errors: list[ErrorReport] = field(default_factory=list)
    panics: list[ErrorReport] = field(default_factory=list)

    @property
    def is_verbose(self) -> bool:
        return self.config.verbose

    @property
    def has_panicked(self) -> bool:
        return bool(self.panics)

    def verbose(self, message: str) -> None:
        if self.config.verbose:
            logger.info(message)
        else:
            logger.debug(message)

    def warn(self, message: str) -> None:
        logger.warning(message)

    def error(self, report: ErrorReport) -> None:
        self.errors.append(report)
        logger.error(report.format())

    def panic_on_build(self, report: ErrorReport) -> None:
        self.panics.append(report)
        logger.critical(report.format())
