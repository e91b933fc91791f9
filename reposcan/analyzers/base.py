"""Base classes for section analyzers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, List, Tuple

from ..capabilities import Capabilities
from ..config import ScanConfig
from ..models import FileRecord, ReportBuilder
from ..walker import FileWalker


@dataclass
class ScanContext:
    """Read-only inputs shared by every analyzer in one scan."""

    root: Path
    records: List[FileRecord]
    walker: FileWalker
    capabilities: Capabilities
    config: ScanConfig
    extensions: FrozenSet[str] = field(init=False)

    def __post_init__(self) -> None:
        self.extensions = frozenset(record.extension for record in self.records)


class Analyzer(ABC):
    """Contract for analyzers that fill one part of the report."""

    #: Names of analyzers whose results this one reads from the builder.
    requires: Tuple[str, ...] = ()

    @abstractmethod
    def supports(self, context: ScanContext) -> bool:
        """Return True when this analyzer should run for the repository."""

    @abstractmethod
    def analyze(self, context: ScanContext, builder: ReportBuilder) -> None:
        """Record findings on ``builder``."""
