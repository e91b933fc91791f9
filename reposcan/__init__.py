"""Repository classifier and dependency reporter."""

from .models import AnalysisReport, DependencyKind, DependencyRecord, FileRecord
from .orchestrator import Orchestrator
from .renderer import render, render_dependency_map, render_json
from .walker import FatalInputError, FileWalker

__version__ = "0.1.0"

__all__ = [
    "AnalysisReport",
    "DependencyKind",
    "DependencyRecord",
    "FatalInputError",
    "FileRecord",
    "FileWalker",
    "Orchestrator",
    "render",
    "render_dependency_map",
    "render_json",
]
