"""Data models for the Toolverse utility service."""
from .document import SourceDocument, PagePreview
from .selection import PageSelection, ResolvedSelection, SelectionMode, RangeMode
from .artifact import OutputArtifact, Download
from .progress import Progress
from .api import PreviewPage, PreviewResponse, AgeResult, DateDiffResult

__all__ = [
    "SourceDocument",
    "PagePreview",
    "PageSelection",
    "ResolvedSelection",
    "SelectionMode",
    "RangeMode",
    "OutputArtifact",
    "Download",
    "Progress",
    "PreviewPage",
    "PreviewResponse",
    "AgeResult",
    "DateDiffResult",
]
