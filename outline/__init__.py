"""
Document outline discovery.

    from outline import OutlinePipeline, load_pages

    pipeline = OutlinePipeline(oracle, settings)
    result = pipeline.run(load_pages("pages.json"))
"""

from outline.errors import OutlineError, StructureExtractionError, EmptyDocumentError, PipelineCancelled
from outline.loader import PageLoadError, load_pages
from outline.orchestrator import OutlinePipeline
from outline.schemas import (
    Page,
    PageStore,
    TreeNode,
    TocEntry,
    TocDetectionResult,
    VerificationResult,
    VerificationSummary,
    NodeFix,
    RepairSummary,
    PageRangeReport,
    OutlineResult,
)

__all__ = [
    "OutlinePipeline",
    "load_pages",
    "PageLoadError",
    "OutlineError",
    "StructureExtractionError",
    "EmptyDocumentError",
    "PipelineCancelled",
    "Page",
    "PageStore",
    "TreeNode",
    "TocEntry",
    "TocDetectionResult",
    "VerificationResult",
    "VerificationSummary",
    "NodeFix",
    "RepairSummary",
    "PageRangeReport",
    "OutlineResult",
]
