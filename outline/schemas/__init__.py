from .page import Page, PageStore, estimate_tokens
from .tree_node import TreeNode
from .toc_entry import TocEntry, TocDetectionResult
from .verification import (
    VerificationResult,
    VerificationSummary,
    NodeFix,
    RepairSummary,
    PageRangeReport,
)
from .outline_result import OutlineResult

__all__ = [
    "Page",
    "PageStore",
    "estimate_tokens",
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
