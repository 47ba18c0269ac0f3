from typing import Optional
from pydantic import BaseModel, Field

from .tree_node import TreeNode
from .toc_entry import TocDetectionResult
from .verification import PageRangeReport, RepairSummary, VerificationSummary


class OutlineResult(BaseModel):
    tree: TreeNode
    toc: TocDetectionResult = Field(default_factory=TocDetectionResult.empty)
    page_ranges: PageRangeReport = Field(default_factory=PageRangeReport)
    verification: Optional[VerificationSummary] = None
    repair: Optional[RepairSummary] = None
    preface_added: bool = False
    elapsed_seconds: float = 0.0
