from typing import List, Optional
from pydantic import BaseModel, Field


class VerificationResult(BaseModel):
    node_id: str
    title: str
    page_start: int
    verified: bool = Field(..., description="Title found on its start page")
    confidence: float = Field(..., ge=0.0, le=1.0)
    appears_at_start: Optional[bool] = Field(None, description="Title is the first content on the page (None if not checked)")


class VerificationSummary(BaseModel):
    accuracy: float = Field(0.0, ge=0.0, le=1.0, description="verified / total (0 when nothing was checked)")
    total: int = 0
    verified: int = 0
    failed: int = 0
    incorrect_nodes: List[str] = Field(default_factory=list, description="Ids of nodes whose boundary failed verification")
    results: List[VerificationResult] = Field(default_factory=list)


class NodeFix(BaseModel):
    node_id: str
    title: str
    old_page: Optional[int]
    new_page: int


class RepairSummary(BaseModel):
    fixed: int = 0
    still_incorrect: int = 0
    attempts: int = 0
    fixes: List[NodeFix] = Field(default_factory=list)
    unresolved: List[str] = Field(default_factory=list, description="Ids of nodes still incorrect after the last round")


class PageRangeReport(BaseModel):
    truncated_count: int = 0
    invalid_titles: List[str] = Field(default_factory=list)
