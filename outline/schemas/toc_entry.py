from typing import List, Optional
from pydantic import BaseModel, Field


class TocEntry(BaseModel):
    title: str = Field(..., min_length=1, description="Entry title as printed in the table of contents")
    page_number: int = Field(..., ge=1, description="Physical page where the section starts")
    level: int = Field(0, ge=0, description="Nesting level (0 = top-level entry)")


class TocDetectionResult(BaseModel):
    has_toc: bool = Field(..., description="Does the document contain a table of contents?")
    toc_end_page: Optional[int] = Field(None, ge=1, description="Last page of the table of contents")
    entries: List[TocEntry] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "TocDetectionResult":
        return cls(has_toc=False, toc_end_page=None, entries=[])
