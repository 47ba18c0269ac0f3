from typing import List
from pydantic import BaseModel, Field


class Subsection(BaseModel):
    structure: str = Field(..., description="Hierarchical index like 1.1, 1.2, 2.1.1")
    title: str = Field(..., description="Section title from the text")
    page_start: int = Field(..., description="Physical page where this section starts")


class SubsectionList(BaseModel):
    sections: List[Subsection] = Field(default_factory=list, description="Subsections in reading order")


class SplitSummary(BaseModel):
    nodes_checked: int = 0
    nodes_split: int = 0
    nodes_created: int = 0
    failures: int = 0
