from typing import List, Optional
from pydantic import BaseModel, Field


class PageRequest(BaseModel):
    page_number: int = Field(..., ge=1, description="Physical page number to read")


class StructureSubsection(BaseModel):
    title: str = Field(..., description="Subsection title")
    level: int = Field(2, ge=1, le=6, description="Hierarchy level (1-6)")
    page_start: int = Field(..., ge=1, description="Starting page")
    page_end: int = Field(..., ge=1, description="Ending page (>= page_start)")


class StructureSection(BaseModel):
    title: str = Field(..., description="Section title")
    level: int = Field(1, ge=1, le=6, description="Hierarchy level (1-6)")
    page_start: int = Field(..., ge=1, description="Starting page")
    page_end: int = Field(..., ge=1, description="Ending page (>= page_start)")
    children: Optional[List[StructureSubsection]] = Field(None, description="Nested subsections")


class StructureOutput(BaseModel):
    title: str = Field(..., description="Document title")
    sections: List[StructureSection] = Field(..., description="Main sections of the document in reading order")
