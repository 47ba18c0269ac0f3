from typing import Optional
from pydantic import BaseModel, Field


class PageLocation(BaseModel):
    thinking: str = Field(..., description="Explain which page contains the start of this section")
    page_number: Optional[int] = Field(None, description="Physical page where the section starts, or null if not found")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence level 0-1")
