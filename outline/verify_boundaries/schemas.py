from dataclasses import dataclass
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


@dataclass
class VerifyRequest:
    title: str
    page_number: int
    page_content: str


@dataclass
class BatchVerifyResult:
    title: str
    page_number: int
    appears: bool
    confidence: float


class TitleCheck(BaseModel):
    index: int = Field(..., description="Index of the verification request")
    appears: bool = Field(..., description="Whether the title appears on the page")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence level 0-1")
    reasoning: Optional[str] = Field(None, description="Brief reasoning")


class BatchVerification(BaseModel):
    verifications: List[TitleCheck] = Field(default_factory=list)


class StartCheck(BaseModel):
    index: int
    starts_at_beginning: bool = Field(..., description="Whether the title is the first content on the page")


class StartVerification(BaseModel):
    results: List[StartCheck] = Field(default_factory=list)


class SingleVerification(BaseModel):
    thinking: str = Field(..., description="Reasoning about whether the title appears")
    appears: Literal["yes", "no"] = Field(..., description="Whether the section title appears or starts on this page")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence level 0-1")
