"""
Configuration schemas for the outline pipeline.

Defines the structure of the YAML settings file. Every section has working
defaults, so an empty (or missing) file yields a runnable configuration.
"""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, field_validator
import os
import re


class LLMSettings(BaseModel):
    """Inference endpoint + model used as the text-understanding oracle."""
    provider: str = Field("openrouter", description="Provider type (only openrouter is built in)")
    model: str = Field("google/gemini-2.5-flash", description="Model identifier")
    api_key: str = Field("${OPENROUTER_API_KEY}", description="API key (can use ${ENV_VAR} syntax)")
    site_url: str = Field("https://github.com/outliner", description="HTTP-Referer sent to OpenRouter")
    site_name: str = Field("outliner", description="X-Title sent to OpenRouter")
    temperature: float = Field(0.0, ge=0.0, le=2.0)
    request_timeout_seconds: int = Field(120, ge=1, description="Per-HTTP-request timeout")
    oracle_timeout_seconds: float = Field(600.0, gt=0, description="Deadline for one oracle call (incl. tool loop)")
    max_retries: int = Field(3, ge=1, description="Transport-level retries per request")

    def resolved_api_key(self) -> str:
        return resolve_env_vars(self.api_key).strip()


class TocSettings(BaseModel):
    """Table-of-contents detection."""
    sample_pages: int = Field(10, ge=1, description="Leading pages given to the oracle as direct context")
    page_char_limit: int = Field(2000, ge=100)
    tool_page_char_limit: int = Field(4000, ge=100)
    max_rounds: int = Field(500, ge=1, description="Maximum tool-loop rounds")


class StructureSettings(BaseModel):
    """Initial skeleton extraction."""
    max_sample_pages: int = Field(12, ge=1)
    max_toc_hint_pages: int = Field(15, ge=0)
    page_char_limit: int = Field(2000, ge=100)
    tool_page_char_limit: int = Field(4000, ge=100)
    max_rounds: int = Field(500, ge=1)


class SplitSettings(BaseModel):
    """Recursive splitting of oversized sections."""
    enabled: bool = True
    max_pages_per_node: int = Field(15, ge=1)
    max_tokens_per_node: int = Field(20000, ge=1)
    page_char_limit: int = Field(2000, ge=100)
    # Heuristic: the oracle often repeats the parent heading as the first subsection
    skip_repeated_parent_title: bool = True


class VerifySettings(BaseModel):
    """Batched boundary verification."""
    enabled: bool = True
    sample_size: Optional[int] = Field(10, ge=1, description="None verifies every node")
    check_page_start: bool = True
    page_char_limit: int = Field(1500, ge=100)
    start_char_limit: int = Field(500, ge=50)
    single_page_char_limit: int = Field(3000, ge=100)


class RepairSettings(BaseModel):
    """Bounded repair loop for incorrect boundaries."""
    enabled: bool = True
    max_retries: int = Field(3, ge=1)
    verify_after_fix: bool = True
    confidence_threshold: float = Field(0.5, ge=0.0, le=1.0)
    page_char_limit: int = Field(2000, ge=100)


class OutlineSettings(BaseModel):
    """
    Top-level settings.

    Stored as YAML, e.g. outliner.yaml:

        llm:
          model: google/gemini-2.5-flash
        verify:
          sample_size: 20
    """
    llm: LLMSettings = Field(default_factory=LLMSettings)
    toc: TocSettings = Field(default_factory=TocSettings)
    structure: StructureSettings = Field(default_factory=StructureSettings)
    split: SplitSettings = Field(default_factory=SplitSettings)
    verify: VerifySettings = Field(default_factory=VerifySettings)
    repair: RepairSettings = Field(default_factory=RepairSettings)
    add_preface: bool = True
    attach_node_text: bool = False
    log_dir: Optional[Path] = Field(None, description="Directory for JSON logs and agent run logs")

    @field_validator('log_dir')
    @classmethod
    def expand_log_dir(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return None
        return Path(resolve_env_vars(str(v))).expanduser()


def resolve_env_vars(value: str) -> str:
    """
    Resolve ${ENV_VAR} references in a string.

    Examples:
        "${OPENROUTER_API_KEY}" -> actual value from environment
        "literal-value" -> "literal-value"
        "${MISSING_VAR}" -> "" (empty string if not set)
    """
    if not isinstance(value, str):
        return value

    pattern = r'\$\{([^}]+)\}'

    def replace(match):
        var_name = match.group(1)
        return os.environ.get(var_name, "")

    return re.sub(pattern, replace, value)
