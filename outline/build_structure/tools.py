"""Page-reading tools offered to the oracle during structure discovery."""

import re
from typing import Dict

from infra.llm import OracleTool
from outline.page_context import truncate
from outline.schemas import PageStore
from .schemas import PageRequest

TOC_KEYWORDS = ("Contents", "CONTENTS", "INDEX", "INDICE")
DOT_LEADER_PATTERN = re.compile(r"\.{3,}\s*\d+|\.\.\.\s*\d+")


def has_toc_indicators(content: str) -> bool:
    return any(k in content for k in TOC_KEYWORDS) or bool(DOT_LEADER_PATTERN.search(content))


def _missing_page(page_number: int, pages: PageStore) -> Dict:
    return {"error": f"Page {page_number} not found (document has pages 1-{pages.total_pages})"}


def analyze_page_tool(pages: PageStore, char_limit: int) -> OracleTool:
    def handler(request: PageRequest) -> Dict:
        content = pages.get(request.page_number)
        if not content:
            return {**_missing_page(request.page_number, pages), "content": ""}
        return {
            "page_number": request.page_number,
            "content": truncate(content, char_limit),
            "has_toc_indicators": has_toc_indicators(content),
        }

    return OracleTool(
        name="analyze_page",
        description="Analyze a page to check for table of contents content. Use it for pages not in the initial sample.",
        input_model=PageRequest,
        handler=handler,
    )


def read_page_tool(pages: PageStore, char_limit: int) -> OracleTool:
    def handler(request: PageRequest) -> Dict:
        if not 1 <= request.page_number <= pages.total_pages:
            return _missing_page(request.page_number, pages)
        content = pages.get(request.page_number)
        if not content:
            return _missing_page(request.page_number, pages)
        return {"page_number": request.page_number, "content": truncate(content, char_limit)}

    return OracleTool(
        name="read_page",
        description=f"Read the content of a page (1 to {pages.total_pages}). Use it for pages not in the initial sample.",
        input_model=PageRequest,
        handler=handler,
    )
