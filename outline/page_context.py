"""Rendering page text into prompt context."""

from typing import Iterable, List

from outline.schemas import Page, PageStore


def truncate(text: str, limit: int) -> str:
    return text[:limit] if limit and len(text) > limit else text


def format_sample_pages(pages: Iterable[Page], char_limit: int) -> str:
    """`--- PAGE N ---` blocks, used for overview samples."""
    return "\n\n".join(
        f"--- PAGE {p.page_number} ---\n{truncate(p.content, char_limit)}"
        for p in pages
    )


def format_tagged_pages(pages: PageStore, start: int, end: int, char_limit: int) -> str:
    """
    Pages wrapped in <physical_index_N> markers so the oracle can cite exact
    page numbers.
    """
    blocks: List[str] = []
    for page in pages.in_range(start, end):
        n = page.page_number
        blocks.append(
            f"<physical_index_{n}>\n{truncate(page.content, char_limit)}\n</physical_index_{n}>"
        )
    return "\n\n".join(blocks)
