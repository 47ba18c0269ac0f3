import math
from typing import Dict, Iterable, Iterator, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class Page(BaseModel):
    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1, description="1-based physical page number")
    content: str = Field("", description="Extracted page text")


def estimate_tokens(text: str) -> int:
    """Coarse token proxy: one token per four characters, rounded up."""
    return math.ceil(len(text) / 4)


class PageStore:
    """
    Read-only, page-number-indexed view over a document's pages.

    Pages may be sparse; total_pages is the highest page number seen.
    """

    def __init__(self, pages: Iterable[Page]):
        self._pages: Dict[int, Page] = {}
        for page in pages:
            self._pages[page.page_number] = page
        self._ordered: List[Page] = [self._pages[n] for n in sorted(self._pages)]

    @classmethod
    def from_texts(cls, texts: Iterable[str]) -> "PageStore":
        return cls(Page(page_number=i, content=text) for i, text in enumerate(texts, start=1))

    @property
    def total_pages(self) -> int:
        return self._ordered[-1].page_number if self._ordered else 0

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._ordered)

    def __contains__(self, page_number: int) -> bool:
        return page_number in self._pages

    def get(self, page_number: int) -> Optional[str]:
        page = self._pages.get(page_number)
        return page.content if page is not None else None

    def in_range(self, start: int, end: int) -> List[Page]:
        return [p for p in self._ordered if start <= p.page_number <= end]

    def estimated_tokens(self, start: int, end: int) -> int:
        return sum(estimate_tokens(p.content) for p in self.in_range(start, end))
