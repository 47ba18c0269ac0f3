import time
import uuid
from typing import List, Optional, Sequence

from infra.cancellation import CancellationToken
from infra.config import StructureSettings
from infra.llm import Oracle, OracleError
from infra.logger import PipelineLogger
from outline.errors import StructureExtractionError
from outline.page_context import format_sample_pages
from outline.schemas import PageStore, TocEntry, TreeNode

from .prompts import STRUCTURE_PROMPT, build_toc_context
from .schemas import StructureOutput
from .tools import read_page_tool


def select_sample_pages(
    total_pages: int,
    toc_entries: Optional[Sequence[TocEntry]] = None,
    toc_end_page: Optional[int] = None,
    max_pages: int = 12,
    max_toc_hints: int = 15
) -> List[int]:
    """
    Page numbers shown to the oracle up front: content start, the page after it,
    the midpoint, the last page and the first TOC entry pages.
    """
    content_start = min(toc_end_page + 1, total_pages) if toc_end_page else 1
    sample = {
        content_start,
        min(content_start + 1, total_pages),
        (content_start + total_pages) // 2,
        total_pages,
    }
    for entry in (toc_entries or [])[:max_toc_hints]:
        if 1 <= entry.page_number <= total_pages:
            sample.add(entry.page_number)
    return sorted(sample)[:max_pages]


class StructureExtractor:
    """Builds the initial (unverified) outline skeleton."""

    def __init__(
        self,
        oracle: Oracle,
        settings: Optional[StructureSettings] = None,
        logger: Optional[PipelineLogger] = None
    ):
        self.oracle = oracle
        self.settings = settings or StructureSettings()
        self.logger = logger

    def build_prompt(
        self,
        pages: PageStore,
        toc_entries: Optional[Sequence[TocEntry]] = None,
        toc_end_page: Optional[int] = None
    ) -> str:
        sample_numbers = select_sample_pages(
            pages.total_pages,
            toc_entries,
            toc_end_page,
            max_pages=self.settings.max_sample_pages,
            max_toc_hints=self.settings.max_toc_hint_pages,
        )
        sample = [p for p in pages if p.page_number in set(sample_numbers)]
        return STRUCTURE_PROMPT.format(
            total_pages=pages.total_pages,
            toc_context=build_toc_context(toc_entries),
            sample_pages=format_sample_pages(sample, self.settings.page_char_limit),
        )

    def extract(
        self,
        pages: PageStore,
        toc_entries: Optional[Sequence[TocEntry]] = None,
        toc_end_page: Optional[int] = None,
        cancel: Optional[CancellationToken] = None
    ) -> TreeNode:
        """
        Raises:
            StructureExtractionError: If the oracle yields no usable structure
        """
        start_time = time.time()

        if self.logger:
            self.logger.info(
                "Starting structure extraction",
                total_pages=pages.total_pages,
                toc_entries=len(toc_entries or []),
                toc_end_page=toc_end_page,
            )

        try:
            output = self.oracle.infer(
                self.build_prompt(pages, toc_entries, toc_end_page),
                StructureOutput,
                tools=[read_page_tool(pages, self.settings.tool_page_char_limit)],
                max_rounds=self.settings.max_rounds,
                cancel=cancel,
            )
        except OracleError as e:
            if self.logger:
                self.logger.error("Structure extraction failed", error=str(e))
            raise StructureExtractionError(f"No structured output from oracle: {e}") from e

        tree = to_tree(output, pages.total_pages)

        if self.logger:
            self.logger.info(
                "Structure extraction complete",
                title=tree.title,
                sections=len(tree.children),
                nodes=tree.count(),
                duration_seconds=time.time() - start_time,
            )
        return tree


def _new_id() -> str:
    return str(uuid.uuid4())


def _convert_section(section, level: int) -> TreeNode:
    node = TreeNode(
        id=_new_id(),
        title=section.title,
        level=level,
        page_start=section.page_start,
        page_end=section.page_end,
    )
    for child in getattr(section, "children", None) or []:
        node.children.append(_convert_section(child, level + 1))
    return node


def to_tree(output: StructureOutput, total_pages: int) -> TreeNode:
    """Convert oracle output into a TreeNode rooted at level 0 spanning the whole document."""
    return TreeNode(
        id=_new_id(),
        title=output.title,
        level=0,
        page_start=1,
        page_end=total_pages,
        children=[_convert_section(section, 1) for section in output.sections],
    )
