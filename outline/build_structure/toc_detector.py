import time
from typing import Optional

from infra.cancellation import CancellationToken
from infra.config import TocSettings
from infra.llm import Oracle
from infra.logger import PipelineLogger
from outline.page_context import format_sample_pages
from outline.schemas import PageStore, TocDetectionResult

from .prompts import TOC_DETECTION_PROMPT
from .tools import analyze_page_tool


class TocDetector:
    """
    Looks for a table of contents in the leading pages.

    The result is a hint for skeleton extraction, never authoritative. Oracle
    failures propagate as OracleError; callers treat them as "no TOC".
    """

    def __init__(
        self,
        oracle: Oracle,
        settings: Optional[TocSettings] = None,
        logger: Optional[PipelineLogger] = None
    ):
        self.oracle = oracle
        self.settings = settings or TocSettings()
        self.logger = logger

    def build_prompt(self, pages: PageStore) -> str:
        sample = list(pages)[:self.settings.sample_pages]
        return TOC_DETECTION_PROMPT.format(
            sample_pages=format_sample_pages(sample, self.settings.page_char_limit)
        )

    def detect(self, pages: PageStore, cancel: Optional[CancellationToken] = None) -> TocDetectionResult:
        start_time = time.time()

        if self.logger:
            self.logger.info("Starting TOC detection", total_pages=pages.total_pages)

        result = self.oracle.infer(
            self.build_prompt(pages),
            TocDetectionResult,
            tools=[analyze_page_tool(pages, self.settings.tool_page_char_limit)],
            max_rounds=self.settings.max_rounds,
            cancel=cancel,
        )
        result = self._normalize(result, pages.total_pages)

        if self.logger:
            self.logger.info(
                "TOC detection complete",
                has_toc=result.has_toc,
                entries=len(result.entries),
                toc_end_page=result.toc_end_page,
                duration_seconds=time.time() - start_time,
            )
        return result

    def _normalize(self, result: TocDetectionResult, total_pages: int) -> TocDetectionResult:
        if not result.has_toc or not result.entries:
            return TocDetectionResult(has_toc=result.has_toc, toc_end_page=result.toc_end_page if result.has_toc else None, entries=[])

        toc_end_page = result.toc_end_page
        if toc_end_page is not None and toc_end_page > total_pages:
            toc_end_page = total_pages
        return TocDetectionResult(has_toc=True, toc_end_page=toc_end_page, entries=result.entries)
