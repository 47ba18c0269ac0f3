"""
Outline pipeline.

Runs the stages strictly in order on one document:

    toc_detection -> structure_extraction -> validate_page_ranges -> preface
      -> split_large_nodes -> validate_page_ranges -> verify_boundaries
      -> repair_boundaries -> validate_page_ranges -> node text

Progress events go to an optional sink. Cancellation is checked between stages
(and inside the stages between oracle calls).
"""

import time
from typing import Optional, Sequence, Union

from infra.cancellation import CancellationToken, check_cancelled
from infra.config import OutlineSettings
from infra.events import EventEmitter, EventSink
from infra.llm import Oracle, OracleError
from infra.logger import PipelineLogger

from outline.build_structure import StructureExtractor, TocDetector
from outline.errors import EmptyDocumentError, OutlineError, PipelineCancelled
from outline.page_ranges import add_node_text, add_preface_if_needed, validate_page_ranges
from outline.repair_boundaries import BoundaryRepairer
from outline.schemas import (
    NodeFix,
    OutlineResult,
    Page,
    PageRangeReport,
    PageStore,
    TocDetectionResult,
    TreeNode,
    VerificationResult,
)
from outline.split_large import LargeSectionSplitter
from outline.verify_boundaries import BoundaryVerifier


class OutlinePipeline:

    def __init__(
        self,
        oracle: Oracle,
        settings: Optional[OutlineSettings] = None,
        logger: Optional[PipelineLogger] = None
    ):
        self.oracle = oracle
        self.settings = settings or OutlineSettings()
        self.logger = logger

        self.toc_detector = TocDetector(oracle, self.settings.toc, self._child_logger("toc_detection"))
        self.structure_extractor = StructureExtractor(oracle, self.settings.structure, self._child_logger("structure_extraction"))
        self.splitter = LargeSectionSplitter(oracle, self.settings.split, self._child_logger("split_large_nodes"))
        self.verifier = BoundaryVerifier(oracle, self.settings.verify, self._child_logger("verify_boundaries"))
        self.repairer = BoundaryRepairer(oracle, self.verifier, self.settings.repair, self._child_logger("repair_boundaries"))

    def _child_logger(self, stage: str) -> Optional[PipelineLogger]:
        return self.logger.child(stage) if self.logger else None

    def run(
        self,
        pages: Union[PageStore, Sequence[Page]],
        on_event: Optional[EventSink] = None,
        cancel: Optional[CancellationToken] = None
    ) -> OutlineResult:
        """
        Build, verify and repair the outline for one document.

        Raises:
            StructureExtractionError: No skeleton could be obtained
            PipelineCancelled: cancel fired
            EmptyDocumentError: No pages
        """
        if not isinstance(pages, PageStore):
            pages = PageStore(pages)

        start_time = time.time()
        events = EventEmitter(on_event, "pipeline")
        events.started(total_pages=pages.total_pages)

        if self.logger:
            self.logger.start_stage(total_pages=pages.total_pages)

        try:
            result = self._run(pages, on_event, cancel)
        except PipelineCancelled as e:
            events.error(message="cancelled", error=str(e))
            if self.logger:
                self.logger.warning("Pipeline cancelled", error=str(e))
            raise
        except OutlineError as e:
            events.error(message="failed", error=str(e), error_type=type(e).__name__)
            if self.logger:
                self.logger.error("Pipeline failed", error=str(e), error_type=type(e).__name__)
            raise

        result.elapsed_seconds = time.time() - start_time
        events.completed(
            nodes=result.tree.count(),
            accuracy=result.verification.accuracy if result.verification else None,
            fixed=result.repair.fixed if result.repair else None,
            elapsed_seconds=round(result.elapsed_seconds, 2),
        )
        if self.logger:
            self.logger.complete_stage(result.elapsed_seconds, nodes=result.tree.count())
        return result

    def _run(self, pages: PageStore, on_event: Optional[EventSink], cancel: Optional[CancellationToken]) -> OutlineResult:
        if pages.total_pages < 1:
            raise EmptyDocumentError("Document has no pages")

        check_cancelled(cancel, "toc_detection")
        toc = self._detect_toc(pages, on_event, cancel)

        check_cancelled(cancel, "structure_extraction")
        tree = self._extract_structure(pages, toc, on_event, cancel)

        check_cancelled(cancel, "validate_page_ranges")
        page_ranges = self._validate(tree, pages, on_event, "initial")

        result = OutlineResult(tree=tree, toc=toc, page_ranges=page_ranges)

        if self.settings.add_preface:
            events = EventEmitter(on_event, "preface")
            result.preface_added = add_preface_if_needed(tree)
            events.completed(added=result.preface_added)

        if self.settings.split.enabled:
            check_cancelled(cancel, "split_large_nodes")
            self._split(tree, pages, on_event, cancel)
            self._merge_report(result.page_ranges, self._validate(tree, pages, on_event, "after_split"))

        if self.settings.verify.enabled:
            check_cancelled(cancel, "verify_boundaries")
            result.verification = self._verify(tree, pages, on_event, cancel)

            if self.settings.repair.enabled and result.verification.incorrect_nodes:
                check_cancelled(cancel, "repair_boundaries")
                result.repair = self._repair(tree, result.verification.incorrect_nodes, pages, on_event, cancel)
                self._merge_report(result.page_ranges, self._validate(tree, pages, on_event, "after_repair"))

        if self.settings.attach_node_text:
            add_node_text(tree, pages)

        return result

    def _detect_toc(self, pages, on_event, cancel) -> TocDetectionResult:
        events = EventEmitter(on_event, "toc_detection")
        events.started(total_pages=pages.total_pages)
        events.progress(message="Scanning for table of contents...")

        try:
            toc = self.toc_detector.detect(pages, cancel)
        except OracleError as e:
            # No TOC hints is a valid outcome
            if self.logger:
                self.logger.warning("TOC detection failed, continuing without TOC", error=str(e))
            events.progress(message="TOC detection failed, continuing without TOC", error=str(e))
            toc = TocDetectionResult.empty()

        events.completed(has_toc=toc.has_toc, entries=len(toc.entries), toc_end_page=toc.toc_end_page)
        return toc

    def _extract_structure(self, pages, toc, on_event, cancel) -> TreeNode:
        events = EventEmitter(on_event, "structure_extraction")
        events.started(total_pages=pages.total_pages)
        events.progress(message="Analyzing document structure...")

        tree = self.structure_extractor.extract(
            pages,
            toc_entries=toc.entries or None,
            toc_end_page=toc.toc_end_page,
            cancel=cancel,
        )

        events.completed(title=tree.title, sections=len(tree.children), nodes=tree.count())
        return tree

    def _validate(self, tree, pages, on_event, phase: str) -> PageRangeReport:
        events = EventEmitter(on_event, "validate_page_ranges")
        report = validate_page_ranges(tree, pages.total_pages)
        if report.truncated_count and self.logger:
            self.logger.warning(
                "Clamped page ranges past end of document",
                phase=phase,
                truncated=report.truncated_count,
                invalid_titles=report.invalid_titles,
            )
        events.completed(phase=phase, truncated=report.truncated_count, invalid_titles=report.invalid_titles)
        return report

    @staticmethod
    def _merge_report(total: PageRangeReport, report: PageRangeReport):
        total.truncated_count += report.truncated_count
        total.invalid_titles.extend(report.invalid_titles)

    def _split(self, tree, pages, on_event, cancel):
        events = EventEmitter(on_event, "split_large_nodes")
        events.started(
            max_pages_per_node=self.settings.split.max_pages_per_node,
            max_tokens_per_node=self.settings.split.max_tokens_per_node,
        )

        def on_split(node: TreeNode, children):
            events.progress(node=node.title, node_id=node.id, new_children=len(children))

        summary = self.splitter.split_tree(tree, pages, cancel=cancel, on_split=on_split)
        events.completed(**summary.model_dump())
        return summary

    def _verify(self, tree, pages, on_event, cancel):
        events = EventEmitter(on_event, "verify_boundaries")
        sample_size = self.settings.verify.sample_size
        events.started(sample_size=sample_size, check_page_start=self.settings.verify.check_page_start)

        seen = []

        def on_result(result: VerificationResult):
            seen.append(result)
            events.progress(
                current_node=result.title,
                node_id=result.node_id,
                verified=result.verified,
                confidence=result.confidence,
                index=len(seen),
            )

        summary = self.verifier.verify(tree, pages, sample_size=sample_size, on_result=on_result, cancel=cancel)
        events.completed(
            accuracy=summary.accuracy,
            total=summary.total,
            verified=summary.verified,
            failed=summary.failed,
        )
        return summary

    def _repair(self, tree, incorrect_nodes, pages, on_event, cancel):
        events = EventEmitter(on_event, "repair_boundaries")
        events.started(incorrect=len(incorrect_nodes), max_retries=self.settings.repair.max_retries)

        def on_fix(fix: NodeFix):
            events.progress(node=fix.title, node_id=fix.node_id, old_page=fix.old_page, new_page=fix.new_page)

        summary = self.repairer.repair(tree, incorrect_nodes, pages, on_fix=on_fix, cancel=cancel)
        events.completed(fixed=summary.fixed, still_incorrect=summary.still_incorrect, attempts=summary.attempts)
        return summary
