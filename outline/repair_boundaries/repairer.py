"""
Bounded repair of incorrect section boundaries.

Each round asks the oracle to relocate every still-incorrect node within the
pages between its nearest trusted neighbours (in document order). A relocation
is accepted only above the confidence threshold; optionally it is re-verified on
the new page. Rounds stop when nothing is left to fix or max_retries is reached.
Nothing here raises for an unrepairable node: leftovers are reported.
"""

import time
from typing import Callable, Iterable, List, Optional, Set, Tuple

from infra.cancellation import CancellationToken, check_cancelled
from infra.config import RepairSettings
from infra.llm import Oracle, OracleError
from infra.logger import PipelineLogger
from outline.page_context import format_tagged_pages
from outline.schemas import NodeFix, PageStore, RepairSummary, TreeNode
from outline.verify_boundaries import BoundaryVerifier

from .prompts import LOCATE_SECTION_PROMPT
from .schemas import PageLocation

FixCallback = Callable[[NodeFix], None]


def search_range(
    ordered_nodes: List[TreeNode],
    index: int,
    excluded: Set[str],
    total_pages: int
) -> Tuple[int, int]:
    """
    Page window for ordered_nodes[index]: from the nearest preceding node not in
    `excluded` to the nearest following one, using page_start of each. Falls back
    to 1 / total_pages at the ends.
    """
    start = 1
    for prev in reversed(ordered_nodes[:index]):
        if prev.id not in excluded and prev.page_start and prev.page_start > 0:
            start = prev.page_start
            break

    end = total_pages
    for nxt in ordered_nodes[index + 1:]:
        if nxt.id not in excluded and nxt.page_start and nxt.page_start > 0:
            end = nxt.page_start
            break

    start = max(1, min(start, total_pages))
    end = max(1, min(end, total_pages))
    if start > end:
        start, end = end, start
    return start, end


class BoundaryRepairer:

    def __init__(
        self,
        oracle: Oracle,
        verifier: Optional[BoundaryVerifier] = None,
        settings: Optional[RepairSettings] = None,
        logger: Optional[PipelineLogger] = None
    ):
        self.oracle = oracle
        self.settings = settings or RepairSettings()
        self.verifier = verifier or BoundaryVerifier(oracle, logger=logger)
        self.logger = logger

    def locate(
        self,
        title: str,
        pages: PageStore,
        page_range: Tuple[int, int],
        cancel: Optional[CancellationToken] = None
    ) -> Optional[PageLocation]:
        """Ask the oracle where `title` starts within page_range. None on failure."""
        start, end = page_range
        prompt = LOCATE_SECTION_PROMPT.format(
            title=title,
            content=format_tagged_pages(pages, start, end, self.settings.page_char_limit),
        )
        try:
            return self.oracle.infer(prompt, PageLocation, cancel=cancel)
        except OracleError as e:
            if self.logger:
                self.logger.warning("Locate failed", title=title, page_range=f"{start}-{end}", error=str(e))
            return None

    def accept(self, location: Optional[PageLocation], total_pages: int) -> bool:
        return (
            location is not None
            and location.page_number is not None
            and location.confidence > self.settings.confidence_threshold
            and 1 <= location.page_number <= total_pages
        )

    def repair(
        self,
        tree: TreeNode,
        incorrect_nodes: Iterable[str],
        pages: PageStore,
        max_retries: Optional[int] = None,
        verify_after_fix: Optional[bool] = None,
        on_fix: Optional[FixCallback] = None,
        cancel: Optional[CancellationToken] = None
    ) -> RepairSummary:
        """
        Relocate page_start of the given node ids in place.

        Fix events go to on_fix in round order, node order within a round.
        """
        start_time = time.time()
        max_retries = max_retries if max_retries is not None else self.settings.max_retries
        if verify_after_fix is None:
            verify_after_fix = self.settings.verify_after_fix

        ordered = list(tree.iter_nodes())
        position = {node.id: i for i, node in enumerate(ordered)}
        current = [node_id for node_id in dict.fromkeys(incorrect_nodes) if node_id in position]

        summary = RepairSummary()
        fixed_ids: Set[str] = set()

        if self.logger:
            self.logger.info("Starting boundary repair", incorrect=len(current), max_retries=max_retries)

        while current and summary.attempts < max_retries:
            check_cancelled(cancel, "repair_boundaries")
            summary.attempts += 1
            round_excluded = set(current)
            still_incorrect: List[str] = []

            if self.logger:
                self.logger.progress("Repair round", current=summary.attempts, total=max_retries, remaining=len(current))

            for node_id in current:
                node = ordered[position[node_id]]
                page_range = search_range(ordered, position[node_id], round_excluded, pages.total_pages)
                location = self.locate(node.title, pages, page_range, cancel)

                if not self.accept(location, pages.total_pages):
                    still_incorrect.append(node_id)
                    continue

                fix = NodeFix(
                    node_id=node.id,
                    title=node.title,
                    old_page=node.page_start,
                    new_page=location.page_number,
                )
                node.page_start = location.page_number
                fixed_ids.add(node.id)
                summary.fixes.append(fix)
                if on_fix:
                    on_fix(fix)

                if self.logger:
                    self.logger.page_event(
                        "Relocated section start",
                        page=fix.new_page,
                        node_id=node.id,
                        title=node.title,
                        old_page=fix.old_page,
                        confidence=location.confidence,
                    )

                if verify_after_fix:
                    appears, _ = self.verifier.verify_title_on_page(node.title, pages.get(node.page_start), cancel)
                    if not appears:
                        still_incorrect.append(node_id)

            current = still_incorrect

        summary.unresolved = list(current)
        summary.still_incorrect = len(current)
        summary.fixed = len(fixed_ids - set(current))

        if self.logger:
            self.logger.info(
                "Boundary repair complete",
                fixed=summary.fixed,
                still_incorrect=summary.still_incorrect,
                attempts=summary.attempts,
                duration_seconds=time.time() - start_time,
            )
        return summary
