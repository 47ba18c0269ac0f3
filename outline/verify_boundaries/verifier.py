"""
Batched boundary verification.

Checks that each section title appears on its start page. All sampled nodes go
to the oracle in ONE request (plus one optional request asking whether the title
opens the page), so the cost does not grow with the number of nodes.
"""

import random
import time
from typing import Callable, Dict, List, Optional, Tuple

from infra.cancellation import CancellationToken
from infra.config import VerifySettings
from infra.llm import Oracle, OracleError
from infra.logger import PipelineLogger
from outline.page_context import truncate
from outline.schemas import PageStore, TreeNode, VerificationResult, VerificationSummary

from .prompts import (
    BATCH_VERIFY_ENTRY,
    BATCH_VERIFY_PROMPT,
    SINGLE_VERIFY_PROMPT,
    START_VERIFY_ENTRY,
    START_VERIFY_PROMPT,
)
from .schemas import (
    BatchVerification,
    BatchVerifyResult,
    SingleVerification,
    StartVerification,
    VerifyRequest,
)

ResultCallback = Callable[[VerificationResult], None]


class BoundaryVerifier:

    def __init__(
        self,
        oracle: Oracle,
        settings: Optional[VerifySettings] = None,
        logger: Optional[PipelineLogger] = None,
        rng: Optional[random.Random] = None
    ):
        self.oracle = oracle
        self.settings = settings or VerifySettings()
        self.logger = logger
        self.rng = rng or random.Random()

    # Primitives

    def verify_titles_on_pages(
        self,
        requests: List[VerifyRequest],
        cancel: Optional[CancellationToken] = None
    ) -> List[BatchVerifyResult]:
        """
        One oracle call for every request. Indices missing from the answer, and
        every request when the call fails, come back as not appearing.
        """
        if not requests:
            return []

        sections = "\n".join(
            BATCH_VERIFY_ENTRY.format(
                index=i,
                title=req.title,
                page_number=req.page_number,
                content=truncate(req.page_content, self.settings.page_char_limit),
            )
            for i, req in enumerate(requests)
        )
        prompt = BATCH_VERIFY_PROMPT.format(sections=sections, last_index=len(requests) - 1)

        checks = {}
        try:
            answer = self.oracle.infer(prompt, BatchVerification, cancel=cancel)
            checks = {check.index: check for check in answer.verifications}
        except OracleError as e:
            if self.logger:
                self.logger.warning("Batch verification failed, marking all unverified", error=str(e), requests=len(requests))

        results = []
        for i, req in enumerate(requests):
            check = checks.get(i)
            results.append(BatchVerifyResult(
                title=req.title,
                page_number=req.page_number,
                appears=check.appears if check else False,
                confidence=check.confidence if check else 0.0,
            ))
        return results

    def verify_titles_at_start(
        self,
        requests: List[VerifyRequest],
        cancel: Optional[CancellationToken] = None
    ) -> Dict[int, bool]:
        """One oracle call; maps request index -> title opens the page. Empty on failure."""
        if not requests:
            return {}

        sections = "\n---\n".join(
            START_VERIFY_ENTRY.format(
                index=i,
                title=req.title,
                content=truncate(req.page_content, self.settings.start_char_limit),
            )
            for i, req in enumerate(requests)
        )

        try:
            answer = self.oracle.infer(START_VERIFY_PROMPT.format(sections=sections), StartVerification, cancel=cancel)
        except OracleError as e:
            if self.logger:
                self.logger.warning("Page-start verification failed", error=str(e), requests=len(requests))
            return {}

        return {
            r.index: r.starts_at_beginning
            for r in answer.results
            if 0 <= r.index < len(requests)
        }

    def verify_title_on_page(
        self,
        title: str,
        page_content: Optional[str],
        cancel: Optional[CancellationToken] = None
    ) -> Tuple[bool, float]:
        """Single-node check used after a repair. Returns (appears, confidence)."""
        if not page_content:
            return False, 0.0

        prompt = SINGLE_VERIFY_PROMPT.format(
            title=title,
            content=truncate(page_content, self.settings.single_page_char_limit),
        )
        try:
            answer = self.oracle.infer(prompt, SingleVerification, cancel=cancel)
        except OracleError as e:
            if self.logger:
                self.logger.warning("Single verification failed", title=title, error=str(e))
            return False, 0.0

        return answer.appears == "yes", answer.confidence

    # Tree verification

    def collect_nodes(self, tree: TreeNode, sample_size: Optional[int] = None) -> List[TreeNode]:
        """Non-root nodes with a positive page_start, optionally sampled, in document order."""
        candidates = [
            node for node in tree.iter_nodes(include_self=False)
            if node.page_start is not None and node.page_start > 0
        ]
        if sample_size is None or sample_size <= 0 or sample_size >= len(candidates):
            return candidates

        chosen = {id(node) for node in self.rng.sample(candidates, sample_size)}
        return [node for node in candidates if id(node) in chosen]

    def verify(
        self,
        tree: TreeNode,
        pages: PageStore,
        sample_size: Optional[int] = -1,
        check_page_start: Optional[bool] = None,
        on_result: Optional[ResultCallback] = None,
        cancel: Optional[CancellationToken] = None
    ) -> VerificationSummary:
        """
        Verify section boundaries with at most two oracle calls.

        sample_size=-1 uses the configured default; None or 0 verifies every node.
        Results are reported through on_result in document order.
        """
        start_time = time.time()
        if sample_size == -1:
            sample_size = self.settings.sample_size
        if check_page_start is None:
            check_page_start = self.settings.check_page_start

        nodes = self.collect_nodes(tree, sample_size)

        if self.logger:
            self.logger.info("Starting boundary verification", nodes=len(nodes), check_page_start=check_page_start)

        # Nodes whose start page has no text are settled without the oracle
        requests: List[VerifyRequest] = []
        request_index: Dict[int, int] = {}
        for position, node in enumerate(nodes):
            content = pages.get(node.page_start)
            if content:
                request_index[position] = len(requests)
                requests.append(VerifyRequest(node.title, node.page_start, content))
            elif self.logger:
                self.logger.page_error("Start page has no text", page=node.page_start, error="no content", node_id=node.id)

        batch_results = self.verify_titles_on_pages(requests, cancel)

        start_results: Dict[int, bool] = {}
        start_lookup: Dict[int, int] = {}
        if check_page_start:
            appeared = [i for i, r in enumerate(batch_results) if r.appears]
            start_lookup = {request_i: sub_i for sub_i, request_i in enumerate(appeared)}
            start_results = self.verify_titles_at_start([requests[i] for i in appeared], cancel)

        summary = VerificationSummary()
        for position, node in enumerate(nodes):
            i = request_index.get(position)
            if i is None:
                result = VerificationResult(
                    node_id=node.id,
                    title=node.title,
                    page_start=node.page_start,
                    verified=False,
                    confidence=0.0,
                )
            else:
                batch = batch_results[i]
                appears_at_start = None
                if check_page_start and batch.appears:
                    appears_at_start = start_results.get(start_lookup[i], False)
                result = VerificationResult(
                    node_id=node.id,
                    title=node.title,
                    page_start=batch.page_number,
                    verified=batch.appears,
                    confidence=batch.confidence,
                    appears_at_start=appears_at_start,
                )

            summary.results.append(result)
            if result.verified:
                summary.verified += 1
            else:
                summary.failed += 1
                summary.incorrect_nodes.append(result.node_id)

            if on_result:
                on_result(result)

        summary.total = len(summary.results)
        summary.accuracy = summary.verified / summary.total if summary.total else 0.0

        if self.logger:
            self.logger.info(
                "Boundary verification complete",
                total=summary.total,
                verified=summary.verified,
                failed=summary.failed,
                accuracy=round(summary.accuracy, 3),
                duration_seconds=time.time() - start_time,
            )
        return summary
