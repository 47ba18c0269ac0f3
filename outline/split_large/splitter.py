"""
Recursive splitting of oversized sections.

A node is large when it spans more than max_pages_per_node pages AND its pages
hold at least max_tokens_per_node estimated tokens. A large node is shown to the
oracle page by page and its subsections become new children; each new child is
then checked with the same predicate. Recursion only descends into children whose
range is a strict subset of the parent's original range, so it always terminates.
"""

import time
import uuid
from typing import Callable, List, Optional, Tuple

from infra.cancellation import CancellationToken, check_cancelled
from infra.config import SplitSettings
from infra.llm import Oracle, OracleError
from infra.logger import PipelineLogger
from outline.page_context import format_tagged_pages
from outline.schemas import PageStore, TreeNode

from .prompts import SUBSECTION_PROMPT
from .schemas import Subsection, SubsectionList, SplitSummary

SplitCallback = Callable[[TreeNode, List[TreeNode]], None]


def node_range(node: TreeNode) -> Tuple[int, int]:
    start = node.page_start or 1
    end = node.page_end or start
    return start, end


def is_large_node(node: TreeNode, pages: PageStore, max_pages: int, max_tokens: int) -> bool:
    start, end = node_range(node)
    if end - start + 1 <= max_pages:
        return False
    return pages.estimated_tokens(start, end) >= max_tokens


def plan_children(
    node: TreeNode,
    subsections: List[Subsection],
    skip_repeated_title: bool = True
) -> Tuple[List[TreeNode], Optional[int]]:
    """
    Turn oracle subsections into child nodes for `node` without mutating it.

    Returns (new_children, new_parent_page_end). Subsections starting outside the
    node's range, or before the previous kept subsection, are dropped.
    """
    start, end = node_range(node)

    if skip_repeated_title and subsections:
        if subsections[0].title.strip().lower() == node.title.strip().lower():
            subsections = subsections[1:]

    kept: List[Subsection] = []
    for sub in subsections:
        if not start <= sub.page_start <= end:
            continue
        if kept and sub.page_start < kept[-1].page_start:
            continue
        kept.append(sub)

    if not kept:
        return [], None

    children = []
    for i, sub in enumerate(kept):
        if i + 1 < len(kept):
            child_end = max(sub.page_start, kept[i + 1].page_start - 1)
        else:
            child_end = end
        children.append(TreeNode(
            id=str(uuid.uuid4()),
            title=sub.title,
            level=node.level + 1,
            page_start=sub.page_start,
            page_end=child_end,
        ))

    new_parent_end = max(start, kept[0].page_start - 1)
    return children, new_parent_end


class LargeSectionSplitter:

    def __init__(
        self,
        oracle: Oracle,
        settings: Optional[SplitSettings] = None,
        logger: Optional[PipelineLogger] = None
    ):
        self.oracle = oracle
        self.settings = settings or SplitSettings()
        self.logger = logger

    def is_large(self, node: TreeNode, pages: PageStore) -> bool:
        return is_large_node(
            node, pages,
            self.settings.max_pages_per_node,
            self.settings.max_tokens_per_node,
        )

    def build_prompt(self, node: TreeNode, pages: PageStore) -> str:
        start, end = node_range(node)
        return SUBSECTION_PROMPT.format(
            title=node.title,
            page_start=start,
            page_end=end,
            content=format_tagged_pages(pages, start, end, self.settings.page_char_limit),
        )

    def split_node(
        self,
        node: TreeNode,
        pages: PageStore,
        cancel: Optional[CancellationToken] = None
    ) -> List[TreeNode]:
        """
        Split one large node a single level deep.

        Returns the appended children (empty if the node was left unsplit).
        Oracle failures leave the node untouched.
        """
        try:
            result = self.oracle.infer(self.build_prompt(node, pages), SubsectionList, cancel=cancel)
        except OracleError as e:
            if self.logger:
                self.logger.warning("Split failed, leaving node unsplit", node_id=node.id, title=node.title, error=str(e))
            raise

        children, new_end = plan_children(node, result.sections, self.settings.skip_repeated_parent_title)
        if not children:
            if self.logger:
                self.logger.info("No subsections found", node_id=node.id, title=node.title)
            return []

        node.page_end = new_end
        node.children.extend(children)
        return children

    def split_recursive(
        self,
        node: TreeNode,
        pages: PageStore,
        summary: SplitSummary,
        cancel: Optional[CancellationToken] = None,
        on_split: Optional[SplitCallback] = None
    ):
        check_cancelled(cancel, "split_large_nodes")
        summary.nodes_checked += 1
        if not self.is_large(node, pages):
            return

        original_start, original_end = node_range(node)
        if self.logger:
            self.logger.info(
                "Splitting large node",
                node_id=node.id,
                title=node.title,
                page_range=f"{original_start}-{original_end}",
                tokens=pages.estimated_tokens(original_start, original_end),
            )

        try:
            children = self.split_node(node, pages, cancel)
        except OracleError:
            summary.failures += 1
            return

        if not children:
            return

        summary.nodes_split += 1
        summary.nodes_created += len(children)
        if on_split:
            on_split(node, children)

        for child in children:
            child_start, child_end = node_range(child)
            if (child_start, child_end) == (original_start, original_end):
                continue
            self.split_recursive(child, pages, summary, cancel, on_split)

    def split_tree(
        self,
        tree: TreeNode,
        pages: PageStore,
        cancel: Optional[CancellationToken] = None,
        on_split: Optional[SplitCallback] = None
    ) -> SplitSummary:
        """Check every non-root node present before splitting starts, depth-first."""
        start_time = time.time()
        summary = SplitSummary()

        for node in list(tree.iter_nodes(include_self=False)):
            self.split_recursive(node, pages, summary, cancel, on_split)

        if self.logger:
            self.logger.info(
                "Large node splitting complete",
                nodes_checked=summary.nodes_checked,
                nodes_split=summary.nodes_split,
                nodes_created=summary.nodes_created,
                failures=summary.failures,
                duration_seconds=time.time() - start_time,
            )
        return summary
