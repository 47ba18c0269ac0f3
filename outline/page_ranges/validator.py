"""
Page-range normalisation and preface insertion.

validate_page_ranges() mutates the tree in place so that, afterwards, every node
satisfies 1 <= page_start <= page_end <= total_pages. It is idempotent: a second
pass changes nothing and reports zero truncations.
"""

import uuid
from typing import Optional

from outline.schemas import PageRangeReport, TreeNode

PREFACE_TITLE = "Preface / Introduction"


def validate_page_ranges(tree: TreeNode, total_pages: int) -> PageRangeReport:
    if total_pages < 1:
        raise ValueError(f"total_pages must be >= 1, got {total_pages}")

    report = PageRangeReport()
    _validate_node(tree, total_pages, None, report)
    return report


def _validate_node(node: TreeNode, total_pages: int, parent: Optional[TreeNode], report: PageRangeReport):
    # Missing bounds inherit from the parent (or the whole document)
    if node.page_start is None:
        node.page_start = parent.page_start if parent is not None else 1
    if node.page_end is None:
        node.page_end = parent.page_end if parent is not None else total_pages

    if node.page_start > total_pages:
        report.invalid_titles.append(node.title)
        node.page_start = total_pages
        report.truncated_count += 1
    elif node.page_start < 1:
        node.page_start = 1
        report.truncated_count += 1

    if node.page_end > total_pages:
        node.page_end = total_pages
        report.truncated_count += 1

    if node.page_start > node.page_end:
        node.page_end = node.page_start

    for child in node.children:
        _validate_node(child, total_pages, node, report)


def add_preface_if_needed(tree: TreeNode) -> bool:
    """
    Insert a lead-in section covering the pages before the first child.

    Returns True if a preface was inserted, False if the first child already
    starts on page 1 (or the tree has no children).
    """
    if not tree.children:
        return False

    first_start = tree.children[0].page_start or 1
    if first_start <= 1:
        return False

    preface = TreeNode(
        id=f"preface-{uuid.uuid4().hex[:12]}",
        title=PREFACE_TITLE,
        level=tree.level + 1,
        page_start=1,
        page_end=first_start - 1,
    )
    tree.children.insert(0, preface)
    return True
