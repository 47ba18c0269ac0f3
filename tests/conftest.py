"""
Shared fixtures for the outline tests.

No network access: every oracle is scripted.
"""

import random
import pytest

from outline.schemas import Page, PageStore, TreeNode
from tests.fakes import ScriptedOracle


def make_pages(total: int, chars: int = 200, titles=None) -> PageStore:
    """Pages whose text starts with the given title (if any) followed by filler."""
    titles = titles or {}
    pages = []
    for n in range(1, total + 1):
        head = f"{titles[n]}\n" if n in titles else ""
        body = f"Body text of page {n}. "
        pages.append(Page(page_number=n, content=(head + body * (chars // len(body) + 1))[:max(chars, len(head))]))
    return PageStore(pages)


def node(node_id, title, start, end, level=1, children=None):
    return TreeNode(id=node_id, title=title, level=level, page_start=start, page_end=end, children=children or [])


@pytest.fixture
def oracle():
    return ScriptedOracle()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def pages_50():
    return make_pages(50, titles={5: "Chapter 1", 11: "Chapter 2", 20: "Chapter 3", 35: "Chapter 4"})


@pytest.fixture
def simple_tree():
    return TreeNode(
        id="root",
        title="Report",
        level=0,
        page_start=1,
        page_end=50,
        children=[
            node("c1", "Chapter 1", 5, 10),
            node("c2", "Chapter 2", 11, 19),
            node("c3", "Chapter 3", 20, 34),
            node("c4", "Chapter 4", 35, 50),
        ],
    )
