"""Tests for node text helpers and the page store."""

from outline.page_ranges import add_node_text, get_node_text, remove_node_text
from outline.schemas import Page, PageStore, estimate_tokens
from tests.conftest import node


class TestPageStore:

    def test_sparse_pages(self):
        store = PageStore([Page(page_number=3, content="c"), Page(page_number=1, content="a")])

        assert store.total_pages == 3
        assert len(store) == 2
        assert [p.page_number for p in store] == [1, 3]
        assert store.get(2) is None
        assert 3 in store

    def test_from_texts_numbers_from_one(self):
        store = PageStore.from_texts(["x", "y"])
        assert store.get(1) == "x"
        assert store.get(2) == "y"

    def test_estimated_tokens(self):
        store = PageStore.from_texts(["a" * 8, "b" * 5])
        assert estimate_tokens("abcde") == 2
        assert store.estimated_tokens(1, 2) == 4


class TestNodeText:

    def test_text_covers_page_range(self):
        pages = PageStore.from_texts(["one", "two", "three", ""])
        section = node("s", "S", 2, 4)
        assert get_node_text(section, pages) == "two\n\nthree"

    def test_add_and_remove(self, simple_tree, pages_50):
        touched = add_node_text(simple_tree, pages_50)

        assert touched == 5
        assert simple_tree.find("c2").text.startswith("Chapter 2")
        remove_node_text(simple_tree)
        assert all(n.text is None for n in simple_tree.iter_nodes())
