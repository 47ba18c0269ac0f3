"""Tests for page-range validation and preface insertion."""

import pytest

from outline.page_ranges import PREFACE_TITLE, add_preface_if_needed, validate_page_ranges
from outline.schemas import TreeNode
from tests.conftest import node


def root_with(*children, start=1, end=50):
    return TreeNode(id="root", title="Doc", level=0, page_start=start, page_end=end, children=list(children))


def assert_ranges_valid(tree, total_pages):
    for n in tree.iter_nodes():
        assert 1 <= n.page_start <= n.page_end <= total_pages, n.title


class TestValidatePageRanges:

    def test_node_past_end_is_clamped(self):
        tree = root_with(node("a", "Appendix", 60, 70))
        report = validate_page_ranges(tree, 50)

        appendix = tree.find("a")
        assert (appendix.page_start, appendix.page_end) == (50, 50)
        assert report.invalid_titles == ["Appendix"]
        assert report.truncated_count == 2

    def test_end_past_document_is_clamped(self):
        tree = root_with(node("a", "Last", 45, 80))
        report = validate_page_ranges(tree, 50)

        assert tree.find("a").page_end == 50
        assert report.truncated_count == 1
        assert report.invalid_titles == []

    def test_inverted_range_collapses_to_start(self):
        tree = root_with(node("a", "Odd", 30, 20))
        validate_page_ranges(tree, 50)
        assert (tree.find("a").page_start, tree.find("a").page_end) == (30, 30)

    def test_missing_bounds_inherit_from_parent(self):
        child = TreeNode(id="a", title="Loose", level=1)
        tree = root_with(child, start=3, end=40)
        validate_page_ranges(tree, 50)
        assert (child.page_start, child.page_end) == (3, 40)

    def test_zero_start_raised_to_one(self):
        tree = root_with(node("a", "Cover", 0, 2))
        report = validate_page_ranges(tree, 50)
        assert tree.find("a").page_start == 1
        assert report.truncated_count == 1

    def test_idempotent(self):
        tree = root_with(
            node("a", "One", 60, 70),
            node("b", "Two", 10, 5, children=[node("b1", "Deep", 90, 95, level=2)]),
        )
        validate_page_ranges(tree, 50)
        snapshot = tree.model_dump()

        report = validate_page_ranges(tree, 50)

        assert report.truncated_count == 0
        assert report.invalid_titles == []
        assert tree.model_dump() == snapshot
        assert_ranges_valid(tree, 50)

    def test_invalid_total_pages(self):
        with pytest.raises(ValueError):
            validate_page_ranges(root_with(), 0)


class TestAddPreface:

    def test_inserts_lead_in_before_first_child(self, simple_tree):
        assert add_preface_if_needed(simple_tree) is True

        preface = simple_tree.children[0]
        assert preface.title == PREFACE_TITLE
        assert (preface.page_start, preface.page_end, preface.level) == (1, 4, 1)
        assert preface.id.startswith("preface-")
        assert len(simple_tree.children) == 5

    def test_second_call_is_noop(self, simple_tree):
        add_preface_if_needed(simple_tree)
        assert add_preface_if_needed(simple_tree) is False
        assert len(simple_tree.children) == 5

    def test_no_preface_when_first_child_starts_on_page_one(self):
        tree = root_with(node("a", "Intro", 1, 10))
        assert add_preface_if_needed(tree) is False

    def test_no_children(self):
        assert add_preface_if_needed(root_with()) is False
