"""Tests for bounded boundary repair."""

import pytest

from infra.config import RepairSettings
from infra.cancellation import CancellationToken, PipelineCancelled
from infra.llm import OracleTimeoutError
from outline.repair_boundaries import BoundaryRepairer, PageLocation, search_range
from outline.schemas import TreeNode
from outline.verify_boundaries import SingleVerification
from tests.conftest import make_pages, node


def location(page, confidence):
    return {"thinking": "title heads the page", "page_number": page, "confidence": confidence}


YES = {"thinking": "found", "appears": "yes", "confidence": 0.9}
NO = {"thinking": "absent", "appears": "no", "confidence": 0.8}


@pytest.fixture
def tree():
    return TreeNode(
        id="root", title="Doc", level=0, page_start=1, page_end=50,
        children=[
            node("a", "Alpha", 5, 8),
            node("b", "Beta", 9, 19),
            node("c", "Gamma", 20, 50),
        ],
    )


@pytest.fixture
def pages():
    return make_pages(50, titles={5: "Alpha", 11: "Beta", 20: "Gamma"})


class TestSearchRange:

    def test_between_trusted_neighbours(self, tree):
        ordered = list(tree.iter_nodes())
        assert search_range(ordered, 2, {"b"}, 50) == (5, 20)

    def test_skips_other_incorrect_nodes(self, tree):
        ordered = list(tree.iter_nodes())
        assert search_range(ordered, 2, {"a", "b", "c"}, 50) == (1, 50)

    def test_ends_of_document(self):
        ordered = [node("only", "Only", 7, 9)]
        assert search_range(ordered, 0, {"only"}, 30) == (1, 30)

    def test_inverted_window_swapped(self):
        ordered = [node("x", "X", 30, 30), node("y", "Y", 5, 6), node("z", "Z", 10, 12)]
        assert search_range(ordered, 1, {"y"}, 40) == (10, 30)


class TestRepair:

    def test_relocates_within_neighbour_window(self, oracle, tree, pages):
        oracle.add(PageLocation, location(11, 0.8))
        fixes = []

        summary = BoundaryRepairer(oracle).repair(tree, ["b"], pages, verify_after_fix=False, on_fix=fixes.append)

        assert tree.find("b").page_start == 11
        assert summary.fixed == 1
        assert summary.still_incorrect == 0
        assert summary.attempts == 1
        assert [(f.old_page, f.new_page) for f in fixes] == [(9, 11)]
        prompt = oracle.calls_for(PageLocation)[0].prompt
        assert "<physical_index_5>" in prompt
        assert "<physical_index_20>" in prompt
        assert "<physical_index_4>" not in prompt
        assert "<physical_index_21>" not in prompt

    def test_confirmed_fix_converges_in_one_round(self, oracle, tree, pages):
        oracle.add(PageLocation, location(11, 0.9))
        oracle.add(SingleVerification, YES)

        summary = BoundaryRepairer(oracle).repair(tree, ["b"], pages)

        assert summary.attempts == 1
        assert summary.fixed == 1
        assert summary.unresolved == []
        assert "Beta" in oracle.calls_for(SingleVerification)[0].prompt

    def test_low_confidence_is_rejected_every_round(self, oracle, tree, pages):
        oracle.add(PageLocation, location(11, 0.5), location(11, 0.3), location(12, 0.1))

        summary = BoundaryRepairer(oracle).repair(tree, ["b"], pages)

        assert tree.find("b").page_start == 9
        assert summary.attempts == 3
        assert summary.fixed == 0
        assert summary.unresolved == ["b"]
        assert summary.fixes == []

    def test_rejected_after_reverification_is_retried(self, oracle, tree, pages):
        oracle.add(PageLocation, location(12, 0.9), location(11, 0.9))
        oracle.add(SingleVerification, NO, YES)
        fixes = []

        summary = BoundaryRepairer(oracle).repair(tree, ["b"], pages, on_fix=fixes.append)

        assert summary.attempts == 2
        assert summary.fixed == 1
        assert [(f.old_page, f.new_page) for f in fixes] == [(9, 12), (12, 11)]
        assert tree.find("b").page_start == 11

    def test_page_outside_document_rejected(self, oracle, tree, pages):
        oracle.add(PageLocation, location(99, 0.99))
        summary = BoundaryRepairer(oracle).repair(tree, ["b"], pages, max_retries=1)
        assert summary.still_incorrect == 1
        assert tree.find("b").page_start == 9

    def test_null_page_and_oracle_failure(self, oracle, tree, pages):
        oracle.add(PageLocation, location(None, 0.9), OracleTimeoutError("slow"))
        summary = BoundaryRepairer(oracle).repair(tree, ["b"], pages, max_retries=2)
        assert summary.attempts == 2
        assert summary.unresolved == ["b"]

    def test_max_retries_bounds_oracle_calls(self, oracle, tree, pages):
        oracle.default[PageLocation] = PageLocation.model_validate(location(None, 0.0))
        repairer = BoundaryRepairer(oracle, settings=RepairSettings(max_retries=2))

        summary = repairer.repair(tree, ["a", "b", "c"], pages)

        assert summary.attempts == 2
        assert len(oracle.calls_for(PageLocation)) == 6
        assert summary.unresolved == ["a", "b", "c"]

    def test_multiple_incorrect_nodes_use_round_start_exclusions(self, oracle, tree, pages):
        oracle.add(PageLocation, location(5, 0.9), location(11, 0.9))

        BoundaryRepairer(oracle).repair(tree, ["a", "b"], pages, verify_after_fix=False)

        first, second = oracle.calls_for(PageLocation)
        assert "<physical_index_1>" in first.prompt and "<physical_index_20>" in first.prompt
        assert "<physical_index_1>" in second.prompt
        assert "<physical_index_4>" in second.prompt

    def test_nothing_to_repair(self, oracle, tree, pages):
        summary = BoundaryRepairer(oracle).repair(tree, [], pages)
        assert summary.attempts == 0
        assert oracle.calls == []

    def test_unknown_ids_ignored(self, oracle, tree, pages):
        summary = BoundaryRepairer(oracle).repair(tree, ["missing"], pages)
        assert summary.attempts == 0

    def test_cancelled(self, oracle, tree, pages):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(PipelineCancelled):
            BoundaryRepairer(oracle).repair(tree, ["b"], pages, cancel=token)
