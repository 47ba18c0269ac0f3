"""Tests for batched boundary verification."""

import pytest

from infra.config import VerifySettings
from infra.llm import OracleOutputError, OracleTransportError
from outline.verify_boundaries import (
    BatchVerification,
    BoundaryVerifier,
    SingleVerification,
    StartVerification,
    VerifyRequest,
)
from outline.schemas import PageStore, TreeNode
from tests.conftest import make_pages


def checks(*flags, confidence=0.9):
    return {
        "verifications": [
            {"index": i, "appears": appears, "confidence": confidence if appears else 0.2}
            for i, appears in enumerate(flags)
        ]
    }


def starts(count, value=True):
    return {"results": [{"index": i, "starts_at_beginning": value} for i in range(count)]}


@pytest.fixture
def verifier(oracle, rng):
    return BoundaryVerifier(oracle, rng=rng)


class TestBatchPrimitive:

    def test_single_request(self, oracle, verifier):
        oracle.add(BatchVerification, {"verifications": [{"index": 0, "appears": True, "confidence": 0.95}]})

        results = verifier.verify_titles_on_pages([
            VerifyRequest("Chapter 2", 10, "...Chapter 2 begins here..."),
        ])

        assert len(results) == 1
        assert (results[0].page_number, results[0].appears, results[0].confidence) == (10, True, 0.95)
        assert "Chapter 2 begins here" in oracle.calls[0].prompt

    def test_missing_index_counts_as_not_appearing(self, oracle, verifier):
        oracle.add(BatchVerification, {"verifications": [{"index": 1, "appears": True, "confidence": 0.8}]})
        results = verifier.verify_titles_on_pages([VerifyRequest("A", 1, "a"), VerifyRequest("B", 2, "b")])
        assert [r.appears for r in results] == [False, True]
        assert results[0].confidence == 0.0

    def test_failure_marks_everything_unverified(self, oracle, verifier):
        oracle.add(BatchVerification, OracleOutputError("garbage"))
        results = verifier.verify_titles_on_pages([VerifyRequest("A", 1, "a"), VerifyRequest("B", 2, "b")])
        assert [(r.appears, r.confidence) for r in results] == [(False, 0.0), (False, 0.0)]

    def test_empty_batch_makes_no_call(self, oracle, verifier):
        assert verifier.verify_titles_on_pages([]) == []
        assert verifier.verify_titles_at_start([]) == {}
        assert oracle.calls == []

    def test_single_title_check(self, oracle, verifier):
        oracle.add(SingleVerification, {"thinking": "heading at top", "appears": "yes", "confidence": 0.7})
        assert verifier.verify_title_on_page("A", "A\ntext") == (True, 0.7)
        assert verifier.verify_title_on_page("A", "") == (False, 0.0)
        assert len(oracle.calls) == 1

    def test_single_title_check_failure(self, oracle, verifier):
        oracle.add(SingleVerification, OracleTransportError("down"))
        assert verifier.verify_title_on_page("A", "A\ntext") == (False, 0.0)


class TestVerifyTree:

    def test_all_correct_uses_two_calls(self, oracle, verifier, simple_tree, pages_50):
        oracle.add(BatchVerification, checks(True, True, True, True))
        oracle.add(StartVerification, starts(4))

        summary = verifier.verify(simple_tree, pages_50, sample_size=None)

        assert len(oracle.calls) == 2
        assert summary.accuracy == 1.0
        assert summary.incorrect_nodes == []
        assert all(r.appears_at_start for r in summary.results)

    def test_accuracy_and_incorrect_nodes(self, oracle, verifier, simple_tree, pages_50):
        oracle.add(BatchVerification, checks(True, False, True, True))
        oracle.add(StartVerification, starts(3))
        seen = []

        summary = verifier.verify(simple_tree, pages_50, sample_size=None, on_result=seen.append)

        assert (summary.total, summary.verified, summary.failed) == (4, 3, 1)
        assert summary.accuracy == 0.75
        assert summary.incorrect_nodes == ["c2"]
        assert [r.node_id for r in seen] == ["c1", "c2", "c3", "c4"]
        assert summary.results[1].appears_at_start is None

    def test_start_check_only_sent_for_titles_that_appear(self, oracle, verifier, simple_tree, pages_50):
        oracle.add(BatchVerification, checks(False, True, False, True))
        oracle.add(StartVerification, {"results": [{"index": 0, "starts_at_beginning": True}]})

        summary = verifier.verify(simple_tree, pages_50, sample_size=None)

        start_prompt = oracle.calls_for(StartVerification)[0].prompt
        assert "Chapter 2" in start_prompt
        assert "Chapter 1" not in start_prompt
        assert [r.appears_at_start for r in summary.results] == [None, True, None, False]

    def test_nothing_appears_uses_one_call(self, oracle, verifier, simple_tree, pages_50):
        oracle.add(BatchVerification, checks(False, False, False, False))

        summary = verifier.verify(simple_tree, pages_50, sample_size=None)

        assert len(oracle.calls) == 1
        assert summary.accuracy == 0.0
        assert len(summary.incorrect_nodes) == 4

    def test_page_start_check_disabled(self, oracle, simple_tree, pages_50, rng):
        oracle.add(BatchVerification, checks(True, True, True, True))
        verifier = BoundaryVerifier(oracle, VerifySettings(check_page_start=False), rng=rng)

        summary = verifier.verify(simple_tree, pages_50, sample_size=None)

        assert len(oracle.calls) == 1
        assert all(r.appears_at_start is None for r in summary.results)

    def test_node_without_page_text_fails_without_oracle(self, oracle, verifier, simple_tree):
        full = make_pages(50, titles={5: "Chapter 1", 20: "Chapter 3", 35: "Chapter 4"})
        pages = PageStore(p for p in full if p.page_number != 11)
        oracle.add(BatchVerification, checks(True, True, True))
        oracle.add(StartVerification, starts(3))

        summary = verifier.verify(simple_tree, pages, sample_size=None)

        assert summary.incorrect_nodes == ["c2"]
        assert summary.results[1].confidence == 0.0
        assert "Chapter 2" not in oracle.calls[0].prompt

    def test_sampling_keeps_document_order(self, oracle, verifier, simple_tree, pages_50):
        oracle.add(BatchVerification, checks(True, True))
        oracle.add(StartVerification, starts(2))

        summary = verifier.verify(simple_tree, pages_50, sample_size=2)

        ids = [r.node_id for r in summary.results]
        assert len(ids) == 2
        assert ids == sorted(ids)

    def test_default_sample_size_from_settings(self, oracle, simple_tree, rng):
        verifier = BoundaryVerifier(oracle, VerifySettings(sample_size=3), rng=rng)
        assert len(verifier.collect_nodes(simple_tree, verifier.settings.sample_size)) == 3
        assert len(verifier.collect_nodes(simple_tree, None)) == 4

    def test_zero_sample_size_verifies_every_node(self, oracle, verifier, simple_tree, pages_50):
        oracle.add(BatchVerification, checks(True, True, True, True))
        oracle.add(StartVerification, starts(4))

        assert len(verifier.collect_nodes(simple_tree, 0)) == 4
        summary = verifier.verify(simple_tree, pages_50, sample_size=0)

        assert summary.total == 4
        assert [r.node_id for r in summary.results] == ["c1", "c2", "c3", "c4"]

    def test_empty_tree(self, oracle, verifier, pages_50):
        summary = verifier.verify(TreeNode(id="r", title="Empty", page_start=1, page_end=50), pages_50)

        assert summary.total == 0
        assert summary.accuracy == 0.0
        assert oracle.calls == []
