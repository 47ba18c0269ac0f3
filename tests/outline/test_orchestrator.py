"""End-to-end pipeline runs against a scripted oracle."""

import pytest

from infra.cancellation import CancellationToken
from infra.config import OutlineSettings
from infra.events import EventType
from infra.llm import OracleOutputError, OracleTimeoutError
from outline import (
    EmptyDocumentError,
    OutlinePipeline,
    PipelineCancelled,
    StructureExtractionError,
)
from outline.build_structure import StructureOutput
from outline.page_ranges import PREFACE_TITLE
from outline.repair_boundaries import PageLocation
from outline.schemas import PageStore, TocDetectionResult
from outline.split_large import SubsectionList
from outline.verify_boundaries import BatchVerification, SingleVerification, StartVerification


STRUCTURE = {
    "title": "Field Report",
    "sections": [
        {"title": "Chapter 1", "page_start": 5, "page_end": 10},
        {"title": "Chapter 2", "page_start": 11, "page_end": 19},
        {"title": "Chapter 3", "page_start": 20, "page_end": 34},
        {"title": "Chapter 4", "page_start": 35, "page_end": 60},
    ],
}


def script_happy_path(oracle):
    """Preface + 4 chapters are verified; Chapter 2 (index 2) fails and is relocated to page 12."""
    oracle.add(TocDetectionResult, {"has_toc": False})
    oracle.add(StructureOutput, STRUCTURE)
    oracle.add(BatchVerification, {"verifications": [
        {"index": i, "appears": i != 2, "confidence": 0.9 if i != 2 else 0.1} for i in range(5)
    ]})
    oracle.add(StartVerification, {"results": [{"index": i, "starts_at_beginning": True} for i in range(4)]})
    oracle.add(PageLocation, {"thinking": "heading", "page_number": 12, "confidence": 0.9})
    oracle.add(SingleVerification, {"thinking": "found", "appears": "yes", "confidence": 0.9})
    return oracle


class TestOutlinePipeline:

    def test_full_run(self, oracle, pages_50):
        script_happy_path(oracle)

        result = OutlinePipeline(oracle).run(pages_50)

        tree = result.tree
        assert tree.title == "Field Report"
        assert [c.title for c in tree.children] == [PREFACE_TITLE, "Chapter 1", "Chapter 2", "Chapter 3", "Chapter 4"]
        assert result.preface_added
        assert result.page_ranges.truncated_count == 1
        assert tree.children[-1].page_end == 50
        assert result.verification.accuracy == 0.8
        assert result.repair.fixed == 1
        assert tree.children[2].page_start == 12
        assert oracle.calls_for(SubsectionList) == []
        for n in tree.iter_nodes():
            assert 1 <= n.page_start <= n.page_end <= 50

    def test_event_order(self, oracle, pages_50):
        script_happy_path(oracle)
        events = []

        OutlinePipeline(oracle).run(pages_50, on_event=events.append)

        assert (events[0].type, events[0].step) == (EventType.STARTED, "pipeline")
        assert (events[-1].type, events[-1].step) == (EventType.COMPLETED, "pipeline")
        steps = list(dict.fromkeys(e.step for e in events))
        assert steps == [
            "pipeline",
            "toc_detection",
            "structure_extraction",
            "validate_page_ranges",
            "preface",
            "split_large_nodes",
            "verify_boundaries",
            "repair_boundaries",
        ]
        verify_progress = [e for e in events if e.step == "verify_boundaries" and e.type == EventType.PROGRESS]
        assert [e.data["index"] for e in verify_progress] == [1, 2, 3, 4, 5]
        fixes = [e for e in events if e.step == "repair_boundaries" and e.type == EventType.PROGRESS]
        assert fixes[0].data["new_page"] == 12

    def test_no_repair_when_everything_verifies(self, oracle, pages_50):
        oracle.add(TocDetectionResult, {"has_toc": False})
        oracle.add(StructureOutput, STRUCTURE)
        oracle.add(BatchVerification, {"verifications": [
            {"index": i, "appears": True, "confidence": 0.9} for i in range(5)
        ]})
        oracle.add(StartVerification, {"results": []})

        result = OutlinePipeline(oracle).run(pages_50)

        assert result.verification.accuracy == 1.0
        assert result.repair is None
        assert oracle.calls_for(PageLocation) == []

    def test_toc_failure_is_recoverable(self, oracle, pages_50):
        script_happy_path(oracle)
        oracle.queues[TocDetectionResult].clear()
        oracle.add(TocDetectionResult, OracleTimeoutError("slow"))
        events = []

        result = OutlinePipeline(oracle).run(pages_50, on_event=events.append)

        assert result.toc == TocDetectionResult.empty()
        assert any(e.step == "toc_detection" and "error" in e.data for e in events)

    def test_structure_failure_is_fatal(self, oracle, pages_50):
        oracle.add(TocDetectionResult, {"has_toc": False})
        oracle.add(StructureOutput, OracleOutputError("never submitted"))
        events = []

        with pytest.raises(StructureExtractionError):
            OutlinePipeline(oracle).run(pages_50, on_event=events.append)

        assert (events[-1].type, events[-1].step) == (EventType.ERROR, "pipeline")
        assert events[-1].data["error_type"] == "StructureExtractionError"

    def test_empty_document(self, oracle):
        with pytest.raises(EmptyDocumentError):
            OutlinePipeline(oracle).run(PageStore([]))

    def test_cancel_before_start(self, oracle, pages_50):
        token = CancellationToken()
        token.cancel("stop")
        events = []

        with pytest.raises(PipelineCancelled):
            OutlinePipeline(oracle).run(pages_50, on_event=events.append, cancel=token)

        assert oracle.calls == []
        assert events[-1].type == EventType.ERROR

    def test_cancel_between_stages(self, oracle, pages_50):
        script_happy_path(oracle)
        token = CancellationToken()

        def sink(event):
            if event.step == "split_large_nodes" and event.type == EventType.COMPLETED:
                token.cancel("user stop")

        with pytest.raises(PipelineCancelled):
            OutlinePipeline(oracle).run(pages_50, on_event=sink, cancel=token)

        assert oracle.calls_for(BatchVerification) == []

    def test_stages_can_be_disabled(self, oracle, pages_50):
        oracle.add(TocDetectionResult, {"has_toc": False})
        oracle.add(StructureOutput, STRUCTURE)
        settings = OutlineSettings()
        settings.verify.enabled = False
        settings.split.enabled = False
        settings.add_preface = False
        settings.attach_node_text = True

        result = OutlinePipeline(oracle, settings).run(pages_50)

        assert result.verification is None
        assert not result.preface_added
        assert [c.title for c in result.tree.children][0] == "Chapter 1"
        assert result.tree.children[0].text.startswith("Chapter 1")
        assert len(oracle.calls) == 2

    def test_accepts_plain_page_list(self, oracle, pages_50):
        script_happy_path(oracle)
        result = OutlinePipeline(oracle).run(list(pages_50))
        assert result.tree.page_end == 50
