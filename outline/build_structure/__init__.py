from .toc_detector import TocDetector
from .structure_extractor import StructureExtractor, select_sample_pages, to_tree
from .schemas import StructureOutput, StructureSection, StructureSubsection, PageRequest
from .tools import analyze_page_tool, read_page_tool, has_toc_indicators

__all__ = [
    "TocDetector",
    "StructureExtractor",
    "select_sample_pages",
    "to_tree",
    "StructureOutput",
    "StructureSection",
    "StructureSubsection",
    "PageRequest",
    "analyze_page_tool",
    "read_page_tool",
    "has_toc_indicators",
]
