from .splitter import LargeSectionSplitter, is_large_node, plan_children, node_range
from .schemas import Subsection, SubsectionList, SplitSummary

__all__ = [
    "LargeSectionSplitter",
    "is_large_node",
    "plan_children",
    "node_range",
    "Subsection",
    "SubsectionList",
    "SplitSummary",
]
