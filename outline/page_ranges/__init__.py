from .validator import PREFACE_TITLE, validate_page_ranges, add_preface_if_needed
from .node_text import get_node_text, add_node_text, remove_node_text

__all__ = [
    "PREFACE_TITLE",
    "validate_page_ranges",
    "add_preface_if_needed",
    "get_node_text",
    "add_node_text",
    "remove_node_text",
]
