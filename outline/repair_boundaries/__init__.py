from .repairer import BoundaryRepairer, FixCallback, search_range
from .schemas import PageLocation

__all__ = [
    "BoundaryRepairer",
    "FixCallback",
    "search_range",
    "PageLocation",
]
