from typing import Iterator, List, Optional
from pydantic import BaseModel, Field


class TreeNode(BaseModel):
    """
    One section of the outline.

    Children are in document (reading) order. Page ranges are optional until the
    page-range validator has run; afterwards 1 <= page_start <= page_end <= total_pages.
    """

    id: str = Field(..., description="Unique node id")
    title: str = Field(..., description="Section title")
    level: int = Field(0, ge=0, description="Depth in the tree (root = 0)")
    page_start: Optional[int] = Field(None, description="First page of the section")
    page_end: Optional[int] = Field(None, description="Last page of the section")
    summary: Optional[str] = None
    text: Optional[str] = None
    children: List["TreeNode"] = Field(default_factory=list)

    def iter_nodes(self, include_self: bool = True) -> Iterator["TreeNode"]:
        """Pre-order traversal (document order)."""
        if include_self:
            yield self
        for child in self.children:
            yield from child.iter_nodes()

    def find(self, node_id: str) -> Optional["TreeNode"]:
        for node in self.iter_nodes():
            if node.id == node_id:
                return node
        return None

    def count(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    def depth(self) -> int:
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)
