"""Attach, strip and read page text for outline nodes."""

from outline.schemas import PageStore, TreeNode


def get_node_text(node: TreeNode, pages: PageStore) -> str:
    start = node.page_start or 1
    end = node.page_end or start
    return "\n\n".join(p.content for p in pages.in_range(start, end) if p.content)


def add_node_text(tree: TreeNode, pages: PageStore) -> int:
    """Fill `text` on every node from its page range. Returns the number of nodes touched."""
    count = 0
    for node in tree.iter_nodes():
        node.text = get_node_text(node, pages)
        count += 1
    return count


def remove_node_text(tree: TreeNode):
    for node in tree.iter_nodes():
        node.text = None
