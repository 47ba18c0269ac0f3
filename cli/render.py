"""Rich rendering for outlines and pipeline events."""

from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from infra.events import EventType, ProgressEvent
from outline.schemas import OutlineResult, TreeNode

EVENT_STYLES = {
    EventType.STARTED: ("▶", "cyan"),
    EventType.PROGRESS: ("…", "dim"),
    EventType.COMPLETED: ("✓", "green"),
    EventType.ERROR: ("✗", "red"),
}


def _node_label(node: TreeNode) -> str:
    pages = f"[dim]pp. {node.page_start}-{node.page_end}[/dim]" if node.page_start else "[dim](no pages)[/dim]"
    return f"{node.title} {pages}"


def build_tree(node: TreeNode, tree: Optional[Tree] = None, max_depth: Optional[int] = None, depth: int = 0) -> Tree:
    if tree is None:
        tree = Tree(f"[bold]{_node_label(node)}[/bold]")
        branch = tree
    else:
        branch = tree.add(_node_label(node))

    if max_depth is None or depth < max_depth:
        for child in node.children:
            build_tree(child, branch, max_depth, depth + 1)
    return tree


def summary_table(result: OutlineResult) -> Table:
    table = Table(title="Outline summary", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value")

    table.add_row("Nodes", str(result.tree.count()))
    table.add_row("Depth", str(result.tree.depth()))
    table.add_row("TOC", f"{len(result.toc.entries)} entries" if result.toc.has_toc else "not found")
    table.add_row("Preface added", "yes" if result.preface_added else "no")
    table.add_row("Clamped ranges", str(result.page_ranges.truncated_count))
    if result.verification:
        v = result.verification
        table.add_row("Verification", f"{v.verified}/{v.total} ({v.accuracy:.0%})")
    if result.repair:
        r = result.repair
        table.add_row("Repair", f"{r.fixed} fixed, {r.still_incorrect} unresolved, {r.attempts} rounds")
    table.add_row("Elapsed", f"{result.elapsed_seconds:.1f}s")
    return table


class EventConsole:
    """Event sink printing one line per pipeline event."""

    def __init__(self, console: Optional[Console] = None, show_progress: bool = True):
        self.console = console or Console(stderr=True)
        self.show_progress = show_progress

    def __call__(self, event: ProgressEvent):
        if event.type == EventType.PROGRESS and not self.show_progress:
            return

        icon, style = EVENT_STYLES[event.type]
        details = ", ".join(
            f"{k}={v}" for k, v in event.data.items()
            if k != "step" and v is not None and v != []
        )
        self.console.print(f"[{style}]{icon} {event.step}[/{style}] [dim]{details}[/dim]")
