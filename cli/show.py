"""
outliner show - Render a saved outline.
"""

import json
import sys

from pydantic import ValidationError
from rich.console import Console

from outline.schemas import OutlineResult
from cli.render import build_tree, summary_table


def cmd_show(args):
    console = Console()

    try:
        with open(args.outline, "r", encoding="utf-8") as f:
            result = OutlineResult.model_validate(json.load(f))
    except FileNotFoundError:
        console.print(f"[red]❌ Outline not found: {args.outline}[/red]")
        sys.exit(1)
    except (json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]❌ Not a valid outline file: {e}[/red]")
        sys.exit(1)

    console.print(build_tree(result.tree, max_depth=args.depth))
    if not args.tree_only:
        console.print(summary_table(result))
