"""
outliner build - Run the outline pipeline over a document's pages.
"""

import json
import sys
from pathlib import Path

from rich.console import Console

from infra.cancellation import CancellationToken
from infra.config import ConfigError, load_settings
from infra.llm import create_oracle
from infra.logger import create_logger
from outline import OutlineError, OutlinePipeline, PipelineCancelled, load_pages
from cli.render import EventConsole, build_tree, summary_table


def _apply_overrides(settings, args):
    if args.no_split:
        settings.split.enabled = False
    if args.no_verify:
        settings.verify.enabled = False
    if args.no_repair:
        settings.repair.enabled = False
    if args.sample_size is not None:
        settings.verify.sample_size = args.sample_size if args.sample_size > 0 else None
    if args.log_dir:
        settings.log_dir = Path(args.log_dir)
    return settings


def cmd_build(args):
    console = Console()
    err_console = Console(stderr=True)

    try:
        settings = _apply_overrides(load_settings(args.config), args)
        pages = load_pages(args.pages)
    except (ConfigError, OutlineError) as e:
        err_console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)

    doc_id = Path(args.pages).stem
    logger = create_logger(
        doc_id,
        "pipeline",
        log_dir=settings.log_dir,
        console_output=args.verbose,
        level="DEBUG" if args.verbose else "INFO",
    )

    try:
        oracle = create_oracle(settings.llm, log_dir=settings.log_dir)
    except ConfigError as e:
        err_console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)

    pipeline = OutlinePipeline(oracle, settings, logger=logger)
    cancel = CancellationToken()
    sink = None if args.json else EventConsole(err_console)

    try:
        result = pipeline.run(pages, on_event=sink, cancel=cancel)
    except KeyboardInterrupt:
        cancel.cancel("interrupted")
        err_console.print("[yellow]⊘ Interrupted[/yellow]")
        sys.exit(130)
    except PipelineCancelled as e:
        err_console.print(f"[yellow]⊘ {e}[/yellow]")
        sys.exit(130)
    except OutlineError as e:
        err_console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)
    finally:
        logger.close()

    data = result.model_dump(mode="json", exclude_none=True)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    if args.json:
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return

    console.print(build_tree(result.tree))
    console.print(summary_table(result))
    if args.output:
        console.print(f"✓ Saved outline to {args.output}")
