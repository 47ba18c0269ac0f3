import argparse
import cli.config
from cli.build import cmd_build
from cli.show import cmd_show


def create_parser():
    parser = argparse.ArgumentParser(
        prog='outliner',
        description='Outliner - Discover and verify the section structure of paginated documents',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Configuration
  outliner config init                    # Write ./outliner.yaml with defaults
  outliner config show                    # Show effective settings

  # Build an outline
  outliner build pages.json --output outline.json
  outliner build ./pages/ --sample-size 25 --output outline.json
  outliner build pages.json --no-split --no-repair --json

  # Inspect a saved outline
  outliner show outline.json
  outliner show outline.json --depth 2
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')
    subparsers.required = True

    # outliner build
    build_parser = subparsers.add_parser('build', help='Build an outline from document pages')
    build_parser.add_argument('pages', help='Pages JSON file or directory of page_NNNN.txt files')
    build_parser.add_argument('--config', help='Settings file (default: ./outliner.yaml)')
    build_parser.add_argument('--output', '-o', help='Write the outline JSON here')
    build_parser.add_argument('--no-split', action='store_true', help='Skip splitting of large sections')
    build_parser.add_argument('--no-verify', action='store_true', help='Skip boundary verification (and repair)')
    build_parser.add_argument('--no-repair', action='store_true', help='Skip repair of incorrect boundaries')
    build_parser.add_argument('--sample-size', type=int, help='Nodes to verify (0 = all)')
    build_parser.add_argument('--log-dir', help='Directory for JSON logs and agent run logs')
    build_parser.add_argument('--json', action='store_true', help='Print the outline as JSON instead of a tree')
    build_parser.add_argument('--verbose', '-v', action='store_true', help='Show pipeline logs on the console')
    build_parser.set_defaults(func=cmd_build)

    # outliner show
    show_parser = subparsers.add_parser('show', help='Render a saved outline')
    show_parser.add_argument('outline', help='Outline JSON written by build --output')
    show_parser.add_argument('--depth', type=int, help='Maximum depth to display')
    show_parser.add_argument('--tree-only', action='store_true', help='Hide the summary table')
    show_parser.set_defaults(func=cmd_show)

    cli.config.setup_parser(subparsers)

    return parser


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    args.func(args)
