"""
Config CLI commands.
"""

from cli.config.init import cmd_config_init
from cli.config.show import cmd_config_show


def setup_parser(subparsers):
    """Setup config command parser."""
    config_parser = subparsers.add_parser(
        'config',
        help='Manage outliner settings'
    )
    config_subparsers = config_parser.add_subparsers(
        dest='config_command',
        help='Config command'
    )
    config_subparsers.required = True

    # outliner config show
    show_parser = config_subparsers.add_parser(
        'show',
        help='Show effective settings'
    )
    show_parser.add_argument('--config', help='Settings file (default: ./outliner.yaml)')
    show_parser.add_argument('--json', action='store_true', help='Output as JSON')
    show_parser.add_argument(
        '--reveal-keys',
        action='store_true',
        help='Show API key values (default: hidden)'
    )
    show_parser.set_defaults(func=cmd_config_show)

    # outliner config init
    init_parser = config_subparsers.add_parser(
        'init',
        help='Write a settings file with defaults'
    )
    init_parser.add_argument('--config', help='Settings file to create (default: ./outliner.yaml)')
    init_parser.add_argument('--force', action='store_true', help='Overwrite existing settings')
    init_parser.set_defaults(func=cmd_config_init)
