"""
Config CLI commands.
"""

from cli.config.show import cmd_config_show


def setup_parser(subparsers):
    """Setup config command parser."""
    from cli.run import add_config_arguments

    config_parser = subparsers.add_parser(
        'config',
        help='Inspect run configuration'
    )
    config_subparsers = config_parser.add_subparsers(
        dest='config_command',
        help='Config command'
    )
    config_subparsers.required = True

    # gauntlet config show
    show_parser = config_subparsers.add_parser(
        'show',
        help='Show resolved configuration (flags > config file > defaults)'
    )
    add_config_arguments(show_parser)
    show_parser.add_argument(
        '--json',
        action='store_true',
        help='Output as JSON'
    )
    show_parser.set_defaults(func=cmd_config_show)
