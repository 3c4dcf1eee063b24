"""
gauntlet config show command - Display the resolved run configuration.
"""

import json

from rich.console import Console
from rich.table import Table

from infra.config import ConfigError, API_KEY_ENV, RunConfig, find_config_file

console = Console()


def cmd_config_show(args):
    """Show the configuration a run would use."""
    from cli.run import config_from_args, EXIT_CONFIG_ERROR, EXIT_OK

    try:
        config = config_from_args(args)
    except ConfigError as e:
        console.print(f"[red]✗ {e}[/red]")
        return EXIT_CONFIG_ERROR

    if args.json:
        print(json.dumps(config.model_dump(), indent=2, default=str))
        return EXIT_OK

    source = args.config or find_config_file()

    table = Table(title="Gauntlet Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Description", style="dim")

    for name, field in RunConfig.model_fields.items():
        value = getattr(config, name)
        if isinstance(value, list):
            value = ",".join(value)
        table.add_row(name, "" if value is None else str(value), field.description or "")

    console.print(table)
    console.print(f"Config file: {source or '(none found)'}")
    console.print(f"API key: ${API_KEY_ENV}")
    return EXIT_OK
