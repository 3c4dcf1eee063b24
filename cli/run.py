import asyncio
import sys
from pathlib import Path

from rich.console import Console

from infra.config import ConfigError, get_api_key, load_run_config
from infra.pipeline.logger import create_logger
from infra.runner import run
from infra.webpagetest import WebPageTestClient, WebPageTestTransport

console = Console()

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_ALL_FAILED = 2
EXIT_INTERRUPTED = 130

# argparse dest -> RunConfig field
CONFIG_ARGS = (
    'url', 'script', 'runs', 'timeout', 'pool', 'batch_size', 'batch_delay',
    'offset_index', 'output', 'output_directory', 'result_type', 'test_ids',
    'max_runs_per_test', 'poll_interval', 'host', 'log_level',
)


def add_config_arguments(parser):
    """Flags shared by every command that resolves a run config."""
    parser.add_argument('--config', type=Path, default=None, help='Config file (default: search from cwd upwards)')
    parser.add_argument('--url', help='The url to test')
    parser.add_argument('--script', help='A WebPageTest script file to run (takes precedence over --url)')
    parser.add_argument('--runs', type=int, help='The number of runs to perform (default: 1)')
    parser.add_argument('--timeout', type=float, help='Max number of minutes to wait for test result (default: 2)')
    parser.add_argument('--pool', type=int, help='The max pool size, for parallel requests (default: 10)')
    parser.add_argument('--batch-size', type=int, help='The max number of runs to start at once (default: 20)')
    parser.add_argument('--batch-delay', type=float, help='Seconds to wait between batches (default: 0)')
    parser.add_argument('--offset-index', type=int, help='Index offset for output file names (default: 0)')
    parser.add_argument('--output', help='Output file name prefix (default: test)')
    parser.add_argument('--output-directory', help='Output directory for result files (default: output)')
    parser.add_argument('--result-type', help='Comma separated data to collect: profile,summary (default: profile)')
    parser.add_argument('--test-ids', help='Comma separated test ids to fetch; skips running new tests')
    parser.add_argument('--max-runs-per-test', type=int, help='Max runs inside one WebPageTest test (default: 10)')
    parser.add_argument('--poll-interval', type=float, help='Seconds between status polls (default: 5)')
    parser.add_argument('--host', help='WebPageTest host (default: https://www.webpagetest.org)')
    parser.add_argument('--log-level', help='Console log level (default: INFO)')


def config_from_args(args):
    cli_values = {name: getattr(args, name, None) for name in CONFIG_ARGS}
    return load_run_config(cli_values, config_path=args.config)


def cmd_run(args):
    try:
        config = config_from_args(args)
        config.require_target()
        api_key = get_api_key()
    except ConfigError as e:
        console.print(f"[red]✗ {e}[/red]")
        return EXIT_CONFIG_ERROR

    client = WebPageTestClient(WebPageTestTransport(api_key, host=config.host))
    logger = create_logger(
        log_dir=args.log_dir or Path(config.output_directory),
        level=config.log_level,
        json_output=not args.no_log_file
    )

    try:
        report = asyncio.run(run(config, client, logger=logger, progress=sys.stdout.isatty()))
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Interrupted[/yellow]")
        return EXIT_INTERRUPTED
    finally:
        logger.close()
        client.close()

    if report.failed or report.start_failures:
        console.print(
            f"[yellow]⚠️  {len(report.failed)} test(s) failed, "
            f"{len(report.start_failures)} could not be started[/yellow]"
        )
        for test_id, reason in report.failed.items():
            console.print(f"  [dim]{test_id}[/dim]: {reason}")

    if report.all_failed:
        console.print("[red]✗ No tests completed[/red]")
        return EXIT_ALL_FAILED

    console.print(
        f"[green]✅ {len(report.completed)} test(s) complete: "
        f"{len(report.summaries.written)} summaries, {len(report.profiles.written)} profiles[/green]"
    )
    return EXIT_OK


def setup_run_parser(subparsers):
    run_parser = subparsers.add_parser('run', help='Run tests and collect results')
    add_config_arguments(run_parser)
    run_parser.add_argument('--log-dir', type=Path, default=None, help='Directory for gauntlet.jsonl (default: output directory)')
    run_parser.add_argument('--no-log-file', action='store_true', help='Only log to the console')
    run_parser.set_defaults(func=cmd_run)
