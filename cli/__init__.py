import argparse
import cli.config
from cli.run import setup_run_parser


def create_parser():
    parser = argparse.ArgumentParser(
        prog='gauntlet',
        description='wpt-gauntlet - Run many WebPageTest measurements and collect the results',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run 44 measurements, 10 per test, at most 10 requests in flight
  gauntlet run --url https://example.org --runs 44

  # Scripted test, collect summaries and profiles
  gauntlet run --script flows/login.txt --runs 20 --result-type profile,summary

  # Fetch results of tests started earlier
  gauntlet run --test-ids 230101_AB_1,230101_AB_2 --result-type summary

  # Continue numbering after a previous run of 44
  gauntlet run --url https://example.org --runs 20 --offset-index 44

  # Show the configuration a run would use
  gauntlet config show
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')
    subparsers.required = True

    setup_run_parser(subparsers)
    cli.config.setup_parser(subparsers)

    return parser


def main(argv=None):
    parser = create_parser()
    args = parser.parse_args(argv)
    return args.func(args)
