"""CLI Main Entry Point"""

import asyncio
import sys

from ai_commit_msg.config import load_config
from ai_commit_msg.generator import Generator
from ai_commit_msg.output import success, warning, dim, bold, CHECK, colorize_commit_type

from ai_commit_msg.cli.args import parse_args, overrides_from_args
from ai_commit_msg.cli.commands import display_config, run_install_completion
from ai_commit_msg.cli.utils import configure_logging, copy_to_clipboard


def _display_message(message):
    """Display commit message with horizontal rules and colored type."""
    colored = colorize_commit_type(message)
    lines = colored.split('\n')
    # Use raw message for width calculation (no ANSI codes)
    raw_lines = message.split('\n')
    width = max((len(line) for line in raw_lines), default=40)
    print(f"\n{dim('─' * width)}")
    print(bold(lines[0]))
    for line in lines[1:]:
        print(line)
    print(dim('─' * width))


def _copy_and_report(message, no_copy):
    """Copy message to clipboard and print result."""
    if no_copy:
        return
    copied, reason = copy_to_clipboard(message)
    if copied:
        print(f"{success(CHECK)} Copied to clipboard!")
    else:
        print(f"{warning('!')} Could not copy to clipboard{': ' + reason if reason else ''}")
        print(dim("  Select the message above to copy manually."))


def _handle_subcommands(args):
    """Handle subcommands that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(), True
    return 0, False


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    args = parse_args(argv)
    configure_logging(args.verbose)

    exit_code, should_exit = _handle_subcommands(args)
    if should_exit:
        return exit_code

    # Precedence: CLI args > environment variables > config file > defaults
    config = load_config(overrides_from_args(args))
    result = asyncio.run(Generator().generate(config))
    if not result.success:
        if not config.notifications:
            print(result.error, file=sys.stderr)
        return 1

    # Pipe mode: output raw message only
    if not sys.stdout.isatty():
        print(result.message)
        return 0

    _display_message(result.message)
    _copy_and_report(result.message, args.no_copy)
    return 0


def run() -> None:
    sys.exit(main())
