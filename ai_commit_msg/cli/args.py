"""CLI Argument Parsing"""

import argparse
import argcomplete

from ai_commit_msg import __version__
from ai_commit_msg.config import VALID_COST_MODES, VALID_PROVIDERS


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{value}'")
    if number < 0:
        raise argparse.ArgumentTypeError("must be 0 or greater")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='aicommit',
        description='Generate AI-powered commit messages from staged changes',
        epilog='Example: aicommit (copies message to clipboard)'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # LLM options
    parser.add_argument('-p', '--provider', type=str, choices=sorted(VALID_PROVIDERS), help='LLM provider')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')
    parser.add_argument('-U', '--context-lines', type=_non_negative_int, metavar='N', help='Lines of diff context sent to the model')

    # Output options
    parser.add_argument('--cost', type=str, choices=sorted(VALID_COST_MODES), help='How to show the estimated cost')
    parser.add_argument('--no-spinner', action='store_true', help='Show a static status line instead of a spinner')
    parser.add_argument('-q', '--quiet', action='store_true', help='No status notifications, print the message only')
    parser.add_argument('--no-copy', action='store_true', help='Print message only, do not copy to clipboard')
    parser.add_argument('--verbose', action='store_true', help='Show debug logging (requests, token cache, timings)')

    # Setup/config
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)


def overrides_from_args(args: argparse.Namespace) -> dict:
    """Config overrides for the flags that were given."""
    overrides = {}
    if args.provider:
        overrides['provider'] = args.provider
    if args.model:
        overrides['model'] = args.model
    if args.context_lines is not None:
        overrides['context_lines'] = args.context_lines
    if args.cost:
        overrides['cost_display'] = args.cost
    if args.no_spinner:
        overrides['spinner'] = False
    if args.quiet:
        overrides['notifications'] = False
    return overrides
