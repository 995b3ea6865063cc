"""palette-tool — Dominant colour palettes from images.

Usage: uv run palette-tool <technique> <tmp_dir> <image> [options]

Techniques are auto-discovered from palette_tool/techniques/.
Each technique module's docstring is its documentation.
Run `palette-tool help <technique>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, palette-tool looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import importlib
import os
import sys

from loguru import logger

from palette_tool import registry
from palette_tool.core.env import load_env, read_settings
from palette_tool.core.image import ImageHandle
from palette_tool.core.report import format_json, format_text
from palette_tool.core.types import Report


def _load_technique_module(name: str) -> object:
    """Load the raw module for a technique (for docstring access)."""
    return importlib.import_module(f'palette_tool.techniques.{name}')


def _short_doc(name: str, fallback: str) -> str:
    doc = (_load_technique_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else fallback


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f'expected an integer, got {value!r}') from None
    if n < 1:
        raise argparse.ArgumentTypeError(f'must be >= 1, got {n}')
    return n


def _build_parser() -> argparse.ArgumentParser:
    techniques = registry.all_techniques()

    epilog = (
        'Examples:\n'
        '  palette-tool palette ./tmp cover.png\n'
        '  palette-tool palette ./tmp cover.png -n 6 --json\n'
        '  palette-tool buckets ./tmp cover.png\n'
        '  palette-tool all ./tmp cover.png\n'
        '  palette-tool help swatch\n'
        '\n'
        'Settings (set in .env or environment):\n'
        '  PALETTE_MAX_COLOURS   default for -n (default 4)\n'
        '  PALETTE_LOG_LEVEL     DEBUG, INFO, WARNING, ... (default WARNING)\n'
        '  PALETTE_LOAD_TIMEOUT  seconds to wait for an image to load\n'
    )
    parser = argparse.ArgumentParser(
        prog='palette-tool',
        description='Dominant colour palettes from images.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    # Global --env-file option before subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='technique', help='Technique to run')

    for name, tech in sorted(techniques.items()):
        p = sub.add_parser(name, help=_short_doc(name, tech.help))
        p.add_argument('tmp_dir', help='Working directory for artefacts')
        p.add_argument('image', help='Path to image file')
        p.add_argument(
            '-n',
            '--max-colours',
            type=_positive_int,
            default=None,
            metavar='N',
            help='Number of colours in the palette (default: PALETTE_MAX_COLOURS or 4)',
        )
        p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
        p.add_argument(
            '--load-timeout',
            type=float,
            default=None,
            metavar='SECONDS',
            help='Give up waiting for the image after SECONDS and use the fallback palette',
        )

    help_parser = sub.add_parser('help', help='Print full docs for a technique')
    help_parser.add_argument('command', nargs='?', help='Technique name')

    return parser


def _print_help(command: str | None) -> None:
    """Print full module docstring for a technique."""
    techniques = registry.all_techniques()

    if command is None:
        print('Available techniques:\n')
        for name, tech in sorted(techniques.items()):
            print(f'  {name:<10} {_short_doc(name, tech.help)}')
        print('\nRun: palette-tool help <technique> for full docs.')
        return

    if command not in techniques:
        print(f'Unknown technique: {command}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(techniques))}', file=sys.stderr)
        sys.exit(1)

    doc = (_load_technique_module(command).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {command!r})')
        return
    print(doc)


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Load .env before anything else — OS env vars always win
    env_path = load_env(env_file=getattr(args, 'env_file', None))
    try:
        settings = read_settings()
    except ValueError as e:
        print(f'Error: {e}', file=sys.stderr)
        sys.exit(1)

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    if env_path:
        logger.info('loaded {}', env_path)

    if not args.technique:
        parser.print_help()
        sys.exit(1)

    if args.technique == 'help':
        _print_help(getattr(args, 'command', None))
        return

    if not os.path.isfile(args.image):
        print(f'Error: image not found: {args.image}', file=sys.stderr)
        sys.exit(1)

    if args.max_colours is None:
        args.max_colours = settings.max_colours
    if args.load_timeout is None:
        args.load_timeout = settings.load_timeout

    # A file that fails to decode still runs: the palette falls back.
    image = ImageHandle.open(args.image)

    report = Report(
        image_path=args.image,
        image_width=image.width,
        image_height=image.height,
        max_colours=args.max_colours,
    )

    tech = registry.get(args.technique)
    tech.execute(image, report, args)

    if args.json:
        print(format_json(report))
    else:
        print(format_text(report))


if __name__ == '__main__':
    main()
