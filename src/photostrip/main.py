"""Subcommand dispatcher for photostrip.

Usage:
    photostrip compose  --manifest booth.yaml --output strip.png
    photostrip themes
"""

import argparse
import sys


def main(args=None):
    parser = argparse.ArgumentParser(
        prog="photostrip",
        description="Photo booth strip compositing.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # Register subcommands. Each delegates to its own module's main().
    subparsers.add_parser("compose", help="Render a strip from a YAML booth manifest")
    subparsers.add_parser("themes", help="List themes and the suggested palette")

    # Parse only the subcommand name, pass the rest to the subcommand's parser.
    parsed, remaining = parser.parse_known_args(args)

    if parsed.command is None:
        parser.print_help()
        sys.exit(1)

    if parsed.command == "compose":
        from .cli import main as compose_main
        compose_main(remaining)
    elif parsed.command == "themes":
        from .themes_cli import main as themes_main
        themes_main(remaining)


if __name__ == "__main__":
    main()
