"""CLI listing the available themes and the suggested palette.

Usage:
    photostrip themes
"""

import argparse

from .colors import DEFAULT_PALETTE, to_hex
from .themes import DEFAULT_THEME, list_themes


def main(args=None):
    parser = argparse.ArgumentParser(
        description="List strip themes and suggested background colors.",
    )
    parser.parse_args(args)

    print("Themes:")
    for theme_id, name in list_themes():
        marker = " (default)" if theme_id == DEFAULT_THEME else ""
        print(f"  {theme_id:<8} {name}{marker}")

    print("\nPalette:")
    for key, rgb in DEFAULT_PALETTE.items():
        print(f"  {key:<8} {to_hex(rgb)}")


if __name__ == "__main__":
    main()
