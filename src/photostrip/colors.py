"""Background palette and decoration ink rules.

Background colors are plain (R, G, B) tuples. Decorations pick their ink
from the background: near-black and near-white backgrounds flip the ink
for contrast, everything else keeps the theme's default ink.
"""


# ── Palette ───────────────────────────────────────────────────────

DEFAULT_PALETTE = {
    "white": (255, 255, 255),
    "black": (0, 0, 0),
    "pink": (252, 231, 243),
    "blue": (219, 234, 254),
    "yellow": (254, 243, 199),
    "green": (209, 250, 229),
    "gray": (229, 231, 235),
    "purple": (192, 132, 252),
}

DEFAULT_BACKGROUND = DEFAULT_PALETTE["white"]

# Channel bounds for the contrast flip. #171717 (the dark UI surface)
# still counts as black; #f5f5f5 and up count as white.
NEAR_BLACK_MAX = 0x17
NEAR_WHITE_MIN = 0xF5


# ── Color parsing ─────────────────────────────────────────────────

def parse_hex_color(hex_str: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' or 'RRGGBB' string to (R, G, B) tuple."""
    hex_str = hex_str.lstrip("#")
    if len(hex_str) != 6 or not all(c in "0123456789abcdefABCDEF" for c in hex_str):
        raise ValueError(f"Invalid hex color: '#{hex_str}'")
    return (int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16))


def to_hex(rgb: tuple[int, int, int]) -> str:
    """Format an (R, G, B) tuple as lowercase '#rrggbb'."""
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def resolve_color(
    value, palette: dict[str, tuple[int, int, int]] | None = None,
) -> tuple[int, int, int]:
    """Resolve a color reference — palette key, inline hex, or RGB triple.

    Palette keys are tried first (the default palette is always
    available). Lists/tuples must be three ints in 0..255.
    """
    if isinstance(value, (list, tuple)):
        if len(value) != 3 or not all(
            isinstance(c, int) and 0 <= c <= 255 for c in value
        ):
            raise ValueError(f"Color must be three 0-255 ints, got {value!r}")
        return tuple(value)
    if not isinstance(value, str):
        raise ValueError(
            f"Color must be a hex string, palette key or [r, g, b], got {value!r}"
        )

    merged = {**DEFAULT_PALETTE, **(palette or {})}
    if value in merged:
        return merged[value]
    if value.startswith("#") or (
        len(value) == 6
        and all(c in "0123456789abcdefABCDEF" for c in value)
    ):
        return parse_hex_color(value)
    raise ValueError(
        f"Unknown color: '{value}'. Not in palette and not a hex value."
    )


# ── Ink rules ─────────────────────────────────────────────────────

def is_near_black(rgb: tuple[int, int, int]) -> bool:
    return max(rgb) <= NEAR_BLACK_MAX


def is_near_white(rgb: tuple[int, int, int]) -> bool:
    return min(rgb) >= NEAR_WHITE_MIN


def pick_ink(
    background: tuple[int, int, int],
    default: tuple[int, int, int],
    on_dark: tuple[int, int, int] | None = None,
    on_light: tuple[int, int, int] | None = None,
) -> tuple[int, int, int]:
    """Choose decoration ink for a background.

    Args:
        background: Strip background RGB.
        default: Theme ink for ordinary backgrounds.
        on_dark: Ink used on near-black backgrounds (None keeps default).
        on_light: Ink used on near-white backgrounds (None keeps default).
    """
    if on_dark is not None and is_near_black(background):
        return on_dark
    if on_light is not None and is_near_white(background):
        return on_light
    return default
