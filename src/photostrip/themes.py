"""Strip themes — decorations drawn in the strip margins.

Each theme is a ThemeDecorator bound to a stable id. Decorators draw
only in the header, footer and side margins laid out by the assembler,
so they never cover a photo and can run before the photos are pasted.

Text coordinates are baselines: x is the left edge (or the center for
centered text), y the alphabetic baseline.

Themes (in display order):
  simple — "PHOTO BOOTH" and today's date, centered in the footer.
  cute   — two hearts in opposite corners and "SWEET MEMORY".
  film   — sprocket holes down both side margins, ISO date in amber,
           and a warm tint + darkening pass over every photo.

Adding a theme: subclass ThemeDecorator, then register_theme() it.
"""

import datetime
from abc import ABC, abstractmethod

from PIL import Image, ImageDraw

from .blend import BlendPass
from .colors import pick_ink
from .common import draw_text_at_baseline, load_font


BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


class ThemeDecorator(ABC):
    """Base class for strip themes."""

    id: str = ""
    name: str = ""
    # Blend passes applied over each photo rectangle, in order.
    photo_passes: tuple[BlendPass, ...] = ()

    @abstractmethod
    def decorate(
        self,
        img: Image.Image,
        width: int,
        height: int,
        background: tuple[int, int, int],
        today: datetime.date | None = None,
    ) -> None:
        """Draw the theme onto img (in place)."""


# ── Themes ───────────────────────────────────────────────────────


class SimpleTheme(ThemeDecorator):
    id = "simple"
    name = "Simple"

    def decorate(self, img, width, height, background, today=None):
        today = today or datetime.date.today()
        ink = pick_ink(background, BLACK, on_dark=WHITE)

        draw_text_at_baseline(
            img, "PHOTO BOOTH", (width / 2, height - 30),
            load_font(24, bold=True), ink, align="center",
        )
        draw_text_at_baseline(
            img, today.strftime("%x"), (width / 2, height - 12),
            load_font(14), ink, align="center",
        )


class CuteTheme(ThemeDecorator):
    id = "cute"
    name = "Cute"

    INK = (225, 29, 72)          # rose
    INK_ON_DARK = (253, 164, 175)

    def decorate(self, img, width, height, background, today=None):
        ink = pick_ink(background, self.INK, on_dark=self.INK_ON_DARK)

        heart_font = load_font(30)
        draw_text_at_baseline(img, "♥", (30, 40), heart_font, ink)
        draw_text_at_baseline(
            img, "♥", (width - 40, height - 40), heart_font, ink,
        )
        draw_text_at_baseline(
            img, "SWEET MEMORY", (width / 2, height - 35),
            load_font(28, bold=True), ink, align="center",
        )


class FilmTheme(ThemeDecorator):
    id = "film"
    name = "Film"

    ACCENT = (251, 191, 36)      # amber date stamp
    PERFORATION_W = 15
    PERFORATION_H = 10
    PERFORATION_STEP = 40
    PERFORATION_TOP = 20
    PERFORATION_INSET = 10

    photo_passes = (
        BlendPass("color", (255, 200, 100), 0.2),
        BlendPass("overlay", (0, 0, 0), 0.3),
    )

    def perforation_rects(self, width: int, height: int) -> list[tuple[int, int, int, int]]:
        """(x, y, w, h) of every sprocket hole, left column first."""
        ys = range(self.PERFORATION_TOP, height, self.PERFORATION_STEP)
        rects = []
        for x in (self.PERFORATION_INSET, width - self.PERFORATION_INSET - self.PERFORATION_W):
            rects.extend((x, y, self.PERFORATION_W, self.PERFORATION_H) for y in ys)
        return rects

    def decorate(self, img, width, height, background, today=None):
        today = today or datetime.date.today()
        ink = pick_ink(background, WHITE, on_light=BLACK)

        draw = ImageDraw.Draw(img)
        for x, y, w, h in self.perforation_rects(width, height):
            draw.rectangle([(x, y), (x + w - 1, y + h - 1)], fill=ink)

        draw_text_at_baseline(
            img, today.isoformat(), (width / 2, height - 20),
            load_font(20, bold=True, mono=True), self.ACCENT, align="center",
        )


# ── Registry ─────────────────────────────────────────────────────

THEMES: dict[str, ThemeDecorator] = {}


def register_theme(theme: ThemeDecorator) -> ThemeDecorator:
    """Add a theme to the registry; ids must be unique."""
    if not theme.id:
        raise ValueError(f"{type(theme).__name__}: theme id must be set")
    if theme.id in THEMES:
        raise ValueError(f"Theme '{theme.id}' is already registered")
    THEMES[theme.id] = theme
    return theme


for _theme in (SimpleTheme(), CuteTheme(), FilmTheme()):
    register_theme(_theme)

DEFAULT_THEME = "simple"


def get_theme(theme_id: str) -> ThemeDecorator:
    if theme_id not in THEMES:
        raise ValueError(
            f"Unknown theme '{theme_id}'. Valid: {list(THEMES)}"
        )
    return THEMES[theme_id]


def list_themes() -> list[tuple[str, str]]:
    """(id, display name) pairs in display order."""
    return [(t.id, t.name) for t in THEMES.values()]


def decorate(
    theme_id: str,
    img: Image.Image,
    width: int,
    height: int,
    background: tuple[int, int, int],
    today: datetime.date | None = None,
) -> None:
    """Draw the named theme's decorations onto img."""
    get_theme(theme_id).decorate(img, width, height, background, today=today)
