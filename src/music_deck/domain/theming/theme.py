"""
Theme value object.

The renderer reads colors from a Theme instead of theming code writing to
shared presentation state. A Theme combines the user's accent color with
the glow colors extracted from the current track's album art.
"""

import math
import re
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional

from loguru import logger

from .colors import RGB, glow_colors_from_art

DEFAULT_ACCENT = "#6ee7b7"

# Approximation: lightness and chroma are fixed, only the hue follows the input
FIXED_LIGHTNESS = 0.7
FIXED_CHROMA = 0.19

ACCENT_VARIABLES = ("--primary", "--ring", "--sidebar-primary", "--sidebar-ring")

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


class OklchColor(NamedTuple):
    l: float
    c: float
    h: float

    def css(self) -> str:
        return f"oklch({self.l} {self.c} {self.h})"


def hex_to_rgb(value: str) -> Optional[RGB]:
    """Parse `#rrggbb` (the `#` is optional). Returns None if malformed."""
    match = _HEX_RE.match(value.strip()) if value else None
    if not match:
        return None
    return tuple(int(part, 16) for part in match.groups())


def rgb_to_hex(rgb: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def rgb_to_oklch(r: int, g: int, b: int) -> OklchColor:
    """Approximate perceptual color for an RGB triple.

    Known approximation: lightness and chroma are the fixed values above,
    whatever the input; only the hue angle is derived from the color.
    """
    r, g, b = r / 255, g / 255, b / 255
    hue = math.degrees(math.atan2(g - b, r - g))
    if hue < 0:
        hue += 360
    return OklchColor(FIXED_LIGHTNESS, FIXED_CHROMA, hue % 360)


def rgb_css(rgb: RGB) -> str:
    return "rgb({}, {}, {})".format(*rgb)


@dataclass(frozen=True)
class Theme:
    """Presentation colors consumed by the rendering layer."""

    accent_hex: str = DEFAULT_ACCENT
    accent_rgb: RGB = (110, 231, 183)
    accent: OklchColor = rgb_to_oklch(110, 231, 183)
    glow_colors: tuple[RGB, ...] = ()

    @property
    def variables(self) -> dict[str, str]:
        """Presentation variables carrying the accent color."""
        value = self.accent.css()
        return {name: value for name in ACCENT_VARIABLES}

    def glow_shadow(self) -> Optional[str]:
        """Layered shadow around album art, or None without glow colors."""
        if not self.glow_colors:
            return None
        first = rgb_to_hex(self.glow_colors[0])
        second = rgb_to_hex(self.glow_colors[1] if len(self.glow_colors) > 1 else self.glow_colors[0])
        return f"0 0 60px {first}33, 0 0 100px {second}26, 0 8px 32px rgba(0,0,0,0.3)"

    def with_accent(self, accent_hex: str) -> "Theme":
        """Theme with a new accent color; unchanged if the color is malformed."""
        rgb = hex_to_rgb(accent_hex)
        if rgb is None:
            logger.warning(f"Ignoring invalid accent color: {accent_hex!r}")
            return self
        return replace(
            self,
            accent_hex=rgb_to_hex(rgb),
            accent_rgb=rgb,
            accent=rgb_to_oklch(*rgb),
        )

    def with_album_art(self, album_art: Optional[bytes]) -> "Theme":
        """Theme whose glow colors come from the given art (cleared without art)."""
        return replace(self, glow_colors=tuple(glow_colors_from_art(album_art)))


def build_theme(accent_hex: str = DEFAULT_ACCENT, album_art: Optional[bytes] = None) -> Theme:
    """Create a Theme for an accent color and optional album art."""
    return Theme().with_accent(accent_hex).with_album_art(album_art)
