"""Theming domain - album-art glow colors and accent color approximation."""

from .colors import (
    RGB,
    SAMPLE_POINTS,
    Raster,
    brightness,
    decode_image,
    extract_glow_colors,
    glow_colors_from_art,
    saturation,
)
from .theme import (
    DEFAULT_ACCENT,
    OklchColor,
    Theme,
    build_theme,
    hex_to_rgb,
    rgb_css,
    rgb_to_hex,
    rgb_to_oklch,
)

__all__ = [
    "RGB",
    "SAMPLE_POINTS",
    "Raster",
    "brightness",
    "decode_image",
    "extract_glow_colors",
    "glow_colors_from_art",
    "saturation",
    "DEFAULT_ACCENT",
    "OklchColor",
    "Theme",
    "build_theme",
    "hex_to_rgb",
    "rgb_css",
    "rgb_to_hex",
    "rgb_to_oklch",
]
