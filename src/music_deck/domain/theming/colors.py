"""
Glow color extraction from album art.

Samples five fixed points near the center of the image (edges tend to be
borders or background) and keeps the most vibrant ones. Deterministic for a
given image.
"""

import io
import math
from typing import NamedTuple, Optional, Protocol, Sequence

from loguru import logger
from PIL import Image, UnidentifiedImageError

RGB = tuple[int, int, int]

# Relative (x, y) sample coordinates
SAMPLE_POINTS = (
    (0.33, 0.33),
    (0.5, 0.5),
    (0.67, 0.67),
    (0.33, 0.67),
    (0.67, 0.33),
)

MIN_BRIGHTNESS = 40
MIN_SATURATION = 0.2
MAX_COLORS = 2


class PixelSource(Protocol):
    """Anything with a size and RGB pixel lookup (a PIL RGB image qualifies)."""

    width: int
    height: int

    def getpixel(self, xy: tuple[int, int]) -> Sequence[int]: ...


class Raster(NamedTuple):
    """Decoded RGB image stored row-major."""

    width: int
    height: int
    pixels: Sequence[RGB]

    def getpixel(self, xy: tuple[int, int]) -> RGB:
        x, y = xy
        return self.pixels[y * self.width + x]

    @classmethod
    def filled(cls, width: int, height: int, color: RGB) -> "Raster":
        return cls(width, height, [color] * (width * height))


def brightness(rgb: RGB) -> float:
    """Perceived brightness (luma), 0 - 255."""
    r, g, b = rgb
    return (r * 299 + g * 587 + b * 114) / 1000


def saturation(rgb: RGB) -> float:
    """HSV-style saturation, 0.0 - 1.0 (0 for black)."""
    high = max(rgb)
    low = min(rgb)
    return 0.0 if high == 0 else (high - low) / high


def sample_coordinates(width: int, height: int) -> list[tuple[int, int]]:
    """Integer pixel coordinates for SAMPLE_POINTS on an image of this size."""
    return [
        (
            min(width - 1, math.floor(width * px)),
            min(height - 1, math.floor(height * py)),
        )
        for px, py in SAMPLE_POINTS
    ]


def extract_glow_colors(image: Optional[PixelSource]) -> list[RGB]:
    """
    Pick up to two vibrant colors from an image.

    Samples too dark (brightness <= 40) or too gray (saturation <= 0.2) are
    discarded; the rest are ranked by saturation + brightness / 255.

    Args:
        image: Decoded RGB image, or None when there is no art

    Returns:
        0, 1 or 2 RGB triples, most vibrant first
    """
    if image is None or image.width <= 0 or image.height <= 0:
        return []

    candidates: list[tuple[float, RGB]] = []
    for xy in sample_coordinates(image.width, image.height):
        r, g, b = image.getpixel(xy)[:3]
        rgb = (int(r), int(g), int(b))
        luma = brightness(rgb)
        sat = saturation(rgb)
        if luma > MIN_BRIGHTNESS and sat > MIN_SATURATION:
            candidates.append((sat + luma / 255, rgb))

    candidates.sort(key=lambda item: item[0], reverse=True)
    return [rgb for _, rgb in candidates[:MAX_COLORS]]


def decode_image(image_data: bytes) -> Optional[Image.Image]:
    """Decode image bytes into an RGB PIL image, or None if unreadable."""
    try:
        img = Image.open(io.BytesIO(image_data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Could not decode album art: {e}")
        return None

    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def glow_colors_from_art(album_art: Optional[bytes]) -> list[RGB]:
    """Glow colors for embedded album art bytes ([] without usable art)."""
    if not album_art:
        return []
    return extract_glow_colors(decode_image(album_art))
