"""
Color primitives for the bead grid engine.

Colors travel through the engine as canonical ``#RRGGBB`` strings (uppercase,
always six hex digits). Two colors are equal exactly when their canonical
strings match, so canonical strings are used directly as dictionary keys.
"""

import math
import re
from typing import Iterable, Sequence, Tuple

import numpy as np

from .errors import FormatError

Color = str
RGB = Tuple[int, int, int]

HEX_PATTERN = re.compile(r"#?(?:[0-9A-Fa-f]{3}|[0-9A-Fa-f]{6})")


def is_valid_hex(text) -> bool:
    """Check whether ``text`` is a 3- or 6-digit hex color, with optional ``#``."""
    if not isinstance(text, str):
        return False
    return HEX_PATTERN.fullmatch(text) is not None


def normalize_hex(text: str) -> Color:
    """
    Convert hex text to canonical ``#RRGGBB`` form.

    Short ``#RGB`` codes expand by digit duplication. Raises ``FormatError``
    for anything that is not a valid hex color.
    """
    if not is_valid_hex(text):
        raise FormatError(f"Invalid hex color: {text!r}")

    digits = text.lstrip("#")
    if len(digits) == 3:
        digits = "".join(d * 2 for d in digits)
    return "#" + digits.upper()


def rgb_to_hex(r: int, g: int, b: int) -> Color:
    """Convert 0-255 channel values to a canonical hex color."""
    for channel in (r, g, b):
        if not 0 <= int(channel) <= 255:
            raise FormatError(f"RGB channel out of range: {(r, g, b)}")
    return f"#{int(r):02X}{int(g):02X}{int(b):02X}"


def hex_to_rgb(color: str) -> RGB:
    """Convert hex text to an ``(r, g, b)`` tuple."""
    digits = normalize_hex(color)[1:]
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


def color_intensity(color: str) -> int:
    """Sum of the RGB channels, used to rank otherwise tied colors."""
    return sum(hex_to_rgb(color))


def color_distance(a: str, b: str) -> float:
    """Euclidean distance between two colors in RGB space."""
    r1, g1, b1 = hex_to_rgb(a)
    r2, g2, b2 = hex_to_rgb(b)
    return math.sqrt((r1 - r2) ** 2 + (g1 - g2) ** 2 + (b1 - b2) ** 2)


def nearest_indices(points, candidates) -> np.ndarray:
    """
    Index of the nearest candidate for every point.

    Args:
        points: (N, 3) RGB values
        candidates: (K, 3) RGB values, K >= 1

    Returns:
        (N,) int array. Integer squared distances keep the comparison exact
        and ``argmin`` picks the first candidate on ties.
    """
    candidates = np.asarray(candidates, dtype=np.int64).reshape(-1, 3)
    if len(candidates) == 0:
        raise ValueError("nearest_indices requires at least one candidate")
    points = np.asarray(points, dtype=np.int64).reshape(-1, 3)

    diff = points[:, np.newaxis, :] - candidates[np.newaxis, :, :]
    distances = np.sum(diff * diff, axis=2)
    return np.argmin(distances, axis=1)


def find_nearest_color(target: str, candidates: Sequence[str]) -> Color:
    """
    Return the candidate closest to ``target`` in RGB space.

    Ties go to the earliest candidate, so callers must pass candidates in a
    reproducible order.
    """
    if not candidates:
        raise ValueError("find_nearest_color requires a non-empty candidate list")

    palette = [normalize_hex(c) for c in candidates]
    idx = nearest_indices([hex_to_rgb(target)], [hex_to_rgb(c) for c in palette])[0]
    return palette[int(idx)]


def unique_colors(colors: Iterable[str]) -> list:
    """Normalize colors and drop duplicates, keeping first-seen order."""
    seen = {}
    for color in colors:
        seen.setdefault(normalize_hex(color), None)
    return list(seen)


def rgb_to_hsv(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """Convert RGB (0-255) to HSV with every component in 0-1."""
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    high = max(r, g, b)
    low = min(r, g, b)
    delta = high - low

    s = 0.0 if high == 0 else delta / high
    if delta == 0:
        h = 0.0  # achromatic
    elif high == r:
        h = ((g - b) / delta + (6 if g < b else 0)) / 6
    elif high == g:
        h = ((b - r) / delta + 2) / 6
    else:
        h = ((r - g) / delta + 4) / 6
    return (h, s, high)


def hsv_to_rgb(h: float, s: float, v: float) -> RGB:
    """Convert HSV (each component 0-1) back to 0-255 RGB."""
    i = math.floor(h * 6)
    f = h * 6 - i
    p = v * (1 - s)
    q = v * (1 - f * s)
    t = v * (1 - (1 - f) * s)

    r, g, b = [
        (v, t, p),
        (q, v, p),
        (p, v, t),
        (p, q, v),
        (t, p, v),
        (v, p, q),
    ][int(i) % 6]
    return (_round_half_up(r * 255), _round_half_up(g * 255), _round_half_up(b * 255))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
