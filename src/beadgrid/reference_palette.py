"""
Reference palette used as the nearest-match universe for image sampling.

The reference palette is the large candidate set (up to 120 colors) that raw
image pixels snap to. It is loaded once from JSON; if the file is missing or
malformed the fixed 12-color default set is used instead.
"""

import json
import os
from typing import List, Optional

from .color import Color, is_valid_hex, normalize_hex
from .errors import LoadError

MAX_REFERENCE_COLORS = 120

# Red, green, blue, yellow, magenta, cyan, white, black, gray, orange, mint, violet
DEFAULT_REFERENCE_PALETTE: List[Color] = [
    "#FF0000", "#00FF00", "#0000FF", "#FFFF00", "#FF00FF", "#00FFFF",
    "#FFFFFF", "#000000", "#888888", "#FF8800", "#00FFAA", "#AA00FF",
]


def get_bundled_palette_path() -> str:
    """Path of the reference palette file shipped with the package."""
    return os.path.join(os.path.dirname(os.path.abspath(__file__)),
                        "data", "full_color_palette.json")


def parse_reference_palette(data, max_colors: int = MAX_REFERENCE_COLORS) -> List[Color]:
    """
    Extract reference colors from decoded JSON.

    Invalid entries are skipped and duplicates collapse to their first
    occurrence. Raises ``LoadError`` if no usable colors remain.
    """
    if not isinstance(data, dict) or not isinstance(data.get('colors'), list):
        raise LoadError("Reference palette must be an object with a 'colors' list")

    colors: List[Color] = []
    for entry in data['colors']:
        if not is_valid_hex(entry):
            print(f"Warning: Skipping invalid reference color: {entry!r}")
            continue
        color = normalize_hex(entry)
        if color not in colors:
            colors.append(color)

    if not colors:
        raise LoadError("Reference palette contains no valid colors")

    if len(colors) > max_colors:
        print(f"Warning: Reference palette has {len(colors)} colors, keeping first {max_colors}")
        colors = colors[:max_colors]
    return colors


def load_reference_palette(path: Optional[str] = None,
                           max_colors: int = MAX_REFERENCE_COLORS) -> List[Color]:
    """
    Load the reference palette, falling back to the default 12 colors.

    Args:
        path: JSON file with a ``colors`` list; the bundled file when None
        max_colors: Upper bound on the number of colors kept

    Returns:
        Non-empty list of canonical colors
    """
    if path is None:
        path = get_bundled_palette_path()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        colors = parse_reference_palette(data, max_colors)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError and LoadError are both ValueErrors
        print(f"Warning: Could not load reference palette from {path}: {e}")
        print(f"Falling back to {len(DEFAULT_REFERENCE_PALETTE)} default colors")
        return list(DEFAULT_REFERENCE_PALETTE)

    print(f"Loaded {len(colors)} reference colors from {path}")
    return colors
