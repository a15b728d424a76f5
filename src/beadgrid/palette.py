"""
User-facing swatch palette and top-color extraction from a color histogram.
"""

from typing import Dict, Iterable, List

from .color import Color, color_intensity, is_valid_hex, normalize_hex
from .errors import FormatError, RangeError
from .grid import DEFAULT_COLOR

PALETTE_SLOTS = 10


def extract_top(histogram: Dict[str, int], n: int = PALETTE_SLOTS,
                default_color: str = DEFAULT_COLOR) -> List[Color]:
    """
    Pick the ``n`` most used colors from a histogram.

    Colors are ranked by count, then by intensity (r+g+b, brighter first),
    then by their order in ``histogram``. The result is padded with
    ``default_color`` so it always holds exactly ``n`` entries.

    Args:
        histogram: Mapping of color to cell count
        n: Number of slots to fill
        default_color: Padding color when fewer than ``n`` colors exist

    Returns:
        List of exactly ``n`` canonical colors
    """
    if n < 0:
        raise ValueError("Slot count must be non-negative")

    entries = []
    for color, count in histogram.items():
        canonical = normalize_hex(color)
        entries.append((canonical, count, color_intensity(canonical)))

    # sorted() is stable, so full ties keep histogram order
    entries.sort(key=lambda e: (-e[1], -e[2]))

    top = [color for color, _, _ in entries[:n]]
    padding = normalize_hex(default_color)
    while len(top) < n:
        top.append(padding)
    return top


class Palette:
    """Fixed number of swatch slots, indexed positionally by the UI."""

    def __init__(self, colors: Iterable[str] = (), slots: int = PALETTE_SLOTS,
                 default_color: str = DEFAULT_COLOR):
        """Initialize palette, padding or truncating to ``slots`` entries."""
        if slots < 1:
            raise ValueError("Palette must have at least one slot")
        self.slots = slots
        self.default_color = normalize_hex(default_color)
        self.colors: List[Color] = []
        self.set_colors(colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self):
        return iter(self.colors)

    def __getitem__(self, index: int) -> Color:
        self._check_slot(index)
        return self.colors[index]

    def _check_slot(self, index: int):
        if not 0 <= index < self.slots:
            raise RangeError(f"Palette slot {index} outside 0-{self.slots - 1}")

    def set_colors(self, colors: Iterable[str]):
        """Replace all slots; all colors are validated before any slot changes."""
        staged = [normalize_hex(c) for c in colors][:self.slots]
        while len(staged) < self.slots:
            staged.append(self.default_color)
        self.colors = staged

    def set_slot(self, index: int, text: str) -> Color:
        """
        Update one slot from user text.

        Raises ``FormatError`` for invalid text and keeps the prior color.
        """
        self._check_slot(index)
        if not is_valid_hex(text.strip() if isinstance(text, str) else text):
            raise FormatError(
                f"Invalid hex color code {text!r}. Please use format #RRGGBB or #RGB."
            )
        self.colors[index] = normalize_hex(text.strip())
        return self.colors[index]

    def set_from_histogram(self, histogram: Dict[str, int]):
        """Fill slots with the most used colors of a histogram."""
        self.colors = extract_top(histogram, self.slots, self.default_color)

    def to_list(self) -> List[Color]:
        return list(self.colors)
