"""
Cell geometries: how grid coordinates map onto canvas pixels.

The grid itself only knows ``(col, row) -> color``. A geometry supplies the
layout math for a particular cell shape so that rendering and hit-testing
stay out of the grid type.
"""

import math
from typing import List, Optional, Tuple

Point = Tuple[float, float]

SQRT3 = math.sqrt(3)


class CellGeometry:
    """Base class for cell layouts sized by a single ``cell_size`` metric."""

    name = ""
    size_key = ""
    cell_map_key = ""

    def __init__(self, cell_size: float = 16.0, offset: Point = (0.0, 0.0)):
        if cell_size <= 0:
            raise ValueError("Cell size must be positive")
        self.cell_size = float(cell_size)
        self.offset_x, self.offset_y = offset

    def canvas_size(self, cols: int, rows: int) -> Tuple[int, int]:
        """Pixel size of a canvas that exactly holds the grid."""
        w, h = self._grid_extent(cols, rows)
        return (int(math.ceil(w + 2 * self.offset_x)), int(math.ceil(h + 2 * self.offset_y)))

    def aspect_ratio(self, cols: int, rows: int) -> float:
        """Width / height of the laid-out grid, independent of cell size."""
        w, h = self._grid_extent(cols, rows)
        return w / h

    def fit_to_canvas(self, canvas_w: float, canvas_h: float, cols: int, rows: int,
                      margin: float = 1.0):
        """Choose the largest cell size that fits the canvas and center the grid."""
        unit_w, unit_h = self._unit_extent(cols, rows)
        self.cell_size = min(canvas_w / unit_w, canvas_h / unit_h) * margin
        w, h = self._grid_extent(cols, rows)
        self.offset_x = (canvas_w - w) / 2
        self.offset_y = (canvas_h - h) / 2

    def _grid_extent(self, cols: int, rows: int) -> Tuple[float, float]:
        unit_w, unit_h = self._unit_extent(cols, rows)
        return (unit_w * self.cell_size, unit_h * self.cell_size)

    def _unit_extent(self, cols: int, rows: int) -> Tuple[float, float]:
        raise NotImplementedError

    def cell_center(self, col: int, row: int) -> Point:
        raise NotImplementedError

    def cell_polygon(self, col: int, row: int) -> List[Point]:
        raise NotImplementedError

    def pixel_to_cell(self, x: float, y: float, cols: int, rows: int) -> Optional[Tuple[int, int]]:
        raise NotImplementedError


class GemGeometry(CellGeometry):
    """Square cells drawn as octagonal gems."""

    name = "gem"
    size_key = "gemSize"
    cell_map_key = "gemColors"

    # Corner cut of a regular octagon inscribed in a unit square
    CORNER_CUT = 0.2929

    def _unit_extent(self, cols, rows):
        return (float(cols), float(rows))

    def cell_center(self, col, row):
        return (self.offset_x + (col + 0.5) * self.cell_size,
                self.offset_y + (row + 0.5) * self.cell_size)

    def cell_polygon(self, col, row):
        cx, cy = self.cell_center(col, row)
        size = self.cell_size - 0.01
        c = size * self.CORNER_CUT
        s = size / 2
        return [
            (cx - s + c, cy - s),
            (cx + s - c, cy - s),
            (cx + s, cy - s + c),
            (cx + s, cy + s - c),
            (cx + s - c, cy + s),
            (cx - s + c, cy + s),
            (cx - s, cy + s - c),
            (cx - s, cy - s + c),
        ]

    def pixel_to_cell(self, x, y, cols, rows):
        col = math.floor((x - self.offset_x) / self.cell_size)
        row = math.floor((y - self.offset_y) / self.cell_size)
        if 0 <= col < cols and 0 <= row < rows:
            return (col, row)
        return None


class HexGeometry(CellGeometry):
    """
    Flat-top hexagons in offset columns.

    ``cell_size`` is the hexagon radius. Odd columns sit half a hex lower
    than even ones.
    """

    name = "hex"
    size_key = "hexSize"
    cell_map_key = "hexColors"

    @property
    def hex_width(self) -> float:
        return 2 * self.cell_size

    @property
    def hex_height(self) -> float:
        return SQRT3 * self.cell_size

    @property
    def col_width(self) -> float:
        return self.hex_width * 0.75

    def _unit_extent(self, cols, rows):
        return (1.5 * (cols - 1) + 2, SQRT3 * rows + SQRT3 / 2)

    def cell_center(self, col, row):
        x = self.offset_x + self.cell_size + col * self.col_width
        y = self.offset_y + self.hex_height / 2 + row * self.hex_height
        if col % 2 == 1:
            y += self.hex_height / 2
        return (x, y)

    def cell_polygon(self, col, row):
        cx, cy = self.cell_center(col, row)
        return [
            (cx + self.cell_size * math.cos(math.pi / 3 * i),
             cy + self.cell_size * math.sin(math.pi / 3 * i))
            for i in range(6)
        ]

    def pixel_to_cell(self, x, y, cols, rows):
        # First guess from the column pitch, then check neighbours
        col = round((x - self.offset_x - self.cell_size) / self.col_width)
        row_offset = self.hex_height / 2 if col % 2 == 1 else 0.0
        row = math.floor((y - self.offset_y - row_offset) / self.hex_height)

        best = None
        best_distance = self.cell_size
        for dc in (0, -1, 1):
            for dr in (0, -1, 1):
                c, r = col + dc, row + dr
                if not (0 <= c < cols and 0 <= r < rows):
                    continue
                cx, cy = self.cell_center(c, r)
                distance = math.hypot(x - cx, y - cy)
                if distance <= best_distance:
                    best_distance = distance
                    best = (c, r)
        return best


GEOMETRIES = {
    GemGeometry.name: GemGeometry,
    HexGeometry.name: HexGeometry,
}


def get_geometry(name: str, cell_size: float = 16.0) -> CellGeometry:
    """Create a geometry by name ("gem" or "hex")."""
    if name not in GEOMETRIES:
        raise ValueError(f"Unknown geometry '{name}'. Available: {list(GEOMETRIES.keys())}")
    return GEOMETRIES[name](cell_size)
