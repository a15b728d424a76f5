"""
Bitmap renderings of a grid: decorated, colors-only, and one pixel per cell.
"""

import os
from typing import Optional

import numpy as np
from PIL import Image, ImageDraw

from .color import hex_to_rgb
from .geometry import CellGeometry
from .grid import CoordinateGrid

DEFAULT_BACKGROUND = "#E0E0E0"
DEFAULT_OUTLINE = "#888888"
SELECTION_OUTLINE = "#00008B"


def _draw_cells(grid: CoordinateGrid, geometry: CellGeometry, background: str,
                outline: Optional[str], highlight_selection: bool) -> Image.Image:
    width, height = geometry.canvas_size(grid.cols, grid.rows)
    image = Image.new("RGB", (width, height), hex_to_rgb(background))
    draw = ImageDraw.Draw(image)

    for col, row, color in grid.iter_cells():
        polygon = geometry.cell_polygon(col, row)
        draw.polygon(polygon, fill=hex_to_rgb(color))
        if outline is None:
            continue
        if highlight_selection and (col, row) in grid.selection:
            draw.polygon(polygon, outline=hex_to_rgb(SELECTION_OUTLINE), width=2)
        else:
            draw.polygon(polygon, outline=hex_to_rgb(outline))

    return image


def render_full(grid: CoordinateGrid, geometry: CellGeometry,
                background: str = DEFAULT_BACKGROUND, outline: str = DEFAULT_OUTLINE,
                highlight_selection: bool = False) -> Image.Image:
    """Render every cell with its shape outline."""
    return _draw_cells(grid, geometry, background, outline, highlight_selection)


def render_colors_only(grid: CoordinateGrid, geometry: CellGeometry,
                       background: str = DEFAULT_BACKGROUND) -> Image.Image:
    """Render flat cell fills with no outlines or selection."""
    return _draw_cells(grid, geometry, background, None, False)


def render_cell_pixels(grid: CoordinateGrid) -> Image.Image:
    """Render exactly one pixel per cell (``cols x rows`` image)."""
    pixels = np.zeros((grid.rows, grid.cols, 3), dtype=np.uint8)
    for col, row, color in grid.iter_cells():
        pixels[row, col] = hex_to_rgb(color)
    return Image.fromarray(pixels, 'RGB')


def save_png(image: Image.Image, output_path: str):
    """Save an image as PNG, creating the parent directory if needed."""
    dir_path = os.path.dirname(output_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)
    image.save(output_path, "PNG")
    print(f"Saved {image.size[0]}x{image.size[1]} image: {output_path}")
