from pathlib import Path
import sys

from PIL import Image

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadgrid.geometry import GemGeometry, HexGeometry
from beadgrid.grid import CoordinateGrid
from beadgrid.render import render_cell_pixels, render_colors_only, render_full, save_png


def _checker_grid():
    grid = CoordinateGrid(4, 3)
    for col, row, _ in list(grid.iter_cells()):
        if (col + row) % 2:
            grid.set(col, row, "#000000")
    return grid


def test_cell_pixels_image_is_exactly_cols_by_rows():
    image = render_cell_pixels(_checker_grid())
    assert image.size == (4, 3)
    assert image.getpixel((0, 0)) == (255, 255, 255)
    assert image.getpixel((1, 0)) == (0, 0, 0)
    assert image.getpixel((3, 2)) == (0, 0, 0)


def test_colors_only_fills_cell_centres():
    grid = _checker_grid()
    geometry = GemGeometry(10)
    image = render_colors_only(grid, geometry)
    assert image.size == (40, 30)
    assert image.getpixel((15, 5)) == (0, 0, 0)
    assert image.getpixel((5, 5)) == (255, 255, 255)
    # Octagon corners leave the background showing
    assert image.getpixel((0, 0)) == (224, 224, 224)


def test_full_render_for_hex_cells(tmp_path):
    grid = _checker_grid()
    grid.select(0, 0)
    geometry = HexGeometry(8)
    image = render_full(grid, geometry, highlight_selection=True)
    assert image.size == geometry.canvas_size(grid.cols, grid.rows)

    cx, cy = geometry.cell_center(1, 0)
    assert image.getpixel((int(cx), int(cy))) == (0, 0, 0)

    path = tmp_path / "out" / "hex.png"
    save_png(image, str(path))
    assert Image.open(path).size == image.size
