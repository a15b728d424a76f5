"""
Editing session: one grid, its history, palettes and quantization state.
"""

from typing import List, Optional

from .color import Color
from .config import Config
from .geometry import CellGeometry, get_geometry
from .grid import CoordinateGrid
from .image_io import load_image
from .palette import Palette
from .persistence import LoadedGrid, load_grid, load_palette, save_grid, save_palette
from .quantize import ColorQuantizer, QuantizationContext, build_replacement_map
from .reference_palette import DEFAULT_REFERENCE_PALETTE, load_reference_palette
from .render import render_cell_pixels, render_colors_only, render_full, save_png
from .sampler import ImageSampler


class EditorSession:
    """
    Owns everything a user edits in one sitting.

    All grid writes go through this object, so callers that move sampling or
    quantization off the main thread only need to serialize calls to it.
    """

    def __init__(self, config: Optional[Config] = None,
                 reference_palette: Optional[List[str]] = None):
        """Initialize session with a blank grid and the reference palette."""
        self.config = config or Config()
        self.geometry: CellGeometry = get_geometry(
            self.config.grid.geometry, self.config.export.cell_size_px
        )
        self.grid = self._new_grid(self.config.grid.cols, self.config.grid.rows)
        self.palette = Palette(slots=self.config.palette.slots,
                               default_color=self.config.grid.default_color)

        if reference_palette is None:
            reference_palette = load_reference_palette(
                self.config.palette.reference_file,
                self.config.palette.max_reference_colors,
            )
        self.reference_palette: List[Color] = (
            list(reference_palette) or list(DEFAULT_REFERENCE_PALETTE)
        )

        self.context = QuantizationContext()
        self.quantizer = ColorQuantizer(self.config.quantize.max_iterations)
        self.sampler = ImageSampler()

    def _new_grid(self, cols: int, rows: int) -> CoordinateGrid:
        return CoordinateGrid(cols, rows, self.config.grid.default_color,
                              self.config.grid.history_limit)

    # Image loading

    def load_image(self, image_path: str) -> dict:
        """
        Sample an image file onto the grid as one undoable edit.

        Returns the image metadata with the resulting color histogram added.
        """
        aspect = self.geometry.aspect_ratio(self.grid.cols, self.grid.rows)
        pixels, metadata = load_image(image_path, aspect_ratio=aspect)
        print(f"Loaded image {metadata['filename']} "
              f"({metadata['original_size'][0]}x{metadata['original_size'][1]})")

        histogram = self.apply_pixels(pixels)
        metadata['histogram'] = histogram
        return metadata

    def apply_pixels(self, pixels) -> dict:
        """Sample a decoded (H, W, C) pixel array onto the grid."""
        height, width = pixels.shape[:2]
        assignments, histogram = self.sampler.sample(
            pixels, width, height, self.grid.cols, self.grid.rows, self.reference_palette
        )

        self.grid.replace_cells(assignments)
        self.palette.set_from_histogram(histogram)
        self.context.record_image(histogram)

        print(f"Mapped image to {self.grid.cols}x{self.grid.rows} grid "
              f"using {len(histogram)} colors")
        return histogram

    # Editing

    def apply_palette_slot(self, index: int) -> int:
        """Paint the selection with the color in a palette slot."""
        return self.grid.apply_to_selection(self.palette[index])

    def reduce_colors(self, target: Optional[int] = None) -> Optional[List[Color]]:
        """
        Reduce the grid to ``target`` colors as one undoable remap.

        Returns the new colors, or None when the grid already uses no more
        than ``target`` colors.
        """
        if target is None:
            target = self.config.quantize.target_colors
        if target < 1:
            raise ValueError("Please enter a valid target color count (minimum 1).")

        histogram = self.grid.get_color_histogram()
        grid_colors = list(histogram)
        if len(grid_colors) <= target:
            print(f"The grid already uses {len(grid_colors)} colors, "
                  f"which is less than or equal to the target of {target}.")
            return None

        print(f"Reducing {len(grid_colors)} colors to {target}...")
        reduced = self.quantizer.reduce_colors(grid_colors, target, self.context, histogram)
        color_map = build_replacement_map(grid_colors, reduced)

        self.grid.apply_color_map(color_map)
        self.palette.set_colors(reduced)

        status = "converged" if self.quantizer.last_converged else "stopped"
        print(f"Clustering {status} after {self.quantizer.last_iterations} iterations")
        return reduced

    def undo(self) -> bool:
        return self.grid.undo()

    def redo(self) -> bool:
        return self.grid.redo()

    def clear(self):
        self.grid.clear()

    def color_counts(self) -> dict:
        return self.grid.get_color_histogram()

    # Files

    def save_grid(self, path: str):
        """Save the grid together with the current palette."""
        save_grid(path, self.grid, self.geometry, self.palette.to_list())
        print(f"Saved grid: {path}")

    def load_grid(self, path: str, keep_cell_size: bool = False) -> LoadedGrid:
        """
        Replace the grid with one loaded from file.

        The file's geometry and cell size are adopted; pass
        ``keep_cell_size=True`` to render at the current cell size instead.
        On any load failure the current grid, history and palette are kept.
        """
        loaded = load_grid(path, self.config.grid.default_color,
                           self.config.grid.history_limit,
                           preferred_geometry=self.geometry.name)

        cell_size = self.geometry.cell_size
        if loaded.cell_size is not None and not keep_cell_size:
            cell_size = loaded.cell_size
        geometry = get_geometry(loaded.geometry_name, cell_size)

        self.grid = loaded.grid
        self.geometry = geometry
        if loaded.palette is not None:
            self.palette.set_colors(loaded.palette)

        print(f"Loaded {loaded.grid.cols}x{loaded.grid.rows} grid from {path}")
        return loaded

    def export_palette(self, path: str, name: str = "Custom Palette"):
        save_palette(path, self.palette.to_list(), name=name)

    def import_palette(self, path: str) -> List[Color]:
        """Replace palette slots from a palette file."""
        colors = load_palette(path)
        self.palette.set_colors(colors)
        print(f"Palette imported successfully with {len(colors)} colors.")
        return colors

    def export_png(self, path: str, mode: str = "full"):
        """
        Write a PNG rendering.

        Modes: ``full`` (outlined cells), ``colors`` (flat fills), ``pixels``
        (one pixel per cell).
        """
        export = self.config.export
        if mode == "full":
            image = render_full(self.grid, self.geometry, export.background, export.outline_color)
        elif mode == "colors":
            image = render_colors_only(self.grid, self.geometry, export.background)
        elif mode == "pixels":
            image = render_cell_pixels(self.grid)
        else:
            raise ValueError(f"Unknown export mode '{mode}'. Available: full, colors, pixels")
        save_png(image, path)
        return image
