"""
Nearest-neighbour image sampling onto the grid with reference palette snapping.
"""

from typing import Dict, Sequence, Tuple

import numpy as np

from .color import Color, hex_to_rgb, nearest_indices, normalize_hex
from .errors import SamplingPreconditionError

Cell = Tuple[int, int]


class ImageSampler:
    """Maps a decoded pixel buffer onto ``grid_cols x grid_rows`` palette colors."""

    def sample(self, pixel_buffer, source_width: int, source_height: int,
               grid_cols: int, grid_rows: int,
               reference_palette: Sequence[str]) -> Tuple[Dict[Cell, Color], Dict[Color, int]]:
        """
        Sample one source pixel per grid cell and snap it to the palette.

        Args:
            pixel_buffer: RGB or RGBA pixels, either (H, W, C) or flat row-major
            source_width: Source image width in pixels
            source_height: Source image height in pixels
            grid_cols: Target grid columns
            grid_rows: Target grid rows
            reference_palette: Non-empty candidate colors for nearest matching

        Returns:
            Tuple of (cell assignments, histogram of matched palette colors).
            The histogram is keyed in row-major first-seen order.
        """
        if not reference_palette:
            raise SamplingPreconditionError(
                "Reference palette is empty; substitute the default palette before sampling"
            )
        if source_width < 1 or source_height < 1:
            raise ValueError(f"Invalid source size {source_width}x{source_height}")
        if grid_cols < 1 or grid_rows < 1:
            raise ValueError(f"Invalid grid size {grid_cols}x{grid_rows}")

        pixels = self._as_rgb_array(pixel_buffer, source_width, source_height)

        # Nearest source pixel for each cell centre
        xs = self._sample_positions(grid_cols, source_width)
        ys = self._sample_positions(grid_rows, source_height)
        samples = pixels[np.ix_(ys, xs)].reshape(-1, 3).astype(np.int64)

        palette = [normalize_hex(c) for c in reference_palette]
        palette_rgb = np.array([hex_to_rgb(c) for c in palette], dtype=np.int64)
        nearest = nearest_indices(samples, palette_rgb)

        assignments: Dict[Cell, Color] = {}
        histogram: Dict[Color, int] = {}
        for i, palette_idx in enumerate(nearest):
            row, col = divmod(i, grid_cols)
            color = palette[int(palette_idx)]
            assignments[(col, row)] = color
            histogram[color] = histogram.get(color, 0) + 1

        return assignments, histogram

    @staticmethod
    def _as_rgb_array(pixel_buffer, width: int, height: int) -> np.ndarray:
        """Coerce the buffer to an (H, W, 3) array, dropping any alpha channel."""
        arr = np.asarray(pixel_buffer)
        if arr.ndim == 3:
            if arr.shape[0] != height or arr.shape[1] != width:
                raise ValueError(
                    f"Pixel buffer shape {arr.shape[:2]} does not match {height}x{width}"
                )
        else:
            flat = arr.reshape(-1)
            channels, remainder = divmod(flat.size, width * height)
            if remainder or channels not in (3, 4):
                raise ValueError(
                    f"Pixel buffer of {flat.size} values does not fit {width}x{height} RGB/RGBA"
                )
            arr = flat.reshape(height, width, channels)

        if arr.shape[2] not in (3, 4):
            raise ValueError(f"Expected 3 or 4 channels, got {arr.shape[2]}")
        return arr[:, :, :3]

    @staticmethod
    def _sample_positions(cells: int, source: int) -> np.ndarray:
        """Source index nearest to each cell centre along one axis."""
        positions = ((np.arange(cells) + 0.5) * source / cells).astype(np.int64)
        return np.minimum(positions, source - 1)
