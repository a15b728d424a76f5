"""
JSON file formats for saved grids and exported palettes.

Grid file::

    {"cols": 64, "rows": 40, "gemSize": 16.0,
     "gemColors": {"0,0": "#FFFFFF", ...},
     "timestamp": "2024-01-01T12:00:00", "palette": ["#FF0000", ...]}

The size and cell-map keys depend on the cell geometry (``gemSize`` /
``gemColors`` or ``hexSize`` / ``hexColors``).

Palette file::

    {"name": "...", "description": "...", "timestamp": "...", "colors": [...]}
"""

import json
import os
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from .color import Color, is_valid_hex, normalize_hex
from .errors import LoadError
from .geometry import GEOMETRIES, CellGeometry
from .grid import DEFAULT_COLOR, CoordinateGrid
from .history import DEFAULT_HISTORY_LIMIT

# Unpadded decimal "col,row"
CELL_KEY_PATTERN = re.compile(r"(0|[1-9][0-9]*),(0|[1-9][0-9]*)")


@dataclass
class LoadedGrid:
    """Result of decoding a grid file."""
    grid: CoordinateGrid
    geometry_name: str
    cell_size: Optional[float]
    palette: Optional[List[Color]]
    timestamp: Optional[str]


def _timestamp() -> str:
    return datetime.now().isoformat()


def grid_to_dict(grid: CoordinateGrid, geometry: CellGeometry,
                 palette: Optional[List[str]] = None) -> dict:
    """Serialize a grid (and optionally its palette) to the grid file layout."""
    data = {
        'cols': grid.cols,
        'rows': grid.rows,
        geometry.size_key: geometry.cell_size,
        geometry.cell_map_key: {
            f"{col},{row}": color for col, row, color in grid.iter_cells()
        },
        'timestamp': _timestamp(),
    }
    if palette is not None:
        data['palette'] = list(palette)
    return data


def _parse_extent(data: dict, key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise LoadError(f"Grid file field '{key}' must be a positive integer, got {value!r}")
    return value


def _parse_cell_key(key: str, cols: int, rows: int) -> Tuple[int, int]:
    match = CELL_KEY_PATTERN.fullmatch(key) if isinstance(key, str) else None
    if match is None:
        raise LoadError(f"Malformed cell key {key!r}; expected 'col,row'")
    col, row = int(match.group(1)), int(match.group(2))
    if not (0 <= col < cols and 0 <= row < rows):
        raise LoadError(f"Cell {key!r} outside grid bounds {cols}x{rows}")
    return col, row


def _find_cell_map(data: dict, preferred: Optional[str]) -> Tuple[str, dict]:
    """Locate the cell map, trying the preferred geometry's key first."""
    names = list(GEOMETRIES)
    if preferred in GEOMETRIES:
        names.remove(preferred)
        names.insert(0, preferred)

    for name in names:
        key = GEOMETRIES[name].cell_map_key
        if key in data:
            if not isinstance(data[key], dict):
                raise LoadError(f"Grid file field '{key}' must be an object")
            return name, data[key]

    expected = [GEOMETRIES[n].cell_map_key for n in names]
    raise LoadError(f"Grid file has no cell map (expected one of {expected})")


def parse_palette_colors(colors) -> List[Color]:
    """Keep only valid hex entries, normalized. Raises ``LoadError`` if none remain."""
    if not isinstance(colors, list):
        raise LoadError("Palette 'colors' must be a list")
    valid = [normalize_hex(c) for c in colors if is_valid_hex(c)]
    if not valid:
        raise LoadError("No valid colors found in the palette")
    return valid


def grid_from_dict(data, default_color: str = DEFAULT_COLOR,
                   history_limit: int = DEFAULT_HISTORY_LIMIT,
                   preferred_geometry: Optional[str] = None) -> LoadedGrid:
    """
    Decode a grid file into a new grid.

    The whole document is validated before the grid is built, so a failure
    never yields a partially populated grid. History of the new grid holds
    exactly the loaded state.
    """
    if not isinstance(data, dict):
        raise LoadError("Grid file must contain a JSON object")

    cols = _parse_extent(data, 'cols')
    rows = _parse_extent(data, 'rows')
    geometry_name, raw_cells = _find_cell_map(data, preferred_geometry)

    cells: Dict[Tuple[int, int], Color] = {}
    for key, color in raw_cells.items():
        cell = _parse_cell_key(key, cols, rows)
        if not is_valid_hex(color):
            raise LoadError(f"Cell {key!r} has invalid color {color!r}")
        cells[cell] = normalize_hex(color)

    cell_size = data.get(GEOMETRIES[geometry_name].size_key)
    if isinstance(cell_size, bool) or not isinstance(cell_size, (int, float)) or cell_size <= 0:
        cell_size = None

    palette = None
    if 'palette' in data:
        try:
            palette = parse_palette_colors(data['palette'])
        except LoadError as e:
            print(f"Warning: Ignoring saved palette: {e}")

    grid = CoordinateGrid.from_cells(cols, rows, cells, default_color, history_limit)
    return LoadedGrid(
        grid=grid,
        geometry_name=geometry_name,
        cell_size=float(cell_size) if cell_size is not None else None,
        palette=palette,
        timestamp=data.get('timestamp'),
    )


def _read_json(path: str, what: str):
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except OSError as e:
        raise LoadError(f"Could not read {what} file {path}: {e}") from e
    except ValueError as e:
        raise LoadError(f"Error parsing {what} file {path}: {e}") from e


def _write_json(path: str, data: dict):
    dir_path = os.path.dirname(path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)


def save_grid(path: str, grid: CoordinateGrid, geometry: CellGeometry,
              palette: Optional[List[str]] = None):
    """Write a grid file."""
    _write_json(path, grid_to_dict(grid, geometry, palette))


def load_grid(path: str, default_color: str = DEFAULT_COLOR,
              history_limit: int = DEFAULT_HISTORY_LIMIT,
              preferred_geometry: Optional[str] = None) -> LoadedGrid:
    """Read and decode a grid file."""
    return grid_from_dict(_read_json(path, "grid"), default_color, history_limit,
                          preferred_geometry)


def palette_to_dict(colors: List[str], name: str = "Custom Palette",
                    description: str = "Exported from beadgrid") -> dict:
    return {
        'name': name,
        'description': description,
        'timestamp': _timestamp(),
        'colors': [normalize_hex(c) for c in colors],
    }


def save_palette(path: str, colors: List[str], name: str = "Custom Palette",
                 description: str = "Exported from beadgrid"):
    """Write a palette file."""
    _write_json(path, palette_to_dict(colors, name, description))


def load_palette(path: str) -> List[Color]:
    """
    Read a palette file.

    Invalid colors are dropped; ``LoadError`` is raised only when the file is
    unreadable, malformed, or has no valid colors at all.
    """
    data = _read_json(path, "palette")
    if not isinstance(data, dict):
        raise LoadError("Invalid palette format. No colors found.")
    return parse_palette_colors(data.get('colors'))
