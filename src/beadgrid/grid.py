"""
Coordinate grid of bead colors with selection and undoable bulk edits.
"""

import numbers
from typing import Callable, Dict, Iterable, Iterator, List, Set, Tuple

from .color import Color, normalize_hex
from .errors import RangeError
from .history import DEFAULT_HISTORY_LIMIT, HistoryStack

Cell = Tuple[int, int]

DEFAULT_COLOR = "#FFFFFF"


class CoordinateGrid:
    """
    Fixed ``cols x rows`` grid mapping ``(col, row)`` to a canonical color.

    Every in-range cell always has a color; unassigned cells hold the default
    color. Bulk edits (selection fill, color remapping, clear, wholesale
    replacement) are recorded in ``history`` so they can be undone.
    """

    def __init__(self, cols: int, rows: int, default_color: str = DEFAULT_COLOR,
                 history_limit: int = DEFAULT_HISTORY_LIMIT):
        """Initialize grid with every cell set to the default color."""
        if cols < 1 or rows < 1:
            raise ValueError(f"Grid extent must be positive, got {cols}x{rows}")

        self.cols = cols
        self.rows = rows
        self.default_color = normalize_hex(default_color)
        self.cells: Dict[Cell, Color] = self._blank_cells()
        self.selection: Set[Cell] = set()

        # The initial state is the first undo target
        self.history = HistoryStack(self, history_limit)
        self.history.snapshot()

    @property
    def total_cells(self) -> int:
        return self.cols * self.rows

    def _blank_cells(self) -> Dict[Cell, Color]:
        return {
            (col, row): self.default_color
            for row in range(self.rows)
            for col in range(self.cols)
        }

    def is_valid_cell(self, col: int, row: int) -> bool:
        """Whether (col, row) are integers inside the grid."""
        for value in (col, row):
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                return False
        return 0 <= col < self.cols and 0 <= row < self.rows

    def _check_cell(self, col: int, row: int):
        if not self.is_valid_cell(col, row):
            raise RangeError(
                f"Cell ({col!r}, {row!r}) is not a cell of the {self.cols}x{self.rows} grid"
            )

    # Cell access

    def get(self, col: int, row: int) -> Color:
        """Get the color at the given cell."""
        self._check_cell(col, row)
        return self.cells[(col, row)]

    def set(self, col: int, row: int, color: str):
        """Overwrite a single cell. Not recorded in history."""
        self._check_cell(col, row)
        self.cells[(col, row)] = normalize_hex(color)

    def iter_cells(self) -> Iterator[Tuple[int, int, Color]]:
        """Yield ``(col, row, color)`` in row-major order."""
        for row in range(self.rows):
            for col in range(self.cols):
                yield col, row, self.cells[(col, row)]

    # Selection

    def select(self, col: int, row: int):
        """Add one cell to the selection."""
        self._check_cell(col, row)
        self.selection.add((col, row))

    def select_many(self, cells: Iterable[Cell]):
        """Add several cells to the selection; nothing is added if any is out of range."""
        cells = list(cells)
        for col, row in cells:
            self._check_cell(col, row)
        self.selection.update(cells)

    def select_color(self, color: str) -> int:
        """Replace the selection with every cell holding ``color``."""
        target = normalize_hex(color)
        self.selection = {cell for cell, value in self.cells.items() if value == target}
        return len(self.selection)

    def clear_selection(self):
        self.selection.clear()

    # Undoable bulk edits

    def _commit(self, mutate: Callable[[], None]):
        """Run an edit so both the pre-edit and post-edit states are in history."""
        if not self.history.is_current():
            self.history.snapshot()
        mutate()
        self.history.snapshot()

    def apply_to_selection(self, color: str) -> int:
        """
        Paint every selected cell with ``color``.

        Returns the number of cells painted; an empty selection is a no-op
        and leaves history untouched.
        """
        if not self.selection:
            return 0
        value = normalize_hex(color)
        selected = list(self.selection)

        def mutate():
            for cell in selected:
                self.cells[cell] = value

        self._commit(mutate)
        return len(selected)

    def apply_color_map(self, color_map: Dict[str, str]) -> int:
        """
        Replace colors according to ``color_map``.

        Cells whose color has no entry are left as they are. Returns the
        number of cells whose color changed.
        """
        mapping = {normalize_hex(old): normalize_hex(new) for old, new in color_map.items()}
        changed = sum(
            1 for value in self.cells.values()
            if value in mapping and mapping[value] != value
        )

        def mutate():
            for cell, value in self.cells.items():
                if value in mapping:
                    self.cells[cell] = mapping[value]

        self._commit(mutate)
        return changed

    def replace_cells(self, assignments: Dict[Cell, str]):
        """
        Overwrite many cells at once as a single undoable edit.

        All coordinates and colors are validated before anything is written.
        """
        staged: Dict[Cell, Color] = {}
        for (col, row), color in assignments.items():
            self._check_cell(col, row)
            staged[(col, row)] = normalize_hex(color)

        self._commit(lambda: self.cells.update(staged))

    def clear(self):
        """Reset every cell to the default color and drop the selection."""
        def mutate():
            self.cells = self._blank_cells()

        self._commit(mutate)
        self.selection.clear()

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    # Statistics

    def get_distinct_colors(self) -> List[Color]:
        """Colors present in the grid, in row-major first-seen order."""
        return list(self.get_color_histogram())

    def get_color_histogram(self) -> Dict[Color, int]:
        """Count of cells per color, keyed in row-major first-seen order."""
        counts: Dict[Color, int] = {}
        for _, _, color in self.iter_cells():
            counts[color] = counts.get(color, 0) + 1
        return counts

    def get_grid_info(self) -> dict:
        """Summary of grid extent and color usage."""
        histogram = self.get_color_histogram()
        return {
            'dimensions': {
                'cols': self.cols,
                'rows': self.rows,
                'total_cells': self.total_cells,
            },
            'colors': {
                'total_used': len(histogram),
                'color_counts': histogram,
            },
            'selection_size': len(self.selection),
            'history': {
                'entries': len(self.history),
                'index': self.history.index,
            },
        }

    @classmethod
    def from_cells(cls, cols: int, rows: int, cells: Dict[Cell, str],
                   default_color: str = DEFAULT_COLOR,
                   history_limit: int = DEFAULT_HISTORY_LIMIT,
                   ) -> "CoordinateGrid":
        """Build a grid from explicit cells; history starts at the given state."""
        grid = cls(cols, rows, default_color, history_limit)
        for (col, row), color in cells.items():
            grid.set(col, row, color)
        grid.history.reset()
        return grid
