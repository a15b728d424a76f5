"""
Snapshot-based undo/redo history for a coordinate grid.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from .grid import CoordinateGrid

Cell = Tuple[int, int]

DEFAULT_HISTORY_LIMIT = 50


@dataclass
class GridSnapshot:
    """Owned copy of the cell-to-color mapping at one point in time."""
    cells: Dict[Cell, str]

    @classmethod
    def capture(cls, cells: Dict[Cell, str]) -> "GridSnapshot":
        """Copy the given mapping into a new snapshot."""
        return cls(cells=dict(cells))

    def restore(self) -> Dict[Cell, str]:
        """Return a fresh copy of the stored mapping."""
        return dict(self.cells)


class HistoryStack:
    """
    Linear undo/redo stack of full grid snapshots.

    ``index`` points at the snapshot matching the live grid. Pushing while
    ``index`` is behind the end discards the redo branch; once ``limit`` is
    exceeded the oldest snapshot is evicted and ``index`` follows it down.
    """

    def __init__(self, grid: "CoordinateGrid", limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.grid = grid
        self.limit = limit
        self.stack: List[GridSnapshot] = []
        self.index = -1

    def __len__(self) -> int:
        return len(self.stack)

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return self.index < len(self.stack) - 1

    def snapshot(self):
        """Record the grid's current cells as the newest history entry."""
        del self.stack[self.index + 1:]
        self.stack.append(GridSnapshot.capture(self.grid.cells))
        self.index = len(self.stack) - 1

        if len(self.stack) > self.limit:
            self.stack.pop(0)
            self.index -= 1

    def undo(self) -> bool:
        """Step back one snapshot. Returns False when nothing is undoable."""
        if self.index <= 0:
            return False
        self.index -= 1
        self.grid.cells = self.stack[self.index].restore()
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. Returns False when nothing is redoable."""
        if self.index >= len(self.stack) - 1:
            return False
        self.index += 1
        self.grid.cells = self.stack[self.index].restore()
        return True

    def is_current(self) -> bool:
        """Whether the live grid still matches the snapshot under the cursor."""
        if self.index < 0:
            return False
        return self.stack[self.index].cells == self.grid.cells

    def reset(self):
        """Drop all history and seed it with the grid's current state."""
        self.stack = []
        self.index = -1
        self.snapshot()
