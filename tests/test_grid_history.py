from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadgrid.errors import FormatError, RangeError
from beadgrid.grid import CoordinateGrid
from beadgrid.history import HistoryStack


def _grid_with_selection(cells, cols=2, rows=2):
    grid = CoordinateGrid(cols, rows)
    grid.select_many(cells)
    return grid


def test_new_grid_is_fully_default():
    grid = CoordinateGrid(3, 2)
    assert grid.get_color_histogram() == {"#FFFFFF": 6}
    assert [(c, r) for c, r, _ in grid.iter_cells()] == [
        (0, 0), (1, 0), (2, 0), (0, 1), (1, 1), (2, 1)
    ]
    assert not grid.history.can_undo


def test_out_of_range_access_raises():
    grid = CoordinateGrid(2, 2)
    with pytest.raises(RangeError):
        grid.get(2, 0)
    with pytest.raises(RangeError):
        grid.set(0, -1, "#000000")
    with pytest.raises(RangeError):
        grid.select(5, 5)
    with pytest.raises(IndexError):
        grid.get(0, 2)


def test_set_normalizes_and_rejects_bad_colors():
    grid = CoordinateGrid(2, 2)
    grid.set(1, 1, "f00")
    assert grid.get(1, 1) == "#FF0000"
    with pytest.raises(FormatError):
        grid.set(0, 0, "not-a-color")
    assert grid.get(0, 0) == "#FFFFFF"


def test_selection_fill_undo_redo():
    grid = _grid_with_selection([(0, 0), (1, 1)])

    assert grid.apply_to_selection("#FF0000") == 2
    assert grid.get_color_histogram() == {"#FF0000": 2, "#FFFFFF": 2}

    assert grid.undo() is True
    assert grid.get_color_histogram() == {"#FFFFFF": 4}

    assert grid.redo() is True
    assert grid.get_color_histogram() == {"#FF0000": 2, "#FFFFFF": 2}
    assert grid.get(0, 0) == "#FF0000"
    assert grid.get(1, 1) == "#FF0000"
    assert grid.get(1, 0) == "#FFFFFF"


def test_empty_selection_is_a_no_op():
    grid = CoordinateGrid(2, 2)
    assert grid.apply_to_selection("#000000") == 0
    assert len(grid.history) == 1
    assert grid.undo() is False


def test_undo_redo_at_boundaries_return_false():
    grid = CoordinateGrid(2, 2)
    assert grid.undo() is False
    assert grid.redo() is False


def test_select_color_picks_every_matching_cell():
    grid = CoordinateGrid(3, 1)
    grid.set(0, 0, "#000000")
    grid.set(2, 0, "#000000")
    assert grid.select_color("#000") == 2
    assert grid.selection == {(0, 0), (2, 0)}
    grid.clear_selection()
    assert grid.selection == set()


def test_partial_color_map_leaves_unmapped_cells():
    grid = CoordinateGrid(3, 1)
    grid.set(0, 0, "#FF0000")
    grid.set(1, 0, "#00FF00")

    changed = grid.apply_color_map({"#FF0000": "#0000FF"})
    assert changed == 1
    assert [color for _, _, color in grid.iter_cells()] == ["#0000FF", "#00FF00", "#FFFFFF"]


def test_identity_color_map_keeps_histogram():
    grid = CoordinateGrid(3, 2)
    grid.set(0, 0, "#123456")
    grid.set(2, 1, "#ABCDEF")
    before = grid.get_color_histogram()

    assert grid.apply_color_map({c: c for c in grid.get_distinct_colors()}) == 0
    assert grid.get_color_histogram() == before


def test_edits_after_undo_discard_redo_branch():
    grid = _grid_with_selection([(0, 0)])
    grid.apply_to_selection("#FF0000")
    grid.undo()
    grid.apply_to_selection("#00FF00")

    assert grid.redo() is False
    assert grid.get(0, 0) == "#00FF00"
    assert grid.undo() is True
    assert grid.get(0, 0) == "#FFFFFF"


def test_balanced_undo_redo_restores_state():
    grid = CoordinateGrid(3, 3)
    grid.select_many([(0, 0), (1, 1)])
    grid.apply_to_selection("#FF0000")
    grid.select_many([(2, 2)])
    grid.apply_to_selection("#00FF00")
    grid.apply_color_map({"#FF0000": "#0000FF"})
    expected = dict(grid.cells)

    for _ in range(3):
        assert grid.undo()
    for _ in range(2):
        assert grid.redo()
    grid.undo()
    for _ in range(2):
        assert grid.redo()

    assert grid.cells == expected


def test_direct_set_is_captured_before_the_next_bulk_edit():
    grid = CoordinateGrid(2, 1)
    grid.set(0, 0, "#000000")
    grid.select(1, 0)
    grid.apply_to_selection("#FF0000")

    grid.undo()
    assert grid.get(0, 0) == "#000000"
    assert grid.get(1, 0) == "#FFFFFF"


def test_clear_is_undoable():
    grid = _grid_with_selection([(0, 0)])
    grid.apply_to_selection("#FF0000")
    grid.clear()
    assert grid.get_color_histogram() == {"#FFFFFF": 4}
    assert grid.selection == set()
    grid.undo()
    assert grid.get(0, 0) == "#FF0000"


def test_replace_cells_validates_before_writing():
    grid = CoordinateGrid(2, 2)
    with pytest.raises(RangeError):
        grid.replace_cells({(0, 0): "#000000", (9, 9): "#000000"})
    with pytest.raises(FormatError):
        grid.replace_cells({(0, 0): "#000000", (1, 1): "bad"})
    assert grid.get_color_histogram() == {"#FFFFFF": 4}
    assert len(grid.history) == 1


def test_history_evicts_oldest_snapshot():
    grid = CoordinateGrid(1, 1, history_limit=3)
    grid.select(0, 0)
    for color in ["#000001", "#000002", "#000003", "#000004"]:
        grid.apply_to_selection(color)

    assert len(grid.history) == 3
    assert grid.history.index == 2
    assert grid.undo() and grid.get(0, 0) == "#000003"
    assert grid.undo() and grid.get(0, 0) == "#000002"
    assert grid.undo() is False


def test_snapshots_are_independent_copies():
    grid = CoordinateGrid(2, 1)
    stack = HistoryStack(grid)
    stack.snapshot()
    grid.cells[(0, 0)] = "#000000"
    assert stack.stack[0].cells[(0, 0)] == "#FFFFFF"
    assert not stack.is_current()


def test_history_limit_must_be_positive():
    with pytest.raises(ValueError):
        CoordinateGrid(2, 2, history_limit=0)


def test_from_cells_starts_history_at_loaded_state():
    grid = CoordinateGrid.from_cells(2, 1, {(1, 0): "#00ff00"})
    assert grid.get(0, 0) == "#FFFFFF"
    assert grid.get(1, 0) == "#00FF00"
    assert len(grid.history) == 1
    assert grid.undo() is False


def test_grid_info_reports_usage():
    grid = CoordinateGrid(2, 2)
    grid.set(0, 0, "#000000")
    info = grid.get_grid_info()
    assert info['dimensions'] == {'cols': 2, 'rows': 2, 'total_cells': 4}
    assert info['colors']['total_used'] == 2
    assert info['colors']['color_counts'] == {"#000000": 1, "#FFFFFF": 3}


def test_non_integer_coordinates_are_rejected():
    grid = CoordinateGrid(2, 2)
    for col, row in [(0.5, 0), (0, 1.0), (True, 0), ("0", 0), (None, 1)]:
        assert not grid.is_valid_cell(col, row)
        with pytest.raises(RangeError):
            grid.get(col, row)
        with pytest.raises(RangeError):
            grid.set(col, row, "#000000")
    assert len(grid.cells) == 4


def test_snapshot_holds_only_cells():
    snapshot = CoordinateGrid(1, 1).history.stack[0]
    assert vars(snapshot) == {'cells': {(0, 0): "#FFFFFF"}}
