from pathlib import Path
import json
import sys

import numpy as np
import pytest
from PIL import Image

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadgrid.config import Config
from beadgrid.errors import LoadError
from beadgrid.session import EditorSession

PALETTE = ["#000000", "#333333", "#666666", "#999999", "#CCCCCC", "#FFFFFF", "#FF0000"]


def _session(cols=4, rows=2, geometry="gem"):
    config = Config()
    config.grid.cols = cols
    config.grid.rows = rows
    config.grid.geometry = geometry
    return EditorSession(config, reference_palette=PALETTE)


def _gradient_pixels(width=8, height=4):
    ramp = np.linspace(0, 255, num=width, dtype=np.uint8)
    gray = np.tile(ramp, (height, 1))
    return np.stack([gray, gray, gray], axis=2)


def test_apply_pixels_fills_grid_and_palette():
    session = _session()
    histogram = session.apply_pixels(_gradient_pixels())

    assert sum(histogram.values()) == 8
    assert session.grid.get_color_histogram() == histogram
    assert len(session.palette) == 10
    assert session.palette[0] in histogram
    assert session.context.reference_palette is not None
    assert session.undo()
    assert session.color_counts() == {"#FFFFFF": 8}


def test_reduce_colors_is_one_undoable_edit():
    session = _session()
    session.apply_pixels(_gradient_pixels())
    before = dict(session.grid.cells)
    assert len(session.color_counts()) == 4

    reduced = session.reduce_colors(2)
    assert len(reduced) == 2
    assert set(session.color_counts()) <= set(reduced)
    assert session.palette.to_list()[:2] == reduced

    session.undo()
    assert session.grid.cells == before


def test_reduce_not_needed_returns_none():
    session = _session()
    assert session.reduce_colors(3) is None
    with pytest.raises(ValueError):
        session.reduce_colors(0)


def test_palette_slot_paints_selection():
    session = _session()
    session.palette.set_slot(2, "#FF0000")
    session.grid.select(1, 1)
    assert session.apply_palette_slot(2) == 1
    assert session.grid.get(1, 1) == "#FF0000"


def test_load_image_samples_file(tmp_path):
    image_path = tmp_path / "gradient.png"
    Image.fromarray(_gradient_pixels(16, 8)).save(image_path)

    session = _session()
    metadata = session.load_image(str(image_path))
    assert metadata['filename'] == "gradient.png"
    assert sum(metadata['histogram'].values()) == 8


def test_grid_save_load_switches_geometry(tmp_path):
    source = _session(geometry="hex")
    source.apply_pixels(_gradient_pixels())
    path = str(tmp_path / "grid.json")
    source.save_grid(path)

    target = _session(cols=2, rows=2)
    loaded = target.load_grid(path)
    assert loaded.geometry_name == "hex"
    assert target.geometry.name == "hex"
    assert target.grid.cells == source.grid.cells
    assert target.palette.to_list() == source.palette.to_list()


def test_failed_load_keeps_current_state(tmp_path):
    session = _session()
    session.grid.select(0, 0)
    session.grid.apply_to_selection("#FF0000")
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"cols": 4, "rows": 2, "gemColors": {"9,9": "#000000"}}),
                    encoding="utf-8")

    with pytest.raises(LoadError):
        session.load_grid(str(path))
    assert session.grid.get(0, 0) == "#FF0000"
    assert session.undo()


def test_palette_export_import(tmp_path):
    session = _session()
    session.palette.set_colors(["#FF0000", "#00FF00"])
    path = str(tmp_path / "palette.json")
    session.export_palette(path, name="Test")

    other = _session()
    assert other.import_palette(path)[:2] == ["#FF0000", "#00FF00"]
    assert other.palette.to_list() == session.palette.to_list()


def test_export_png_modes(tmp_path):
    session = _session()
    pixels = session.export_png(str(tmp_path / "pixels.png"), "pixels")
    assert pixels.size == (4, 2)
    full = session.export_png(str(tmp_path / "full.png"))
    assert full.size == (64, 32)
    with pytest.raises(ValueError):
        session.export_png(str(tmp_path / "x.png"), "svg")


def test_clear_resets_to_default():
    session = _session()
    session.apply_pixels(_gradient_pixels())
    session.clear()
    assert session.color_counts() == {"#FFFFFF": 8}
    assert session.undo()
    assert session.redo()


def test_loaded_cell_size_is_applied_unless_kept(tmp_path):
    source = _session()
    source.geometry.cell_size = 12.0
    path = str(tmp_path / "grid.json")
    source.save_grid(path)

    target = _session()
    target.load_grid(path)
    assert target.geometry.cell_size == 12.0
    assert target.export_png(str(tmp_path / "full.png")).size == (48, 24)

    kept = _session()
    kept.load_grid(path, keep_cell_size=True)
    assert kept.geometry.cell_size == 16.0

    resaved = str(tmp_path / "resaved.json")
    target.save_grid(resaved)
    assert json.loads(Path(resaved).read_text(encoding="utf-8"))['gemSize'] == 12.0
