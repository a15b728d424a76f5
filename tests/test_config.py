from pathlib import Path
import sys

import pytest
import yaml

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from beadgrid.config import Config


def test_missing_file_gives_defaults(tmp_path):
    config = Config.from_yaml(str(tmp_path / "absent.yaml"))
    assert config.grid.cols == 64 and config.grid.rows == 40
    assert config.grid.geometry == "gem"
    assert config.palette.slots == 10
    assert config.quantize.max_iterations == 50
    assert config.grid.history_limit == 50


def test_yaml_sections_and_overrides(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "grid": {"cols": 20, "rows": 10, "geometry": "hex"},
        "quantize": {"target_colors": 6},
    }), encoding="utf-8")

    config = Config.from_yaml(str(path), rows=12, cell_size_px=None, unknown=1)
    assert config.grid.cols == 20
    assert config.grid.rows == 12
    assert config.grid.geometry == "hex"
    assert config.quantize.target_colors == 6
    assert config.export.cell_size_px == 16.0


def test_save_and_reload(tmp_path):
    config = Config()
    config.export.background = "#101010"
    path = str(tmp_path / "nested" / "saved.yaml")
    config.save_yaml(path)

    reloaded = Config.from_yaml(path)
    assert reloaded.to_dict() == config.to_dict()


@pytest.mark.parametrize("overrides", [
    {"cols": 0},
    {"geometry": "triangle"},
    {"history_limit": 0},
    {"target_colors": 0},
    {"default_color": "white"},
    {"cell_size_px": -1},
])
def test_invalid_values_rejected(tmp_path, overrides):
    with pytest.raises(ValueError):
        Config.from_yaml(str(tmp_path / "absent.yaml"), **overrides)


def test_export_section_keys(tmp_path):
    config = Config.from_yaml(str(tmp_path / "absent.yaml"))
    assert set(config.to_dict()['export']) == {'cell_size_px', 'background', 'outline_color'}
