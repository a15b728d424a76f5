"""
Configuration management for the bead grid editor.
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Literal, Optional

from .color import is_valid_hex
from .geometry import GEOMETRIES


@dataclass
class GridConfig:
    """Grid extent and editing parameters."""
    cols: int = 64
    rows: int = 40
    geometry: Literal["gem", "hex"] = "gem"
    default_color: str = "#FFFFFF"
    history_limit: int = 50


@dataclass
class PaletteConfig:
    """Swatch palette and reference palette settings."""
    slots: int = 10
    reference_file: Optional[str] = None
    max_reference_colors: int = 120


@dataclass
class QuantizeConfig:
    """Color reduction settings."""
    max_iterations: int = 50
    target_colors: int = 10


@dataclass
class ExportConfig:
    """Rendering and output settings."""
    cell_size_px: float = 16.0
    background: str = "#E0E0E0"
    outline_color: str = "#888888"


@dataclass
class Config:
    """Main configuration class."""
    config_file: Optional[str] = None

    # Component configurations
    grid: GridConfig = field(default_factory=GridConfig)
    palette: PaletteConfig = field(default_factory=PaletteConfig)
    quantize: QuantizeConfig = field(default_factory=QuantizeConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    @classmethod
    def from_yaml(cls, config_path: str, **overrides) -> "Config":
        """Load configuration from YAML file with optional overrides."""
        if not os.path.exists(config_path):
            # Return default config if file doesn't exist
            config = cls()
            config.config_file = config_path
        else:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}

            config = cls(
                config_file=config_path,
                grid=GridConfig(**data.get('grid', {})),
                palette=PaletteConfig(**data.get('palette', {})),
                quantize=QuantizeConfig(**data.get('quantize', {})),
                export=ExportConfig(**data.get('export', {})),
            )

        config.apply_overrides(**overrides)
        config.validate()
        return config

    def apply_overrides(self, **overrides):
        """Set matching attributes on the nested sections; unknown keys are ignored."""
        sections = (self.grid, self.palette, self.quantize, self.export)
        for key, value in overrides.items():
            if value is None:
                continue
            for section in sections:
                if hasattr(section, key):
                    setattr(section, key, value)
                    break

    def validate(self):
        """Validate configuration parameters."""
        if self.grid.cols < 1 or self.grid.rows < 1:
            raise ValueError("Grid dimensions must be positive")

        if self.grid.geometry not in GEOMETRIES:
            raise ValueError(f"Unknown geometry '{self.grid.geometry}'")

        if self.grid.history_limit < 1:
            raise ValueError("History limit must be at least 1")

        if self.palette.slots < 1:
            raise ValueError("Palette must have at least one slot")

        if self.palette.max_reference_colors < 1:
            raise ValueError("Max reference colors must be at least 1")

        if self.quantize.max_iterations < 1:
            raise ValueError("Max iterations must be at least 1")

        if self.quantize.target_colors < 1:
            raise ValueError("Target colors must be at least 1")

        if self.export.cell_size_px <= 0:
            raise ValueError("Cell size must be positive")

        for name, value in (("default_color", self.grid.default_color),
                            ("background", self.export.background),
                            ("outline_color", self.export.outline_color)):
            if not is_valid_hex(value):
                raise ValueError(f"Invalid hex color for {name}: {value!r}")

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            'grid': {
                'cols': self.grid.cols,
                'rows': self.grid.rows,
                'geometry': self.grid.geometry,
                'default_color': self.grid.default_color,
                'history_limit': self.grid.history_limit
            },
            'palette': {
                'slots': self.palette.slots,
                'reference_file': self.palette.reference_file,
                'max_reference_colors': self.palette.max_reference_colors
            },
            'quantize': {
                'max_iterations': self.quantize.max_iterations,
                'target_colors': self.quantize.target_colors
            },
            'export': {
                'cell_size_px': self.export.cell_size_px,
                'background': self.export.background,
                'outline_color': self.export.outline_color
            }
        }

    def save_yaml(self, path: Optional[str] = None):
        """Save configuration to YAML file."""
        if path is None:
            path = self.config_file or "config.yaml"

        # Ensure directory exists
        dir_path = os.path.dirname(path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, indent=2)
