"""
Bead Grid Editor

Color-quantization and grid-state engine for painting bead and gem patterns:
sample images onto a fixed grid, pick swatches, reduce colors with k-means,
and undo/redo every bulk edit.
"""

__version__ = "1.0.0"

from .config import Config
from .errors import FormatError, RangeError, LoadError, SamplingPreconditionError
from .grid import CoordinateGrid
from .history import HistoryStack
from .palette import Palette, extract_top
from .quantize import ColorQuantizer, QuantizationContext, build_replacement_map
from .sampler import ImageSampler
from .session import EditorSession

__all__ = [
    "Config",
    "CoordinateGrid",
    "HistoryStack",
    "Palette",
    "extract_top",
    "ColorQuantizer",
    "QuantizationContext",
    "build_replacement_map",
    "ImageSampler",
    "EditorSession",
    "FormatError",
    "RangeError",
    "LoadError",
    "SamplingPreconditionError",
]
