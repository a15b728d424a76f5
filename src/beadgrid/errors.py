"""
Exception types raised by the bead grid engine.
"""


class FormatError(ValueError):
    """Raised when text is not a valid 3- or 6-digit hex color."""


class RangeError(IndexError):
    """Raised when a coordinate or palette slot falls outside its bounds."""


class LoadError(ValueError):
    """Raised when a grid, palette or reference palette file cannot be loaded."""


class SamplingPreconditionError(ValueError):
    """Raised when image sampling is attempted against an empty reference palette."""
