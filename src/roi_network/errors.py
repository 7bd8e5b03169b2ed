"""Error kinds raised and reported by the ROI network pipeline."""

from __future__ import annotations


class RoiNetworkError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(RoiNetworkError, ValueError):
    """A mandatory input is missing or structurally invalid.

    Raised before any computation starts.
    """


class ShapeMismatch(RoiNetworkError, ValueError):
    """Array dimensions do not line up (sensor data vs. operator, ROI rows)."""


class EmptyBandSelection(RoiNetworkError):
    """A configured frequency band selects no frequency bins.

    The pipeline does not raise this; it is recorded as a diagnostic and the
    affected band value is NaN.
    """


class NumericalDegeneracy(RoiNetworkError, ArithmeticError):
    """Division by zero in a normalisation (zero auto-power, n**2 - n == 0)."""
