"""ROI band power and network connectivity from source-projected EEG."""

from .config import NetworkConfig
from .core import RoiNetworkAnalyzer, compute_roi_network
from .errors import (
    ConfigurationError,
    EmptyBandSelection,
    NumericalDegeneracy,
    RoiNetworkError,
    ShapeMismatch,
)
from .io import LeadfieldBundle, NetworkDefinition, RoiDefinition, SensorRecording
from .reductions import register_connectivity_reduction, register_power_reduction
from .results import Diagnostic, ResultSet, results_to_frame

__version__ = "0.1.0"

__all__ = [
    "NetworkConfig",
    "RoiNetworkAnalyzer",
    "compute_roi_network",
    "ConfigurationError",
    "EmptyBandSelection",
    "NumericalDegeneracy",
    "RoiNetworkError",
    "ShapeMismatch",
    "LeadfieldBundle",
    "NetworkDefinition",
    "RoiDefinition",
    "SensorRecording",
    "register_connectivity_reduction",
    "register_power_reduction",
    "Diagnostic",
    "ResultSet",
    "results_to_frame",
]
