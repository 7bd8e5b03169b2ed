"""I/O: leadfield/atlas bundles and sensor recordings."""

from .network_file import LeadfieldBundle, NetworkDefinition, RoiDefinition, load_network_file
from .recording import SensorRecording, load_recording

__all__ = [
    "LeadfieldBundle",
    "NetworkDefinition",
    "RoiDefinition",
    "load_network_file",
    "SensorRecording",
    "load_recording",
]
