"""Sensor recordings: in-memory container and EEGLAB .set/.fdt loader.

The loader uses scipy.io.loadmat for .set metadata and numpy for .fdt binary
data, and keeps the trial axis so epochs can be concatenated downstream.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from scipy.io import loadmat

from ..errors import ConfigurationError, ShapeMismatch

logger = logging.getLogger(__name__)


@dataclass
class SensorRecording:
    """Sensor-space samples for one dataset.

    Parameters
    ----------
    data : ndarray, shape (n_channels, n_times, n_trials) or (n_channels, n_times)
        Real-valued samples. A 2-D array is a single trial.
    sfreq : float
        Sampling rate in Hz.
    ch_names : list[str]
        Channel labels; generated when omitted.
    """

    data: np.ndarray
    sfreq: float
    ch_names: list[str] = field(default_factory=list)

    def __post_init__(self):
        data = np.asarray(self.data, dtype=np.float64)
        if data.ndim == 2:
            data = data[:, :, np.newaxis]
        if data.ndim != 3:
            raise ShapeMismatch(
                f"Recording must be (channels, times[, trials]), got shape {data.shape}"
            )
        self.data = data
        self.sfreq = float(self.sfreq)
        if not self.ch_names:
            self.ch_names = [f"Ch{i + 1}" for i in range(data.shape[0])]

    @property
    def n_channels(self) -> int:
        return self.data.shape[0]

    @property
    def n_times(self) -> int:
        return self.data.shape[1]

    @property
    def n_trials(self) -> int:
        return self.data.shape[2]

    def concatenated(self) -> np.ndarray:
        """Trials laid end to end: (n_channels, n_times * n_trials)."""
        return self.data.reshape(self.n_channels, -1, order="F")


_MISSING = object()


def _field(eeg, name, default=_MISSING):
    """Read ``name`` from a mat_struct (wrapped EEG) or the top-level dict."""
    value = eeg.get(name, _MISSING) if isinstance(eeg, dict) else getattr(eeg, name, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise ConfigurationError(f"EEG structure has no '{name}' field")
        return default
    return value


def _channel_names(chanlocs, n_channels: int) -> list[str]:
    """Channel labels from ``chanlocs``; empty when they do not cover every channel."""
    if chanlocs is None:
        return []
    entries = list(np.ravel(chanlocs)) if isinstance(chanlocs, np.ndarray) else [chanlocs]
    names = [str(getattr(ch, "labels", f"Ch{i + 1}")) for i, ch in enumerate(entries)]
    return names if len(names) == n_channels else []


def _read_fdt(set_path: Path, data_field) -> np.ndarray:
    """Read the float32 sample file that accompanies a .set file."""
    candidates = [set_path.with_suffix(".fdt")]
    if isinstance(data_field, str):
        candidates.insert(0, set_path.parent / data_field)
    for fdt_path in candidates:
        if fdt_path.exists():
            return np.fromfile(str(fdt_path), dtype=np.float32).astype(np.float64)
    raise FileNotFoundError(
        f"EEG .fdt data file not found (tried {', '.join(str(p) for p in candidates)})"
    )


def load_recording(set_path: str | Path) -> SensorRecording:
    """Load an EEGLAB .set (and .fdt) file into a SensorRecording.

    The EEG structure may be stored under ``EEG`` or as top-level
    variables; samples may be inline or in a float32 .fdt file.
    """
    set_path = Path(set_path)
    if not set_path.exists():
        raise FileNotFoundError(f"Recording not found: {set_path}")

    mat = loadmat(str(set_path), squeeze_me=True, struct_as_record=False)
    eeg = mat.get("EEG", mat)

    sfreq = float(_field(eeg, "srate"))
    shape = (int(_field(eeg, "nbchan")), int(_field(eeg, "pnts")), int(_field(eeg, "trials", 1)))

    data_field = _field(eeg, "data")
    inline = isinstance(data_field, np.ndarray) and data_field.size and data_field.dtype.kind in "fiu"
    samples = np.asarray(data_field, dtype=np.float64) if inline else _read_fdt(set_path, data_field)

    if samples.size != np.prod(shape):
        raise ShapeMismatch(
            f"{set_path.name}: {samples.size} samples, expected "
            f"{' x '.join(map(str, shape))} = {int(np.prod(shape))}"
        )
    # Column-major on disk: channel varies fastest, then point, then trial
    data = samples.reshape(shape, order="F")

    logger.info(
        "Loaded %s: %d channels, %d points x %d trials, sfreq=%.0f Hz",
        set_path.name, shape[0], shape[1], shape[2], sfreq,
    )
    return SensorRecording(
        data=data, sfreq=sfreq, ch_names=_channel_names(_field(eeg, "chanlocs", None), shape[0]),
    )
