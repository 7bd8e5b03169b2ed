"""Synthetic data fixtures for testing."""

from __future__ import annotations

import numpy as np
import pytest
from scipy.io import savemat

from roi_network.io.network_file import LeadfieldBundle, NetworkDefinition, RoiDefinition
from roi_network.io.recording import SensorRecording

SFREQ = 100.0
DURATION = 10.0  # seconds


def _make_signal(sfreq: float, duration: float, seed: int = 42) -> np.ndarray:
    """Broadband noise with theta, alpha and beta components."""
    rng = np.random.default_rng(seed)
    n_times = int(sfreq * duration)
    t = np.arange(n_times) / sfreq
    signal = rng.standard_normal(n_times) * 0.5
    signal += 1.0 * np.sin(2 * np.pi * 10 * t)  # alpha
    signal += 0.6 * np.sin(2 * np.pi * 5 * t)   # theta
    signal += 0.3 * np.sin(2 * np.pi * 20 * t)  # beta
    return signal


def _make_projection(weights: dict[int, list[tuple[int, list[float]]]], n_channels: int,
                     n_voxels: int) -> np.ndarray:
    """Build an orientation-major operator.

    ``weights[channel]`` is a list of ``(voxel, [wx, wy, wz])``.
    """
    projection = np.zeros((n_channels, n_voxels * 3))
    for ch, entries in weights.items():
        for voxel, axes in entries:
            for axis, w in enumerate(axes):
                projection[ch, axis * n_voxels + voxel] = w
    return projection


@pytest.fixture
def single_roi_bundle() -> LeadfieldBundle:
    """1 sensor -> 2 voxels x 3 axes, one ROI over both voxels, one 1-ROI network."""
    projection = _make_projection(
        {0: [(0, [1.0, 0.5, 0.2]), (1, [0.8, -0.3, 0.1])]},
        n_channels=1, n_voxels=2,
    )
    rois = {1: RoiDefinition(1, np.array([0, 1]), "Solo")}
    networks = [NetworkDefinition("solo", (1,))]
    return LeadfieldBundle(projection=projection, rois=rois, networks=networks)


@pytest.fixture
def two_roi_bundle() -> LeadfieldBundle:
    """2 sensors -> 4 voxels; ROI 1 (voxels 0, 1) follows sensor 0, ROI 2 (voxels 2, 3) sensor 1."""
    projection = _make_projection(
        {
            0: [(0, [1.0, 0.4, 0.2]), (1, [0.7, 0.2, -0.1])],
            1: [(2, [0.9, -0.5, 0.3]), (3, [0.6, 0.3, 0.2])],
        },
        n_channels=2, n_voxels=4,
    )
    rois = {
        1: RoiDefinition(1, np.array([0, 1]), "Left"),
        2: RoiDefinition(2, np.array([2, 3]), "Right"),
    }
    networks = [NetworkDefinition("pair", (1, 2))]
    return LeadfieldBundle(projection=projection, rois=rois, networks=networks)


@pytest.fixture
def single_channel_recording() -> SensorRecording:
    return SensorRecording(data=_make_signal(SFREQ, DURATION)[np.newaxis, :], sfreq=SFREQ)


@pytest.fixture
def zero_lag_recording() -> SensorRecording:
    """Sensor 1 is a scaled copy of sensor 0 (perfect zero-lag coupling)."""
    x = _make_signal(SFREQ, DURATION)
    return SensorRecording(data=np.vstack([x, 2.0 * x]), sfreq=SFREQ)


@pytest.fixture
def lagged_recording() -> SensorRecording:
    """Sensor 1 is white noise on sensor 0 delayed by 20 ms."""
    rng = np.random.default_rng(7)
    x = rng.standard_normal(int(SFREQ * DURATION))
    return SensorRecording(data=np.vstack([x, np.roll(x, 2)]), sfreq=SFREQ)


@pytest.fixture
def independent_recording() -> SensorRecording:
    return SensorRecording(
        data=np.vstack([_make_signal(SFREQ, DURATION, seed=1), _make_signal(SFREQ, DURATION, seed=2)]),
        sfreq=SFREQ,
    )


@pytest.fixture
def network_file(tmp_path, two_roi_bundle):
    """The two-ROI bundle written in the LORETA .mat layout (1-based indices)."""
    rois = np.empty((1, 2), dtype=[("Vertices", object), ("Label", object)])
    rois[0, 0] = (np.array([[1.0, 2.0]]), "Left")
    rois[0, 1] = (np.array([[3.0, 4.0]]), "Right")

    networks = np.empty((1, 2), dtype=[("name", object), ("ROI_inds", object)])
    networks[0, 0] = ("pair", np.array([[1.0, 2.0]]))
    networks[0, 1] = ("left_only", np.array([[1.0]]))

    path = tmp_path / "network.mat"
    savemat(str(path), {
        "loreta_P": two_roi_bundle.projection,
        "loreta_ROIS": rois,
        "loreta_Networks": networks,
    })
    return path


@pytest.fixture
def set_file(tmp_path, independent_recording):
    """Two-channel, two-trial EEGLAB .set with data in a separate .fdt file."""
    data = independent_recording.data[:, :, 0]
    n_points = data.shape[1] // 2
    epochs = np.stack([data[:, :n_points], data[:, n_points:]], axis=2)

    fdt_path = tmp_path / "rec.fdt"
    epochs.astype(np.float32).ravel(order="F").tofile(str(fdt_path))

    path = tmp_path / "rec.set"
    savemat(str(path), {"EEG": {
        "srate": SFREQ,
        "nbchan": 2,
        "pnts": n_points,
        "trials": 2,
        "data": "rec.fdt",
    }})
    return path


@pytest.fixture
def config_yaml(tmp_path):
    config_text = """
roi_network:
  nfft: 200
  use_db: true
  bands:
    theta: [4, 6]
    alpha: [8, 12]
    beta: [18, 22]
  power_reductions: [theta, alpha, beta]
  connectivity_reductions: [alpha]
"""
    path = tmp_path / "config.yaml"
    path.write_text(config_text)
    return path
