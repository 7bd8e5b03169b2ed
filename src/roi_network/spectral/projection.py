"""Sensor -> source projection."""

from __future__ import annotations

import numpy as np

from ..errors import ShapeMismatch


def project(data: np.ndarray, projection: np.ndarray) -> np.ndarray:
    """Project sensor data into 3-axis voxel space.

    Parameters
    ----------
    data : ndarray, shape (n_channels, n_samples)
        Sensor samples, trials already laid end to end
        (:meth:`SensorRecording.concatenated`).
    projection : ndarray, shape (n_channels, n_voxels * 3)
        Operator with orientation-major columns: column ``axis * n_voxels + v``
        is orientation ``axis`` of voxel ``v``.

    Returns
    -------
    source : ndarray, shape (n_samples, n_voxels, 3)
    """
    data = np.asarray(data)
    if data.ndim != 2:
        raise ShapeMismatch(f"Sensor data must be (n_channels, n_samples), got shape {data.shape}")
    if projection.ndim != 2 or projection.shape[1] % 3 != 0:
        raise ShapeMismatch(
            f"Projection operator shape {projection.shape} is not (n_channels, n_voxels * 3)"
        )
    if data.shape[0] != projection.shape[0]:
        raise ShapeMismatch(
            f"Sensor data has {data.shape[0]} channels, projection operator expects "
            f"{projection.shape[0]}"
        )

    n_samples = data.shape[1]
    n_voxels = projection.shape[1] // 3
    source = data.T @ projection  # (n_samples, n_voxels * 3)
    return source.reshape(n_samples, 3, n_voxels).transpose(0, 2, 1)
