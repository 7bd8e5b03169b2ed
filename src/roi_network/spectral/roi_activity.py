"""ROI dimensionality reduction: one representative series per ROI.

The voxels (and orientations) of a ROI are collapsed with an SVD; the
leading component scores are kept in the data's own units so power stays
comparable across ROIs.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.stats import zscore as _zscore

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def roi_activity(
    source: np.ndarray,
    vertices: np.ndarray,
    n_pca: int = 1,
    zscore: bool = False,
) -> np.ndarray:
    """Reduce the vertices of one ROI to a single series.

    Parameters
    ----------
    source : ndarray, shape (n_rows, n_voxels) or (n_rows, n_voxels, n_axes)
        Time samples or frequency bins along the first axis.
    vertices : ndarray of int
        0-based voxel indices of the ROI.
    n_pca : int
        Number of leading components retained. Their scores are summed.
    zscore : bool
        Z-score each voxel/orientation column before the decomposition.
        Off in the pipeline: it would equalise power across ROIs.

    Returns
    -------
    series : ndarray, shape (n_rows,)
    """
    if n_pca < 1:
        raise ValueError(f"n_pca must be >= 1, got {n_pca}")
    vertices = np.asarray(vertices, dtype=np.int64)
    n_voxels = source.shape[1]
    if vertices.size == 0:
        raise ConfigurationError("ROI has no vertices")
    if vertices.min() < 0 or vertices.max() >= n_voxels:
        raise ConfigurationError(f"ROI vertices outside 0..{n_voxels - 1}")

    roi = source[:, vertices].reshape(source.shape[0], -1)
    if zscore:
        roi = np.nan_to_num(_zscore(roi, axis=0))

    u, s, vt = np.linalg.svd(roi, full_matrices=False)
    k = min(n_pca, s.size)

    # Sign convention: largest-magnitude loading of each pattern is positive
    dominant = np.argmax(np.abs(vt[:k]), axis=1)
    signs = np.sign(vt[np.arange(k), dominant])
    signs[signs == 0] = 1.0
    scores = u[:, :k] * (s[:k] * signs)

    total = float(np.sum(s**2))
    if total > 0:
        logger.debug(
            "ROI (%d columns): %d component(s) explain %.1f%% of variance",
            roi.shape[1], k, 100.0 * np.sum(s[:k] ** 2) / total,
        )
    return scores.sum(axis=1)
