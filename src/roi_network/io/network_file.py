"""Leadfield/atlas bundle: projection operator, ROI vertex lists, networks.

The MATLAB network file holds three variables:

    loreta_P         (n_channels, n_voxels * 3) projection operator,
                     orientation-major columns (all voxels for x, then y, z)
    loreta_ROIS      struct array, field ``Vertices`` (1-based voxel
                     indices) and optionally ``Label``
    loreta_Networks  struct array, fields ``name`` and ``ROI_inds``
                     (1-based positions in ``loreta_ROIS``)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from scipy.io import loadmat

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

_REQUIRED_VARIABLES = ("loreta_P", "loreta_ROIS", "loreta_Networks")


@dataclass(frozen=True, eq=False)
class RoiDefinition:
    """One atlas region: identifier plus 0-based voxel indices."""

    roi_id: int
    vertices: np.ndarray
    label: str = ""


@dataclass(frozen=True)
class NetworkDefinition:
    """A named group of ROI ids whose pairwise connectivity is summarised."""

    name: str
    roi_ids: tuple[int, ...]


@dataclass
class LeadfieldBundle:
    """Projection operator, ROI atlas and network definitions.

    Parameters
    ----------
    projection : ndarray, shape (n_channels, n_voxels * 3)
        Sensor -> source operator, orientation-major columns.
    rois : dict[int, RoiDefinition]
        ROI id -> definition.
    networks : list[NetworkDefinition]
        Networks in file order.
    """

    projection: np.ndarray
    rois: dict[int, RoiDefinition]
    networks: list[NetworkDefinition] = field(default_factory=list)

    @property
    def n_channels(self) -> int:
        return self.projection.shape[0]

    @property
    def n_voxels(self) -> int:
        return self.projection.shape[1] // 3

    def referenced_roi_ids(self) -> list[int]:
        """Sorted union of the ROI ids used by any network."""
        return sorted({rid for net in self.networks for rid in net.roi_ids})

    def roi_label(self, roi_id: int) -> str:
        roi = self.rois.get(roi_id)
        if roi is not None and roi.label:
            return roi.label
        return f"ROI_{roi_id}"

    def validate(self) -> None:
        """Raise ConfigurationError on structural problems."""
        if self.projection.ndim != 2:
            raise ConfigurationError(
                f"Projection operator must be 2-D, got shape {self.projection.shape}"
            )
        if self.projection.shape[1] % 3 != 0:
            raise ConfigurationError(
                f"Projection operator has {self.projection.shape[1]} columns, "
                "expected a multiple of 3 (voxels x orientations)"
            )
        if not self.rois:
            raise ConfigurationError("Atlas defines no ROIs")
        n_voxels = self.n_voxels
        for roi_id, roi in self.rois.items():
            if roi.vertices.size == 0:
                raise ConfigurationError(f"ROI {roi_id} has no vertices")
            if roi.vertices.min() < 0 or roi.vertices.max() >= n_voxels:
                raise ConfigurationError(
                    f"ROI {roi_id} references vertices outside 0..{n_voxels - 1}"
                )
        for net in self.networks:
            missing = [rid for rid in net.roi_ids if rid not in self.rois]
            if missing:
                raise ConfigurationError(
                    f"Network '{net.name}' references unknown ROI id(s): {missing}"
                )


def _as_list(value) -> list:
    """squeeze_me turns 1-element struct arrays into scalars; undo that."""
    if isinstance(value, np.ndarray):
        return list(value.ravel())
    return [value]


def _as_int_array(value) -> np.ndarray:
    return np.atleast_1d(np.asarray(value)).astype(np.int64).ravel()


def load_network_file(path: str | Path) -> LeadfieldBundle:
    """Load a LORETA network ``.mat`` file into a LeadfieldBundle.

    Vertex indices are converted to 0-based; ROI ids keep their 1-based
    position in ``loreta_ROIS``.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Network file not found: {path}")

    mat = loadmat(str(path), squeeze_me=True, struct_as_record=False)
    missing = [name for name in _REQUIRED_VARIABLES if name not in mat]
    if missing:
        raise ConfigurationError(f"{path.name}: missing variable(s) {', '.join(missing)}")

    # Load the operator unsqueezed so a 1-channel operator stays 2-D
    projection = loadmat(str(path), squeeze_me=False, variable_names=["loreta_P"])["loreta_P"]
    projection = np.asarray(projection, dtype=np.float64)

    rois = {}
    for i, roi in enumerate(_as_list(mat["loreta_ROIS"]), start=1):
        vertices = _as_int_array(roi.Vertices) - 1
        label = getattr(roi, "Label", "")
        label = label if isinstance(label, str) else ""
        rois[i] = RoiDefinition(roi_id=i, vertices=vertices, label=label)

    networks = [
        NetworkDefinition(name=str(net.name), roi_ids=tuple(int(r) for r in _as_int_array(net.ROI_inds)))
        for net in _as_list(mat["loreta_Networks"])
    ]

    bundle = LeadfieldBundle(projection=projection, rois=rois, networks=networks)
    logger.info(
        "Loaded %s: %d channels, %d voxels, %d ROIs, %d networks",
        path.name, bundle.n_channels, bundle.n_voxels, len(rois), len(networks),
    )
    return bundle
