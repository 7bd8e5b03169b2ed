"""Band power and network connectivity heat maps."""

from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ..results import ResultSet
from .style import CONNECTIVITY_CMAP, POWER_CMAP, apply_style

logger = logging.getLogger(__name__)


def plot_band_power(
    band_power: np.ndarray,
    roi_labels: list[str],
    band_names: list[str],
    output_path: Path,
    use_db: bool = True,
) -> Path:
    """Heat map of band power, ROIs as rows and bands as columns.

    Parameters
    ----------
    band_power : ndarray, shape (n_rois, n_bands)
    roi_labels : list[str]
        Row labels.
    band_names : list[str]
        Column labels.
    """
    apply_style()
    df = pd.DataFrame(band_power, index=roi_labels, columns=band_names)

    height = max(2.5, 0.3 * len(roi_labels) + 1.5)
    fig, ax = plt.subplots(figsize=(1.2 * len(band_names) + 2.5, height))
    sns.heatmap(
        df,
        ax=ax,
        cmap=POWER_CMAP,
        annot=len(roi_labels) <= 20,
        fmt=".1f",
        cbar_kws={"label": "Power (dB)" if use_db else "Power"},
    )
    ax.set_xlabel("Band")
    ax.set_ylabel("ROI")
    ax.set_title("Band power per ROI")

    output_path = Path(output_path)
    fig.savefig(output_path)
    plt.close(fig)
    logger.info("Saved band power plot: %s", output_path)
    return output_path


def plot_network_connectivity(
    conn: np.ndarray,
    roi_labels: list[str],
    band_names: list[str],
    network_name: str,
    output_path: Path,
) -> Path:
    """One imaginary-coherence matrix per band for a single network.

    Parameters
    ----------
    conn : ndarray, shape (n, n, n_bands)
    """
    apply_style()
    n_bands = len(band_names)
    fig, axes = plt.subplots(1, n_bands, figsize=(3.5 * n_bands, 3.2), squeeze=False)

    vmax = np.nanmax(conn) if np.isfinite(conn).any() else 1.0
    for b, band in enumerate(band_names):
        ax = axes[0, b]
        mat = conn[:, :, b].copy()
        np.fill_diagonal(mat, np.nan)
        sns.heatmap(
            pd.DataFrame(mat, index=roi_labels, columns=roi_labels),
            ax=ax,
            cmap=CONNECTIVITY_CMAP,
            vmin=0.0,
            vmax=vmax,
            square=True,
            cbar=b == n_bands - 1,
            cbar_kws={"label": "|imag coherence|"},
        )
        ax.set_title(band)

    fig.suptitle(network_name, fontsize=12, y=1.02)
    fig.tight_layout()
    output_path = Path(output_path)
    fig.savefig(output_path)
    plt.close(fig)
    logger.info("Saved connectivity plot: %s", output_path)
    return output_path


def plot_results(
    results: ResultSet,
    roi_labels: dict[int, str],
    network_rois: dict[str, list[int]],
    output_dir: Path,
    use_db: bool = True,
) -> list[Path]:
    """Write every figure for a ResultSet into ``output_dir``.

    Parameters
    ----------
    roi_labels : dict[int, str]
        ROI id -> display label.
    network_rois : dict[str, list[int]]
        Network name -> member ROI ids (matrix order).
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    paths = []

    if results.band_power is not None and results.roi_ids:
        paths.append(plot_band_power(
            results.band_power,
            [roi_labels.get(rid, f"ROI_{rid}") for rid in results.roi_ids],
            results.band_names,
            output_dir / "band_power.png",
            use_db=use_db,
        ))

    for name, conn in results.connectivity.items():
        labels = [roi_labels.get(rid, f"ROI_{rid}") for rid in network_rois.get(name, [])]
        if len(labels) != conn.shape[0]:
            labels = [str(i) for i in range(conn.shape[0])]
        safe_name = "".join(c if c.isalnum() or c in "-_" else "_" for c in name)
        paths.append(plot_network_connectivity(
            conn, labels, results.band_names, name,
            output_dir / f"connectivity_{safe_name}.png",
        ))
    return paths
