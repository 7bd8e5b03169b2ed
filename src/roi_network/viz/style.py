"""Plot defaults for band power and connectivity figures."""

from __future__ import annotations

import matplotlib as mpl

FIGURE_PARAMS = {
    "figure.dpi": 150,
    "savefig.dpi": 300,
    "savefig.bbox": "tight",
    "font.size": 10,
    "axes.titlesize": 11,
    "axes.labelsize": 10,
    "xtick.labelsize": 8,
    "ytick.labelsize": 8,
    "font.family": "sans-serif",
}

# Sequential maps: power (dB or linear) and |imag coherence| in [0, 1]
POWER_CMAP = "viridis"
CONNECTIVITY_CMAP = "magma"


def apply_style():
    """Apply figure defaults to matplotlib."""
    mpl.rcParams.update(FIGURE_PARAMS)
