"""Visualization: band power and network connectivity heat maps."""

from .network_plots import plot_band_power, plot_network_connectivity, plot_results

__all__ = [
    "plot_band_power",
    "plot_network_connectivity",
    "plot_results",
]
