"""Spectral pipeline: projection, ROI reduction, PSD, band power, connectivity."""

from .projection import project
from .roi_activity import roi_activity
from .psd import compute_psd, compute_voxel_psd
from .band_power import average_bands, extract_band_power, find_empty_bands, to_decibels
from .connectivity import (
    compute_cross_spectra,
    find_degenerate_bands,
    imaginary_coherence,
    network_connectivity,
)

__all__ = [
    "project",
    "roi_activity",
    "compute_psd",
    "compute_voxel_psd",
    "average_bands",
    "extract_band_power",
    "find_empty_bands",
    "to_decibels",
    "compute_cross_spectra",
    "find_degenerate_bands",
    "imaginary_coherence",
    "network_connectivity",
]
