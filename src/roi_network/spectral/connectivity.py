"""Network connectivity: cross-spectra and imaginary coherence per band.

The imaginary part of coherency ignores zero-lag coupling, which in source
space is dominated by field spread between neighbouring regions.
"""

from __future__ import annotations

import numpy as np
from scipy.signal import csd

from ..errors import ShapeMismatch
from .band_power import average_bands, band_mask
from .psd import welch_params


def compute_cross_spectra(
    data: np.ndarray,
    sfreq: float,
    *,
    nperseg: int | None = None,
    noverlap: int | None = None,
    nfft: int | None = None,
    window: str = "hamming",
) -> tuple[np.ndarray, np.ndarray]:
    """Welch cross-spectral density between all pairs of rows.

    Parameters
    ----------
    data : ndarray, shape (n_rois, n_times)
        One time series per ROI.
    sfreq : float
        Sampling frequency in Hz.
    nperseg, noverlap, nfft, window
        Same conventions as :func:`~roi_network.spectral.psd.compute_psd`.

    Returns
    -------
    freqs : ndarray, shape (n_freqs,)
        Frequency vector, DC removed.
    cross_spectra : ndarray, shape (n_rois, n_rois, n_freqs), complex
        ``cross_spectra[i, j]`` is the cross-spectrum of rows i and j.
    """
    if data.ndim != 2:
        raise ShapeMismatch(f"Network data must be (n_rois, n_times), got shape {data.shape}")
    nperseg, noverlap, nfft = welch_params(data.shape[1], sfreq, nperseg, noverlap, nfft)

    freqs, pxy = csd(
        data[:, np.newaxis, :],
        data[np.newaxis, :, :],
        fs=sfreq,
        window=window,
        nperseg=nperseg,
        noverlap=noverlap,
        nfft=nfft,
        detrend=False,
        axis=-1,
    )
    return freqs[1:], pxy[..., 1:]


def imaginary_coherence(cross_spectra: np.ndarray) -> np.ndarray:
    """Absolute imaginary coherency ``|Im(S_ij / sqrt(S_ii * S_jj))|``.

    Parameters
    ----------
    cross_spectra : ndarray, shape (n, n, n_freqs)

    Returns
    -------
    icoh : ndarray, shape (n, n, n_freqs)
        Zero on the diagonal. Pairs involving a row with zero (or negative)
        auto-power at a bin are NaN at that bin only.
    """
    n = cross_spectra.shape[0]
    auto = np.real(cross_spectra[np.arange(n), np.arange(n)])  # (n, n_freqs)
    valid = auto > 0
    norm = np.sqrt(np.where(valid, auto, np.nan))
    with np.errstate(invalid="ignore"):
        icoh = np.abs(np.imag(cross_spectra / (norm[:, np.newaxis, :] * norm[np.newaxis, :, :])))
    icoh[np.arange(n), np.arange(n)] = 0.0
    return icoh


def find_degenerate_bands(
    freqs: np.ndarray,
    cross_spectra: np.ndarray,
    bands: dict[str, tuple[float, float]],
) -> dict[str, list[int]]:
    """Bands containing bins where some row has zero auto-power.

    Returns band name -> affected row indices, for the bands only.
    """
    n = cross_spectra.shape[0]
    auto = np.real(cross_spectra[np.arange(n), np.arange(n)])
    degenerate = {}
    for name, limits in bands.items():
        rows = np.nonzero((auto[:, band_mask(freqs, limits)] <= 0).any(axis=1))[0]
        if rows.size:
            degenerate[name] = rows.tolist()
    return degenerate


def network_connectivity(
    data: np.ndarray,
    sfreq: float,
    bands: dict[str, tuple[float, float]],
    **kwargs,
) -> tuple[np.ndarray, dict[str, list[int]]]:
    """Band-averaged imaginary coherence for one network.

    Parameters
    ----------
    data : ndarray, shape (n_rois, n_times)
        Member ROI time series.
    sfreq : float
        Sampling frequency.
    bands : dict
        Band name -> (fmin, fmax), inclusive.
    **kwargs
        Welch parameters for :func:`compute_cross_spectra`.

    Returns
    -------
    conn : ndarray, shape (n_rois, n_rois, n_bands)
        Mean imaginary coherence over each band's bins, zero diagonal.
        NaN for empty bands and for pairs in degenerate bands.
    degenerate : dict[str, list[int]]
        See :func:`find_degenerate_bands`.
    """
    freqs, cross_spectra = compute_cross_spectra(data, sfreq, **kwargs)
    icoh = imaginary_coherence(cross_spectra)
    conn = average_bands(freqs, icoh, bands, axis=-1)
    return conn, find_degenerate_bands(freqs, cross_spectra, bands)
