"""Welch PSD for ROI and voxel time series."""

from __future__ import annotations

import logging

import numpy as np
from scipy.signal import welch

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def welch_params(
    n_times: int,
    sfreq: float,
    nperseg: int | None = None,
    noverlap: int | None = None,
    nfft: int | None = None,
) -> tuple[int, int, int]:
    """Resolve Welch segment length, overlap and FFT length.

    Defaults: 1-second segments, 50% overlap, ``nfft = 2 * sfreq``.
    Segments longer than the series are clamped to it (overlap then becomes
    half the clamped length).
    """
    if nperseg is None:
        nperseg = int(round(sfreq))
    if noverlap is None:
        noverlap = nperseg // 2
    if nfft is None:
        nfft = int(round(2 * sfreq))
    if nfft < nperseg:
        raise ConfigurationError(f"nfft ({nfft}) must be >= segment length ({nperseg})")

    if nperseg > n_times:
        logger.warning(
            "Segment length (%d samples) exceeds data length (%d). Using %d.",
            nperseg, n_times, n_times,
        )
        nperseg = n_times
        noverlap = nperseg // 2
    return nperseg, noverlap, nfft


def compute_psd(
    data: np.ndarray,
    sfreq: float,
    *,
    nperseg: int | None = None,
    noverlap: int | None = None,
    nfft: int | None = None,
    window: str = "hamming",
    axis: int = 0,
) -> tuple[np.ndarray, np.ndarray]:
    """Compute power spectral density using Welch's method.

    Parameters
    ----------
    data : ndarray
        Time series; time runs along ``axis``.
    sfreq : float
        Sampling frequency in Hz.
    nperseg : int, optional
        Segment length. Default: ``sfreq`` (1-second windows).
    noverlap : int, optional
        Overlap between segments. Default: ``nperseg // 2``.
    nfft : int, optional
        FFT length, zero-padded. Default: ``2 * sfreq``.
    window : str
        Window function (default: Hamming).
    axis : int
        Time axis.

    Returns
    -------
    freqs : ndarray, shape (nfft // 2,)
        Frequency vector in Hz, DC removed.
    psd : ndarray
        PSD with the frequency axis in place of the time axis, DC removed.
    """
    nperseg, noverlap, nfft = welch_params(data.shape[axis], sfreq, nperseg, noverlap, nfft)

    freqs, psd = welch(
        data,
        fs=sfreq,
        window=window,
        nperseg=nperseg,
        noverlap=noverlap,
        nfft=nfft,
        detrend=False,
        axis=axis,
    )

    psd = np.moveaxis(psd, axis, 0)[1:]
    return freqs[1:], np.moveaxis(psd, 0, axis)


def compute_voxel_psd(
    source: np.ndarray,
    sfreq: float,
    **kwargs,
) -> tuple[np.ndarray, np.ndarray]:
    """PSD of every voxel, averaged over the three orientations.

    Epochs concatenated in ``source`` are treated as one continuous series.

    Parameters
    ----------
    source : ndarray, shape (n_samples, n_voxels, 3)

    Returns
    -------
    freqs : ndarray, shape (n_freqs,)
    psd : ndarray, shape (n_freqs, n_voxels)
    """
    freqs, psd = compute_psd(source, sfreq, axis=0, **kwargs)
    # Average in power, after estimation
    return freqs, psd.mean(axis=-1)
