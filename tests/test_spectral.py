"""Tests for PSD and band aggregation."""

import numpy as np
import pytest

from roi_network.errors import ConfigurationError
from roi_network.spectral.band_power import (
    average_bands,
    band_mask,
    extract_band_power,
    find_empty_bands,
    to_decibels,
)
from roi_network.spectral.psd import compute_psd, compute_voxel_psd


def test_compute_psd_peak_and_axis():
    rng = np.random.default_rng(42)
    sfreq = 100.0
    t = np.arange(1000) / sfreq
    signal = np.sin(2 * np.pi * 10 * t) + rng.standard_normal(1000) * 0.1

    freqs, psd = compute_psd(signal, sfreq)
    assert len(freqs) == len(psd) == 100  # floor(nfft / 2), nfft = 200
    assert freqs[0] == pytest.approx(0.5)
    assert freqs[-1] == pytest.approx(50.0)
    assert 0.0 not in freqs

    peak_freq = freqs[np.argmax(psd)]
    assert 9.5 <= peak_freq <= 10.5


@pytest.mark.parametrize("nfft", [100, 128, 201, 256])
def test_frequency_axis_length(nfft):
    rng = np.random.default_rng(0)
    freqs, psd = compute_psd(rng.standard_normal(600), 100.0, nfft=nfft)
    assert len(freqs) == nfft // 2
    assert freqs.min() > 0
    assert psd.shape == (nfft // 2,)


def test_nfft_shorter_than_segment_rejected():
    with pytest.raises(ConfigurationError):
        compute_psd(np.zeros(500), 100.0, nfft=50)


def test_short_series_clamps_segment():
    rng = np.random.default_rng(0)
    freqs, psd = compute_psd(rng.standard_normal(60), 100.0)
    assert len(freqs) == 100
    assert np.all(np.isfinite(psd))


def test_voxel_psd_averages_orientations_in_power():
    rng = np.random.default_rng(3)
    x = rng.standard_normal(1000)
    # Orientation 0 carries the signal, the others are silent
    source = np.zeros((1000, 2, 3))
    source[:, 0, 0] = x
    source[:, 1, 0] = x
    source[:, 1, 1] = -x

    freqs, psd = compute_voxel_psd(source, 100.0)
    _, single = compute_psd(x, 100.0)
    assert psd.shape == (len(freqs), 2)
    np.testing.assert_allclose(psd[:, 0], single / 3)
    # Amplitude averaging would cancel x and -x; power averaging does not
    np.testing.assert_allclose(psd[:, 1], 2 * single / 3)


def test_band_selection_is_inclusive():
    freqs = np.arange(1, 21, dtype=float)
    mask = band_mask(freqs, (8.0, 12.0))
    assert freqs[mask].tolist() == [8.0, 9.0, 10.0, 11.0, 12.0]


def test_find_empty_bands():
    freqs = np.arange(0.5, 50.5, 0.5)
    bands = {"theta": (4, 6), "gamma": (60, 80), "gap": (1.1, 1.2)}
    assert find_empty_bands(freqs, bands) == ["gamma", "gap"]


def test_extract_band_power_shape_and_order():
    freqs = np.arange(0.5, 50.5, 0.5)
    spectra = np.zeros((len(freqs), 3))
    spectra[:, 0] = 1.0
    spectra[:, 1] = 2.0
    spectra[:, 2] = np.where(freqs >= 18, 3.0, 0.0)
    bands = {"beta": (18, 22), "theta": (4, 6), "alpha": (8, 12), "delta": (1, 3)}

    power = extract_band_power(freqs, spectra, bands, use_db=False)
    assert power.shape == (3, 4)
    # Mean of squared magnitude
    np.testing.assert_allclose(power[1], [4.0, 4.0, 4.0, 4.0])
    np.testing.assert_allclose(power[2], [9.0, 0.0, 0.0, 0.0])


def test_empty_band_gives_nan():
    freqs = np.arange(0.5, 50.5, 0.5)
    spectra = np.ones((len(freqs), 2))
    power = extract_band_power(freqs, spectra, {"theta": (4, 6), "gamma": (60, 80)}, use_db=False)
    assert np.all(np.isfinite(power[:, 0]))
    assert np.all(np.isnan(power[:, 1]))


def test_legacy_decibels_double_square():
    freqs = np.arange(0.5, 50.5, 0.5)
    spectra = np.full((len(freqs), 1), 3.0)
    power = extract_band_power(freqs, spectra, {"alpha": (8, 12)}, use_db=True)
    assert power[0, 0] == pytest.approx(10 * np.log10(3.0**4))

    standard = extract_band_power(
        freqs, spectra, {"alpha": (8, 12)}, use_db=True, db_mode="standard",
    )
    assert standard[0, 0] == pytest.approx(10 * np.log10(3.0**2))


def test_to_decibels_modes():
    x = np.array([0.5, 2.0, 10.0])
    np.testing.assert_allclose(to_decibels(x, "legacy"), 10 * np.log10(x**2))
    np.testing.assert_allclose(to_decibels(x, "standard"), 10 * np.log10(x))
    assert np.isneginf(to_decibels(np.array([0.0]))[0])
    with pytest.raises(ValueError):
        to_decibels(x, "bogus")


def test_average_bands_keeps_other_axes():
    freqs = np.array([1.0, 2.0, 3.0, 4.0])
    values = np.arange(2 * 2 * 4, dtype=float).reshape(2, 2, 4)
    out = average_bands(freqs, values, {"low": (1, 2), "high": (3, 4)}, axis=-1)
    assert out.shape == (2, 2, 2)
    np.testing.assert_allclose(out[0, 0], [0.5, 2.5])
