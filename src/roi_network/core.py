"""RoiNetworkAnalyzer: ROI band power and network connectivity for one recording."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any

import numpy as np

from .config import NetworkConfig
from .errors import ConfigurationError, EmptyBandSelection, NumericalDegeneracy, ShapeMismatch
from .io.network_file import LeadfieldBundle, NetworkDefinition
from .io.recording import SensorRecording
from .reductions import CONNECTIVITY_REDUCTIONS, POWER_REDUCTIONS, resolve
from .results import ResultSet
from .spectral.band_power import extract_band_power, find_empty_bands
from .spectral.connectivity import network_connectivity
from .spectral.projection import project
from .spectral.psd import compute_voxel_psd
from .spectral.roi_activity import roi_activity

logger = logging.getLogger(__name__)


class RoiNetworkAnalyzer:
    """Computes ROI band power and per-network connectivity.

    Lifecycle of :meth:`run`: validate → project → voxel spectra → ROI
    activity → band power + power reductions → network connectivity +
    connectivity reductions.

    Parameters
    ----------
    bundle : LeadfieldBundle
        Projection operator, ROI atlas and networks.
    config : NetworkConfig, optional
        Analysis options. Defaults to ``NetworkConfig()``.
    """

    def __init__(self, bundle: LeadfieldBundle, config: NetworkConfig | None = None):
        if bundle is None:
            raise ConfigurationError("No leadfield/atlas bundle given")
        self.bundle = bundle
        self.config = config or NetworkConfig()

    @property
    def roi_ids(self) -> list[int]:
        """ROIs to analyse: the configured list or every network ROI."""
        if self.config.roi_list is not None:
            return list(dict.fromkeys(self.config.roi_list))
        return self.bundle.referenced_roi_ids()

    def validate(self, sfreq: float | None = None) -> None:
        """Raise ConfigurationError if the run cannot start."""
        self.bundle.validate()
        issues = self.config.validate(sfreq)
        roi_ids = self.roi_ids
        if not roi_ids:
            issues.append("No ROIs to analyse (empty roi_list and no networks)")
        unknown = [rid for rid in roi_ids if rid not in self.bundle.rois]
        if unknown:
            issues.append(f"ROI id(s) not in atlas: {unknown}")
        if issues:
            raise ConfigurationError("; ".join(issues))
        resolve(POWER_REDUCTIONS, self.config.power_reductions, "power")
        resolve(CONNECTIVITY_REDUCTIONS, self.config.connectivity_reductions, "connectivity")

    def _welch_kwargs(self, sfreq: float) -> dict[str, Any]:
        return {
            "nperseg": self.config.resolve_nperseg(sfreq),
            "noverlap": self.config.resolve_noverlap(sfreq),
            "nfft": self.config.resolve_nfft(sfreq),
            "window": self.config.window,
        }

    def _run_isolated(
        self,
        func: Callable[[Any], Any],
        items: Iterable[Any],
        label: Callable[[Any], str],
        results: ResultSet,
        deadline: float | None,
    ) -> dict[Any, Any]:
        """Apply ``func`` to each item, reporting failures instead of raising.

        Uses a thread pool when ``n_jobs > 1``. Items not started when the deadline
        passes are abandoned (items already running finish but are discarded)
        and the ResultSet is marked incomplete.
        """
        items = list(items)
        outputs: dict[Any, Any] = {}

        if self.config.n_jobs == 1 or (deadline is not None and time.monotonic() > deadline):
            for i, item in enumerate(items):
                if deadline is not None and time.monotonic() > deadline:
                    results.incomplete = True
                    logger.warning("Deadline passed: %d item(s) not processed", len(items) - i)
                    break
                try:
                    outputs[item] = func(item)
                except Exception as e:
                    results.report(label(item), e)
            return outputs

        pool = ThreadPoolExecutor(max_workers=self.config.n_jobs)
        try:
            futures = {pool.submit(func, item): item for item in items}
            timeout = None if deadline is None else max(0.0, deadline - time.monotonic())
            done, not_done = wait(futures, timeout=timeout)
            if not_done:
                results.incomplete = True
                logger.warning("Deadline passed: %d item(s) not processed", len(not_done))
            for future, item in futures.items():
                if future not in done:
                    continue
                error = future.exception()
                if error is not None:
                    results.report(label(item), error)
                else:
                    outputs[item] = future.result()
        finally:
            # Queued work is dropped; running items are joined before the next stage
            pool.shutdown(wait=True, cancel_futures=True)
        return outputs

    def run(self, recording: SensorRecording) -> ResultSet:
        """Run the full pipeline on one recording."""
        sfreq = recording.sfreq
        self.validate(sfreq)
        cfg = self.config
        power_fns = resolve(POWER_REDUCTIONS, cfg.power_reductions, "power")
        conn_fns = resolve(CONNECTIVITY_REDUCTIONS, cfg.connectivity_reductions, "connectivity")
        deadline = None if cfg.timeout_sec is None else time.monotonic() + cfg.timeout_sec
        welch_kwargs = self._welch_kwargs(sfreq)
        roi_ids = self.roi_ids

        results = ResultSet()
        results.roi_ids = roi_ids
        results.band_names = cfg.band_names

        logger.info(
            "Step 1/5: Projecting %d channels x %d samples (%d trials) to %d voxels",
            recording.n_channels, recording.n_times, recording.n_trials, self.bundle.n_voxels,
        )
        source = project(recording.concatenated(), self.bundle.projection)

        logger.info("Step 2/5: Voxel spectra (nfft=%d)", welch_kwargs["nfft"])
        freqs, voxel_spec = compute_voxel_psd(source, sfreq, **welch_kwargs)
        results.freqs = freqs
        for band_name in find_empty_bands(freqs, cfg.bands):
            lo, hi = cfg.bands[band_name]
            results.report(
                f"band:{band_name}",
                EmptyBandSelection(
                    f"Band {lo}-{hi} Hz selects no bins (axis {freqs[0]:.3g}-{freqs[-1]:.3g} Hz)"
                ),
            )

        logger.info("Step 3/5: ROI activity for %d ROIs", len(roi_ids))
        series, spectra = self._extract_rois(source, voxel_spec, roi_ids, results, deadline)

        logger.info("Step 4/5: Band power (%d bands)", len(cfg.bands))
        spec_matrix = np.full((len(freqs), len(roi_ids)), np.nan)
        for col, roi_id in enumerate(roi_ids):
            if roi_id in spectra:
                spec_matrix[:, col] = spectra[roi_id]
        results.band_power = extract_band_power(
            freqs, spec_matrix, cfg.bands, use_db=cfg.use_db, db_mode=cfg.db_mode,
        )
        for name, func in power_fns.items():
            try:
                results.add(name, func(results.band_power))
            except Exception as e:
                results.report(name, e)

        if conn_fns:
            logger.info("Step 5/5: Connectivity for %d networks", len(self.bundle.networks))
            self._connectivity(series, sfreq, welch_kwargs, conn_fns, results, deadline)
        else:
            logger.info("Step 5/5: Connectivity skipped (no reductions configured)")

        logger.info(
            "Done: %d metrics, %d diagnostics%s",
            len(results), len(results.diagnostics), " (incomplete)" if results.incomplete else "",
        )
        return results

    def _extract_rois(
        self,
        source: np.ndarray,
        voxel_spec: np.ndarray,
        roi_ids: list[int],
        results: ResultSet,
        deadline: float | None,
    ) -> tuple[dict[int, np.ndarray], dict[int, np.ndarray]]:
        """Time-domain and spectral ROI series, keyed by ROI id."""

        def extract(roi_id: int) -> tuple[np.ndarray, np.ndarray]:
            vertices = self.bundle.rois[roi_id].vertices
            return (
                roi_activity(source, vertices, n_pca=1, zscore=False),
                roi_activity(voxel_spec, vertices, n_pca=1, zscore=False),
            )

        extracted = self._run_isolated(
            extract, roi_ids, lambda rid: f"roi:{rid}", results, deadline,
        )

        series = {rid: out[0] for rid, out in extracted.items()}
        spectra = {rid: out[1] for rid, out in extracted.items()}
        return series, spectra

    def _connectivity(
        self,
        series: dict[int, np.ndarray],
        sfreq: float,
        welch_kwargs: dict[str, Any],
        conn_fns: dict[str, Callable],
        results: ResultSet,
        deadline: float | None,
    ) -> None:
        requested = set(self.roi_ids)
        bands = self.config.bands

        def compute(net: NetworkDefinition) -> tuple[np.ndarray, dict[str, list[int]]]:
            outside = [rid for rid in net.roi_ids if rid not in requested]
            if outside:
                raise ConfigurationError(f"ROI id(s) {outside} not in roi_list")
            unavailable = [rid for rid in net.roi_ids if rid not in series]
            if unavailable:
                raise ShapeMismatch(f"No time series for ROI id(s) {unavailable}")
            data = np.vstack([series[rid] for rid in net.roi_ids])
            return network_connectivity(data, sfreq, bands, **welch_kwargs)

        matrices = self._run_isolated(
            compute, self.bundle.networks, lambda net: f"network:{net.name}", results, deadline,
        )
        for net in self.bundle.networks:
            if net not in matrices:
                continue
            conn, degenerate = matrices[net]
            results.connectivity[net.name] = conn
            for band_name, rows in degenerate.items():
                results.report(
                    f"network:{net.name}:{band_name}",
                    NumericalDegeneracy(
                        f"Zero auto-power for ROI(s) {[net.roi_ids[r] for r in rows]} "
                        f"in band {band_name}"
                    ),
                )
            for fname, func in conn_fns.items():
                key = f"{net.name}_{fname}"
                try:
                    results.add(key, func(conn))
                except Exception as e:
                    results.report(key, e)


def compute_roi_network(
    recording: SensorRecording,
    bundle: LeadfieldBundle,
    config: NetworkConfig | None = None,
    **options,
) -> ResultSet | dict:
    """Functional entry point.

    Keyword options override ``config`` fields (unknown keys raise
    ConfigurationError). Returns the ResultSet, or its wrapped
    ``{"measures": ...}`` form when ``wrap_output`` is set.
    """
    if options:
        base = config.to_dict() if config is not None else {}
        config = NetworkConfig.from_dict({**base, **options})
    analyzer = RoiNetworkAnalyzer(bundle, config)
    results = analyzer.run(recording)
    return results.wrapped() if analyzer.config.wrap_output else results
