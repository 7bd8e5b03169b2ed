"""ResultSet: named metric outputs plus per-target diagnostics."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class Diagnostic:
    """A non-fatal problem attached to one ROI, band, network or metric."""

    target: str
    error: Exception

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    @property
    def message(self) -> str:
        return str(self.error)


class ResultSet(Mapping):
    """Flat mapping from metric name to value.

    Entries are added with :meth:`add` and never overwritten. Diagnostics
    collect the errors isolated during the run, so a ResultSet with
    diagnostics is a partial success rather than a failure.

    Attributes
    ----------
    diagnostics : list[Diagnostic]
        Errors reported per ROI, band, network or metric.
    incomplete : bool
        True when a deadline stopped ROI or network work early.
    freqs : ndarray or None
        Frequency axis (Hz, DC removed) used for the spectra.
    roi_ids : list[int]
        Row order of ``band_power``.
    band_names : list[str]
        Column order of ``band_power``.
    band_power : ndarray or None, shape (n_rois, n_bands)
        Band power per ROI.
    connectivity : dict[str, ndarray]
        Network name -> (n, n, n_bands) band connectivity matrix.
    """

    def __init__(self):
        self._values: dict[str, Any] = {}
        self._lock = threading.Lock()
        self.diagnostics: list[Diagnostic] = []
        self.incomplete = False
        self.freqs: np.ndarray | None = None
        self.roi_ids: list[int] = []
        self.band_names: list[str] = []
        self.band_power: np.ndarray | None = None
        self.connectivity: dict[str, np.ndarray] = {}

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return (
            f"ResultSet({len(self)} metrics, {len(self.diagnostics)} diagnostics"
            f"{', incomplete' if self.incomplete else ''})"
        )

    def add(self, name: str, value: Any) -> None:
        """Store a metric. Raises KeyError if ``name`` is already present."""
        with self._lock:
            if name in self._values:
                raise KeyError(f"Metric '{name}' already present in ResultSet")
            self._values[name] = value

    def report(self, target: str, error: Exception) -> None:
        """Record an isolated error for ``target`` and log it."""
        with self._lock:
            self.diagnostics.append(Diagnostic(target, error))
        logger.warning("%s: %s (%s)", target, error, type(error).__name__)

    def diagnostics_for(self, target: str) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.target == target]

    @property
    def ok(self) -> bool:
        """True when every configured output was produced without problems."""
        return not self.diagnostics and not self.incomplete

    def wrapped(self) -> dict[str, dict[str, dict[str, Any]]]:
        """Return ``{"measures": {name: {"mean": value}}}``."""
        return {"measures": {name: {"mean": value} for name, value in self._values.items()}}

    def diagnostics_frame(self) -> pd.DataFrame:
        """Diagnostics as a DataFrame with columns target, kind, message."""
        return pd.DataFrame(
            [{"target": d.target, "kind": d.kind, "message": d.message} for d in self.diagnostics],
            columns=["target", "kind", "message"],
        )


def results_to_frame(results: Mapping[str, Any]) -> pd.DataFrame:
    """Flatten a ResultSet into a long table.

    Scalars produce one row with ``index`` 0; arrays produce one row per
    element in C order.

    Returns
    -------
    DataFrame
        Columns: metric, index, value.
    """
    rows = []
    for name, value in results.items():
        arr = np.atleast_1d(np.asarray(value, dtype=float))
        for i, v in enumerate(arr.ravel()):
            rows.append({"metric": name, "index": i, "value": float(v)})
    return pd.DataFrame(rows, columns=["metric", "index", "value"])
