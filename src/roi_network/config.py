"""Typed analysis configuration with YAML loading and eager validation."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError

DEFAULT_BANDS: dict[str, tuple[float, float]] = {
    "theta": (4.0, 6.0),
    "alpha": (8.0, 12.0),
    "beta": (18.0, 22.0),
}

DEFAULT_REDUCTIONS = ["theta", "alpha", "beta"]

DB_MODES = ("legacy", "standard")


def _parse_bands(bands: Any) -> dict[str, tuple[float, float]]:
    """Accept a name -> [lo, hi] mapping or an ordered list of [lo, hi] pairs."""
    if isinstance(bands, dict):
        items = list(bands.items())
    elif isinstance(bands, (list, tuple)):
        items = [(f"band{i + 1}", limits) for i, limits in enumerate(bands)]
    else:
        raise ConfigurationError(f"bands must be a mapping or a list of pairs, got {type(bands).__name__}")

    parsed = {}
    for name, limits in items:
        try:
            lo, hi = limits
            parsed[str(name)] = (float(lo), float(hi))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Band '{name}' must be a [low, high] pair, got {limits!r}") from e
    return parsed


@dataclass
class NetworkConfig:
    """Options for one ROI power / network connectivity run.

    Attributes
    ----------
    nfft : int or None
        FFT length. Default: twice the sampling rate.
    use_db : bool
        Convert band power to decibels.
    db_mode : str
        ``"legacy"`` squares the band power again before ``10*log10``
        (output-compatible with existing analyses); ``"standard"`` applies
        ``10*log10`` directly.
    bands : dict[str, tuple[float, float]]
        Ordered frequency bands (inclusive limits, Hz).
    roi_list : list[int] or None
        ROI ids to analyse. Default: every ROI referenced by a network.
    power_reductions : list[str]
        Registered power reductions to apply, in order.
    connectivity_reductions : list[str]
        Registered connectivity reductions. Empty skips connectivity.
    wrap_output : bool
        Return ``{"measures": {name: {"mean": value}}}`` instead of the
        bare ResultSet.
    window : str
        Welch window name (scipy.signal.get_window).
    window_sec : float
        Welch segment length in seconds.
    overlap : float
        Segment overlap as a fraction of the segment length.
    n_jobs : int
        Worker threads for ROI extraction and network connectivity.
    timeout_sec : float or None
        Deadline for ROI and network work; partial results after expiry.
    """

    nfft: int | None = None
    use_db: bool = True
    db_mode: str = "legacy"
    bands: dict[str, tuple[float, float]] = field(default_factory=lambda: dict(DEFAULT_BANDS))
    roi_list: list[int] | None = None
    power_reductions: list[str] = field(default_factory=lambda: list(DEFAULT_REDUCTIONS))
    connectivity_reductions: list[str] = field(default_factory=lambda: list(DEFAULT_REDUCTIONS))
    wrap_output: bool = False
    window: str = "hamming"
    window_sec: float = 1.0
    overlap: float = 0.5
    n_jobs: int = 1
    timeout_sec: float | None = None

    def __post_init__(self):
        self.bands = _parse_bands(self.bands)
        issues = self._check_types()
        if not issues:
            issues = self.validate()
        if issues:
            raise ConfigurationError("Invalid configuration: " + "; ".join(issues))

    def _check_types(self) -> list[str]:
        """Coerce list-like fields and check scalar field types."""
        issues = []
        for name in ("use_db", "wrap_output"):
            if not isinstance(getattr(self, name), bool):
                issues.append(f"{name} must be true or false, got {getattr(self, name)!r}")
        for name, optional in (("nfft", True), ("n_jobs", False)):
            value = getattr(self, name)
            if value is None and optional:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                issues.append(f"{name} must be an integer, got {value!r}")
        for name, optional in (("window_sec", False), ("overlap", False), ("timeout_sec", True)):
            value = getattr(self, name)
            if value is None and optional:
                continue
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                issues.append(f"{name} must be a number, got {value!r}")
        for name in ("db_mode", "window"):
            if not isinstance(getattr(self, name), str):
                issues.append(f"{name} must be a string, got {getattr(self, name)!r}")

        if self.roi_list is not None:
            roi_list = [self.roi_list] if isinstance(self.roi_list, (int, str)) else self.roi_list
            try:
                self.roi_list = [int(r) for r in roi_list]
            except (TypeError, ValueError):
                issues.append(f"roi_list must be a list of integer ROI ids, got {self.roi_list!r}")

        for name in ("power_reductions", "connectivity_reductions"):
            value = getattr(self, name)
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                issues.append(f"{name} must be a list of reduction names, got {value!r}")
                continue
            setattr(self, name, list(value))
        return issues

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> NetworkConfig:
        """Build a config from a flat options mapping, rejecting unknown keys."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s): {', '.join(unknown)}. Known: {', '.join(sorted(known))}"
            )
        return cls(**data)

    @classmethod
    def from_yaml(cls, path: str | Path) -> NetworkConfig:
        """Load a config from a YAML file.

        Options may sit at the top level or under a ``roi_network:`` key.
        """
        path = Path(path)
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: expected a mapping at the top level")
        if "roi_network" in data:
            data = data["roi_network"] or {}
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view suitable for yaml.dump."""
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        out["bands"] = {name: [lo, hi] for name, (lo, hi) in self.bands.items()}
        return out

    @property
    def band_names(self) -> list[str]:
        return list(self.bands)

    def resolve_nfft(self, sfreq: float) -> int:
        """FFT length for a recording sampled at ``sfreq``."""
        return int(self.nfft) if self.nfft is not None else int(round(2 * sfreq))

    def resolve_nperseg(self, sfreq: float) -> int:
        return int(round(self.window_sec * sfreq))

    def resolve_noverlap(self, sfreq: float) -> int:
        return int(self.resolve_nperseg(sfreq) * self.overlap)

    def validate(self, sfreq: float | None = None) -> list[str]:
        """Check for structural errors. Returns a list of problems.

        With ``sfreq`` the sampling-rate dependent checks (nfft vs. segment
        length) are included.
        """
        issues = []
        if not self.bands:
            issues.append("No frequency bands defined")
        for name, (lo, hi) in self.bands.items():
            if lo > hi:
                issues.append(f"Band '{name}': low {lo} > high {hi}")
            if lo < 0:
                issues.append(f"Band '{name}': negative frequency {lo}")
        if self.db_mode not in DB_MODES:
            issues.append(f"db_mode must be one of {DB_MODES}, got '{self.db_mode}'")
        if self.nfft is not None and int(self.nfft) < 1:
            issues.append(f"nfft must be positive, got {self.nfft}")
        if self.window_sec <= 0:
            issues.append(f"window_sec must be positive, got {self.window_sec}")
        if not 0 <= self.overlap < 1:
            issues.append(f"overlap must be in [0, 1), got {self.overlap}")
        if self.n_jobs < 1:
            issues.append(f"n_jobs must be >= 1, got {self.n_jobs}")
        if self.timeout_sec is not None and self.timeout_sec <= 0:
            issues.append(f"timeout_sec must be positive, got {self.timeout_sec}")
        if self.roi_list is not None and not self.roi_list:
            issues.append("roi_list is empty")
        if sfreq is not None:
            nperseg = self.resolve_nperseg(sfreq)
            nfft = self.resolve_nfft(sfreq)
            if nperseg < 2:
                issues.append(f"Segment length of {nperseg} samples is too short")
            if nfft < nperseg:
                issues.append(f"nfft ({nfft}) must be >= segment length ({nperseg})")
        return issues
