"""Named reductions applied to band power and band connectivity arrays.

Power reductions receive the (n_rois, n_bands) band power array; connectivity
reductions receive one network's (n, n, n_bands) band connectivity array.
Each returns a value stored in the ResultSet under the reduction's name
(prefixed with the network name for connectivity).

Register additional reductions with the decorators::

    @register_power_reduction("alpha_mean")
    def alpha_mean(band_power):
        return float(np.nanmean(band_power[:, 1]))
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import numpy as np

from .errors import ConfigurationError, NumericalDegeneracy

Reduction = Callable[[np.ndarray], Any]

POWER_REDUCTIONS: dict[str, Reduction] = {}
CONNECTIVITY_REDUCTIONS: dict[str, Reduction] = {}


def _register(registry: dict[str, Reduction], kind: str, name: str, replace: bool):
    def decorator(func: Reduction) -> Reduction:
        if name in registry and not replace:
            raise ConfigurationError(f"{kind} reduction '{name}' is already registered")
        registry[name] = func
        return func

    return decorator


def register_power_reduction(name: str, *, replace: bool = False):
    """Decorator registering ``func(band_power) -> value`` under ``name``."""
    return _register(POWER_REDUCTIONS, "Power", name, replace)


def register_connectivity_reduction(name: str, *, replace: bool = False):
    """Decorator registering ``func(band_connectivity) -> value`` under ``name``."""
    return _register(CONNECTIVITY_REDUCTIONS, "Connectivity", name, replace)


def band_column(index: int) -> Reduction:
    """Reduction returning one band's column: power of every ROI."""

    def reduce(band_power: np.ndarray) -> np.ndarray:
        return band_power[:, index]

    reduce.__doc__ = f"Band power of every ROI in band {index}."
    return reduce


def mean_pairwise(index: int) -> Reduction:
    """Reduction averaging the off-diagonal entries of one band's matrix.

    The divisor is ``n**2 - n``; networks with fewer than two ROIs raise
    NumericalDegeneracy.
    """

    def reduce(conn: np.ndarray) -> float:
        n = conn.shape[0]
        n_pairs = n * n - n
        if n_pairs == 0:
            raise NumericalDegeneracy(
                f"Mean pairwise connectivity needs at least 2 ROIs, network has {n}"
            )
        off_diagonal = ~np.eye(n, dtype=bool)
        return float(conn[:, :, index][off_diagonal].sum() / n_pairs)

    reduce.__doc__ = f"Mean pairwise connectivity in band {index}."
    return reduce


def resolve(registry: dict[str, Reduction], names: list[str], kind: str) -> dict[str, Reduction]:
    """Look up ``names`` in ``registry``; unknown names raise ConfigurationError."""
    unknown = [n for n in names if n not in registry]
    if unknown:
        available = ", ".join(sorted(registry))
        raise ConfigurationError(
            f"Unknown {kind} reduction(s): {', '.join(unknown)}. Available: {available}"
        )
    return {n: registry[n] for n in names}


for _index, _name in enumerate(("theta", "alpha", "beta")):
    register_power_reduction(_name)(band_column(_index))
    register_connectivity_reduction(_name)(mean_pairwise(_index))
