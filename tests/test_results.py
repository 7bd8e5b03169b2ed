"""Tests for ResultSet and its tabular views."""

import numpy as np
import pytest

from roi_network.errors import NumericalDegeneracy
from roi_network.results import ResultSet, results_to_frame


def test_add_never_overwrites():
    results = ResultSet()
    results.add("alpha", np.array([1.0, 2.0]))
    with pytest.raises(KeyError, match="alpha"):
        results.add("alpha", np.array([3.0, 4.0]))
    np.testing.assert_array_equal(results["alpha"], [1.0, 2.0])
    assert list(results) == ["alpha"]


def test_report_and_ok():
    results = ResultSet()
    assert results.ok
    results.report("network:solo", NumericalDegeneracy("needs 2 ROIs"))
    assert not results.ok
    (diag,) = results.diagnostics_for("network:solo")
    assert diag.kind == "NumericalDegeneracy"
    assert diag.message == "needs 2 ROIs"
    assert results.diagnostics_for("network:other") == []


def test_incomplete_is_not_ok():
    results = ResultSet()
    results.incomplete = True
    assert not results.ok
    assert "incomplete" in repr(results)


def test_wrapped():
    results = ResultSet()
    results.add("theta", np.array([1.0]))
    results.add("pair_alpha", 0.25)
    wrapped = results.wrapped()
    assert list(wrapped) == ["measures"]
    assert wrapped["measures"]["pair_alpha"] == {"mean": 0.25}
    np.testing.assert_array_equal(wrapped["measures"]["theta"]["mean"], [1.0])


def test_results_to_frame():
    results = ResultSet()
    results.add("alpha", np.array([1.0, 2.0, 3.0]))
    results.add("pair_alpha", 0.5)
    df = results_to_frame(results)
    assert list(df.columns) == ["metric", "index", "value"]
    assert len(df) == 4
    alpha = df[df["metric"] == "alpha"]
    assert alpha["index"].tolist() == [0, 1, 2]
    assert alpha["value"].tolist() == [1.0, 2.0, 3.0]
    assert df[df["metric"] == "pair_alpha"]["value"].iloc[0] == 0.5


def test_diagnostics_frame():
    results = ResultSet()
    assert results.diagnostics_frame().empty
    results.report("roi:3", ValueError("bad vertices"))
    df = results.diagnostics_frame()
    assert df.to_dict("records") == [
        {"target": "roi:3", "kind": "ValueError", "message": "bad vertices"}
    ]
