"""Tests for I/O modules."""

import numpy as np
import pytest
from scipy.io import savemat

from roi_network.errors import ConfigurationError, ShapeMismatch
from roi_network.io.network_file import LeadfieldBundle, RoiDefinition, load_network_file
from roi_network.io.recording import SensorRecording, load_recording


def test_load_network_file(network_file, two_roi_bundle):
    bundle = load_network_file(network_file)
    np.testing.assert_allclose(bundle.projection, two_roi_bundle.projection)
    assert bundle.n_channels == 2
    assert bundle.n_voxels == 4
    assert sorted(bundle.rois) == [1, 2]
    # 1-based vertices in the file, 0-based in memory
    np.testing.assert_array_equal(bundle.rois[2].vertices, [2, 3])
    assert bundle.roi_label(1) == "Left"
    assert [n.name for n in bundle.networks] == ["pair", "left_only"]
    assert bundle.networks[1].roi_ids == (1,)
    assert bundle.referenced_roi_ids() == [1, 2]
    bundle.validate()


def test_load_network_file_missing_variables(tmp_path):
    path = tmp_path / "bad.mat"
    savemat(str(path), {"loreta_P": np.zeros((2, 6))})
    with pytest.raises(ConfigurationError, match="loreta_ROIS"):
        load_network_file(path)


def test_load_network_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_network_file(tmp_path / "nope.mat")


def test_bundle_validation_errors():
    rois = {1: RoiDefinition(1, np.array([0, 5]))}
    with pytest.raises(ConfigurationError, match="outside"):
        LeadfieldBundle(projection=np.zeros((2, 6)), rois=rois).validate()
    with pytest.raises(ConfigurationError, match="multiple of 3"):
        LeadfieldBundle(projection=np.zeros((2, 7)), rois=rois).validate()
    with pytest.raises(ConfigurationError, match="no vertices"):
        LeadfieldBundle(
            projection=np.zeros((2, 6)), rois={1: RoiDefinition(1, np.array([], dtype=int))},
        ).validate()


def test_load_recording_fdt(set_file, independent_recording):
    rec = load_recording(set_file)
    assert rec.sfreq == 100.0
    assert rec.n_channels == 2
    assert rec.n_trials == 2
    assert rec.n_times == 500
    np.testing.assert_allclose(
        rec.concatenated(), independent_recording.data[:, :, 0].astype(np.float32),
    )


def test_load_recording_inline(tmp_path):
    data = np.arange(2 * 5 * 3, dtype=float).reshape(2, 5, 3)
    path = tmp_path / "inline.set"
    savemat(str(path), {"srate": 50.0, "nbchan": 2, "pnts": 5, "trials": 3, "data": data})
    rec = load_recording(path)
    np.testing.assert_allclose(rec.data, data)
    assert rec.ch_names == ["Ch1", "Ch2"]


def test_load_recording_size_mismatch(tmp_path):
    path = tmp_path / "broken.set"
    savemat(str(path), {"srate": 50.0, "nbchan": 2, "pnts": 7, "trials": 1,
                        "data": np.zeros((2, 5))})
    with pytest.raises(ShapeMismatch):
        load_recording(path)


def test_sensor_recording_2d_is_single_trial():
    rec = SensorRecording(data=np.zeros((3, 40)), sfreq=100)
    assert rec.data.shape == (3, 40, 1)
    assert rec.n_trials == 1
    assert rec.concatenated().shape == (3, 40)


def test_sensor_recording_concatenates_trials_in_order():
    data = np.zeros((1, 2, 3))
    data[0, :, 0] = [1, 2]
    data[0, :, 1] = [3, 4]
    data[0, :, 2] = [5, 6]
    rec = SensorRecording(data=data, sfreq=10)
    np.testing.assert_array_equal(rec.concatenated(), [[1, 2, 3, 4, 5, 6]])
