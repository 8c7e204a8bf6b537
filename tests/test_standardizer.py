import json

import numpy as np
import pytest

from posetrack.features.standardizer import FeatureStandardizer, ScalerParameters


def _params():
    return ScalerParameters(mean=[1.0, -2.0, 0.5], scale=[2.0, 0.5, 4.0])


def test_transform_and_inverse_round_trip():
    std = FeatureStandardizer(_params())
    f = np.array([3.0, -1.0, 4.5])

    z = std.transform(f)
    np.testing.assert_allclose(z, [1.0, 2.0, 1.0])
    np.testing.assert_allclose(std.inverse_transform(z), f)


def test_passthrough_without_params():
    std = FeatureStandardizer()
    assert not std.is_ready
    np.testing.assert_array_equal(std.transform([1.0, 2.0]), [1.0, 2.0])


def test_zero_scale_rejected_at_load():
    with pytest.raises(ValueError):
        ScalerParameters(mean=[0.0, 0.0], scale=[1.0, 0.0])


def test_non_finite_and_mismatched_params_rejected():
    with pytest.raises(ValueError):
        ScalerParameters(mean=[0.0, float("nan")], scale=[1.0, 1.0])
    with pytest.raises(ValueError):
        ScalerParameters(mean=[0.0, 1.0, 2.0], scale=[1.0, 1.0])
    with pytest.raises(ValueError):
        ScalerParameters.from_dict({"mean": [1.0]})


def test_length_mismatch_raises():
    std = FeatureStandardizer(_params())
    with pytest.raises(ValueError):
        std.transform([1.0, 2.0])


def test_params_are_read_only_and_untouched():
    params = _params()
    std = FeatureStandardizer(params)
    std.transform([3.0, -1.0, 4.5])

    np.testing.assert_array_equal(params.mean, [1.0, -2.0, 0.5])
    with pytest.raises(ValueError):
        params.mean[0] = 9.0


def test_from_json_file(tmp_path):
    path = tmp_path / "scaler_params.json"
    path.write_text(json.dumps({"mean": [0.0, 1.0], "scale": [1.0, 2.0]}), encoding="utf-8")

    params = ScalerParameters.from_json_file(str(path))
    assert len(params) == 2
    np.testing.assert_array_equal(params.scale, [1.0, 2.0])
