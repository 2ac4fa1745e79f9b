import math
import numpy as np
import pytest
from matjson.binning import (
    BinningData, BinningOption, BinningType, BinningValue, BinUtility, Transform3D, local_value
)
from matjson.binning_codec import bin_utility_to_json, json_to_bin_utility
from matjson.config import Config
from matjson.errors import MalformedDocument, UnknownAxisKind

def test_equidistant_search():
    bd = BinningData(BinningValue.X, BinningOption.OPEN, bins=2, min=0.0, max=10.0)
    assert bd.type is BinningType.EQUIDISTANT
    assert bd.edges == (0.0, 5.0, 10.0)
    assert bd.search(2.5) == 0
    assert bd.search(7.0) == 1
    # Open: out-of-range values stay in the edge bins
    assert bd.search(-3.0) == 0
    assert bd.search(12.0) == 1

def test_closed_option_wraps():
    bd = BinningData(BinningValue.X, BinningOption.CLOSED, bins=4, min=0.0, max=4.0)
    assert bd.search(-0.5) == 3
    assert bd.search(4.5) == 0
    # The upper edge itself is still inside the last bin
    assert bd.search(4.0) == 3
    assert bd.search(0.0) == 0

def test_circular_option_folds_periodically():
    bd = BinningData(BinningValue.PHI, BinningOption.CIRCULAR, bins=4, min=-math.pi, max=math.pi)
    assert bd.search(math.pi + 0.1) == 0
    assert bd.search(-math.pi - 0.1) == 3
    assert bd.search(0.1) == 2

def test_arbitrary_edges():
    bd = BinningData(BinningValue.Z, edges=[0.0, 1.0, 5.0, 10.0])
    assert bd.type is BinningType.ARBITRARY
    assert bd.bins == 3
    assert bd.search(0.0) == 0
    assert bd.search(3.0) == 1
    assert bd.search(10.0) == 2

def test_invalid_axes():
    with pytest.raises(ValueError):
        BinningData(BinningValue.Z, edges=[0.0, 2.0, 2.0])
    with pytest.raises(ValueError):
        BinningData(BinningValue.Z, edges=[1.0])
    with pytest.raises(ValueError):
        BinningData(BinningValue.X, bins=0, min=0.0, max=1.0)
    with pytest.raises(ValueError):
        BinningData(BinningValue.X, bins=2, min=1.0, max=1.0)

def test_local_values():
    point = (3.0, 4.0, 0.0)
    assert local_value(point, BinningValue.R) == 5.0
    assert np.isclose(local_value(point, BinningValue.PHI), math.atan2(4.0, 3.0))
    assert local_value(point, BinningValue.ETA) == 0.0
    assert np.isclose(local_value((0.0, 0.0, 2.0), BinningValue.MAG), 2.0)

def test_euler_transform():
    transform = Transform3D.from_euler((0.0, 0.0, 0.0), {'x': 0, 'y': 0, 'z': math.pi / 2})
    assert np.allclose(transform.to_global((1.0, 0.0, 0.0)), (0.0, 1.0, 0.0))
    assert np.allclose(transform.to_local((0.0, 1.0, 0.0)), (1.0, 0.0, 0.0))

def test_bin_lookup_goes_through_transform(xy_bin_utility):
    assert xy_bin_utility.bins == (2, 3)
    assert xy_bin_utility.bin((7.0, 4.0, 0.0)) == (1, 2)

    shifted = BinUtility(xy_bin_utility.binning_data, Transform3D.from_translation_rotation((5.0, 0.0, 0.0)))
    # Global x=7 is local x=2
    assert shifted.bin((7.0, 0.0, 0.0)) == (0, 1)

def test_encode_equidistant(xy_bin_utility):
    encoded = bin_utility_to_json(xy_bin_utility, Config())
    assert encoded == {
        "bin0": {"value": "binX", "option": "open", "type": "equidistant", "bins": 2, "min": 0.0, "max": 10.0},
        "bin1": {"value": "binY", "option": "open", "type": "equidistant", "bins": 3, "min": -5.0, "max": 5.0},
    }
    assert json_to_bin_utility(encoded, Config()) == xy_bin_utility

def test_encode_arbitrary_with_transform():
    bu = BinUtility(
        [BinningData(BinningValue.Z, BinningOption.OPEN, edges=[-100.0, -20.0, 20.0, 100.0])],
        Transform3D.from_euler((0.0, 0.0, 50.0), {'x': 0.1, 'y': 0.0, 'z': 0.3}),
    )
    encoded = bin_utility_to_json(bu, Config())
    assert encoded["bin0"]["edges"] == [-100.0, -20.0, 20.0, 100.0]
    assert encoded["bin0"]["bins"] == 3
    assert "bin1" not in encoded
    assert encoded["transform"]["translation"] == [0.0, 0.0, 50.0]

    decoded = json_to_bin_utility(encoded, Config())
    assert decoded == bu
    assert decoded.bins == (3, 1)

def test_identity_transform_is_not_written(xy_bin_utility):
    bu = BinUtility(xy_bin_utility.binning_data, Transform3D())
    assert "transform" not in bin_utility_to_json(bu, Config())

def test_array_form_is_accepted():
    decoded = json_to_bin_utility({"bin0": ["binR", "closed", 5, [0, 100]]}, Config())
    assert decoded.bins == (5, 1)
    assert decoded.binning_data[0].value is BinningValue.R
    assert decoded.binning_data[0].option is BinningOption.CLOSED

def test_unknown_axis_kind():
    material = {"bin0": {"value": "binQ", "option": "open", "type": "equidistant", "bins": 2, "min": 0, "max": 1}}
    with pytest.raises(UnknownAxisKind):
        json_to_bin_utility(material, Config())

def test_declared_count_must_match_edges():
    material = {"bin0": {"value": "binX", "type": "arbitrary", "bins": 4, "edges": [0, 1, 2]}}
    with pytest.raises(MalformedDocument) as excinfo:
        json_to_bin_utility(material, Config(), path=("leaf",))
    assert excinfo.value.path == ("leaf", "bin0")

@pytest.mark.parametrize("material", [
    {"bin1": {"value": "binX", "bins": 2, "min": 0, "max": 1}},
    {"bin0": {"value": "binX", "bins": 2, "min": 0}},
    {"bin0": {"value": "binX", "bins": 2.5, "min": 0, "max": 1}},
    {"bin0": {"value": "binX", "option": "sideways", "bins": 2, "min": 0, "max": 1}},
    {"bin0": "binX"},
    {"bin0": {"option": "open", "bins": 2, "min": 0, "max": 1}},
])
def test_malformed_binning(material):
    with pytest.raises(MalformedDocument):
        json_to_bin_utility(material, Config())

def test_no_binning_keys():
    assert json_to_bin_utility({"type": "homogeneous"}, Config()) is None
