# matjson/binning_codec.py
import numpy as np

from .binning import BinningData, BinningOption, BinningType, BinningValue, BinUtility, Transform3D
from .errors import MalformedDocument, UnknownAxisKind

BINNING_VALUE_TOKENS = {bv.value: bv for bv in BinningValue}
BINNING_OPTION_TOKENS = {bo.value: bo for bo in BinningOption}


def bin_utility_to_json(bin_utility, config):
    """
    Returns the document keys describing a BinUtility, e.g.
    {"bin0": {...}, "bin1": {...}, "transform": {...}}.
    """
    out = {}
    for key, binning_data in zip(config.bin_keys, bin_utility.binning_data):
        out[key] = binning_data_to_json(binning_data)
    transform = bin_utility.transform
    if transform is not None and not transform.is_identity():
        out[config.transkey] = {
            "translation": transform.translation.tolist(),
            "rotation": transform.rotation.tolist()
        }
    return out


def binning_data_to_json(binning_data):
    axis = {
        "value": binning_data.value.value,
        "option": binning_data.option.value,
        "type": binning_data.type.value,
        "bins": binning_data.bins
    }
    if binning_data.type is BinningType.EQUIDISTANT:
        axis["min"] = binning_data.min
        axis["max"] = binning_data.max
    else:
        axis["edges"] = list(binning_data.edges)
    return axis


def json_to_bin_utility(material, config, path=(), evaluate=None):
    """
    Reads the binning keys of a material leaf.

    Returns None when the leaf carries no binning at all. `evaluate` turns a
    number or expression string into a float; plain numbers only if omitted.
    """
    evaluate = evaluate or _plain_number
    binning_data = []
    for key in config.bin_keys:
        if key not in material:
            break
        binning_data.append(json_to_binning_data(material[key], path + (key,), evaluate))

    # bin1 without bin0 would silently shift the axes
    if not binning_data and config.bin1key in material:
        raise MalformedDocument(f"'{config.bin1key}' given without '{config.bin0key}'", path)

    transform = None
    if config.transkey in material:
        transform = _json_to_transform(material[config.transkey], path + (config.transkey,))

    if not binning_data and transform is None:
        return None
    return BinUtility(binning_data, transform)


def json_to_binning_data(axis, path, evaluate=None):
    evaluate = evaluate or _plain_number
    if isinstance(axis, list):
        return _legacy_axis(axis, path, evaluate)
    if not isinstance(axis, dict):
        raise MalformedDocument(f"Binning axis must be an object, got {type(axis).__name__}", path)

    if "value" not in axis:
        raise MalformedDocument("Binning axis is missing 'value'", path)
    value = _binning_value(axis["value"], path)
    option = _binning_option(axis.get("option", BinningOption.OPEN.value), path)
    layout = axis.get("type", BinningType.ARBITRARY.value if "edges" in axis else BinningType.EQUIDISTANT.value)

    if layout == BinningType.ARBITRARY.value:
        edges = axis.get("edges")
        if not isinstance(edges, list):
            raise MalformedDocument("Arbitrary binning needs an 'edges' list", path)
        edges = [evaluate(e, path + ("edges", i)) for i, e in enumerate(edges)]
        declared = axis.get("bins")
        if declared is not None and _bin_count(declared, path) != len(edges) - 1:
            raise MalformedDocument(
                f"Declared {declared} bins but {len(edges)} edges describe {len(edges) - 1}", path
            )
        try:
            return BinningData(value, option, edges=edges)
        except ValueError as e:
            raise MalformedDocument(str(e), path) from e

    if layout == BinningType.EQUIDISTANT.value:
        for key in ("bins", "min", "max"):
            if key not in axis:
                raise MalformedDocument(f"Equidistant binning is missing '{key}'", path)
        bins = _bin_count(axis["bins"], path)
        lo = evaluate(axis["min"], path + ("min",))
        hi = evaluate(axis["max"], path + ("max",))
        try:
            return BinningData(value, option, bins=bins, min=lo, max=hi)
        except ValueError as e:
            raise MalformedDocument(str(e), path) from e

    raise MalformedDocument(f"Unknown binning type '{layout}'", path)


def _legacy_axis(axis, path, evaluate):
    # [value, option, bins, [min, max]]
    if len(axis) != 4 or not isinstance(axis[3], list) or len(axis[3]) != 2:
        raise MalformedDocument("Array binning must read [value, option, bins, [min, max]]", path)
    value = _binning_value(axis[0], path)
    option = _binning_option(axis[1], path)
    bins = _bin_count(axis[2], path)
    lo = evaluate(axis[3][0], path + (3, 0))
    hi = evaluate(axis[3][1], path + (3, 1))
    try:
        return BinningData(value, option, bins=bins, min=lo, max=hi)
    except ValueError as e:
        raise MalformedDocument(str(e), path) from e


def _binning_value(token, path):
    if token not in BINNING_VALUE_TOKENS:
        raise UnknownAxisKind(f"Unknown binning value '{token}'", path)
    return BINNING_VALUE_TOKENS[token]


def _binning_option(token, path):
    if token not in BINNING_OPTION_TOKENS:
        raise MalformedDocument(f"Unknown binning option '{token}'", path)
    return BINNING_OPTION_TOKENS[token]


def _bin_count(bins, path):
    if isinstance(bins, bool) or not isinstance(bins, int) or bins < 1:
        raise MalformedDocument(f"Bin count must be a positive integer, got {bins!r}", path)
    return bins


def _json_to_transform(data, path):
    if not isinstance(data, dict):
        raise MalformedDocument("Transform must be an object", path)
    try:
        translation = np.array(data.get("translation", [0.0, 0.0, 0.0]), dtype=float)
        rotation = np.array(data.get("rotation", np.eye(3).tolist()), dtype=float)
        return Transform3D.from_translation_rotation(translation, rotation)
    except (TypeError, ValueError) as e:
        raise MalformedDocument(f"Invalid transform: {e}", path) from e


def _plain_number(value, path):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDocument(f"Expected a number, got {value!r}", path)
    return float(value)
