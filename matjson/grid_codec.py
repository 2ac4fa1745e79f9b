# matjson/grid_codec.py
import logging

from .binning_codec import bin_utility_to_json, json_to_bin_utility
from .errors import MalformedDocument
from .expression_evaluator import ExpressionEvaluator
from .material import MaterialProperties
from .material_grid import GridType, MaterialGrid

LOG = logging.getLogger(__name__)

GRID_TYPE_TOKENS = {gt.value: gt for gt in GridType}


def scalar_reader(evaluator=None):
    """
    Returns a function reading a number, or an expression string such as
    "352.8*mm", from the document. Without an evaluator only numbers pass.
    """
    def read(value, path):
        if isinstance(value, bool):
            raise MalformedDocument(f"Expected a number, got {value!r}", path)
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str) and evaluator is not None:
            success, result = evaluator.evaluate(value)
            if not success:
                raise MalformedDocument(f"Could not evaluate '{value}': {result}", path)
            return result
        raise MalformedDocument(f"Expected a number, got {value!r}", path)
    return read


def grid_to_json(grid, config, write_data=True):
    """Encodes a MaterialGrid as a material leaf (without the geoid)."""
    out = {config.typekey: grid.kind.value}
    if grid.bin_utility is not None and grid.kind is not GridType.HOMOGENEOUS:
        out.update(bin_utility_to_json(grid.bin_utility, config))
    if write_data and grid.has_values:
        if grid.kind is GridType.HOMOGENEOUS:
            out[config.datakey] = grid.properties.to_list()
        else:
            out[config.datakey] = [[mp.to_list() for mp in row] for row in grid.matrix]
    return out


def json_to_grid(material, config, path=(), evaluator=None):
    """
    Decodes a material leaf into a MaterialGrid.

    A leaf without data (a skeleton written with write_data off) decodes to a
    proto grid keeping its binning, whatever its type tag says.
    """
    if not isinstance(material, dict):
        raise MalformedDocument(f"Material must be an object, got {type(material).__name__}", path)
    read = scalar_reader(evaluator if evaluator is not None else ExpressionEvaluator())

    token = material.get(config.typekey)
    if token is None:
        raise MalformedDocument(f"Material is missing '{config.typekey}'", path)
    if token not in GRID_TYPE_TOKENS:
        raise MalformedDocument(f"Unknown material type '{token}'", path + (config.typekey,))
    kind = GRID_TYPE_TOKENS[token]

    bin_utility = json_to_bin_utility(material, config, path, read)

    if kind is GridType.PROTO or config.datakey not in material:
        if kind is not GridType.PROTO:
            LOG.debug("%s: '%s' material without data, reading it as proto", "/".join(map(str, path)), token)
        return MaterialGrid.proto(bin_utility)

    data = material[config.datakey]
    data_path = path + (config.datakey,)
    if not isinstance(data, list):
        raise MalformedDocument("Material data must be an array", data_path)

    if kind is GridType.HOMOGENEOUS:
        # The 1x1 matrix form [[[...]]] is accepted as well
        if len(data) == 1 and isinstance(data[0], list) and len(data[0]) == 1 and isinstance(data[0][0], list):
            data, data_path = data[0][0], data_path + (0, 0)
        return MaterialGrid.homogeneous(_json_to_properties(data, data_path, read))

    if bin_utility is None:
        raise MalformedDocument(f"Binned material needs at least '{config.bin0key}'", path)
    matrix = []
    for i1, row in enumerate(data):
        if not isinstance(row, list):
            raise MalformedDocument("Material data rows must be arrays", data_path + (i1,))
        matrix.append(tuple(_json_to_properties(mp, data_path + (i1, i0), read)
                            for i0, mp in enumerate(row)))
    return MaterialGrid.binned(bin_utility, matrix, data_path)


def _json_to_properties(values, path, read):
    if not isinstance(values, list):
        raise MalformedDocument(f"Material properties must be an array, got {values!r}", path)
    if len(values) not in (0, 6):
        raise MalformedDocument(
            f"Material properties need 6 values (or none for vacuum), got {len(values)}", path
        )
    return MaterialProperties.from_list([read(v, path + (i,)) for i, v in enumerate(values)])
