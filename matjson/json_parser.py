# matjson/json_parser.py
import logging

from .errors import MaterialJsonError, MalformedDocument, IdentifierOverflow, UnresolvableIdentifier
from .expression_evaluator import ExpressionEvaluator
from .geometry_id import GeometryID, field_max
from .grid_codec import json_to_grid
from .material import DetectorMaterialMaps
from .material_grid import material_from_grid

LOG = logging.getLogger(__name__)


class MaterialJsonParser:
    """
    Reads a material JSON document back into surface and volume material maps.

    Each material leaf is keyed by its explicit geoid when present, otherwise
    by the identifier composed from the numeric keys on its path. Depending on
    `Config.fail_fast` a bad entry either aborts the whole import or is skipped
    and recorded in `DetectorMaterialMaps.errors`.
    """
    def __init__(self, config, logger=None):
        self.config = config
        self.logger = logger or LOG
        self.maps = DetectorMaterialMaps()
        self.evaluator = ExpressionEvaluator()

    def parse(self, document):
        cfg = self.config
        # Fresh state for every document
        self.maps = DetectorMaterialMaps()
        self.evaluator = ExpressionEvaluator()

        detector_json = self._require_object(document, cfg.detkey, ())
        volumes_json = self._require_object(detector_json, cfg.volkey, (cfg.detkey,))

        for volume_key, volume_json in volumes_json.items():
            path = (cfg.detkey, cfg.volkey, volume_key)
            self._guarded(self._parse_volume, path, volume_key, volume_json)

        self.logger.info("Read %d surface and %d volume material entries (geoversion '%s'), %d skipped",
                         len(self.maps.surface), len(self.maps.volume), cfg.geoversion,
                         len(self.maps.errors))
        return self.maps

    def _guarded(self, handler, path, *args):
        """Runs one entry's handler, applying the fail-fast policy to its errors."""
        try:
            handler(path, *args)
        except MaterialJsonError as e:
            if self.config.fail_fast:
                raise
            self.logger.warning("Skipping entry: %s", e)
            self.maps.errors.append(e)

    def _parse_volume(self, path, volume_key, volume_json):
        cfg = self.config
        if not isinstance(volume_json, dict):
            raise MalformedDocument("Volume entry must be an object", path)

        volume = self._positional_index(volume_key, "volume", path)
        name = volume_json.get(cfg.namekey, "")
        if not isinstance(name, str):
            raise MalformedDocument(f"'{cfg.namekey}' must be a string", path + (cfg.namekey,))
        self.logger.debug("Reading volume '%s' (%s)", name, volume_key)

        if cfg.matkey in volume_json:
            if cfg.process_volumes:
                self._guarded(self._parse_material, path + (cfg.matkey,), volume_json[cfg.matkey],
                              {"volume": volume}, True)
            else:
                self.logger.debug("Volume material of '%s' not processed", name)

        if cfg.boukey in volume_json:
            boundaries_json = self._require_object(volume_json, cfg.boukey, path)
            if cfg.process_boundaries:
                for boundary_key, material_json in boundaries_json.items():
                    material_path = path + (cfg.boukey, boundary_key)
                    context = {"volume": volume, "boundary": boundary_key}
                    self._guarded(self._parse_material, material_path, material_json, context, False)
            else:
                self.logger.debug("Boundary material of '%s' not processed", name)

        if cfg.laykey in volume_json:
            layers_json = self._require_object(volume_json, cfg.laykey, path)
            for layer_key, layer_json in layers_json.items():
                self._guarded(self._parse_layer, path + (cfg.laykey, layer_key), volume, layer_key, layer_json)

    def _parse_layer(self, path, volume, layer_key, layer_json):
        cfg = self.config
        if not isinstance(layer_json, dict):
            raise MalformedDocument("Layer entry must be an object", path)
        layer = self._positional_index(layer_key, "layer", path)

        surface_groups = [
            (cfg.senkey, "sensitive", cfg.process_sensitives),
            (cfg.appkey, "approach", cfg.process_approaches),
        ]
        for key, field, enabled in surface_groups:
            if key not in layer_json:
                continue
            group_json = self._require_object(layer_json, key, path)
            if not enabled:
                self.logger.debug("%s: %s material not processed", "/".join(map(str, path)), field)
                continue
            for surface_key, material_json in group_json.items():
                material_path = path + (key, surface_key)
                context = {"volume": volume, "layer": layer, field: surface_key}
                self._guarded(self._parse_material, material_path, material_json, context, False)

        if cfg.repkey in layer_json and cfg.process_representing:
            self._guarded(self._parse_material, path + (cfg.repkey,), layer_json[cfg.repkey],
                          {"volume": volume, "layer": layer}, False)

    def _parse_material(self, path, material_json, context, is_volume):
        if not isinstance(material_json, dict):
            raise MalformedDocument("Material entry must be an object", path)
        # Mapping keys on the path, as numbers where they are numeric
        context = {
            field: None if key is None else self._positional_index(key, field, path)
            for field, key in context.items()
        }
        geo_id = self._resolve_geometry_id(material_json, path, context)
        grid = json_to_grid(material_json, self.config, path, self.evaluator)

        material = material_from_grid(grid, volume=is_volume)
        if material is None:
            self.logger.debug("%s: no material values for %s, nothing to add", "/".join(map(str, path)), geo_id)
            return

        target = self.maps.volume if is_volume else self.maps.surface
        if geo_id in target:
            raise MalformedDocument(f"Duplicate material for {geo_id}", path)
        target[geo_id] = material

    def _resolve_geometry_id(self, material_json, path, context):
        """
        Picks the explicit geoid if there is one, otherwise builds the
        identifier from the positional context. A geoid whose fields disagree
        with the keys on its path is an error, as is having neither.
        """
        cfg = self.config
        positional = None
        if all(value is not None for value in context.values()):
            positional = GeometryID.encode(**context)

        if cfg.geoidkey not in material_json:
            if positional is None:
                missing = [field for field, value in context.items() if value is None]
                raise UnresolvableIdentifier(
                    f"No '{cfg.geoidkey}' and no numeric {'/'.join(missing)} key to build one from", path
                )
            return positional

        explicit = self._read_geoid(material_json[cfg.geoidkey], path + (cfg.geoidkey,))
        # Only the fields named by the path are checked; the geoid may carry more
        for field, value in context.items():
            if value is not None and explicit.get(field) != value:
                raise MalformedDocument(
                    f"'{cfg.geoidkey}' {explicit} does not belong to {field} {value}", path
                )
        return explicit

    @staticmethod
    def _read_geoid(value, path):
        if isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedDocument(f"Geometry id must be an integer, got {value!r}", path)
        try:
            return GeometryID(value)
        except IdentifierOverflow as e:
            raise IdentifierOverflow(e.reason, path) from e

    @staticmethod
    def _positional_index(key, field, path):
        """The numeric value of a mapping key, or None if the key is not a number."""
        key = str(key)
        if not (key.isascii() and key.isdigit()):
            return None
        index = int(key)
        if index > field_max(field):
            raise IdentifierOverflow(f"{field} index {index} exceeds its range (max {field_max(field)})", path)
        return index

    @staticmethod
    def _require_object(parent, key, path):
        if not isinstance(parent, dict):
            raise MalformedDocument("Expected an object", path)
        if key not in parent:
            raise MalformedDocument(f"Missing '{key}'", path)
        value = parent[key]
        if not isinstance(value, dict):
            raise MalformedDocument(f"'{key}' must be an object", path + (key,))
        return value
