# matjson/converter.py
import json
import logging

from .config import Config
from .json_parser import MaterialJsonParser
from .json_writer import MaterialJsonWriter
from .material_rep import DetectorRepBuilder


class JsonGeometryConverter:
    """
    Converts detector material between geometry/material maps and JSON.

    Export:  tracking geometry or material maps -> DetectorRep -> document
    Import:  document -> (surface material map, volume material map)

    Every call builds its own intermediate objects; the converter keeps no
    state between calls, so one instance can be shared freely.
    """
    def __init__(self, config=None, logger=None):
        self.config = config if config is not None else Config()
        self.logger = logger if logger is not None else logging.getLogger(self.config.name)

    def tracking_geometry_to_json(self, tracking_geometry):
        """
        Walks the geometry and writes the material attached to it.

        Args:
            tracking_geometry: a TrackingGeometry, or its world volume.

        Returns:
            dict: the JSON document.
        """
        builder = DetectorRepBuilder(self.config, self.logger)
        detector_rep = builder.from_tracking_geometry(tracking_geometry)
        return MaterialJsonWriter(self.config, self.logger).write(detector_rep)

    def material_maps_to_json(self, maps):
        """
        Writes material that is already keyed by GeometryID.

        Args:
            maps: a (surface_material_map, volume_material_map) pair or a
                  DetectorMaterialMaps.
        """
        surface_map, volume_map = maps
        builder = DetectorRepBuilder(self.config, self.logger)
        detector_rep = builder.from_material_maps(surface_map, volume_map)
        return MaterialJsonWriter(self.config, self.logger).write(detector_rep)

    def json_to_material_maps(self, document):
        """
        Reads a JSON document into fresh native material objects.

        Returns:
            DetectorMaterialMaps: unpacks as (surface_map, volume_map).
        Raises:
            MaterialJsonError: on the first bad entry when `fail_fast` is set,
            or when the document root itself is malformed.
        """
        return MaterialJsonParser(self.config, self.logger).parse(document)

    @staticmethod
    def to_json_string(document, indent=2):
        return json.dumps(document, indent=indent)

    def json_string_to_material_maps(self, json_string):
        return self.json_to_material_maps(json.loads(json_string))
