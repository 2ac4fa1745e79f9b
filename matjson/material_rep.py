# matjson/material_rep.py
import logging

from .geometry_id import GeometryID
from .material import SURFACE_MATERIAL_TYPES, VOLUME_MATERIAL_TYPES
from .material_grid import grid_from_material

LOG = logging.getLogger(__name__)


class LayerRep:
    """Material attached to one layer: sensitive, approach and representing surfaces."""
    def __init__(self, layer_id):
        self.layer_id = layer_id
        self.sensitives = {}    # GeometryID: MaterialGrid
        self.approaches = {}    # GeometryID: MaterialGrid
        self.representing = None

    def __bool__(self):
        # Worth writing out
        return bool(self.sensitives or self.approaches or self.representing is not None)

    def __eq__(self, other):
        if not isinstance(other, LayerRep):
            return NotImplemented
        return (self.layer_id == other.layer_id and self.sensitives == other.sensitives
                and self.approaches == other.approaches and self.representing == other.representing)

    def __repr__(self):
        return (f"LayerRep({self.layer_id}, sensitives={len(self.sensitives)}, "
                f"approaches={len(self.approaches)}, representing={self.representing is not None})")


class VolumeRep:
    """Material attached to one volume: its layers, boundaries and the volume itself."""
    def __init__(self, volume_id, volume_name=""):
        self.volume_id = volume_id
        self.volume_name = volume_name
        self.layers = {}       # layer index: LayerRep
        self.boundaries = {}   # GeometryID: MaterialGrid
        self.material = None
        # Identifier the volume material is keyed by, the volume id unless a map says otherwise
        self.material_id = volume_id

    def __bool__(self):
        return bool(self.layers or self.boundaries or self.material is not None)

    def __eq__(self, other):
        if not isinstance(other, VolumeRep):
            return NotImplemented
        return (self.volume_id == other.volume_id and self.volume_name == other.volume_name
                and self.layers == other.layers and self.boundaries == other.boundaries
                and self.material == other.material and self.material_id == other.material_id)

    def __repr__(self):
        return (f"VolumeRep({self.volume_id.volume}, {self.volume_name!r}, layers={len(self.layers)}, "
                f"boundaries={len(self.boundaries)}, material={self.material is not None})")


class DetectorRep:
    """Root of the intermediate tree: volume index -> VolumeRep."""
    def __init__(self):
        self.volumes = {}

    def __bool__(self):
        return bool(self.volumes)

    def __eq__(self, other):
        if not isinstance(other, DetectorRep):
            return NotImplemented
        return self.volumes == other.volumes

    def __repr__(self):
        return f"DetectorRep(volumes={sorted(self.volumes)})"


class DetectorRepBuilder:
    """
    Builds a DetectorRep either by walking a tracking geometry or from
    material maps keyed by GeometryID. Categories switched off in the
    configuration are skipped and empty layers/volumes are pruned.
    """
    def __init__(self, config, logger=None):
        self.config = config
        self.logger = logger or LOG

    # --- From a geometry ---

    def from_tracking_geometry(self, tracking_geometry):
        """
        Accepts a TrackingGeometry (anything with `highest_tracking_volume`)
        or a world volume directly.
        """
        world = getattr(tracking_geometry, "highest_tracking_volume", tracking_geometry)
        detector_rep = DetectorRep()
        self._convert_volume(detector_rep, world, set())
        self.logger.debug("Built detector representation with %d volume(s) from geometry",
                          len(detector_rep.volumes))
        return detector_rep

    def _convert_volume(self, detector_rep, volume, visited):
        # Guard against the same volume being reachable twice
        if id(volume) in visited:
            return
        visited.add(id(volume))

        cfg = self.config
        volume_id = GeometryID(volume.geometry_id)
        volume_rep = VolumeRep(volume_id, volume.name)

        if cfg.process_volumes and getattr(volume, "volume_material", None) is not None:
            volume_rep.material = grid_from_material(volume.volume_material)

        for layer in getattr(volume, "confined_layers", None) or []:
            layer_rep = self._convert_layer(layer)
            if layer_rep:
                volume_rep.layers[layer_rep.layer_id.layer] = layer_rep

        if cfg.process_boundaries:
            for boundary in getattr(volume, "boundary_surfaces", None) or []:
                if boundary.surface_material is not None:
                    volume_rep.boundaries[GeometryID(boundary.geometry_id)] = \
                        grid_from_material(boundary.surface_material)

        if volume_rep:
            self._add_volume(detector_rep, volume_rep)
        else:
            self.logger.debug("Volume '%s' (%s) carries no material, skipped", volume.name, volume_id)

        for sub_volume in getattr(volume, "confined_volumes", None) or []:
            self._convert_volume(detector_rep, sub_volume, visited)

    def _convert_layer(self, layer):
        cfg = self.config
        layer_rep = LayerRep(GeometryID(layer.geometry_id).layer_id())

        if cfg.process_sensitives:
            for surface in layer.surface_array or []:
                if surface.surface_material is not None:
                    layer_rep.sensitives[GeometryID(surface.geometry_id)] = \
                        grid_from_material(surface.surface_material)

        if cfg.process_approaches:
            for surface in layer.approach_surfaces or []:
                if surface.surface_material is not None:
                    layer_rep.approaches[GeometryID(surface.geometry_id)] = \
                        grid_from_material(surface.surface_material)

        representing = layer.surface_representation
        if cfg.process_representing and representing is not None and representing.surface_material is not None:
            layer_rep.representing = grid_from_material(representing.surface_material)

        return layer_rep

    def _add_volume(self, detector_rep, volume_rep):
        index = volume_rep.volume_id.volume
        existing = detector_rep.volumes.get(index)
        if existing is None:
            detector_rep.volumes[index] = volume_rep
            return
        # Two volumes share an index; keep everything and say so
        self.logger.warning("Volumes '%s' and '%s' share volume index %d, merging their material",
                            existing.volume_name, volume_rep.volume_name, index)
        existing.boundaries.update(volume_rep.boundaries)
        existing.layers.update(volume_rep.layers)
        if volume_rep.material is not None:
            existing.material = volume_rep.material
            existing.material_id = volume_rep.material_id

    # --- From material maps ---

    def from_material_maps(self, surface_material_map, volume_material_map):
        """
        Groups GeometryID-keyed material into the volume/layer hierarchy.
        Keys may be GeometryID objects or their integer values.
        """
        cfg = self.config
        detector_rep = DetectorRep()

        surface_items = sorted((GeometryID(k), m) for k, m in (surface_material_map or {}).items())
        for geo_id, material in surface_items:
            if not isinstance(material, SURFACE_MATERIAL_TYPES):
                self.logger.warning("%s in the surface material map for %s is not surface material "
                                    "and is not written", type(material).__name__, geo_id)
            elif geo_id.sensitive:
                if cfg.process_sensitives:
                    self._layer_rep(detector_rep, geo_id).sensitives[geo_id] = grid_from_material(material)
            elif geo_id.approach:
                if cfg.process_approaches:
                    self._layer_rep(detector_rep, geo_id).approaches[geo_id] = grid_from_material(material)
            elif geo_id.layer:
                if cfg.process_representing:
                    self._layer_rep(detector_rep, geo_id).representing = grid_from_material(material)
            elif geo_id.boundary:
                if cfg.process_boundaries:
                    self._volume_rep(detector_rep, geo_id).boundaries[geo_id] = grid_from_material(material)
            else:
                self.logger.warning("Surface material for %s has no boundary, layer or sensitive "
                                    "position and is not written", geo_id)

        if cfg.process_volumes:
            volume_items = sorted((GeometryID(k), m) for k, m in (volume_material_map or {}).items())
            for geo_id, material in volume_items:
                if not isinstance(material, VOLUME_MATERIAL_TYPES):
                    self.logger.warning("%s in the volume material map for %s is not volume material "
                                        "and is not written", type(material).__name__, geo_id)
                    continue
                volume_rep = self._volume_rep(detector_rep, geo_id)
                volume_rep.material = grid_from_material(material)
                volume_rep.material_id = geo_id

        self.logger.debug("Built detector representation with %d volume(s) from material maps",
                          len(detector_rep.volumes))
        return detector_rep

    @staticmethod
    def _volume_rep(detector_rep, geo_id):
        index = geo_id.volume
        if index not in detector_rep.volumes:
            detector_rep.volumes[index] = VolumeRep(geo_id.volume_id())
        return detector_rep.volumes[index]

    def _layer_rep(self, detector_rep, geo_id):
        volume_rep = self._volume_rep(detector_rep, geo_id)
        if geo_id.layer not in volume_rep.layers:
            volume_rep.layers[geo_id.layer] = LayerRep(geo_id.layer_id())
        return volume_rep.layers[geo_id.layer]
