# matjson/json_writer.py
import logging

from .grid_codec import grid_to_json

LOG = logging.getLogger(__name__)


class MaterialJsonWriter:
    """
    Writes a DetectorRep to a JSON-ready dict. Every key name comes from the
    Config, and each material leaf carries the GeometryID it belongs to.
    """
    def __init__(self, config, logger=None):
        self.config = config
        self.logger = logger or LOG
        self.written_leaves = 0

    def write(self, detector_rep):
        cfg = self.config
        self.written_leaves = 0
        volumes_json = {}
        for index in sorted(detector_rep.volumes):
            volume_rep = detector_rep.volumes[index]
            if not volume_rep:
                continue
            volumes_json[str(index)] = self._write_volume(volume_rep)

        self.logger.info("Wrote material for %d volume(s), %d material entries (geoversion '%s', data %s)",
                         len(volumes_json), self.written_leaves, cfg.geoversion,
                         "written" if cfg.write_data else "omitted")
        return {cfg.detkey: {cfg.volkey: volumes_json}}

    def _write_volume(self, volume_rep):
        cfg = self.config
        volume_json = {cfg.namekey: volume_rep.volume_name}

        if volume_rep.material is not None:
            volume_json[cfg.matkey] = self._write_material(volume_rep.material, volume_rep.material_id)

        if volume_rep.boundaries:
            volume_json[cfg.boukey] = {
                str(geo_id.boundary): self._write_material(grid, geo_id)
                for geo_id, grid in sorted(volume_rep.boundaries.items())
            }

        layers_json = {}
        for index in sorted(volume_rep.layers):
            layer_rep = volume_rep.layers[index]
            if layer_rep:
                layers_json[str(index)] = self._write_layer(layer_rep)
        if layers_json:
            volume_json[cfg.laykey] = layers_json

        return volume_json

    def _write_layer(self, layer_rep):
        cfg = self.config
        layer_json = {}
        if layer_rep.sensitives:
            layer_json[cfg.senkey] = {
                str(geo_id.sensitive): self._write_material(grid, geo_id)
                for geo_id, grid in sorted(layer_rep.sensitives.items())
            }
        if layer_rep.approaches:
            layer_json[cfg.appkey] = {
                str(geo_id.approach): self._write_material(grid, geo_id)
                for geo_id, grid in sorted(layer_rep.approaches.items())
            }
        if layer_rep.representing is not None:
            layer_json[cfg.repkey] = self._write_material(layer_rep.representing, layer_rep.layer_id)
        return layer_json

    def _write_material(self, grid, geo_id):
        cfg = self.config
        material_json = grid_to_json(grid, cfg, cfg.write_data)
        material_json[cfg.geoidkey] = geo_id.value
        self.written_leaves += 1
        return material_json
