# FILE: matjson/geometry_types.py
#
# A small tracking geometry model. The converter itself only relies on the
# attribute names used here (duck typing), so any geometry provider exposing
# the same attributes can be walked.

from .geometry_id import GeometryID


class Surface:
    """A surface with an optional attached surface material."""
    def __init__(self, name="", geometry_id=None, surface_material=None):
        self.name = name
        self.geometry_id = geometry_id if geometry_id is not None else GeometryID()
        self.surface_material = surface_material

    def assign_geometry_id(self, geometry_id):
        self.geometry_id = geometry_id

    def __repr__(self):
        return f"Surface({self.name!r}, {self.geometry_id})"


class Layer:
    """
    A layer inside a tracking volume.

    surface_array:          sensitive surfaces
    approach_surfaces:      approach surfaces of the approach descriptor
    surface_representation: the surface representing the layer itself
    """
    def __init__(self, name="", surface_representation=None, surface_array=None, approach_surfaces=None,
                 geometry_id=None):
        self.name = name
        self.geometry_id = geometry_id if geometry_id is not None else GeometryID()
        self.surface_representation = surface_representation
        self.surface_array = surface_array if surface_array is not None else []
        self.approach_surfaces = approach_surfaces if approach_surfaces is not None else []

    def __repr__(self):
        return f"Layer({self.name!r}, {self.geometry_id})"


class TrackingVolume:
    """A volume with its layers, boundary surfaces and confined sub-volumes."""
    def __init__(self, name, volume_material=None, layers=None, boundary_surfaces=None,
                 confined_volumes=None, geometry_id=None):
        self.name = name
        self.geometry_id = geometry_id if geometry_id is not None else GeometryID()
        self.volume_material = volume_material
        self.confined_layers = layers if layers is not None else []
        self.boundary_surfaces = boundary_surfaces if boundary_surfaces is not None else []
        self.confined_volumes = confined_volumes if confined_volumes is not None else []

    def add_volume(self, volume):
        self.confined_volumes.append(volume)

    def add_layer(self, layer):
        self.confined_layers.append(layer)

    def __repr__(self):
        return f"TrackingVolume({self.name!r}, {self.geometry_id})"


class TrackingGeometry:
    """Holds the world volume of a tracking geometry."""
    def __init__(self, highest_tracking_volume):
        self.highest_tracking_volume = highest_tracking_volume

    def assign_geometry_ids(self):
        """
        Numbers the whole hierarchy: volumes depth-first from 1, and boundary,
        layer, approach and sensitive surfaces from 1 within their parent.
        """
        counter = [0]

        def assign_volume(volume):
            counter[0] += 1
            volume_id = GeometryID.encode(volume=counter[0])
            volume.geometry_id = volume_id

            for ib, boundary in enumerate(volume.boundary_surfaces, start=1):
                boundary.assign_geometry_id(volume_id.replace(boundary=ib))

            for il, layer in enumerate(volume.confined_layers, start=1):
                layer_id = volume_id.replace(layer=il)
                layer.geometry_id = layer_id
                if layer.surface_representation is not None:
                    layer.surface_representation.assign_geometry_id(layer_id)
                for ia, approach in enumerate(layer.approach_surfaces, start=1):
                    approach.assign_geometry_id(layer_id.replace(approach=ia))
                for isen, sensitive in enumerate(layer.surface_array, start=1):
                    sensitive.assign_geometry_id(layer_id.replace(sensitive=isen))

            for sub_volume in volume.confined_volumes:
                assign_volume(sub_volume)

        assign_volume(self.highest_tracking_volume)
        return self
