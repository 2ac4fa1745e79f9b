# matjson/material.py
import math
from dataclasses import dataclass


@dataclass(frozen=True)
class MaterialProperties:
    """A slab of material: thickness plus the properties of the material itself."""
    thickness: float
    x0: float   # radiation length
    l0: float   # nuclear interaction length
    a: float    # atomic mass
    z: float    # atomic number
    rho: float  # density

    @property
    def is_vacuum(self):
        return self == VACUUM

    def __bool__(self):
        return not self.is_vacuum

    @property
    def thickness_in_x0(self):
        return self.thickness / self.x0 if self.x0 else math.inf

    @property
    def thickness_in_l0(self):
        return self.thickness / self.l0 if self.l0 else math.inf

    def to_list(self):
        """Six floats, or an empty list for vacuum."""
        if self.is_vacuum:
            return []
        return [self.thickness, self.x0, self.l0, self.a, self.z, self.rho]

    @classmethod
    def from_list(cls, values):
        if len(values) == 0:
            return VACUUM
        if len(values) != 6:
            raise ValueError(f"Material properties need 6 values, got {len(values)}")
        return cls(*(float(v) for v in values))


VACUUM = MaterialProperties(0.0, math.inf, math.inf, 0.0, 0.0, 0.0)


def _matrix(rows):
    return tuple(tuple(row) for row in rows)


class _ProtoMaterial:
    """Marks an object that should carry material, without any values yet."""
    def __init__(self, bin_utility=None):
        self.bin_utility = bin_utility

    def material_properties(self, position=None):
        return VACUUM

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.bin_utility == other.bin_utility

    def __repr__(self):
        return f"{type(self).__name__}({self.bin_utility!r})"


class _HomogeneousMaterial:
    def __init__(self, properties):
        self.properties = properties

    def material_properties(self, position=None):
        return self.properties

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.properties == other.properties

    def __repr__(self):
        return f"{type(self).__name__}({self.properties!r})"


class _BinnedMaterial:
    """
    Material varying over the bins of a BinUtility.

    `matrix` is row-major: matrix[i1][i0], with one row per bin of the
    second axis and one entry per bin of the first axis.
    """
    def __init__(self, bin_utility, matrix):
        self.bin_utility = bin_utility
        self.matrix = _matrix(matrix)
        b0, b1 = bin_utility.bins
        if len(self.matrix) != b1 or any(len(row) != b0 for row in self.matrix):
            raise ValueError(
                f"Material matrix shape does not match the bin utility ({b0} x {b1})"
            )

    def material_properties(self, position=None):
        if position is None:
            return self.matrix[0][0]
        i0, i1 = self.bin_utility.bin(position)
        return self.matrix[i1][i0]

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.bin_utility == other.bin_utility and self.matrix == other.matrix

    def __repr__(self):
        b0, b1 = self.bin_utility.bins
        return f"{type(self).__name__}({b0}x{b1})"


# Surface and volume variants share their shape but are distinct types, so a
# volume map can never be confused with a surface map.

class ProtoSurfaceMaterial(_ProtoMaterial):
    pass


class HomogeneousSurfaceMaterial(_HomogeneousMaterial):
    pass


class BinnedSurfaceMaterial(_BinnedMaterial):
    pass


class ProtoVolumeMaterial(_ProtoMaterial):
    pass


class HomogeneousVolumeMaterial(_HomogeneousMaterial):
    pass


class BinnedVolumeMaterial(_BinnedMaterial):
    pass


SURFACE_MATERIAL_TYPES = (ProtoSurfaceMaterial, HomogeneousSurfaceMaterial, BinnedSurfaceMaterial)
VOLUME_MATERIAL_TYPES = (ProtoVolumeMaterial, HomogeneousVolumeMaterial, BinnedVolumeMaterial)


class DetectorMaterialMaps:
    """
    Result of an import: surface and volume material keyed by GeometryID.

    Unpacks like a pair, `surface, volume = maps`. `errors` holds the entries
    that were skipped when the import ran in best-effort mode.
    """
    def __init__(self, surface=None, volume=None, errors=None):
        self.surface = surface if surface is not None else {}
        self.volume = volume if volume is not None else {}
        self.errors = errors if errors is not None else []

    def __iter__(self):
        yield self.surface
        yield self.volume

    def __len__(self):
        return len(self.surface) + len(self.volume)

    def __repr__(self):
        return (f"DetectorMaterialMaps(surface={len(self.surface)}, "
                f"volume={len(self.volume)}, errors={len(self.errors)})")