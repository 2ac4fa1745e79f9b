# matjson/material_grid.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .binning import BinUtility
from .errors import DimensionMismatch
from .material import (
    MaterialProperties, ProtoSurfaceMaterial, HomogeneousSurfaceMaterial, BinnedSurfaceMaterial,
    ProtoVolumeMaterial, HomogeneousVolumeMaterial, BinnedVolumeMaterial
)


class GridType(Enum):
    PROTO = "proto"
    HOMOGENEOUS = "homogeneous"
    BINNED = "binned"


@dataclass(frozen=True, eq=True)
class MaterialGrid:
    """
    Tagged description of the material on a surface or in a volume.

    proto:       structure only (optional binning), no values
    homogeneous: one MaterialProperties, stored as a 1x1 matrix
    binned:      a BinUtility plus matrix[i1][i0] of MaterialProperties
    """
    kind: GridType
    bin_utility: Optional[BinUtility] = None
    matrix: Tuple[Tuple[MaterialProperties, ...], ...] = ()

    @classmethod
    def proto(cls, bin_utility=None):
        return cls(GridType.PROTO, bin_utility)

    @classmethod
    def homogeneous(cls, properties):
        return cls(GridType.HOMOGENEOUS, None, ((properties,),))

    @classmethod
    def binned(cls, bin_utility, matrix, path=()):
        matrix = tuple(tuple(row) for row in matrix)
        check_dimensions(bin_utility, matrix, path)
        return cls(GridType.BINNED, bin_utility, matrix)

    @property
    def has_values(self):
        return self.kind is not GridType.PROTO

    @property
    def properties(self):
        """The single MaterialProperties of a homogeneous grid."""
        if self.kind is not GridType.HOMOGENEOUS:
            raise AttributeError(f"A {self.kind.value} grid has no single material")
        return self.matrix[0][0]


def check_dimensions(bin_utility, matrix, path=()):
    b0, b1 = bin_utility.bins
    if len(matrix) != b1:
        raise DimensionMismatch(f"Expected {b1} rows of material data, got {len(matrix)}", path)
    for i1, row in enumerate(matrix):
        if len(row) != b0:
            raise DimensionMismatch(
                f"Expected {b0} entries in material row {i1}, got {len(row)}", path
            )


def grid_from_material(material):
    """Describes a native surface or volume material object as a MaterialGrid."""
    if isinstance(material, (ProtoSurfaceMaterial, ProtoVolumeMaterial)):
        return MaterialGrid.proto(material.bin_utility)
    if isinstance(material, (HomogeneousSurfaceMaterial, HomogeneousVolumeMaterial)):
        return MaterialGrid.homogeneous(material.properties)
    if isinstance(material, (BinnedSurfaceMaterial, BinnedVolumeMaterial)):
        return MaterialGrid.binned(material.bin_utility, material.matrix)
    raise TypeError(f"Unsupported material type {type(material).__name__}")


def material_from_grid(grid, volume=False):
    """
    Builds a fresh native material object from a grid.

    Proto grids carry no values and give None.
    """
    if grid.kind is GridType.PROTO:
        return None
    if grid.kind is GridType.HOMOGENEOUS:
        cls = HomogeneousVolumeMaterial if volume else HomogeneousSurfaceMaterial
        return cls(grid.properties)
    cls = BinnedVolumeMaterial if volume else BinnedSurfaceMaterial
    return cls(grid.bin_utility, grid.matrix)
