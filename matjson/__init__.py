from .binning import BinningData, BinningOption, BinningType, BinningValue, BinUtility, Transform3D
from .config import Config
from .converter import JsonGeometryConverter
from .errors import (
    MaterialJsonError, MalformedDocument, DimensionMismatch, UnknownAxisKind,
    IdentifierOverflow, UnresolvableIdentifier
)
from .geometry_id import GeometryID
from .geometry_types import Surface, Layer, TrackingVolume, TrackingGeometry
from .material import (
    VACUUM, MaterialProperties, DetectorMaterialMaps,
    ProtoSurfaceMaterial, HomogeneousSurfaceMaterial, BinnedSurfaceMaterial,
    ProtoVolumeMaterial, HomogeneousVolumeMaterial, BinnedVolumeMaterial
)
from .material_grid import GridType, MaterialGrid
