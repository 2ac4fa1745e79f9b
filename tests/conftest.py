import math
import pytest

from matjson.binning import BinningData, BinningOption, BinningValue, BinUtility, Transform3D
from matjson.geometry_types import Surface, Layer, TrackingVolume, TrackingGeometry
from matjson.material import (
    MaterialProperties, ProtoSurfaceMaterial, HomogeneousSurfaceMaterial, BinnedSurfaceMaterial,
    HomogeneousVolumeMaterial
)

BERYLLIUM = MaterialProperties(0.8, 352.8, 407.0, 9.012, 4.0, 0.001848)
SILICON = MaterialProperties(0.15, 93.7, 465.2, 28.0855, 14.0, 0.00233)
AIR = MaterialProperties(1.0, 303900.0, 710000.0, 14.4, 7.3, 1.2e-06)


def make_properties(n):
    """Distinct material slabs, so a transposed grid cannot pass a comparison."""
    return MaterialProperties(0.1 * (n + 1), 90.0 + n, 450.0 + n, 28.0, 14.0, 0.002 + 0.0001 * n)


@pytest.fixture
def xy_bin_utility():
    # 2 bins in x over [0, 10], 3 bins in y over [-5, 5]
    return BinUtility([
        BinningData(BinningValue.X, BinningOption.OPEN, bins=2, min=0.0, max=10.0),
        BinningData(BinningValue.Y, BinningOption.OPEN, bins=3, min=-5.0, max=5.0),
    ])


@pytest.fixture
def xy_matrix():
    # matrix[i1][i0]: 3 rows (bin1) of 2 entries (bin0)
    return tuple(tuple(make_properties(2 * i1 + i0) for i0 in range(2)) for i1 in range(3))


@pytest.fixture
def detector_geometry(xy_bin_utility, xy_matrix):
    """
    World (vol 1, no material)
      Beampipe (vol 2): one boundary with homogeneous material
      Pixel (vol 3): volume material, boundaries 1 (material) and 2 (none),
        layer 1: representing, approaches 1 (proto) and 2, sensitives 1 (binned), 2, 3 (none)
        layer 2: no material at all
      Gap (vol 4): no material at all
    """
    phi_z = BinUtility(
        [BinningData(BinningValue.PHI, BinningOption.CLOSED, bins=4, min=-math.pi, max=math.pi),
         BinningData(BinningValue.Z, BinningOption.OPEN, edges=[-100.0, -20.0, 20.0, 100.0])],
        Transform3D.from_euler((0.0, 0.0, 50.0), {'x': 0.0, 'y': 0.0, 'z': math.pi / 8}),
    )

    beampipe = TrackingVolume("Beampipe", boundary_surfaces=[
        Surface("BeampipeOuter", surface_material=HomogeneousSurfaceMaterial(BERYLLIUM))
    ])

    layer1 = Layer(
        "PixelLayer1",
        surface_representation=Surface("PixelLayer1Rep", surface_material=HomogeneousSurfaceMaterial(SILICON)),
        approach_surfaces=[
            Surface("PixelLayer1Inner", surface_material=ProtoSurfaceMaterial(phi_z)),
            Surface("PixelLayer1Outer", surface_material=HomogeneousSurfaceMaterial(AIR)),
        ],
        surface_array=[
            Surface("Module1", surface_material=BinnedSurfaceMaterial(xy_bin_utility, xy_matrix)),
            Surface("Module2", surface_material=HomogeneousSurfaceMaterial(SILICON)),
            Surface("Module3"),
        ],
    )
    layer2 = Layer("PixelLayer2", surface_representation=Surface("PixelLayer2Rep"),
                   surface_array=[Surface("Module4")])

    pixel = TrackingVolume(
        "Pixel",
        volume_material=HomogeneousVolumeMaterial(AIR),
        layers=[layer1, layer2],
        boundary_surfaces=[
            Surface("PixelInner", surface_material=HomogeneousSurfaceMaterial(BERYLLIUM)),
            Surface("PixelOuter"),
        ],
    )
    gap = TrackingVolume("Gap")

    world = TrackingVolume("World", confined_volumes=[beampipe, pixel, gap])
    return TrackingGeometry(world).assign_geometry_ids()


def iter_surfaces(volume):
    """All surfaces of a volume tree, depth-first."""
    yield from volume.boundary_surfaces
    for layer in volume.confined_layers:
        if layer.surface_representation is not None:
            yield layer.surface_representation
        yield from layer.approach_surfaces
        yield from layer.surface_array
    for sub_volume in volume.confined_volumes:
        yield from iter_surfaces(sub_volume)


def iter_volumes(volume):
    yield volume
    for sub_volume in volume.confined_volumes:
        yield from iter_volumes(sub_volume)
