# matjson/binning.py
import math
from enum import Enum

import numpy as np
from scipy.spatial.transform import Rotation as R


class BinningValue(Enum):
    """Kind of local value an axis bins in. The values are the document tokens."""
    X = "binX"
    Y = "binY"
    Z = "binZ"
    R = "binR"
    PHI = "binPhi"
    RPHI = "binRPhi"
    H = "binH"
    ETA = "binEta"
    MAG = "binMag"


class BinningOption(Enum):
    OPEN = "open"          # out-of-range values land in the first/last bin
    CLOSED = "closed"      # an overflow wraps to the opposite edge bin
    CIRCULAR = "circular"  # the value is folded periodically into [min, max)


class BinningType(Enum):
    EQUIDISTANT = "equidistant"
    ARBITRARY = "arbitrary"


def local_value(point, binning_value):
    """Projects a local 3D point onto the quantity a BinningValue describes."""
    x, y, z = (float(c) for c in point)
    r = math.hypot(x, y)
    if binning_value is BinningValue.X:
        return x
    if binning_value is BinningValue.Y:
        return y
    if binning_value is BinningValue.Z:
        return z
    if binning_value is BinningValue.R:
        return r
    if binning_value is BinningValue.PHI:
        return math.atan2(y, x)
    if binning_value is BinningValue.RPHI:
        return r * math.atan2(y, x)
    if binning_value is BinningValue.H:
        return math.atan2(r, z)
    if binning_value is BinningValue.ETA:
        if r == 0.0:
            return math.copysign(math.inf, z) if z else 0.0
        return math.asinh(z / r)
    if binning_value is BinningValue.MAG:
        return math.sqrt(x * x + y * y + z * z)
    raise ValueError(f"Unhandled binning value {binning_value}")


class BinningData:
    """
    Describes the binning along a single axis.

    Equidistant axes are defined by (min, max, bins); arbitrary axes by an
    explicit, strictly increasing sequence of bin edges.
    """
    def __init__(self, value, option=BinningOption.OPEN, bins=1, min=0.0, max=1.0, edges=None):
        self.value = BinningValue(value)
        self.option = BinningOption(option)

        if edges is not None:
            edges = tuple(float(e) for e in edges)
            if len(edges) < 2:
                raise ValueError("Arbitrary binning needs at least two edges")
            if any(b <= a for a, b in zip(edges, edges[1:])):
                raise ValueError(f"Bin edges must be strictly increasing, got {list(edges)}")
            self.type = BinningType.ARBITRARY
            self._edges = edges
            self.bins = len(edges) - 1
            self.min = edges[0]
            self.max = edges[-1]
        else:
            if isinstance(bins, bool) or int(bins) != bins or bins < 1:
                raise ValueError(f"Bin count must be a positive integer, got {bins}")
            if not float(min) < float(max):
                raise ValueError(f"Binning range must satisfy min < max, got [{min}, {max}]")
            self.type = BinningType.EQUIDISTANT
            self.bins = int(bins)
            self.min = float(min)
            self.max = float(max)
            self._edges = None

    @property
    def edges(self):
        if self._edges is not None:
            return self._edges
        return tuple(np.linspace(self.min, self.max, self.bins + 1).tolist())

    @property
    def step(self):
        return (self.max - self.min) / self.bins

    def search(self, value):
        """Returns the bin index for a value, applying the boundary option."""
        if self.option is BinningOption.CIRCULAR:
            period = self.max - self.min
            value = self.min + math.fmod(value - self.min, period)
            if value < self.min:
                value += period

        if self.type is BinningType.EQUIDISTANT:
            index = int(math.floor((value - self.min) / self.step))
        else:
            index = int(np.searchsorted(self._edges, value, side="right")) - 1

        if 0 <= index < self.bins:
            return index
        # The upper edge belongs to the last bin
        if value == self.max:
            return self.bins - 1
        if self.option is BinningOption.CLOSED:
            return self.bins - 1 if index < 0 else 0
        # Open (and circular rounding at max)
        return 0 if index < 0 else self.bins - 1

    def __eq__(self, other):
        if not isinstance(other, BinningData):
            return NotImplemented
        return (self.value is other.value and self.option is other.option
                and self.type is other.type and self.bins == other.bins
                and self.edges == other.edges)

    def __repr__(self):
        if self.type is BinningType.ARBITRARY:
            return f"BinningData({self.value.value}, {self.option.value}, edges={list(self._edges)})"
        return (f"BinningData({self.value.value}, {self.option.value}, "
                f"bins={self.bins}, range=[{self.min}, {self.max}])")


class Transform3D:
    """Affine transform from the binning frame to the global frame."""
    def __init__(self, matrix=None):
        self.matrix = np.eye(4) if matrix is None else np.array(matrix, dtype=float)
        if self.matrix.shape != (4, 4):
            raise ValueError(f"Transform matrix must be 4x4, got shape {self.matrix.shape}")

    @classmethod
    def from_translation_rotation(cls, translation=(0.0, 0.0, 0.0), rotation=None):
        matrix = np.eye(4)
        if rotation is not None:
            rotation = np.array(rotation, dtype=float)
            if rotation.shape != (3, 3):
                raise ValueError(f"Rotation must be 3x3, got shape {rotation.shape}")
            matrix[:3, :3] = rotation
        translation = np.array(translation, dtype=float)
        if translation.shape != (3,):
            raise ValueError(f"Translation must have 3 components, got shape {translation.shape}")
        matrix[:3, 3] = translation
        return cls(matrix)

    @classmethod
    def from_euler(cls, translation=(0.0, 0.0, 0.0), angles=None, degrees=False):
        """Builds a transform from intrinsic ZYX angles given as {'x', 'y', 'z'}."""
        angles = angles or {'x': 0, 'y': 0, 'z': 0}
        rot = R.from_euler('ZYX', [angles['z'], angles['y'], angles['x']], degrees=degrees)
        return cls.from_translation_rotation(translation, rot.as_matrix())

    @property
    def translation(self):
        return self.matrix[:3, 3].copy()

    @property
    def rotation(self):
        return self.matrix[:3, :3].copy()

    def is_identity(self):
        return np.allclose(self.matrix, np.eye(4))

    def to_local(self, point):
        """Maps a global point into the local frame."""
        p = np.append(np.array(point, dtype=float), 1.0)
        return (np.linalg.inv(self.matrix) @ p)[:3]

    def to_global(self, point):
        p = np.append(np.array(point, dtype=float), 1.0)
        return (self.matrix @ p)[:3]

    def __eq__(self, other):
        if not isinstance(other, Transform3D):
            return NotImplemented
        return bool(np.allclose(self.matrix, other.matrix))

    def __repr__(self):
        return f"Transform3D(translation={self.translation.tolist()})"


class BinUtility:
    """Up to two binning axes plus an optional transform into the binning frame."""
    def __init__(self, binning_data=None, transform=None):
        self.binning_data = list(binning_data or [])
        if len(self.binning_data) > 2:
            raise ValueError(f"At most two binning axes are supported, got {len(self.binning_data)}")
        self.transform = transform

    @property
    def dimensions(self):
        return len(self.binning_data)

    @property
    def bins(self):
        """(bins0, bins1), with 1 for a missing axis."""
        counts = [bd.bins for bd in self.binning_data] + [1, 1]
        return counts[0], counts[1]

    def total_bins(self):
        b0, b1 = self.bins
        return b0 * b1

    def bin(self, position):
        """Returns (i0, i1) for a global position."""
        local = self.transform.to_local(position) if self.transform is not None else position
        indices = [bd.search(local_value(local, bd.value)) for bd in self.binning_data] + [0, 0]
        return indices[0], indices[1]

    def __eq__(self, other):
        if not isinstance(other, BinUtility):
            return NotImplemented
        if self.binning_data != other.binning_data:
            return False
        # A missing transform and an identity transform are the same thing
        mine = self.transform if self.transform is not None else Transform3D()
        theirs = other.transform if other.transform is not None else Transform3D()
        return mine == theirs

    def __repr__(self):
        return f"BinUtility({self.binning_data})"
