import math
from dataclasses import dataclass

import numpy as np
from numba import njit


# ============================================================
#  Math primitives
# ============================================================

@dataclass(frozen=True)
class Vec2:
    """
    2D vector for texture coordinates (u, v) and screen positions.

    Immutable: operations return new objects, `+=` rebinds the name.
    """
    x: float
    y: float

    def __add__(self, o): return Vec2(self.x + o.x, self.y + o.y)
    def __sub__(self, o): return Vec2(self.x - o.x, self.y - o.y)
    def __mul__(self, k: float): return Vec2(self.x * k, self.y * k)
    def __truediv__(self, k: float): return Vec2(self.x / k, self.y / k)

    def __iter__(self):
        yield self.x
        yield self.y

    def dot(self, o) -> float:
        return self.x * o.x + self.y * o.y


@dataclass(frozen=True)
class Vec3:
    """
    3D vector for positions, normals and colors.

    Used in:
      - object-local vertices and normals
      - camera offset and world-space points
      - projected points (x, y, inv_z)
    """
    x: float
    y: float
    z: float

    def __add__(self, o): return Vec3(self.x + o.x, self.y + o.y, self.z + o.z)
    def __sub__(self, o): return Vec3(self.x - o.x, self.y - o.y, self.z - o.z)
    def __mul__(self, k: float): return Vec3(self.x * k, self.y * k, self.z * k)
    def __truediv__(self, k: float): return Vec3(self.x / k, self.y / k, self.z / k)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def dot(self, o) -> float:
        """Dot product (scalar product)."""
        return self.x * o.x + self.y * o.y + self.z * o.z

    def norm(self) -> float:
        """Euclidean length."""
        return math.sqrt(self.dot(self))

    def normalize(self):
        """Return normalized vector (length=1); the zero vector stays zero."""
        n = self.norm()
        if n <= 1e-12:
            return Vec3(0.0, 0.0, 0.0)
        return self * (1.0 / n)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @staticmethod
    def from_array(a) -> "Vec3":
        return Vec3(float(a[0]), float(a[1]), float(a[2]))


# ============================================================
#  Scalar helpers (shared with the numba kernels)
# ============================================================

@njit(cache=True)
def edge_func(ax, ay, bx, by, px, py):
    """
    Signed area of the parallelogram spanned by (p - a) and (b - a).

    The sign tells which side of the directed line a->b the point p lies on.
    Used for triangle orientation (back-face test) and for point-in-triangle
    membership (barycentric weights before normalization).
    """
    return (px - ax) * (by - ay) - (py - ay) * (bx - ax)


@njit(cache=True)
def clamp(x, lo, hi):
    """Clamp x into the inclusive range [lo, hi]."""
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


# ============================================================
#  Rotation
# ============================================================

def rotation_basis(yaw: float, pitch: float) -> np.ndarray:
    """
    Orthonormal basis for a (yaw, pitch) orientation.

    Returns a 3x3 matrix whose columns are the local axes i, j, k expressed
    in the parent frame. Composition order is fixed: yaw about the vertical
    (Y) axis, then pitch about the yawed horizontal axis:

        R = Ry(-yaw) @ Rx(-pitch)

    Positive yaw turns the forward axis k towards -X, positive pitch tilts
    it towards +Y.
    """
    cy, sy = math.cos(yaw), math.sin(yaw)
    cp, sp = math.cos(pitch), math.sin(pitch)
    return np.array([
        [cy,  sy * sp, -sy * cp],
        [0.0, cp,       sp],
        [sy, -cy * sp,  cy * cp],
    ], dtype=np.float64)


class Rotation:
    """
    Orientation stored as two angles plus the derived basis and its inverse.

    apply     - local -> parent   (i*v.x + j*v.y + k*v.z)
    apply_inv - parent -> local   (transpose basis, valid because orthonormal)

    Incremental updates mutate the angles and rebuild both bases from
    scratch, so repeated updates never accumulate matrix drift.
    """

    def __init__(self, yaw: float = 0.0, pitch: float = 0.0):
        self.yaw = float(yaw)
        self.pitch = float(pitch)
        self._rebuild()

    def _rebuild(self):
        self.matrix = rotation_basis(self.yaw, self.pitch)
        self.inverse = np.ascontiguousarray(self.matrix.T)

    @property
    def i(self) -> Vec3:
        return Vec3.from_array(self.matrix[:, 0])

    @property
    def j(self) -> Vec3:
        return Vec3.from_array(self.matrix[:, 1])

    @property
    def k(self) -> Vec3:
        return Vec3.from_array(self.matrix[:, 2])

    def apply(self, v: Vec3) -> Vec3:
        return Vec3.from_array(self.matrix @ v.to_array())

    def apply_inv(self, v: Vec3) -> Vec3:
        return Vec3.from_array(self.inverse @ v.to_array())

    def apply_many(self, pts: np.ndarray) -> np.ndarray:
        """Rotate an (N, 3) array of local vectors into the parent frame."""
        return pts @ self.inverse

    def apply_inv_many(self, pts: np.ndarray) -> np.ndarray:
        """Rotate an (N, 3) array of parent vectors into the local frame."""
        return pts @ self.matrix

    def add_yaw(self, delta: float):
        self.yaw += delta
        self._rebuild()

    def add_pitch(self, delta: float):
        self.pitch += delta
        self._rebuild()

    def __repr__(self):
        return f"Rotation(yaw={self.yaw:.4f}, pitch={self.pitch:.4f})"
