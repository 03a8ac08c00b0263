import math
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from .maths import Rotation, Vec3
from .texture import Texture


# ============================================================
#  Scene objects
# ============================================================

class SceneObject:
    """
    Triangle soup with a local -> world transform.

    positions - (3N, 3) object-local vertex positions
    uvs       - (3N, 2) texture coordinates
    normals   - (3N, 3) object-local vertex normals

    Consecutive rows form one triangle: rows 3i, 3i+1, 3i+2.

    local -> world is always: rotate, then scale (uniform), then translate.
    """

    def __init__(self, positions, uvs=None, normals=None,
                 texture: Optional[Texture] = None,
                 scale: float = 1.0,
                 offset: Vec3 = Vec3(0.0, 0.0, 0.0),
                 rotation: Optional[Rotation] = None,
                 name: str = "object"):
        positions = np.ascontiguousarray(positions, dtype=np.float64).reshape(-1, 3)
        n = positions.shape[0]
        if n % 3 != 0:
            raise ValueError(f"{name}: vertex count {n} is not a multiple of 3")

        # missing attributes get the mesh-source defaults
        if uvs is None:
            uvs = np.zeros((n, 2), dtype=np.float64)
        if normals is None:
            normals = np.tile([0.0, 0.0, 1.0], (n, 1))
        uvs = np.ascontiguousarray(uvs, dtype=np.float64).reshape(-1, 2)
        normals = np.ascontiguousarray(normals, dtype=np.float64).reshape(-1, 3)
        if uvs.shape[0] != n or normals.shape[0] != n:
            raise ValueError(
                f"{name}: expected {n} uvs and normals, got {uvs.shape[0]} and {normals.shape[0]}"
            )

        self.name = name
        self.positions = positions
        self.uvs = uvs
        self.normals = normals
        self.texture = texture if texture is not None else Texture.default()
        self.scale = float(scale)
        self.offset = offset
        self.rotation = rotation if rotation is not None else Rotation()

    @property
    def num_triangles(self) -> int:
        return self.positions.shape[0] // 3

    def local_to_world(self, p: Vec3) -> Vec3:
        pw = self.rotation.apply(p)
        pw = pw * self.scale
        pw += self.offset
        return pw

    def local_to_world_many(self, pts: np.ndarray) -> np.ndarray:
        """Same as local_to_world for an (N, 3) array."""
        return self.rotation.apply_many(pts) * self.scale + self.offset.to_array()

    def world_normals(self) -> np.ndarray:
        """
        Vertex normals rotated into world space.

        Scale is ignored: correct for uniform scale only (a non-uniform scale
        would need the inverse-transpose).
        """
        return self.rotation.apply_many(self.normals)

    def __repr__(self):
        return f"SceneObject({self.name!r}, triangles={self.num_triangles})"


@dataclass
class Camera:
    """Pinhole camera: position, orientation and horizontal field of view (radians)."""
    offset: Vec3 = Vec3(0.0, 0.0, 0.0)
    rotation: Rotation = field(default_factory=Rotation)
    fov: float = 2.0 * math.pi / 3.0


@dataclass
class Scene:
    """
    One camera plus an ordered list of objects.

    List order is draw order; with the depth test the final image does not
    depend on it.
    """
    objects: List[SceneObject] = field(default_factory=list)
    camera: Camera = field(default_factory=Camera)

    def add(self, obj: SceneObject) -> SceneObject:
        self.objects.append(obj)
        return obj

    @property
    def num_triangles(self) -> int:
        return sum(o.num_triangles for o in self.objects)
