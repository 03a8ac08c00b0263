"""
Collaborator adapters: mesh and texture sources, image export, demo geometry.

These sit outside the rendering core; they only turn files into the flat
arrays and texture grids the core consumes, and back.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np
from PIL import Image

from .logger import channel_logger
from .scene import SceneObject
from .target import RenderTarget
from .texture import Texture

PathLike = Union[str, Path]

log = channel_logger("assets")

DEFAULT_UV = (0.0, 0.0)
DEFAULT_NORMAL = (0.0, 0.0, 1.0)


class AssetError(ValueError):
    """A mesh or texture file could not be understood."""


@dataclass
class MeshData:
    """Flat triangle soup: rows 3i..3i+2 belong to triangle i."""
    positions: np.ndarray
    uvs: np.ndarray
    normals: np.ndarray

    @property
    def num_triangles(self) -> int:
        return self.positions.shape[0] // 3

    def to_object(self, **kwargs) -> SceneObject:
        return SceneObject(self.positions, self.uvs, self.normals, **kwargs)


# ============================================================
#  OBJ loader
# ============================================================

def _resolve(idx: str, count: int) -> int:
    """OBJ index (1-based, or negative = relative to the end) -> 0-based."""
    i = int(idx)
    i = i - 1 if i > 0 else count + i
    if not 0 <= i < count:
        raise IndexError(f"index {idx} out of range (have {count})")
    return i


def triangulate_fan(corners: List[Tuple]) -> List[Tuple]:
    """
    Split a convex polygon (3..N corners) into triangles sharing corner 0:
      (0,1,2), (0,2,3), ..., (0,N-2,N-1)
    """
    tris = []
    for i in range(2, len(corners)):
        tris.append((corners[0], corners[i - 1], corners[i]))
    return tris


def parse_obj(lines, source: str = "<obj>") -> MeshData:
    """
    Parse Wavefront OBJ text.

    Supported:
      v  x y z
      vt u v
      vn x y z
      f  v | v/vt | v//vn | v/vt/vn  (3 or more corners, fan-triangulated)

    Corners without a uv get (0, 0), corners without a normal get (0, 0, 1).
    """
    verts: List[Tuple[float, float, float]] = []
    uvs: List[Tuple[float, float]] = []
    normals: List[Tuple[float, float, float]] = []
    out_p, out_t, out_n = [], [], []

    for lineno, line in enumerate(lines, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        try:
            if parts[0] == "v":
                verts.append((float(parts[1]), float(parts[2]), float(parts[3])))
            elif parts[0] == "vt":
                uvs.append((float(parts[1]), float(parts[2])))
            elif parts[0] == "vn":
                normals.append((float(parts[1]), float(parts[2]), float(parts[3])))
            elif parts[0] == "f":
                if len(parts) < 4:
                    raise ValueError("face needs at least 3 corners")
                corners = []
                for group in parts[1:]:
                    comps = group.split("/")
                    p = verts[_resolve(comps[0], len(verts))]
                    t = uvs[_resolve(comps[1], len(uvs))] if len(comps) > 1 and comps[1] else DEFAULT_UV
                    n = normals[_resolve(comps[2], len(normals))] if len(comps) > 2 and comps[2] else DEFAULT_NORMAL
                    corners.append((p, t, n))
                for tri in triangulate_fan(corners):
                    for p, t, n in tri:
                        out_p.append(p)
                        out_t.append(t)
                        out_n.append(n)
        except (ValueError, IndexError) as e:
            raise AssetError(f"{source}:{lineno}: {e}") from e

    return MeshData(
        positions=np.array(out_p, dtype=np.float64).reshape(-1, 3),
        uvs=np.array(out_t, dtype=np.float64).reshape(-1, 2),
        normals=np.array(out_n, dtype=np.float64).reshape(-1, 3),
    )


def load_obj(path: PathLike) -> MeshData:
    path = Path(path)
    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        mesh = parse_obj(f, source=str(path))
    log.info("loaded %s: %d triangles", path.name, mesh.num_triangles)
    return mesh


# ============================================================
#  Textures and export
# ============================================================

def load_texture(path: PathLike) -> Texture:
    """
    Decode an image file into a Texture.

    Alpha is dropped. Rows are flipped so that row 0 (v = 0) is the bottom
    of the picture, matching OBJ texture coordinates.
    """
    path = Path(path)
    try:
        with Image.open(path) as img:
            rgb = np.array(img.convert("RGB"), dtype=np.float64)
    except OSError as e:
        raise AssetError(f"{path}: {e}") from e
    log.info("loaded texture %s: %dx%d", path.name, rgb.shape[1], rgb.shape[0])
    return Texture(np.flipud(rgb))


def to_image(target: RenderTarget) -> Image.Image:
    """RGB snapshot of the target's color buffer, top row first."""
    return Image.fromarray(np.ascontiguousarray(target.color_buffer[:, :, :3]), "RGB")


def save_image(target: RenderTarget, path: PathLike, fmt: Optional[str] = None) -> Path:
    """Write the target to an uncompressed image (BMP unless the suffix says otherwise)."""
    path = Path(path)
    if fmt is None and not path.suffix:
        fmt = "BMP"
    to_image(target).save(path, format=fmt)
    log.info("saved %s (%dx%d)", path, target.width, target.height)
    return path


# ============================================================
#  Demo geometry
# ============================================================

_CUBE_FACES = (
    # normal,       corners; cross(c1 - c0, c2 - c0) points along the normal
    ((0, 0, -1), ((-1, 1, -1), (1, 1, -1), (1, -1, -1), (-1, -1, -1))),
    ((0, 0, 1),  ((1, 1, 1), (-1, 1, 1), (-1, -1, 1), (1, -1, 1))),
    ((-1, 0, 0), ((-1, 1, 1), (-1, 1, -1), (-1, -1, -1), (-1, -1, 1))),
    ((1, 0, 0),  ((1, 1, -1), (1, 1, 1), (1, -1, 1), (1, -1, -1))),
    ((0, 1, 0),  ((-1, 1, 1), (1, 1, 1), (1, 1, -1), (-1, 1, -1))),
    ((0, -1, 0), ((-1, -1, -1), (1, -1, -1), (1, -1, 1), (-1, -1, 1))),
)
_QUAD_UVS = ((0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0))


def demo_cube() -> MeshData:
    """Unit cube (12 triangles) with per-face uvs and outward normals."""
    out_p, out_t, out_n = [], [], []
    for normal, quad in _CUBE_FACES:
        corners = list(zip(quad, _QUAD_UVS, [normal] * 4))
        for tri in triangulate_fan(corners):
            for p, t, n in tri:
                out_p.append(p)
                out_t.append(t)
                out_n.append(n)
    return MeshData(
        positions=np.array(out_p, dtype=np.float64),
        uvs=np.array(out_t, dtype=np.float64),
        normals=np.array(out_n, dtype=np.float64),
    )


def checker_texture(size: int = 8, cells: int = 2,
                    a=(230.0, 230.0, 230.0), b=(60.0, 90.0, 200.0)) -> Texture:
    """size x size checkerboard with cells x cells squares."""
    idx = (np.arange(size) * cells // size)
    mask = (idx[:, None] + idx[None, :]) % 2 == 0
    grid = np.where(mask[:, :, None], np.array(a, dtype=np.float64), np.array(b, dtype=np.float64))
    return Texture(grid)
