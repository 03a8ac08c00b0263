from typing import Sequence

import numpy as np
from numba import njit

from .maths import Vec2, Vec3


@njit(cache=True)
def texel_index(t, size):
    """
    Map a normalized coordinate t to a texel index along one axis.

    index = clamp(floor(t * (size - 1)), 0, size - 1)

    Nearest-neighbour, edge-clamped: no wrapping, no filtering.
    """
    f = np.floor(t * (size - 1))
    if not f >= 0.0:
        return 0
    if f > size - 1:
        return size - 1
    return int(f)


class Texture:
    """
    2D grid of RGB colors (0..255 stored as float64), shape (height, width, 3).

    Row 0 corresponds to v = 0, i.e. the bottom row of the source picture
    (assets.load_texture flips decoded images accordingly).
    """

    def __init__(self, pixels: np.ndarray):
        pixels = np.ascontiguousarray(pixels, dtype=np.float64)
        if pixels.ndim != 3 or pixels.shape[2] != 3 or pixels.shape[0] == 0 or pixels.shape[1] == 0:
            raise ValueError(f"texture grid must have shape (h, w, 3), got {pixels.shape}")
        self.pixels = pixels
        self.height, self.width = pixels.shape[0], pixels.shape[1]

    @classmethod
    def solid(cls, rgb: Sequence[float], width: int = 1, height: int = 1) -> "Texture":
        """Single-color texture."""
        grid = np.empty((height, width, 3), dtype=np.float64)
        grid[:, :] = rgb
        return cls(grid)

    @classmethod
    def default(cls) -> "Texture":
        """20x20 light grey texture used when an object has none."""
        return cls.solid((200.0, 200.0, 200.0), 20, 20)

    def sample(self, uv: Vec2) -> Vec3:
        s = texel_index(uv.x, self.width)
        t = texel_index(uv.y, self.height)
        return Vec3.from_array(self.pixels[t, s])

    def __repr__(self):
        return f"Texture({self.width}x{self.height})"
