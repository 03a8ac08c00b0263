from typing import Sequence, Tuple

import numpy as np


class RenderTarget:
    """
    Color buffer + depth buffer, one cell per pixel, row-major.

    color - (height, width, 4) uint8, RGBA
    depth - (height, width) float32, reciprocal camera-space depth (inv_z)

    Depth convention:
      - larger inv_z = nearer to the camera
      - 0 means "nothing seen yet"

    Both arrays are allocated once in __init__ and reused for the lifetime of
    the target; clear() resets them in place.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"render target size must be positive, got {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self._color = np.zeros((self.height, self.width, 4), dtype=np.uint8)
        self._depth = np.zeros((self.height, self.width), dtype=np.float32)
        self.clear()

    @property
    def color_buffer(self) -> np.ndarray:
        return self._color

    @property
    def depth_buffer(self) -> np.ndarray:
        return self._depth

    def clear(self):
        """Reset color to opaque black and depth to 0, without reallocating."""
        self._color[:, :, :3] = 0
        self._color[:, :, 3] = 255
        self._depth.fill(0.0)

    def _check(self, row: int, col: int):
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"pixel ({row}, {col}) outside {self.width}x{self.height} target")

    def pixel(self, row: int, col: int) -> Tuple[int, int, int, int]:
        """RGBA color at (row, col)."""
        self._check(row, col)
        r, g, b, a = self._color[row, col]
        return int(r), int(g), int(b), int(a)

    def depth_at(self, row: int, col: int) -> float:
        self._check(row, col)
        return float(self._depth[row, col])

    def write_pixel(self, row: int, col: int, rgb: Sequence[float], depth: float):
        """Store an opaque color and its depth at (row, col)."""
        self._check(row, col)
        self._color[row, col, 0] = int(rgb[0])
        self._color[row, col, 1] = int(rgb[1])
        self._color[row, col, 2] = int(rgb[2])
        self._color[row, col, 3] = 255
        self._depth[row, col] = depth

    def covered(self) -> np.ndarray:
        """Boolean mask of pixels that received a surface this frame."""
        return self._depth > 0.0

    def __repr__(self):
        return f"RenderTarget({self.width}x{self.height})"
