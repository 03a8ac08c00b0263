import math
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import RenderConfig
from .logger import ChannelLogger, channel_logger
from .maths import Vec3
from .raster import draw_triangles
from .scene import Scene, SceneObject
from .target import RenderTarget


@dataclass
class FrameStats:
    """Counters for one render() call."""
    triangles: int = 0
    culled: int = 0
    discarded: int = 0
    pixels: int = 0
    seconds: float = 0.0

    def merge(self, other: "FrameStats"):
        self.triangles += other.triangles
        self.culled += other.culled
        self.discarded += other.discarded
        self.pixels += other.pixels


class Renderer:
    """
    Draws a Scene into a RenderTarget.

    Pipeline per triangle:
      local -> world    (object rotation, scale, offset)
      world -> camera   (minus camera offset, inverse camera rotation)
      camera -> screen  (x*ppwu/z + W/2, y*ppwu/z + H/2, keep 1/z)
      rasterize         (raster.draw_triangles)

    pixels_per_world_unit is computed once from the camera fov and target
    width; call refresh() after changing either.
    """

    def __init__(self, scene: Scene, target: RenderTarget,
                 config: Optional[RenderConfig] = None,
                 logger: Optional[ChannelLogger] = None):
        self.scene = scene
        self.target = target
        self.config = config if config is not None else RenderConfig()
        self.log = logger if logger is not None else channel_logger("render")
        self.pixels_per_world_unit = 0.0
        self.refresh()

    def refresh(self):
        """Recompute the cached screen scale from the current fov and width."""
        screen_width_world = 2.0 * math.tan(self.scene.camera.fov / 2.0)
        self.pixels_per_world_unit = self.target.width / screen_width_world

    # ============================================================
    #  Transforms
    # ============================================================

    def world_to_view(self, p: Vec3) -> Vec3:
        cam = self.scene.camera
        return cam.rotation.apply_inv(p - cam.offset)

    def world_to_screen(self, p: Vec3) -> Vec3:
        """
        World point -> (screen x, screen y, inv_z).

        No near-plane handling here: a point at camera depth 0 raises
        ZeroDivisionError, points behind the camera project mirrored.
        """
        pv = self.world_to_view(p)
        f = self.pixels_per_world_unit
        return Vec3(pv.x * f / pv.z + self.target.width / 2,
                    pv.y * f / pv.z + self.target.height / 2,
                    1.0 / pv.z)

    def _view_to_screen_many(self, view: np.ndarray) -> np.ndarray:
        f = self.pixels_per_world_unit
        inv_z = 1.0 / view[:, 2]
        out = np.empty_like(view)
        out[:, 0] = view[:, 0] * f * inv_z + self.target.width / 2
        out[:, 1] = view[:, 1] * f * inv_z + self.target.height / 2
        out[:, 2] = inv_z
        return out

    # ============================================================
    #  Drawing
    # ============================================================

    def draw_object(self, obj: SceneObject) -> FrameStats:
        """Transform and rasterize every triangle of obj, in array order."""
        stats = FrameStats(triangles=obj.num_triangles)
        if obj.num_triangles == 0:
            return stats

        cam = self.scene.camera
        world = obj.local_to_world_many(obj.positions)
        view = cam.rotation.apply_inv_many(world - cam.offset.to_array())

        # near-plane policy: drop the whole triangle, never clip
        depth_ok = (view[:, 2] > self.config.near_clip).reshape(-1, 3).all(axis=1)
        stats.discarded = int(depth_ok.size - np.count_nonzero(depth_ok))
        if stats.discarded:
            self.log.debug("%s: %d triangles behind near plane", obj.name, stats.discarded)
        if not depth_ok.any():
            return stats

        keep = np.repeat(depth_ok, 3)
        screen = self._view_to_screen_many(view[keep]).reshape(-1, 3, 3)
        uvs = obj.uvs[keep].reshape(-1, 3, 2)
        normals = obj.world_normals()[keep].reshape(-1, 3, 3)

        written, culled = draw_triangles(
            self.target.color_buffer, self.target.depth_buffer, obj.texture.pixels,
            np.ascontiguousarray(screen), np.ascontiguousarray(uvs), np.ascontiguousarray(normals),
            self.config.shading_id, self.config.light_array(),
        )
        stats.pixels = int(written)
        stats.culled = int(culled)
        return stats

    def render(self) -> FrameStats:
        """Clear the target and draw every object in scene order."""
        start = time.perf_counter()
        self.target.clear()
        frame = FrameStats()
        for obj in self.scene.objects:
            frame.merge(self.draw_object(obj))
        frame.seconds = time.perf_counter() - start
        self.log.debug(
            "frame: %d triangles, %d culled, %d discarded, %d pixels in %.1f ms",
            frame.triangles, frame.culled, frame.discarded, frame.pixels, frame.seconds * 1000.0,
        )
        return frame
