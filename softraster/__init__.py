"""CPU software rasterizer: triangle meshes + pinhole camera -> color image."""

from .maths import Vec2, Vec3, Rotation, edge_func, clamp, rotation_basis
from .target import RenderTarget
from .texture import Texture
from .scene import SceneObject, Camera, Scene
from .config import RenderConfig
from .renderer import Renderer, FrameStats

__version__ = "0.1.0"
