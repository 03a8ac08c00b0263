import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

import numpy as np

from .shading import shading_model


@dataclass
class RenderConfig:
    """
    Rendering settings.

    width, height   - render target resolution (pixels)
    fov             - camera horizontal field of view (radians)
    light_direction - direction the single light travels, normalized on init
    shading         - illumination model name (see shading.SHADING_MODELS)
    near_clip       - triangles with any vertex at camera depth <= near_clip
                      are discarded whole (no clipping)
    """
    width: int = 1280
    height: int = 720
    fov: float = 2.0 * math.pi / 3.0
    light_direction: Tuple[float, float, float] = (0.0, 0.0, -1.0)
    shading: str = "half_lambert"
    near_clip: float = 1e-3

    shading_id: int = field(init=False, repr=False, default=0)

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"resolution must be positive, got {self.width}x{self.height}")
        light = np.asarray(self.light_direction, dtype=np.float64)
        n = float(np.linalg.norm(light))
        if light.shape != (3,) or n == 0.0:
            raise ValueError(f"light_direction must be a non-zero 3-vector, got {self.light_direction}")
        self.light_direction = tuple(float(c) for c in light / n)
        self.shading_id = shading_model(self.shading)

    def light_array(self) -> np.ndarray:
        return np.array(self.light_direction, dtype=np.float64)

    @classmethod
    def from_settings(cls, settings_path: Path) -> "RenderConfig":
        """
        Read camelCase keys from a JSON settings file.

        A missing or unparsable file gives the defaults; unknown keys are
        ignored (the same file also carries logging settings).
        """
        if not settings_path.exists():
            return cls()
        try:
            data = json.loads(settings_path.read_text())
        except json.JSONDecodeError:
            return cls()
        kwargs = {}
        for key, attr, conv in (
            ("width", "width", int),
            ("height", "height", int),
            ("fov", "fov", float),
            ("lightDirection", "light_direction", tuple),
            ("shading", "shading", str),
            ("nearClip", "near_clip", float),
        ):
            if key in data:
                kwargs[attr] = conv(data[key])
        return cls(**kwargs)
