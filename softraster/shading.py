"""
Local illumination models.

Every model maps a unit surface normal and a unit light direction to a scalar
intensity that the rasterizer multiplies into the sampled texel. The
rasterizer only interpolates the normal, calls illuminate() and scales the
color, so adding a model means adding a function here and a branch in
illuminate().
"""

from numba import njit

from .maths import clamp


SHADE_HALF_LAMBERT = 0
SHADE_LAMBERT = 1
SHADE_UNLIT = 2

SHADING_MODELS = {
    "half_lambert": SHADE_HALF_LAMBERT,
    "lambert": SHADE_LAMBERT,
    "unlit": SHADE_UNLIT,
}


@njit(cache=True)
def lambert(nx, ny, nz, lx, ly, lz):
    """Diffuse term max(0, N.L), capped at 1."""
    return clamp(nx * lx + ny * ly + nz * lz, 0.0, 1.0)


@njit(cache=True)
def half_lambert(nx, ny, nz, lx, ly, lz):
    """
    Diffuse term remapped to [0.5, 1]: surfaces facing away from the light
    still get half of the texel color, so no pixel ends up fully black.
    """
    return 0.5 + 0.5 * lambert(nx, ny, nz, lx, ly, lz)


@njit(cache=True)
def unlit(nx, ny, nz, lx, ly, lz):
    return 1.0


@njit(cache=True)
def illuminate(model, nx, ny, nz, lx, ly, lz):
    if model == SHADE_LAMBERT:
        return lambert(nx, ny, nz, lx, ly, lz)
    if model == SHADE_UNLIT:
        return unlit(nx, ny, nz, lx, ly, lz)
    return half_lambert(nx, ny, nz, lx, ly, lz)


def shading_model(name: str) -> int:
    """Resolve a model name to the id passed down to the kernels."""
    try:
        return SHADING_MODELS[name]
    except KeyError:
        raise ValueError(
            f"unknown shading model {name!r}, expected one of {sorted(SHADING_MODELS)}"
        ) from None
