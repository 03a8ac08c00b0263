import math

from numba import njit

from .maths import edge_func
from .shading import illuminate
from .texture import texel_index


# ============================================================
#  Numba rasterizers
# ============================================================

@njit(cache=True)
def inside_triangle(x1, y1, x2, y2, x3, y3, px, py):
    """
    Point-in-triangle test used by the rasterizer.

    Inclusive on all three edges: a point exactly on an edge shared by two
    adjacent triangles is claimed by both of them.
    """
    b1 = edge_func(x2, y2, x3, y3, px, py)
    b2 = edge_func(x3, y3, x1, y1, px, py)
    b3 = edge_func(x1, y1, x2, y2, px, py)
    return b1 >= 0.0 and b2 >= 0.0 and b3 >= 0.0


@njit(cache=True)
def perspective_interpolate(l1, l2, l3, a1, a2, a3, z_inv):
    """
    Perspective-correct blend of a per-vertex scalar.

    l1..l3 are the screen-space barycentrics already weighted by each
    vertex's inv_z, and z_inv = l1 + l2 + l3:

        a = (l1*a1 + l2*a2 + l3*a3) / z_inv
    """
    return (l1 * a1 + l2 * a2 + l3 * a3) / z_inv


@njit(cache=True)
def _span(lo, hi, size):
    """Half-open pixel range [floor(lo), ceil(hi) + 1) clamped into [0, size]."""
    lo = min(max(lo, 0.0), float(size))
    hi = min(max(hi, 0.0), float(size))
    start = int(math.floor(lo))
    stop = int(math.ceil(hi)) + 1
    if stop > size:
        stop = size
    return start, stop


@njit(cache=True)
def draw_triangle(color, depth, tex,
                  x1, y1, iz1, u1, v1, nx1, ny1, nz1,
                  x2, y2, iz2, u2, v2, nx2, ny2, nz2,
                  x3, y3, iz3, u3, v3, nx3, ny3, nz3,
                  model, lx, ly, lz):
    """
    Rasterize one textured triangle with per-pixel shading.

    Inputs per vertex:
      x, y   - screen position (pixels, y grows downwards)
      iz     - reciprocal camera-space depth
      u, v   - texture coordinates
      nx..nz - world-space vertex normal

    Z-buffer:
      - depth stores inv_z, pixel is drawn if z_inv > depth[row, col]
      - depth is written immediately on pass

    Returns the number of pixels written, or -1 if the triangle is
    back-facing or degenerate (signed area <= 0).
    """
    H, W = depth.shape
    th, tw = tex.shape[0], tex.shape[1]

    total = edge_func(x1, y1, x2, y2, x3, y3)
    if not total > 0.0:
        return -1

    col_start, col_stop = _span(min(x1, x2, x3), max(x1, x2, x3), W)
    row_start, row_stop = _span(min(y1, y2, y3), max(y1, y2, y3), H)

    written = 0
    for row in range(row_start, row_stop):
        py = row + 0.5
        for col in range(col_start, col_stop):
            px = col + 0.5

            # barycentrics, normalized only once we know we are inside
            b1 = edge_func(x2, y2, x3, y3, px, py)
            b2 = edge_func(x3, y3, x1, y1, px, py)
            b3 = edge_func(x1, y1, x2, y2, px, py)
            if b1 < 0.0 or b2 < 0.0 or b3 < 0.0:
                continue
            b1 /= total
            b2 /= total
            b3 /= total

            l1 = b1 * iz1
            l2 = b2 * iz2
            l3 = b3 * iz3
            z_inv = l1 + l2 + l3

            if not z_inv > depth[row, col]:
                continue
            depth[row, col] = z_inv

            uu = perspective_interpolate(l1, l2, l3, u1, u2, u3, z_inv)
            vv = perspective_interpolate(l1, l2, l3, v1, v2, v3, z_inv)

            nnx = perspective_interpolate(l1, l2, l3, nx1, nx2, nx3, z_inv)
            nny = perspective_interpolate(l1, l2, l3, ny1, ny2, ny3, z_inv)
            nnz = perspective_interpolate(l1, l2, l3, nz1, nz2, nz3, z_inv)
            nlen = math.sqrt(nnx*nnx + nny*nny + nnz*nnz)
            if nlen > 0.0:
                nnx /= nlen; nny /= nlen; nnz /= nlen

            intensity = illuminate(model, nnx, nny, nnz, lx, ly, lz)

            s = texel_index(uu, tw)
            t = texel_index(vv, th)

            color[row, col, 0] = int(tex[t, s, 0] * intensity)
            color[row, col, 1] = int(tex[t, s, 1] * intensity)
            color[row, col, 2] = int(tex[t, s, 2] * intensity)
            color[row, col, 3] = 255
            written += 1

    return written


@njit(cache=True)
def draw_triangles(color, depth, tex, screen, uvs, normals, model, light):
    """
    Rasterize a batch of triangles in array order.

    screen  - (N, 3, 3) per-vertex (x, y, inv_z)
    uvs     - (N, 3, 2)
    normals - (N, 3, 3) world-space
    light   - (3,) unit light direction

    Returns (pixels_written, triangles_culled).
    """
    written = 0
    culled = 0
    lx, ly, lz = light[0], light[1], light[2]
    for n in range(screen.shape[0]):
        s = screen[n]
        uv = uvs[n]
        nr = normals[n]
        res = draw_triangle(color, depth, tex,
                            s[0, 0], s[0, 1], s[0, 2], uv[0, 0], uv[0, 1], nr[0, 0], nr[0, 1], nr[0, 2],
                            s[1, 0], s[1, 1], s[1, 2], uv[1, 0], uv[1, 1], nr[1, 0], nr[1, 1], nr[1, 2],
                            s[2, 0], s[2, 1], s[2, 2], uv[2, 0], uv[2, 1], nr[2, 0], nr[2, 1], nr[2, 2],
                            model, lx, ly, lz)
        if res < 0:
            culled += 1
        else:
            written += res
    return written, culled

