"""End-to-end rendering through the Renderer."""

import math

import numpy as np
import pytest

from softraster.config import RenderConfig
from softraster.maths import Rotation, Vec3
from softraster.renderer import Renderer
from softraster.scene import Camera, Scene, SceneObject
from softraster.target import RenderTarget
from softraster.texture import Texture

QUAD = [
    (-1.0, -1.0, 0.0), (-1.0, 1.0, 0.0), (1.0, -1.0, 0.0),
    (-1.0, 1.0, 0.0), (1.0, 1.0, 0.0), (1.0, -1.0, 0.0),
]
TOWARD_CAMERA = [(0.0, 0.0, -1.0)] * 6


def _quad(offset: Vec3, rgb=(200.0, 100.0, 50.0), normals=TOWARD_CAMERA, **kwargs) -> SceneObject:
    return SceneObject(QUAD, normals=normals, texture=Texture.solid(rgb), offset=offset, **kwargs)


def _renderer(*objects, width: int = 1280, height: int = 720) -> Renderer:
    scene = Scene(objects=list(objects))
    return Renderer(scene, RenderTarget(width, height))


def test_quad_scenario_lights_expected_block() -> None:
    # shifted slightly so the diagonal misses every pixel centre
    renderer = _renderer(_quad(Vec3(0.01, 0.0, 5.0)))
    assert renderer.pixels_per_world_unit == pytest.approx(640.0 / math.sqrt(3.0))

    stats = renderer.render()

    expected = np.zeros((720, 1280), dtype=bool)
    expected[286:434, 567:715] = True
    assert np.array_equal(renderer.target.covered(), expected)
    assert stats.triangles == 2
    assert stats.culled == 0
    assert stats.discarded == 0
    assert stats.pixels == 148 * 148

    # normals face the light head-on: full texel color
    assert renderer.target.pixel(300, 600) == (200, 100, 50, 255)
    assert renderer.target.pixel(420, 700) == (200, 100, 50, 255)
    assert renderer.target.pixel(285, 600) == (0, 0, 0, 255)
    assert renderer.target.depth_at(360, 640) == pytest.approx(0.2)


def test_default_normals_get_half_intensity() -> None:
    renderer = _renderer(_quad(Vec3(0.01, 0.0, 5.0), normals=None))
    renderer.render()
    assert renderer.target.pixel(360, 640) == (100, 50, 25, 255)


def test_rendering_is_deterministic() -> None:
    objects = [
        _quad(Vec3(0.3, -0.2, 4.0), rotation=Rotation(0.4, 0.3)),
        _quad(Vec3(-0.5, 0.4, 6.0), rgb=(10.0, 250.0, 90.0), scale=1.7),
    ]
    a = _renderer(*objects, width=320, height=200)
    b = _renderer(*objects, width=320, height=200)
    a.render()
    b.render()
    assert np.array_equal(a.target.color_buffer, b.target.color_buffer)
    assert np.array_equal(a.target.depth_buffer, b.target.depth_buffer)


def test_image_does_not_depend_on_draw_order() -> None:
    near = _quad(Vec3(0.0, 0.0, 5.0), rgb=(255.0, 0.0, 0.0))
    far = _quad(Vec3(0.5, 0.3, 6.0), rgb=(0.0, 0.0, 255.0), scale=2.0)

    first = _renderer(near, far, width=320, height=200)
    second = _renderer(far, near, width=320, height=200)
    first.render()
    second.render()

    assert np.array_equal(first.target.color_buffer, second.target.color_buffer)
    assert np.array_equal(first.target.depth_buffer, second.target.depth_buffer)
    assert first.target.pixel(100, 160) == (255, 0, 0, 255)


def test_render_clears_previous_frame() -> None:
    obj = _quad(Vec3(0.0, 0.0, 5.0))
    renderer = _renderer(obj, width=320, height=200)
    renderer.render()
    assert renderer.target.covered().any()

    obj.offset = Vec3(0.0, 0.0, -5.0)
    stats = renderer.render()
    assert not renderer.target.covered().any()
    assert stats.pixels == 0


def test_screen_scale_is_cached_until_refresh() -> None:
    renderer = _renderer(_quad(Vec3(0.0, 0.0, 5.0)), width=320, height=200)
    before = renderer.render().pixels

    renderer.scene.camera.fov = math.pi / 2
    assert renderer.render().pixels == before

    renderer.refresh()
    assert renderer.pixels_per_world_unit == pytest.approx(160.0)
    assert renderer.render().pixels > before


def test_triangles_at_or_behind_near_plane_are_discarded() -> None:
    behind = _quad(Vec3(0.0, 0.0, -5.0))
    straddling = SceneObject(
        [(-1.0, -1.0, 5.0), (-1.0, 1.0, 5.0), (1.0, -1.0, -1.0)],
        normals=TOWARD_CAMERA[:3],
    )
    on_camera = _quad(Vec3(0.0, 0.0, 0.0))
    visible = _quad(Vec3(0.0, 0.0, 5.0))

    renderer = _renderer(behind, straddling, on_camera, visible, width=320, height=200)
    stats = renderer.render()

    assert stats.triangles == 7
    assert stats.discarded == 5
    assert stats.culled == 0
    assert stats.pixels == int(renderer.target.covered().sum())


def test_back_facing_object_is_culled() -> None:
    turned = _quad(Vec3(0.0, 0.0, 5.0), rotation=Rotation(math.pi, 0.0))
    renderer = _renderer(turned, width=320, height=200)
    stats = renderer.render()
    assert stats.culled == 2
    assert stats.pixels == 0
    assert not renderer.target.covered().any()


def test_world_to_screen() -> None:
    renderer = _renderer()
    f = renderer.pixels_per_world_unit

    centre = renderer.world_to_screen(Vec3(0.0, 0.0, 5.0))
    assert (centre.x, centre.y, centre.z) == pytest.approx((640.0, 360.0, 0.2))

    right_down = renderer.world_to_screen(Vec3(1.0, 2.0, 4.0))
    assert right_down.x == pytest.approx(640.0 + f / 4.0)
    assert right_down.y == pytest.approx(360.0 + f / 2.0)

    with pytest.raises(ZeroDivisionError):
        renderer.world_to_screen(Vec3(1.0, 2.0, 0.0))


def test_camera_pose_moves_the_view() -> None:
    camera = Camera(offset=Vec3(1.0, 0.0, 0.0), rotation=Rotation(math.pi / 2, 0.0))
    renderer = Renderer(Scene(camera=camera), RenderTarget(1280, 720))
    # the yawed camera looks down -x
    p = renderer.world_to_screen(Vec3(-4.0, 0.0, 0.0))
    assert (p.x, p.y, p.z) == pytest.approx((640.0, 360.0, 0.2))


def test_config_selects_shading_and_light() -> None:
    scene = Scene(objects=[_quad(Vec3(0.0, 0.0, 5.0), normals=None)])
    renderer = Renderer(scene, RenderTarget(320, 200), RenderConfig(width=320, height=200, shading="lambert"))
    renderer.render()
    # lambert with the normal facing away from the light is black
    assert renderer.target.pixel(100, 160) == (0, 0, 0, 255)
    assert renderer.target.covered()[100, 160]

    lit_from_behind = RenderConfig(width=320, height=200, light_direction=(0.0, 0.0, 2.0), shading="lambert")
    renderer = Renderer(scene, RenderTarget(320, 200), lit_from_behind)
    renderer.render()
    assert renderer.target.pixel(100, 160) == (200, 100, 50, 255)
