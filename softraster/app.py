import argparse
import math
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import pygame

from .assets import AssetError, checker_texture, demo_cube, load_obj, load_texture, save_image
from .config import RenderConfig
from .logger import init_logger
from .maths import Rotation, Vec3
from .renderer import FrameStats, Renderer
from .scene import Camera, Scene
from .target import RenderTarget


MOVE_SPEED = 1.0   # world units per second
TURN_SPEED = 1.0   # radians per second
SPIN_SPEED = 1.0   # object yaw, radians per second


# ============================================================
#  Scene setup
# ============================================================

def build_scene(config: RenderConfig, model: Optional[str], texture: Optional[str]) -> Scene:
    """
    One object 5 units in front of the camera.

    Uses the OBJ file / image when given, a checkered demo cube otherwise.
    """
    mesh = load_obj(model) if model else demo_cube()
    if texture:
        tex = load_texture(texture)
    elif model:
        tex = None  # SceneObject falls back to the plain grey texture
    else:
        tex = checker_texture()
    obj = mesh.to_object(
        texture=tex,
        offset=Vec3(0.0, 0.0, 5.0),
        rotation=Rotation(math.pi * 0.9, 0.0),
        name=Path(model).stem if model else "cube",
    )
    return Scene(objects=[obj], camera=Camera(fov=config.fov))


def present(surface: pygame.Surface, target: RenderTarget):
    """Copy the RGB channels of the target into a pygame surface."""
    img = pygame.surfarray.pixels3d(surface)  # shape: (W,H,3), indexed [x,y]
    img[:, :, :] = target.color_buffer[:, :, :3].swapaxes(0, 1)
    # Delete img view to unlock surface for blitting
    del img


# ============================================================
#  Main loop
# ============================================================

def run(renderer: Renderer, screenshot_path: Path, log):
    """
    Interactive loop:
      - handle input (camera move / turn, screenshot, quit)
      - spin the first object
      - render and present the frame with a HUD
    """
    target = renderer.target
    scene = renderer.scene
    camera = scene.camera

    pygame.init()
    screen = pygame.display.set_mode((target.width, target.height), pygame.RESIZABLE)
    pygame.display.set_caption("softraster: WASD move | arrows look | F12 screenshot | ESC exit")
    render_surface = pygame.Surface((target.width, target.height))

    clock = pygame.time.Clock()
    font = pygame.font.SysFont("consolas", 16)
    stats = FrameStats()

    running = True
    while running:
        dt = clock.tick(60) / 1000.0

        # ====================================================
        #  Input handling
        # ====================================================
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F12:
                    save_image(target, screenshot_path)

        if scene.objects:
            scene.objects[0].rotation.add_yaw(SPIN_SPEED * dt)

        keys = pygame.key.get_pressed()

        # Camera movement along its own right / forward axes
        cam_right = camera.rotation.i
        cam_fwd = camera.rotation.k
        move = Vec3(0.0, 0.0, 0.0)
        if keys[pygame.K_a]:
            move -= cam_right
        if keys[pygame.K_d]:
            move += cam_right
        if keys[pygame.K_w]:
            move += cam_fwd
        if keys[pygame.K_s]:
            move -= cam_fwd
        camera.offset = camera.offset + move * (MOVE_SPEED * dt)

        if keys[pygame.K_LEFT]:
            camera.rotation.add_yaw(TURN_SPEED * dt)
        if keys[pygame.K_RIGHT]:
            camera.rotation.add_yaw(-TURN_SPEED * dt)
        if keys[pygame.K_UP]:
            camera.rotation.add_pitch(TURN_SPEED * dt)
        if keys[pygame.K_DOWN]:
            camera.rotation.add_pitch(-TURN_SPEED * dt)

        # ====================================================
        #  Render + present frame
        # ====================================================
        stats = renderer.render()
        present(render_surface, target)

        if screen.get_size() != (target.width, target.height):
            pygame.transform.scale(render_surface, screen.get_size(), screen)
        else:
            screen.blit(render_surface, (0, 0))

        hud = [
            f"Tris: {stats.triangles} | Culled: {stats.culled} | Near: {stats.discarded} "
            f"| Pixels: {stats.pixels} | {stats.seconds * 1000.0:.1f} ms | FPS: {clock.get_fps():.1f}",
            "WASD move | arrows look | F12 screenshot | ESC exit",
        ]
        y = 10
        for line in hud:
            screen.blit(font.render(line, True, (235, 235, 235)), (10, y))
            y += 18

        pygame.display.flip()

    log.info("exiting after last frame: %s", stats)
    pygame.quit()


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="CPU software rasterizer")
    parser.add_argument("-m", "--model", help="OBJ mesh to display (default: demo cube)")
    parser.add_argument("-t", "--texture", help="texture image for the mesh")
    parser.add_argument("-W", "--width", type=int, help="render width in pixels")
    parser.add_argument("-H", "--height", type=int, help="render height in pixels")
    parser.add_argument("-s", "--settings", default="settings.json",
                        help="JSON settings file (default: settings.json)")
    parser.add_argument("-o", "--screenshot", metavar="PATH",
                        help="render one frame to PATH and exit, no window")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = Path(args.settings)
    logger = init_logger(settings)
    log = logger.channel("app")

    config = RenderConfig.from_settings(settings)
    if args.width or args.height:
        config = replace(config, width=args.width or config.width,
                         height=args.height or config.height)

    try:
        scene = build_scene(config, args.model, args.texture)
    except (AssetError, OSError) as e:
        log.error("could not load scene: %s", e)
        return 1

    target = RenderTarget(config.width, config.height)
    renderer = Renderer(scene, target, config, logger.channel("render"))
    log.info("rendering %d triangles at %dx%d", scene.num_triangles, target.width, target.height)

    if args.screenshot:
        # first call also compiles the numba kernels
        stats = renderer.render()
        save_image(target, args.screenshot)
        log.info("frame: %s", stats)
        return 0

    run(renderer, Path("screenshot.bmp"), log)
    return 0


if __name__ == "__main__":
    sys.exit(main())
