from __future__ import annotations

import logging
import time
from typing import Dict, Tuple

import moderngl
import pygame

from terrain2d.config import (
    APP_VERSION,
    CAMERA_SMOOTH_K,
    FPS_CAP,
    VIEW_HALF_HEIGHT,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from terrain2d.render.camera import FollowCamera, Viewer
from terrain2d.render.renderer import Renderer
from terrain2d.world.params import TerrainParams
from terrain2d.world.world import TerrainWorld

logger = logging.getLogger(__name__)


def _init_pygame_gl() -> None:
    pygame.init()
    pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MAJOR_VERSION, 3)
    pygame.display.gl_set_attribute(pygame.GL_CONTEXT_MINOR_VERSION, 3)
    pygame.display.gl_set_attribute(pygame.GL_CONTEXT_PROFILE_MASK, pygame.GL_CONTEXT_PROFILE_CORE)
    pygame.display.gl_set_attribute(pygame.GL_DOUBLEBUFFER, 1)


def _read_input() -> Tuple[float, float]:
    keys = pygame.key.get_pressed()
    dx = float(keys[pygame.K_RIGHT] or keys[pygame.K_d]) - float(keys[pygame.K_LEFT] or keys[pygame.K_a])
    dy = float(keys[pygame.K_UP] or keys[pygame.K_w]) - float(keys[pygame.K_DOWN] or keys[pygame.K_s])
    return dx, dy


def run_headless(
    params: TerrainParams,
    *,
    ticks: int,
    velocity: Tuple[float, float],
    dt: float,
    load_distance: int = 1,
    prefetch_margin: int = 0,
) -> Dict[str, int]:
    """Drive the chunk lifecycle without a window; the viewer moves at constant velocity."""
    world = TerrainWorld(params, load_distance=load_distance, prefetch_margin=prefetch_margin)
    viewer = Viewer(speed=0.0)
    loaded = retired = released = 0
    try:
        for _ in range(max(0, int(ticks))):
            viewer.x += float(velocity[0]) * dt
            viewer.y += float(velocity[1]) * dt
            res = world.update(viewer.x, viewer.y)
            loaded += len(res.loaded)
            retired += len(res.retired)
            released += len(res.released)
        stats = world.stats()
    finally:
        world.shutdown()
    stats.update(loaded=loaded, retired=retired, released=released, ticks=int(ticks))
    logger.debug("Headless run finished: %s", stats)
    return stats


def run_app(
    params: TerrainParams,
    *,
    speed: float,
    debug: bool,
    load_distance: int,
    prefetch_margin: int,
) -> None:
    _init_pygame_gl()

    flags = pygame.OPENGL | pygame.DOUBLEBUF | pygame.RESIZABLE
    pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT), flags)
    pygame.display.set_caption(f"terrain2d v{APP_VERSION} (seed={params.seed})")

    try:
        ctx = moderngl.create_context()
    except Exception as e:
        pygame.quit()
        raise RuntimeError("Failed to create ModernGL context (need OpenGL 3.2+)") from e

    if debug:
        print(f"[terrain2d] moderngl ctx version_code={ctx.version_code} vendor={ctx.info.get('GL_VENDOR')} renderer={ctx.info.get('GL_RENDERER')}")

    ctx.viewport = (0, 0, WINDOW_WIDTH, WINDOW_HEIGHT)
    renderer = Renderer(ctx, WINDOW_WIDTH, WINDOW_HEIGHT)

    world = TerrainWorld(params, renderer=renderer, load_distance=load_distance, prefetch_margin=prefetch_margin)
    viewer = Viewer(speed=speed)
    cam = FollowCamera(smooth_k=CAMERA_SMOOTH_K, half_height=VIEW_HALF_HEIGHT)
    cam.snap(*viewer.position())

    # Fade out over the outermost loaded ring.
    cw, chh = params.chunk_world_size()
    reach = min(cw, chh) * (load_distance + 0.5)
    renderer.set_fade(reach * 0.6, reach)

    clock = pygame.time.Clock()
    running = True
    last_t = time.perf_counter()
    last_log = last_t

    try:
        while running:
            now = time.perf_counter()
            dt = min(now - last_t, 0.05)
            last_t = now

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    w, h = max(64, event.w), max(64, event.h)
                    pygame.display.set_mode((w, h), flags)
                    renderer.resize(w, h)

            dx, dy = _read_input()
            viewer.update(dt, dx=dx, dy=dy)
            world.update(viewer.x, viewer.y)
            cam.update(dt, viewer.position())

            renderer.begin_frame()
            renderer.set_view(cam.x, cam.y, cam.half_height)
            world.draw(renderer)
            pygame.display.flip()

            if debug and now - last_log >= 1.0:
                last_log = now
                s = world.stats()
                solid = "solid" if world.is_solid(viewer.x, viewer.y) else "open"
                print(
                    f"[terrain2d] fps~{clock.get_fps():.0f} pos=({viewer.x:.0f},{viewer.y:.0f}) {solid} "
                    f"live={s['live']} cached={s['cached']} generated={s['generated']}"
                )

            if FPS_CAP and FPS_CAP > 0:
                clock.tick(FPS_CAP)
            else:
                clock.tick()
    finally:
        world.shutdown()
        renderer.release()
        pygame.quit()
