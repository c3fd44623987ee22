"""Tests for projection helpers and the viewer / camera."""
from __future__ import annotations

import math

import numpy as np

from terrain2d.render.camera import FollowCamera, Viewer
from terrain2d.util.math import exp_smooth, ortho


def _project(m: np.ndarray, x: float, y: float) -> tuple[float, float]:
    # Column-major storage: transpose to apply as M @ v.
    v = m.T @ np.array([x, y, 0.0, 1.0], dtype=np.float32)
    return float(v[0]), float(v[1])


def test_ortho_maps_view_rect_to_clip_space() -> None:
    m = ortho(-100.0, 300.0, -50.0, 150.0)
    assert np.allclose(_project(m, -100.0, -50.0), (-1.0, -1.0))
    assert np.allclose(_project(m, 300.0, 150.0), (1.0, 1.0))
    assert np.allclose(_project(m, 100.0, 50.0), (0.0, 0.0))


def test_exp_smooth_approaches_target() -> None:
    v = 0.0
    for _ in range(200):
        v = exp_smooth(v, 10.0, 5.0, 1.0 / 60.0)
    assert math.isclose(v, 10.0, rel_tol=1e-3)


def test_viewer_diagonal_speed_is_normalized() -> None:
    viewer = Viewer(speed=100.0)
    viewer.update(1.0, dx=1.0, dy=1.0)
    assert math.isclose(math.hypot(viewer.x, viewer.y), 100.0, rel_tol=1e-9)
    viewer.update(0.5, dx=-5.0, dy=0.0)
    assert math.isclose(viewer.x, 100.0 / math.sqrt(2) - 50.0, rel_tol=1e-9)


def test_camera_follows_target() -> None:
    cam = FollowCamera(smooth_k=8.0, half_height=100.0)
    cam.snap(0.0, 0.0)
    for _ in range(120):
        cam.update(1.0 / 60.0, (50.0, -20.0))
    assert math.isclose(cam.x, 50.0, rel_tol=1e-3)
    assert math.isclose(cam.y, -20.0, rel_tol=1e-3)
