from __future__ import annotations

import numpy as np

from terrain2d.util.math import exp_smooth


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


class Viewer:
    """The tracked entity driving chunk loading; moves freely in the XY plane."""

    def __init__(self, speed: float, x: float = 0.0, y: float = 0.0) -> None:
        self.speed = float(speed)
        self.x = float(x)
        self.y = float(y)

    def update(self, dt: float, *, dx: float, dy: float) -> None:
        """Move by input direction.

        Args:
            dx: -1..1 (left..right)
            dy: -1..1 (down..up)
        """
        dx = _clamp(float(dx), -1.0, 1.0)
        dy = _clamp(float(dy), -1.0, 1.0)
        n = float(np.hypot(dx, dy))
        if n > 1.0:
            dx, dy = dx / n, dy / n
        self.x += dx * self.speed * dt
        self.y += dy * self.speed * dt

    def position(self) -> tuple[float, float]:
        return self.x, self.y


class FollowCamera:
    """2D camera that trails a target with exponential smoothing."""

    def __init__(self, smooth_k: float, half_height: float) -> None:
        self.smooth_k = float(smooth_k)
        self.half_height = float(half_height)
        self.x = 0.0
        self.y = 0.0

    def snap(self, x: float, y: float) -> None:
        self.x = float(x)
        self.y = float(y)

    def update(self, dt: float, target: tuple[float, float]) -> None:
        self.x = exp_smooth(self.x, float(target[0]), self.smooth_k, dt)
        self.y = exp_smooth(self.y, float(target[1]), self.smooth_k, dt)
