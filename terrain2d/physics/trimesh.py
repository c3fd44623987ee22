from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Set, Tuple

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class StaticTrimesh:
    """Static collision body built from a chunk's triangle list."""

    translation: Tuple[float, float]
    vertices: np.ndarray  # (N,2) float32, body-local
    triangles: np.ndarray  # (T,3) uint32
    enabled: bool = True
    _bounds: Optional[Tuple[float, float, float, float]] = field(default=None, repr=False)

    def world_triangles(self) -> np.ndarray:
        """(T, 3, 2) float64 triangle corners in world space."""
        tri = self.vertices[self.triangles].astype(np.float64)
        return tri + np.array(self.translation, dtype=np.float64)

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        if self._bounds is None and len(self.vertices):
            lo = self.vertices.min(axis=0).astype(np.float64) + self.translation
            hi = self.vertices.max(axis=0).astype(np.float64) + self.translation
            self._bounds = (float(lo[0]), float(lo[1]), float(hi[0]), float(hi[1]))
        return self._bounds

    def contains_point(self, x: float, y: float) -> bool:
        b = self.bounds()
        if b is None or not (b[0] <= x <= b[2] and b[1] <= y <= b[3]):
            return False
        tri = self.world_triangles()
        a, bb, c = tri[:, 0], tri[:, 1], tri[:, 2]

        def _cross(p: np.ndarray, q: np.ndarray) -> np.ndarray:
            return (p[:, 0] - x) * (q[:, 1] - y) - (q[:, 0] - x) * (p[:, 1] - y)

        d1 = _cross(a, bb)
        d2 = _cross(bb, c)
        d3 = _cross(c, a)
        has_neg = (d1 < 0) | (d2 < 0) | (d3 < 0)
        has_pos = (d1 > 0) | (d2 > 0) | (d3 > 0)
        return bool(np.any(~(has_neg & has_pos)))


def create_static_trimesh(vertices: np.ndarray, indices: np.ndarray, translation: Tuple[float, float] = (0.0, 0.0)) -> StaticTrimesh:
    v = np.asarray(vertices, dtype=np.float32).reshape(-1, 2)
    i = np.asarray(indices, dtype=np.uint32).reshape(-1, 3)
    return StaticTrimesh(translation=(float(translation[0]), float(translation[1])), vertices=v, triangles=i)


class PhysicsWorld:
    """Minimal body set for static chunk colliders.

    Removal is two-phase: ``mark_for_removal`` disables a body at once,
    ``remove`` drops it later (e.g. at the start of the next tick).
    """

    def __init__(self) -> None:
        self.bodies: Dict[int, StaticTrimesh] = {}
        self.marked: Set[int] = set()
        self._ids = itertools.count(1)

    def __len__(self) -> int:
        return len(self.bodies)

    def add_static_trimesh(self, vertices: np.ndarray, indices: np.ndarray, translation: Tuple[float, float]) -> int:
        body_id = next(self._ids)
        self.bodies[body_id] = create_static_trimesh(vertices, indices, translation)
        return body_id

    def mark_for_removal(self, body_id: int) -> None:
        self.bodies[body_id].enabled = False
        self.marked.add(body_id)

    def remove(self, body_id: int) -> None:
        del self.bodies[body_id]
        self.marked.discard(body_id)
        logger.debug("Removed body %d", body_id)

    def contains_point(self, x: float, y: float) -> bool:
        """True if any enabled body covers the world point (edges included)."""
        return any(body.enabled and body.contains_point(x, y) for body in self.bodies.values())
