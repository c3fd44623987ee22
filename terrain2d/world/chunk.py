from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

import numpy as np

from terrain2d.world.grid import ChunkPosition


class ChunkMeshData:
    """Triangle list of one chunk, in chunk-local space.

    ``vertices`` is (N, 2) float32 with the origin at the chunk's top-left
    corner (X right, Y negative downward). ``indices`` is (N,) uint32 and
    references every vertex exactly once, three per triangle.
    """

    __slots__ = ("vertices", "indices")

    def __init__(self, vertices: np.ndarray, indices: np.ndarray) -> None:
        v = np.ascontiguousarray(vertices, dtype=np.float32).reshape(-1, 2)
        i = np.ascontiguousarray(indices, dtype=np.uint32).reshape(-1)
        if i.size % 3 != 0:
            raise ValueError(f"index count must be a multiple of 3, got {i.size}")
        v.setflags(write=False)
        i.setflags(write=False)
        self.vertices = v
        self.indices = i

    @classmethod
    def empty(cls) -> "ChunkMeshData":
        return cls(np.zeros((0, 2), dtype=np.float32), np.zeros((0,), dtype=np.uint32))

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)

    def triangles(self) -> np.ndarray:
        """(T, 3, 2) array of triangle corner positions."""
        return self.vertices[self.indices].reshape(-1, 3, 2)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChunkMeshData):
            return NotImplemented
        return np.array_equal(self.vertices, other.vertices) and np.array_equal(self.indices, other.indices)

    def __repr__(self) -> str:
        return f"ChunkMeshData(vertices={len(self.vertices)}, triangles={self.triangle_count})"


class ChunkState(enum.Enum):
    UNKNOWN = "unknown"  # no cache entry
    DATA_READY = "data_ready"  # mesh computed, not instantiated
    INSTANTIATED = "instantiated"  # handed to the engine, handle held
    PENDING_TEARDOWN = "pending_teardown"  # engine asked to release, awaiting confirmation


@dataclass
class Chunk:
    """A materialized chunk: cached mesh plus the engine-side handle, if any."""

    position: ChunkPosition
    mesh: ChunkMeshData
    state: ChunkState = ChunkState.DATA_READY
    handle: Optional[Any] = None
    # Handle being released while PENDING_TEARDOWN.
    retiring: Optional[Any] = field(default=None, repr=False)


@dataclass(frozen=True)
class TeardownNotice:
    position: ChunkPosition
    handle: Any
