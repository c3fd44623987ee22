"""Chunk / cell coordinate algebra.

The chunk grid is centered on the world origin: chunk (0, 0) spans half a
chunk in every direction around (0, 0). Y points up in world space; rows of
cells inside a chunk extend downward from its top-left corner.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple


def _round_half_away(v: float) -> int:
    # Ties round away from zero (2.5 -> 3, -2.5 -> -3), unlike builtin round().
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


@dataclass(frozen=True, order=True)
class ChunkSize:
    """The size of a chunk in cells."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ValueError(f"chunk size must be positive, got {self.width}x{self.height}")

    @classmethod
    def of(cls, t: Iterable[int]) -> "ChunkSize":
        w, h = t
        return cls(int(w), int(h))

    def world_size(self, cell_size: "CellSize") -> Tuple[float, float]:
        return float(self.width * cell_size.width), float(self.height * cell_size.height)

    def center_offset(self) -> Tuple[float, float]:
        """Offset (in cells) from the top-left corner to the chunk center."""
        return self.width / 2.0, self.height / -2.0

    @property
    def samples(self) -> int:
        return (self.width + 1) * (self.height + 1)


@dataclass(frozen=True, order=True)
class CellSize:
    """The size of each cell of a chunk, in world units."""

    width: int
    height: int

    def __post_init__(self) -> None:
        if int(self.width) <= 0 or int(self.height) <= 0:
            raise ValueError(f"cell size must be positive, got {self.width}x{self.height}")

    @classmethod
    def of(cls, t: Iterable[int]) -> "CellSize":
        w, h = t
        return cls(int(w), int(h))


@dataclass(frozen=True, order=True)
class ChunkPosition:
    """Address of a chunk in the infinite chunk grid. (0, 0) contains the world origin."""

    x: int
    y: int

    @classmethod
    def of(cls, t: Iterable[int]) -> "ChunkPosition":
        x, y = t
        return cls(int(x), int(y))

    @classmethod
    def from_world(cls, chunk_size: ChunkSize, cell_size: CellSize, world: Tuple[float, float]) -> "ChunkPosition":
        """Chunk containing a world point.

        The point is pushed half a chunk away from the origin before dividing,
        then truncated toward zero, so chunk boundaries sit halfway between
        chunk centers.
        """
        sw, sh = chunk_size.world_size(cell_size)
        wx, wy = float(world[0]), float(world[1])
        wx += math.copysign(1.0, wx) * sw / 2.0
        wy += math.copysign(1.0, wy) * sh / 2.0
        return cls(int(wx / sw), int(wy / sh))

    def to_world_center(self, chunk_size: ChunkSize, cell_size: CellSize) -> Tuple[float, float]:
        sw, sh = chunk_size.world_size(cell_size)
        return float(self.x * sw), float(self.y * sh)

    def to_world_corner(self, chunk_size: ChunkSize, cell_size: CellSize) -> Tuple[float, float]:
        """Top-left corner in world space; the placement origin of the chunk mesh."""
        tl_x = self.x * chunk_size.width * cell_size.width
        tl_y = (self.y + 1) * chunk_size.height * cell_size.height
        return float(tl_x), float(tl_y)

    def chebyshev(self, other: "ChunkPosition") -> int:
        return max(abs(self.x - other.x), abs(self.y - other.y))

    def __add__(self, rhs: "ChunkPosition") -> "ChunkPosition":
        return ChunkPosition(self.x + rhs.x, self.y + rhs.y)

    def __sub__(self, rhs: "ChunkPosition") -> "ChunkPosition":
        return ChunkPosition(self.x - rhs.x, self.y - rhs.y)

    def __repr__(self) -> str:
        return f"({self.x}, {self.y})"


@dataclass(frozen=True, order=True)
class CellPosition:
    """Address of a cell inside a chunk, origin at the chunk center."""

    x: int
    y: int

    @classmethod
    def of(cls, t: Iterable[int]) -> "CellPosition":
        x, y = t
        return cls(int(x), int(y))

    @classmethod
    def from_world(cls, chunk_size: ChunkSize, cell_size: CellSize, world: Tuple[float, float]) -> "CellPosition":
        """Nearest cell to a world point, relative to the center of the chunk containing it.

        Halfway cases round away from zero.
        """
        chunk = ChunkPosition.from_world(chunk_size, cell_size, world)
        cx, cy = chunk.to_world_center(chunk_size, cell_size)
        ox = (float(world[0]) - cx) / cell_size.width
        oy = (float(world[1]) - cy) / cell_size.height
        return cls(_round_half_away(ox), _round_half_away(oy))

    def to_world(self, cell_size: CellSize) -> Tuple[float, float]:
        return float(self.x * cell_size.width), float(self.y * cell_size.height)

    def __add__(self, rhs: "CellPosition") -> "CellPosition":
        return CellPosition(self.x + rhs.x, self.y + rhs.y)

    def __sub__(self, rhs: "CellPosition") -> "CellPosition":
        return CellPosition(self.x - rhs.x, self.y - rhs.y)
