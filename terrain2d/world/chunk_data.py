from __future__ import annotations

from typing import Callable

import numpy as np

from terrain2d.world.grid import CellSize, ChunkPosition, ChunkSize


class ChunkData:
    """Corner samples of one chunk.

    Holds ``(width + 1) * (height + 1)`` float32 samples, row-major: the
    sample for corner ``(x, y)`` lives at ``y * (width + 1) + x``. Neighboring
    cells share their corner samples. The buffer is read-only once built.
    """

    def __init__(self, size: ChunkSize, samples: np.ndarray) -> None:
        arr = np.array(samples, dtype=np.float32).reshape(-1)
        if arr.size != size.samples:
            raise ValueError(f"expected {size.samples} samples for chunk {size.width}x{size.height}, got {arr.size}")
        arr.setflags(write=False)
        self.size = size
        self._data = arr

    @property
    def samples(self) -> np.ndarray:
        """Flat row-major sample buffer (read-only)."""
        return self._data

    def as_grid(self) -> np.ndarray:
        """Samples as a (height + 1, width + 1) array indexed [y, x]."""
        return self._data.reshape(self.size.height + 1, self.size.width + 1)

    def get_at(self, x: int, y: int) -> float:
        if not (0 <= x <= self.size.width and 0 <= y <= self.size.height):
            raise IndexError(f"corner ({x}, {y}) outside chunk {self.size.width}x{self.size.height}")
        return float(self._data[y * (self.size.width + 1) + x])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChunkData):
            return NotImplemented
        return self.size == other.size and np.array_equal(self._data, other._data)

    def __repr__(self) -> str:
        return f"ChunkData(size={self.size.width}x{self.size.height})"

    @staticmethod
    def corner_coords(position: ChunkPosition, size: ChunkSize, cell_size: CellSize) -> tuple[np.ndarray, np.ndarray]:
        """World coordinates of every corner sample, as two (height + 1, width + 1) grids."""
        x0, y0 = position.to_world_corner(size, cell_size)
        xs = x0 + np.arange(size.width + 1, dtype=np.float64) * cell_size.width
        ys = y0 - np.arange(size.height + 1, dtype=np.float64) * cell_size.height
        return np.meshgrid(xs, ys, indexing="xy")

    @classmethod
    def generate_with(
        cls,
        position: ChunkPosition,
        size: ChunkSize,
        cell_size: CellSize,
        fn: Callable[[float, float], float],
    ) -> "ChunkData":
        """Fill every corner by calling ``fn(world_x, world_y)`` once per sample."""
        grid_x, grid_y = cls.corner_coords(position, size, cell_size)
        h = np.zeros(grid_x.shape, dtype=np.float32)
        for j in range(grid_x.shape[0]):
            for i in range(grid_x.shape[1]):
                h[j, i] = float(fn(float(grid_x[j, i]), float(grid_y[j, i])))
        return cls(size, h)

    @classmethod
    def generate(cls, position: ChunkPosition, size: ChunkSize, cell_size: CellSize, sampler) -> "ChunkData":
        """Sample ``sampler`` at every corner of the chunk at ``position``.

        Samplers exposing a vectorized ``grid(x, y)`` are called once per
        chunk; otherwise ``sample(x, y)`` is called per corner.
        """
        if hasattr(sampler, "grid"):
            grid_x, grid_y = cls.corner_coords(position, size, cell_size)
            return cls(size, np.asarray(sampler.grid(grid_x, grid_y), dtype=np.float32))
        return cls.generate_with(position, size, cell_size, sampler.sample)
