"""Tests for chunk sample generation and storage."""
from __future__ import annotations

import numpy as np
import pytest

from terrain2d.world.chunk_data import ChunkData
from terrain2d.world.grid import CellSize, ChunkPosition, ChunkSize
from terrain2d.world.noise import NoiseConfig, ScalarField


class PlaneSampler:
    """Per-point sampler with an exact, position-revealing value."""

    def __init__(self) -> None:
        self.calls: list[tuple[float, float]] = []

    def sample(self, x: float, y: float) -> float:
        self.calls.append((x, y))
        return x + 100.0 * y


def test_buffer_has_one_more_sample_than_cells_per_axis() -> None:
    size = ChunkSize(4, 2)
    data = ChunkData.generate(ChunkPosition(0, 0), size, CellSize(8, 8), PlaneSampler())
    assert data.samples.shape == (15,)
    assert data.as_grid().shape == (3, 5)


def test_corners_are_sampled_downward_from_world_corner() -> None:
    size = ChunkSize(4, 2)
    cell = CellSize(8, 8)
    sampler = PlaneSampler()
    pos = ChunkPosition(1, -1)
    data = ChunkData.generate(pos, size, cell, sampler)
    assert pos.to_world_corner(size, cell) == (32.0, 0.0)
    assert len(sampler.calls) == 15
    assert data.get_at(0, 0) == 32.0
    assert data.get_at(2, 1) == 48.0 + 100.0 * -8.0
    assert data.get_at(4, 2) == 64.0 + 100.0 * -16.0
    # Row-major layout: y * (width + 1) + x
    assert data.samples[1 * 5 + 2] == data.get_at(2, 1)


def test_out_of_range_reads_raise() -> None:
    data = ChunkData(ChunkSize(2, 2), np.zeros(9, dtype=np.float32))
    for x, y in [(-1, 0), (3, 0), (0, 3), (0, -1)]:
        with pytest.raises(IndexError):
            data.get_at(x, y)


def test_sample_count_is_validated() -> None:
    with pytest.raises(ValueError):
        ChunkData(ChunkSize(2, 2), np.zeros(4, dtype=np.float32))


def test_samples_are_read_only() -> None:
    data = ChunkData(ChunkSize(1, 1), np.zeros(4, dtype=np.float32))
    with pytest.raises(ValueError):
        data.samples[0] = 1.0


def test_generation_is_deterministic() -> None:
    field = ScalarField(42)
    size = ChunkSize(8, 8)
    cell = CellSize(8, 8)
    a = ChunkData.generate(ChunkPosition(-3, 2), size, cell, field)
    b = ChunkData.generate(ChunkPosition(-3, 2), size, cell, ScalarField(42))
    assert a == b
    assert a.samples.tobytes() == b.samples.tobytes()


def test_vectorized_and_per_point_generation_agree() -> None:
    field = ScalarField(9, NoiseConfig(scale=0.02, octaves=3), mode="fast")
    size = ChunkSize(6, 5)
    cell = CellSize(8, 4)
    pos = ChunkPosition(2, -1)
    fast = ChunkData.generate(pos, size, cell, field)
    slow = ChunkData.generate_with(pos, size, cell, field.sample)
    assert fast == slow


def test_neighbor_chunks_share_edge_samples() -> None:
    field = ScalarField(3)
    size = ChunkSize(4, 4)
    cell = CellSize(8, 8)
    left = ChunkData.generate(ChunkPosition(0, 0), size, cell, field).as_grid()
    right = ChunkData.generate(ChunkPosition(1, 0), size, cell, field).as_grid()
    assert np.array_equal(left[:, -1], right[:, 0])
