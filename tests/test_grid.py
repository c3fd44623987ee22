"""Tests for chunk / cell coordinate conversions."""
from __future__ import annotations

import pytest

from terrain2d.world.grid import CellPosition, CellSize, ChunkPosition, ChunkSize


def test_chunk_positions_around_origin() -> None:
    coords = [(-1, 1), (0, 1), (1, 1), (1, 0), (1, -1), (0, -1), (-1, -1), (-1, 0)]
    chunk_size = ChunkSize(10, 10)
    cell_size = CellSize(1, 1)
    for x, y in coords:
        world = (x * 10.0, y * 10.0)
        assert ChunkPosition.from_world(chunk_size, cell_size, world) == ChunkPosition(x, y)

    cell_size = CellSize(8, 8)
    world = (10 * 8 + 16.0, 10 * 8 + 16.0)
    assert ChunkPosition.from_world(chunk_size, cell_size, world) == ChunkPosition(1, 1)


def test_chunk_position_far() -> None:
    chunk_size = ChunkSize(10, 10)
    cell_size = CellSize(1, 1)
    world = (10 * -5.0 + 4.0, 10 * 1.0 + 4.0)
    assert ChunkPosition.from_world(chunk_size, cell_size, world) == ChunkPosition(-5, 1)


def test_origin_belongs_to_origin_chunk() -> None:
    assert ChunkPosition.from_world(ChunkSize(64, 64), CellSize(8, 8), (0.0, 0.0)) == ChunkPosition(0, 0)
    # Just inside the half-chunk boundary on either side.
    assert ChunkPosition.from_world(ChunkSize(64, 64), CellSize(8, 8), (255.9, -255.9)) == ChunkPosition(0, 0)
    assert ChunkPosition.from_world(ChunkSize(64, 64), CellSize(8, 8), (256.0, -256.0)) == ChunkPosition(1, -1)


def test_center_round_trip() -> None:
    for chunk_size, cell_size in [(ChunkSize(64, 64), CellSize(8, 8)), (ChunkSize(3, 5), CellSize(7, 2))]:
        for x in range(-6, 7):
            for y in range(-6, 7):
                p = ChunkPosition(x, y)
                center = p.to_world_center(chunk_size, cell_size)
                assert ChunkPosition.from_world(chunk_size, cell_size, center) == p


def test_world_corner_is_top_left_with_y_up() -> None:
    chunk_size = ChunkSize(64, 32)
    cell_size = CellSize(8, 4)
    assert ChunkPosition(0, 0).to_world_corner(chunk_size, cell_size) == (0.0, 128.0)
    assert ChunkPosition(-2, -1).to_world_corner(chunk_size, cell_size) == (-1024.0, 0.0)


def test_cell_positions_easy() -> None:
    chunk_size = ChunkSize(64, 64)
    cell_size = CellSize(8, 8)
    cases = [
        ((8.0, 8.0), (1, 1)),
        ((-8.0, 8.0), (-1, 1)),
        ((16.0, 16.0), (2, 2)),
        ((-16.0, -16.0), (-2, -2)),
        ((512.0, 512.0), (0, 0)),
        ((496.0, 496.0), (-2, -2)),
    ]
    for world, expected in cases:
        assert CellPosition.from_world(chunk_size, cell_size, world) == CellPosition(*expected)


def test_cell_position_rounding() -> None:
    chunk_size = ChunkSize(64, 64)
    cell_size = CellSize(8, 8)
    cases = [
        ((9.0, 10.0), (1, 1)),
        ((6.0, 7.0), (1, 1)),
        ((3.0, 3.0), (0, 0)),
        ((-3.0, -3.0), (0, 0)),
        ((-15.0, 9.0), (-2, 1)),
    ]
    for world, expected in cases:
        assert CellPosition.from_world(chunk_size, cell_size, world) == CellPosition(*expected)


def test_cell_position_ties_round_away_from_zero() -> None:
    chunk_size = ChunkSize(64, 64)
    cell_size = CellSize(8, 8)
    assert CellPosition.from_world(chunk_size, cell_size, (4.0, -4.0)) == CellPosition(1, -1)
    assert CellPosition.from_world(chunk_size, cell_size, (-4.0, 4.0)) == CellPosition(-1, 1)
    assert CellPosition.from_world(chunk_size, cell_size, (20.0, 12.0)) == CellPosition(3, 2)


def test_position_arithmetic_and_order() -> None:
    a = ChunkPosition(1, -2)
    b = ChunkPosition(-3, 5)
    assert a + b == ChunkPosition(-2, 3)
    assert a - b == ChunkPosition(4, -7)
    assert CellPosition(1, 1) + CellPosition(2, -3) == CellPosition(3, -2)
    assert CellPosition(1, 1) - CellPosition(2, -3) == CellPosition(-1, 4)
    assert sorted([ChunkPosition(1, 0), ChunkPosition(0, 5), ChunkPosition(0, -1)]) == [
        ChunkPosition(0, -1),
        ChunkPosition(0, 5),
        ChunkPosition(1, 0),
    ]
    assert len({ChunkPosition(2, 2), ChunkPosition.of((2, 2))}) == 1


def test_sizes_reject_non_positive_dimensions() -> None:
    with pytest.raises(ValueError):
        ChunkSize(0, 4)
    with pytest.raises(ValueError):
        CellSize(8, -1)


def test_size_helpers() -> None:
    assert ChunkSize(64, 32).world_size(CellSize(8, 4)) == (512.0, 128.0)
    assert ChunkSize(64, 32).center_offset() == (32.0, -16.0)
    assert ChunkSize(2, 3).samples == 12
    assert CellPosition(-2, 3).to_world(CellSize(8, 4)) == (-16.0, 12.0)
