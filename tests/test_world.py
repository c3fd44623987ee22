"""Tests for wiring chunks into the physics world and renderer."""
from __future__ import annotations

from terrain2d.world.chunk import ChunkState
from terrain2d.world.grid import CellSize, ChunkPosition, ChunkSize
from terrain2d.world.params import TerrainParams
from terrain2d.world.world import TerrainWorld

PARAMS = TerrainParams(chunk_size=ChunkSize(4, 4), cell_size=CellSize(8, 8), threshold=0.2)


class ConstantSampler:
    def __init__(self, value: float) -> None:
        self.value = value

    def sample(self, x: float, y: float) -> float:
        return self.value


class FakeRenderer:
    def __init__(self) -> None:
        self.uploaded: list[tuple[float, float]] = []
        self.released: list[object] = []
        self.drawn: list[object] = []

    def upload_chunk(self, corner, mesh):
        self.uploaded.append(corner)
        return {"corner": corner, "triangles": mesh.triangle_count}

    def release_chunk(self, gpu) -> None:
        self.released.append(gpu)

    def draw_chunk(self, gpu) -> None:
        self.drawn.append(gpu)


def test_spawned_chunks_get_bodies_and_gpu_meshes() -> None:
    renderer = FakeRenderer()
    world = TerrainWorld(PARAMS, renderer=renderer, sampler=ConstantSampler(1.0))
    world.update(0.0, 0.0)
    assert len(world.physics) == 9
    assert len(world.instances) == 9
    assert (0.0, 32.0) in renderer.uploaded
    world.draw(renderer)
    assert len(renderer.drawn) == 9
    assert all(gpu["triangles"] == 32 for gpu in renderer.drawn)


def test_solid_field_collides_everywhere_in_range() -> None:
    world = TerrainWorld(PARAMS, sampler=ConstantSampler(1.0))
    world.update(0.0, 0.0)
    assert world.is_solid(1.0, 1.0)
    assert world.is_solid(-20.0, -20.0)
    assert not world.is_solid(500.0, 500.0)


def test_empty_field_never_collides() -> None:
    world = TerrainWorld(PARAMS, sampler=ConstantSampler(-1.0))
    world.update(0.0, 0.0)
    assert len(world.physics) == 9
    assert not world.is_solid(1.0, 1.0)


def test_teardown_disables_then_frees_resources() -> None:
    renderer = FakeRenderer()
    world = TerrainWorld(PARAMS, renderer=renderer, sampler=ConstantSampler(1.0))
    world.update(0.0, 0.0)
    far = PARAMS.chunk_world_size()[0] * 10

    res = world.update(far, 0.0)
    assert len(res.retired) == 9
    assert len(world.physics.marked) == 9
    assert len(world.instances) == 9  # only the new neighborhood is drawn
    assert renderer.released == []

    res = world.update(far, 0.0)
    assert len(res.released) == 9
    assert len(world.physics) == 9
    assert len(renderer.released) == 9
    assert world.stats()["pending_teardown"] == 0


def test_shutdown_releases_everything() -> None:
    renderer = FakeRenderer()
    world = TerrainWorld(PARAMS, renderer=renderer, sampler=ConstantSampler(1.0))
    world.update(0.0, 0.0)
    world.update(PARAMS.chunk_world_size()[0] * 10, 0.0)
    world.shutdown()
    assert len(world.physics) == 0
    assert len(renderer.released) == 18
    assert world.instances == {}
    assert world.cm.positions_in(ChunkState.INSTANTIATED) == []
    assert world.cm.state(ChunkPosition(0, 0)) is ChunkState.DATA_READY


def test_shutdown_with_prefetch_worker_releases_everything() -> None:
    renderer = FakeRenderer()
    world = TerrainWorld(PARAMS, renderer=renderer, sampler=ConstantSampler(1.0), prefetch_margin=1)
    world.update(0.0, 0.0)
    world.cm.wait_idle()
    world.shutdown()
    assert world.cm.worker is None
    assert len(world.physics) == 0
    assert len(renderer.released) == 9
