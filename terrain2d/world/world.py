from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from terrain2d.physics.trimesh import PhysicsWorld
from terrain2d.world.chunk import ChunkMeshData, ChunkState
from terrain2d.world.chunk_manager import ChunkManager, StepResult
from terrain2d.world.grid import ChunkPosition
from terrain2d.world.params import TerrainParams

logger = logging.getLogger(__name__)


@dataclass
class ChunkInstance:
    """Engine-side handle of an instantiated chunk."""

    position: ChunkPosition
    corner: Tuple[float, float]
    body_id: int
    gpu: Optional[object] = None


class TerrainWorld:
    """Feeds chunks from a ChunkManager into the physics world and, if present, a renderer.

    Acts as the manager's sink: every spawned chunk gets a static trimesh
    body and a GPU mesh; teardown disables the body immediately and frees
    both on release.
    """

    def __init__(
        self,
        params: TerrainParams,
        *,
        renderer=None,
        physics: Optional[PhysicsWorld] = None,
        sampler=None,
        load_distance: int = 1,
        prefetch_margin: int = 0,
    ) -> None:
        self.params = params
        self.renderer = renderer
        self.physics = physics if physics is not None else PhysicsWorld()
        self.instances: Dict[ChunkPosition, ChunkInstance] = {}
        self.cm = ChunkManager(
            params=params,
            sink=self,
            sampler=sampler,
            load_distance=load_distance,
            prefetch_margin=prefetch_margin,
        )

    # --- ChunkSink ---
    def spawn(self, position: ChunkPosition, corner: Tuple[float, float], mesh: ChunkMeshData) -> ChunkInstance:
        body_id = self.physics.add_static_trimesh(mesh.vertices, mesh.indices, corner)
        gpu = self.renderer.upload_chunk(corner, mesh) if self.renderer is not None else None
        inst = ChunkInstance(position=position, corner=corner, body_id=body_id, gpu=gpu)
        self.instances[position] = inst
        return inst

    def mark_for_teardown(self, position: ChunkPosition, handle: ChunkInstance) -> None:
        self.physics.mark_for_removal(handle.body_id)
        self.instances.pop(position, None)

    def release(self, position: ChunkPosition, handle: ChunkInstance) -> None:
        self.physics.remove(handle.body_id)
        if handle.gpu is not None and self.renderer is not None:
            self.renderer.release_chunk(handle.gpu)
        logger.debug("Despawned chunk %r body=%d", position, handle.body_id)

    # --- Per-tick ---
    def update(self, x: float, y: float) -> StepResult:
        return self.cm.step((x, y))

    def draw(self, renderer) -> None:
        for inst in self.instances.values():
            if inst.gpu is not None:
                renderer.draw_chunk(inst.gpu)

    def is_solid(self, x: float, y: float) -> bool:
        return self.physics.contains_point(x, y)

    def stats(self) -> Dict[str, int]:
        return {
            "cached": len(self.cm),
            "live": self.cm.count_in(ChunkState.INSTANTIATED),
            "pending_teardown": self.cm.count_in(ChunkState.PENDING_TEARDOWN),
            "generated": self.cm.generated,
            "bodies": len(self.physics),
        }

    def shutdown(self) -> None:
        try:
            self.cm.shutdown()
        finally:
            self.cm.release_all()
            self.instances.clear()
