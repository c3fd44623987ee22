from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Set, Tuple

from terrain2d.world.chunk import Chunk, ChunkMeshData, ChunkState, TeardownNotice
from terrain2d.world.chunk_data import ChunkData
from terrain2d.world.grid import ChunkPosition
from terrain2d.world.marching_squares import marching_squares
from terrain2d.world.params import TerrainParams

logger = logging.getLogger(__name__)


class ChunkSink(Protocol):
    """Engine-side collaborator that owns instantiated chunks.

    Handles returned by ``spawn`` are opaque to the manager: they are stored
    and handed back at teardown, never inspected.
    """

    def spawn(self, position: ChunkPosition, corner: Tuple[float, float], mesh: ChunkMeshData) -> Any: ...

    def mark_for_teardown(self, position: ChunkPosition, handle: Any) -> None: ...

    def release(self, position: ChunkPosition, handle: Any) -> None: ...


def neighborhood_offsets(distance: int) -> Tuple[ChunkPosition, ...]:
    """Offsets of a square neighborhood, top row first, left to right.

    For ``distance=1``: (-1,1) (0,1) (1,1) (-1,0) (0,0) (1,0) (-1,-1) (0,-1) (1,-1).
    """
    d = int(distance)
    return tuple(ChunkPosition(dx, dy) for dy in range(d, -d - 1, -1) for dx in range(-d, d + 1))


def build_chunk_mesh(position: ChunkPosition, params: TerrainParams, sampler) -> ChunkMeshData:
    """Sample one chunk and contour it. Pure; safe to call from worker threads."""
    data = ChunkData.generate(position, params.chunk_size, params.cell_size, sampler)
    return marching_squares(data, params.chunk_size, params.cell_size, params.threshold, interpolate=params.interpolate)


_Result = Tuple[ChunkPosition, Optional[ChunkMeshData], Optional[BaseException]]


class ChunkWorker(threading.Thread):
    def __init__(self, task_q: "queue.Queue[ChunkPosition]", out_q: "queue.Queue[_Result]", *, params: TerrainParams, sampler) -> None:
        super().__init__(daemon=True, name="chunk-worker")
        self.task_q = task_q
        self.out_q = out_q
        self.params = params
        self.sampler = sampler
        self._halt = threading.Event()

    def stop(self) -> None:
        self._halt.set()

    def run(self) -> None:
        while not self._halt.is_set():
            try:
                pos = self.task_q.get(timeout=0.1)
            except queue.Empty:
                continue
            try:
                mesh = build_chunk_mesh(pos, self.params, self.sampler)
                self.out_q.put((pos, mesh, None))
            except Exception as e:
                logger.exception("Generation failed for %r", pos)
                self.out_q.put((pos, None, e))
            finally:
                self.task_q.task_done()


@dataclass
class StepResult:
    tracked: Optional[ChunkPosition]
    loaded: List[ChunkPosition] = field(default_factory=list)
    retired: List[TeardownNotice] = field(default_factory=list)
    released: List[ChunkPosition] = field(default_factory=list)


class ChunkManager:
    """Decides which chunks exist around a tracked position.

    ``chunks`` caches generated meshes for the lifetime of the manager: a
    position is generated at most once, then instantiated, torn down and
    re-instantiated from the cache. Each position has at most one live
    instance.

    Not thread-safe: the ``ensure_loaded`` / ``reap_out_of_range`` /
    ``finalize_teardown`` steps are expected to be driven from one thread.
    With ``prefetch_margin > 0`` a background worker generates the ring just
    beyond the load distance; its results are only inserted on the calling
    thread.
    """

    def __init__(
        self,
        *,
        params: TerrainParams,
        sink: ChunkSink,
        sampler=None,
        load_distance: int = 1,
        prefetch_margin: int = 0,
    ) -> None:
        if load_distance < 0:
            raise ValueError(f"load_distance must be >= 0, got {load_distance}")
        if prefetch_margin < 0:
            raise ValueError(f"prefetch_margin must be >= 0, got {prefetch_margin}")
        self.params = params
        self.sink = sink
        self.sampler = sampler if sampler is not None else params.make_field()
        self.load_distance = int(load_distance)
        self.prefetch_margin = int(prefetch_margin)
        self.offsets = neighborhood_offsets(self.load_distance)

        self.chunks: Dict[ChunkPosition, Chunk] = {}
        self.generated = 0
        # positions whose sink handle is live or awaiting release
        self.held: Set[ChunkPosition] = set()

        self.pending: Set[ChunkPosition] = set()
        self.worker: Optional[ChunkWorker] = None
        if self.prefetch_margin > 0:
            self.task_q: "queue.Queue[ChunkPosition]" = queue.Queue()
            self.out_q: "queue.Queue[_Result]" = queue.Queue()
            self.worker = ChunkWorker(self.task_q, self.out_q, params=params, sampler=self.sampler)
            self.worker.start()

    def shutdown(self) -> None:
        if self.worker is not None:
            self.worker.stop()
            self.worker.join(timeout=1.0)
            self.worker = None
            self.pending.clear()

    # --- Queries ---
    def __len__(self) -> int:
        return len(self.chunks)

    def __contains__(self, position: object) -> bool:
        return position in self.chunks

    def ordered(self) -> List[Tuple[ChunkPosition, Chunk]]:
        return sorted(self.chunks.items(), key=lambda kv: kv[0])

    def state(self, position: ChunkPosition) -> ChunkState:
        chunk = self.chunks.get(position)
        return ChunkState.UNKNOWN if chunk is None else chunk.state

    def positions_in(self, state: ChunkState) -> List[ChunkPosition]:
        return sorted(pos for pos, chunk in self.chunks.items() if chunk.state is state)

    def count_in(self, state: ChunkState) -> int:
        if state in (ChunkState.INSTANTIATED, ChunkState.PENDING_TEARDOWN):
            return sum(1 for pos in self.held if self.chunks[pos].state is state)
        return sum(1 for chunk in self.chunks.values() if chunk.state is state)

    def _held_in(self, state: ChunkState) -> List[Tuple[ChunkPosition, Chunk]]:
        return sorted(((pos, self.chunks[pos]) for pos in self.held if self.chunks[pos].state is state), key=lambda kv: kv[0])

    def chunk_at_world(self, x: float, y: float) -> ChunkPosition:
        return ChunkPosition.from_world(self.params.chunk_size, self.params.cell_size, (x, y))

    def neighborhood(self, center: ChunkPosition) -> List[ChunkPosition]:
        return [center + d for d in self.offsets]

    # --- Generation ---
    def _insert(self, position: ChunkPosition, mesh: ChunkMeshData) -> Chunk:
        chunk = Chunk(position=position, mesh=mesh)
        self.chunks[position] = chunk
        self.generated += 1
        return chunk

    def _accept(self, item: _Result) -> Optional[ChunkPosition]:
        pos, mesh, err = item
        self.pending.discard(pos)
        if err is not None:
            raise RuntimeError(f"chunk generation failed for {pos!r}") from err
        if pos in self.chunks:
            return None
        self._insert(pos, mesh)
        return pos

    def _await(self, position: ChunkPosition) -> None:
        while position in self.pending:
            if self.worker is None or not self.worker.is_alive():
                raise RuntimeError(f"chunk worker stopped while {position!r} was pending")
            try:
                item = self.out_q.get(timeout=0.1)
            except queue.Empty:
                continue
            self._accept(item)

    def _get_or_generate(self, position: ChunkPosition) -> Chunk:
        chunk = self.chunks.get(position)
        if chunk is not None:
            return chunk
        if position in self.pending:
            self._await(position)
            return self.chunks[position]
        return self._insert(position, build_chunk_mesh(position, self.params, self.sampler))

    def prefetch(self, tracked: Optional[ChunkPosition]) -> int:
        """Queue off-thread generation of the ring beyond the load distance."""
        if self.worker is None or tracked is None:
            return 0
        n = 0
        for d in neighborhood_offsets(self.load_distance + self.prefetch_margin):
            pos = tracked + d
            if pos in self.chunks or pos in self.pending:
                continue
            self.pending.add(pos)
            self.task_q.put(pos)
            n += 1
        return n

    def ingest_ready(self, max_items: Optional[int] = None) -> List[ChunkPosition]:
        """Move finished worker results into the cache as DATA_READY."""
        if self.worker is None:
            return []
        ready: List[ChunkPosition] = []
        while max_items is None or len(ready) < max_items:
            try:
                item = self.out_q.get_nowait()
            except queue.Empty:
                break
            pos = self._accept(item)
            if pos is not None:
                ready.append(pos)
        return ready

    def wait_idle(self) -> None:
        """Block until the worker has finished every queued position."""
        if self.worker is not None:
            self.task_q.join()

    # --- Lifecycle ---
    def instantiate(self, position: ChunkPosition) -> bool:
        """Hand the chunk at ``position`` to the sink. No-op if already live."""
        chunk = self._get_or_generate(position)
        if chunk.state is ChunkState.INSTANTIATED:
            return False
        if chunk.state is ChunkState.PENDING_TEARDOWN:
            logger.debug("Deferring %r until teardown completes", position)
            return False

        corner = position.to_world_corner(self.params.chunk_size, self.params.cell_size)
        handle = self.sink.spawn(position, corner, chunk.mesh)
        chunk.handle = handle
        chunk.state = ChunkState.INSTANTIATED
        self.held.add(position)
        logger.debug("Loading %r, handle=%r", position, handle)
        return True

    def ensure_loaded(self, tracked: Optional[ChunkPosition]) -> List[ChunkPosition]:
        """Instantiate every chunk of the tracked position's neighborhood."""
        if tracked is None:
            return []
        self.ingest_ready()
        loaded: List[ChunkPosition] = []
        for pos in self.neighborhood(tracked):
            if self.state(pos) in (ChunkState.INSTANTIATED, ChunkState.PENDING_TEARDOWN):
                continue
            if self.instantiate(pos):
                loaded.append(pos)
        return loaded

    def reap_out_of_range(self, tracked: Optional[ChunkPosition]) -> List[TeardownNotice]:
        """Mark live chunks outside the neighborhood for teardown; mesh data is kept."""
        if tracked is None:
            return []
        keep = set(self.neighborhood(tracked))
        notices: List[TeardownNotice] = []
        for pos, chunk in self._held_in(ChunkState.INSTANTIATED):
            if pos in keep:
                continue
            handle = chunk.handle
            self.sink.mark_for_teardown(pos, handle)
            chunk.retiring = handle
            chunk.handle = None
            chunk.state = ChunkState.PENDING_TEARDOWN
            logger.debug("Marking for teardown: pos=%r, handle=%r", pos, handle)
            notices.append(TeardownNotice(position=pos, handle=handle))
        return notices

    def finalize_teardown(self) -> List[ChunkPosition]:
        """Have the sink release marked chunks; they become DATA_READY again."""
        released: List[ChunkPosition] = []
        for pos, chunk in self._held_in(ChunkState.PENDING_TEARDOWN):
            self.sink.release(pos, chunk.retiring)
            logger.debug("Released pos=%r, handle=%r", pos, chunk.retiring)
            chunk.retiring = None
            chunk.state = ChunkState.DATA_READY
            self.held.discard(pos)
            released.append(pos)
        return released

    def release_all(self) -> List[ChunkPosition]:
        """Release every live or retiring handle at once; all chunks end up DATA_READY."""
        released: List[ChunkPosition] = []
        for pos in sorted(self.held):
            chunk = self.chunks[pos]
            handle = chunk.handle if chunk.state is ChunkState.INSTANTIATED else chunk.retiring
            self.sink.release(pos, handle)
            chunk.handle = None
            chunk.retiring = None
            chunk.state = ChunkState.DATA_READY
            self.held.discard(pos)
            released.append(pos)
        return released

    def evict_distant(self, tracked: ChunkPosition, keep_distance: int) -> List[ChunkPosition]:
        """Drop cached DATA_READY chunks farther than ``keep_distance`` (Chebyshev) from ``tracked``."""
        if keep_distance < self.load_distance:
            raise ValueError(f"keep_distance ({keep_distance}) must be >= load_distance ({self.load_distance})")
        evicted = [
            pos
            for pos, chunk in self.ordered()
            if chunk.state is ChunkState.DATA_READY and pos.chebyshev(tracked) > keep_distance
        ]
        for pos in evicted:
            del self.chunks[pos]
        if evicted:
            logger.debug("Evicted %d cached chunks", len(evicted))
        return evicted

    def step(self, world: Optional[Tuple[float, float]]) -> StepResult:
        """One tick: finish pending teardowns, load around ``world``, then reap."""
        released = self.finalize_teardown()
        tracked = None if world is None else self.chunk_at_world(world[0], world[1])
        loaded = self.ensure_loaded(tracked)
        retired = self.reap_out_of_range(tracked)
        self.prefetch(tracked)
        return StepResult(tracked=tracked, loaded=loaded, retired=retired, released=released)
