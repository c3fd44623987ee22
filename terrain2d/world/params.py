from __future__ import annotations

from dataclasses import dataclass, field

from terrain2d.config import (
    DEFAULT_CELL_SIZE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_INTERPOLATE,
    DEFAULT_NOISE,
    DEFAULT_NOISE_SCALE,
    DEFAULT_OCTAVES,
    DEFAULT_SEED,
    DEFAULT_THRESHOLD,
)
from terrain2d.world.grid import CellSize, ChunkSize
from terrain2d.world.noise import NoiseConfig, ScalarField


@dataclass(frozen=True)
class TerrainParams:
    chunk_size: ChunkSize = field(default_factory=lambda: ChunkSize.of(DEFAULT_CHUNK_SIZE))
    cell_size: CellSize = field(default_factory=lambda: CellSize.of(DEFAULT_CELL_SIZE))
    seed: int = DEFAULT_SEED
    noise: str = DEFAULT_NOISE  # "simplex" | "fast"
    noise_scale: float = DEFAULT_NOISE_SCALE
    octaves: int = DEFAULT_OCTAVES
    threshold: float = DEFAULT_THRESHOLD
    interpolate: bool = DEFAULT_INTERPOLATE

    def __post_init__(self) -> None:
        if not self.noise_scale > 0.0:
            raise ValueError(f"noise_scale must be positive, got {self.noise_scale}")

    def chunk_world_size(self) -> tuple[float, float]:
        return self.chunk_size.world_size(self.cell_size)

    def make_field(self) -> ScalarField:
        return ScalarField(self.seed, NoiseConfig(scale=self.noise_scale, octaves=self.octaves), mode=self.noise)
