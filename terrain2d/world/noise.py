from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from opensimplex import OpenSimplex


@dataclass(frozen=True)
class NoiseConfig:
    scale: float = 0.007  # world -> noise space; smaller = wider features
    octaves: int = 1
    lacunarity: float = 2.0
    gain: float = 0.5


class FastValueNoise2D:
    """Fast 2D value noise with fully vectorized numpy implementation.

    Uses an integer hash on lattice points and smooth interpolation.
    Deterministic for a given seed. Output is in [-1, 1).
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)

    @staticmethod
    def _fade(t: np.ndarray) -> np.ndarray:
        # smootherstep
        return t * t * t * (t * (t * 6 - 15) + 10)

    def _hash(self, xi: np.ndarray, yi: np.ndarray) -> np.ndarray:
        x = (xi.astype(np.uint32) * np.uint32(374761393)) ^ (yi.astype(np.uint32) * np.uint32(668265263)) ^ np.uint32(self.seed & 0xFFFFFFFF)
        x ^= (x >> np.uint32(13))
        x *= np.uint32(1274126177)
        x ^= (x >> np.uint32(16))
        return (x.astype(np.float64) / float(2**32))

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        xi0 = np.floor(x).astype(np.int64)
        yi0 = np.floor(y).astype(np.int64)

        u = self._fade(x - xi0)
        v = self._fade(y - yi0)

        a = self._hash(xi0, yi0)
        b = self._hash(xi0 + 1, yi0)
        c = self._hash(xi0, yi0 + 1)
        d = self._hash(xi0 + 1, yi0 + 1)

        ab = a + (b - a) * u
        cd = c + (d - c) * u
        return (ab + (cd - ab) * v) * 2.0 - 1.0


class _SimplexBase:
    """Adapter giving OpenSimplex the same vectorized interface as FastValueNoise2D."""

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)
        self._simp = OpenSimplex(self.seed)

    def noise2(self, x: float, y: float) -> float:
        return self._simp.noise2(x, y)

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        flat_x = np.ravel(x)
        flat_y = np.ravel(y)
        out = np.empty(flat_x.shape, dtype=np.float64)
        for i in range(flat_x.size):
            out[i] = self._simp.noise2(float(flat_x[i]), float(flat_y[i]))
        return out.reshape(np.shape(x))


class ScalarField:
    """Continuous, seedable 2D scalar field sampled in world coordinates.

    World coordinates are multiplied by ``cfg.scale`` before reaching the
    underlying noise. With more than one octave, layers are summed (fBm) and
    normalized back into [-1, 1]. Instances hold no mutable state after
    construction, so one field can serve several generation threads.
    """

    def __init__(self, seed: int, cfg: NoiseConfig | None = None, *, mode: str = "simplex") -> None:
        self.seed = int(seed)
        self.cfg = cfg or NoiseConfig()
        if self.cfg.octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {self.cfg.octaves}")
        if mode == "simplex":
            self.base = _SimplexBase(self.seed)
        elif mode == "fast":
            self.base = FastValueNoise2D(self.seed)
        else:
            raise ValueError(f"unknown noise mode: {mode!r}")
        self.mode = mode

    def sample(self, x: float, y: float) -> float:
        if isinstance(self.base, _SimplexBase) and self.cfg.octaves == 1:
            # Single-point fast path, same arithmetic as grid() for one octave.
            v = self.base.noise2(float(x) * self.cfg.scale, float(y) * self.cfg.scale)
            return float(np.float32(v))
        xv = np.array([x], dtype=np.float64)
        yv = np.array([y], dtype=np.float64)
        return float(self.grid(xv, yv)[0])

    def grid(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        """Sample arrays of world coordinates (same shape); returns float32."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        freq = self.cfg.scale
        amp = 1.0
        total = np.zeros_like(x)
        norm = 0.0
        for _ in range(self.cfg.octaves):
            total += self.base.noise(x * freq, y * freq) * amp
            norm += amp
            freq *= self.cfg.lacunarity
            amp *= self.cfg.gain
        if self.cfg.octaves > 1:
            total = total / max(norm, 1e-9)
        return total.astype(np.float32)

    def __call__(self, x: float, y: float) -> float:
        return self.sample(x, y)
