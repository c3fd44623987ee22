from __future__ import annotations

import argparse
import logging
import random
from typing import Optional, Sequence

from terrain2d.app import run_app, run_headless
from terrain2d.config import (
    APP_VERSION,
    DEFAULT_CELL_SIZE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_LOAD_DISTANCE,
    DEFAULT_NOISE,
    DEFAULT_NOISE_SCALE,
    DEFAULT_OCTAVES,
    DEFAULT_PREFETCH_MARGIN,
    DEFAULT_SEED,
    DEFAULT_THRESHOLD,
    DEFAULT_TICK_DT,
    DEFAULT_TICKS,
    DEFAULT_VIEWER_SPEED,
)
from terrain2d.world.grid import CellSize, ChunkSize
from terrain2d.world.params import TerrainParams

def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="terrain2d", description=f"Chunked 2D marching-squares terrain v{APP_VERSION}")
    p.add_argument("--seed", default=str(DEFAULT_SEED), help=f"int seed or 'random' (default: {DEFAULT_SEED})")
    p.add_argument("--chunk-size", type=int, nargs=2, metavar=("W", "H"), default=list(DEFAULT_CHUNK_SIZE), help="cells per chunk (default: 64 64)")
    p.add_argument("--cell-size", type=int, nargs=2, metavar=("W", "H"), default=list(DEFAULT_CELL_SIZE), help="world units per cell (default: 8 8)")
    p.add_argument("--noise", choices=["simplex", "fast"], default=DEFAULT_NOISE, help="scalar field noise (simplex or fast value noise)")
    p.add_argument("--noise-scale", type=float, default=DEFAULT_NOISE_SCALE, help="world -> noise coordinate scale (default: 0.007)")
    p.add_argument("--octaves", type=int, default=DEFAULT_OCTAVES, help="fBm octaves (default: 1)")
    p.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD, help="field value above which terrain is solid (default: 0.2)")
    p.add_argument("--interpolate", action="store_true", help="place contour points at the threshold crossing instead of edge midpoints")
    p.add_argument("--load-distance", type=int, default=DEFAULT_LOAD_DISTANCE, help="chunks loaded around the viewer in each direction (default: 1)")
    p.add_argument("--prefetch", type=int, default=DEFAULT_PREFETCH_MARGIN, help="extra ring of chunks generated in the background (default: 0)")
    p.add_argument("--speed", type=float, default=DEFAULT_VIEWER_SPEED, help="viewer speed (world units / sec)")
    p.add_argument("--debug", action="store_true", help="enable debug logs")
    p.add_argument("--headless", action="store_true", help="run the chunk lifecycle without a window and print a summary")
    p.add_argument("--ticks", type=int, default=DEFAULT_TICKS, help="headless: number of ticks")
    p.add_argument("--velocity", type=float, nargs=2, metavar=("VX", "VY"), default=[DEFAULT_VIEWER_SPEED, 0.0], help="headless: viewer velocity")
    return p.parse_args(argv)

def params_from_args(args: argparse.Namespace) -> TerrainParams:
    if isinstance(args.seed, str) and args.seed.lower() == "random":
        seed = random.randint(0, 2**31 - 1)
    else:
        seed = int(args.seed)
    return TerrainParams(
        chunk_size=ChunkSize.of(args.chunk_size),
        cell_size=CellSize.of(args.cell_size),
        seed=seed,
        noise=str(args.noise),
        noise_scale=float(args.noise_scale),
        octaves=int(args.octaves),
        threshold=float(args.threshold),
        interpolate=bool(args.interpolate),
    )

def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="[terrain2d] %(name)s: %(message)s")

    params = params_from_args(args)

    if args.headless:
        stats = run_headless(
            params,
            ticks=int(args.ticks),
            velocity=(float(args.velocity[0]), float(args.velocity[1])),
            dt=DEFAULT_TICK_DT,
            load_distance=int(args.load_distance),
            prefetch_margin=int(args.prefetch),
        )
        print("[terrain2d] " + " ".join(f"{k}={v}" for k, v in stats.items()))
        return

    run_app(
        params,
        speed=float(args.speed),
        debug=bool(args.debug),
        load_distance=int(args.load_distance),
        prefetch_margin=int(args.prefetch),
    )

if __name__ == "__main__":
    main()
