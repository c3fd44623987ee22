"""Marching squares contouring of chunk samples into a flat triangle list.

Every cell of a chunk is classified by which of its four corners lie above
the threshold (bit 3 top-left, bit 2 top-right, bit 1 bottom-right, bit 0
bottom-left). The resulting case selects a run of triangles from ``TRI_LUT``;
each triangle corner is an ``Anchor``: either a fixed cell corner or a point
on one of the four cell edges.

Cases 5 and 10 (diagonal corners above the threshold) are saddles. When the
mean of the four corner samples exceeds the threshold the two solid corners
stay connected (cases 5 / 10), otherwise they are split into two separate
corner triangles (cases 16 / 17).

Edge anchors sit at the edge midpoint by default. ``interpolate=True`` moves
them to the linear zero-crossing of the threshold between the two edge
samples instead.

Cell-local geometry has its origin at the cell's top-left corner, X right and
Y negative downward; cell ``(x, y)`` is translated by ``(x * cw, -y * ch)``.
Cells are emitted column by column (x outer, y inner) and every triangle
corner is a new vertex, so ``indices`` is simply ``0..N-1``.
"""
from __future__ import annotations

import enum
from typing import Sequence, Tuple

import numpy as np

from terrain2d.world.chunk import ChunkMeshData
from terrain2d.world.chunk_data import ChunkData
from terrain2d.world.grid import CellSize, ChunkSize


class Anchor(enum.IntEnum):
    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3
    TOP_LEFT = 4
    TOP_RIGHT = 5
    BOT_RIGHT = 6
    BOT_LEFT = 7


T, R, B, L = Anchor.TOP, Anchor.RIGHT, Anchor.BOTTOM, Anchor.LEFT
TL, TR, BR, BL = Anchor.TOP_LEFT, Anchor.TOP_RIGHT, Anchor.BOT_RIGHT, Anchor.BOT_LEFT

TRI_LUT: Tuple[Tuple[Anchor, ...], ...] = (
    (),
    (L, BL, B),
    (B, BR, R),
    (L, BL, BR, L, BR, R),
    (T, R, TR),
    (L, BL, B, L, B, R, L, R, T, T, R, TR),
    (T, BR, TR, B, BR, T),
    (BL, BR, TR, TR, T, L, L, BL, TR),
    (TL, L, T),
    (TL, BL, B, B, T, TL),
    (TL, L, T, L, B, T, T, B, R, R, B, BR),
    (TL, BL, BR, TL, BR, R, R, T, TL),
    (TL, R, TR, TL, L, R),
    (TR, TL, BL, BL, B, R, R, TR, BL),
    (TL, BR, TR, TL, L, B, B, BR, TL),
    (TL, BL, BR, BR, TR, TL),
    (L, BL, B, T, R, TR),  # case 5 split
    (B, BR, R, TL, L, T),  # case 10 split
)

SPLIT_CASES = {5: 16, 10: 17}

# Corners indexed 0..3 as [top_left, top_right, bot_right, bot_left], in cell units.
_CORNER_UNIT = np.array([(0.0, 0.0), (1.0, 0.0), (1.0, -1.0), (0.0, -1.0)], dtype=np.float64)

# Each anchor is the segment between two corners (a == b for corner anchors).
_ANCHOR_A = np.array([0, 1, 2, 3, 0, 1, 2, 3], dtype=np.intp)
_ANCHOR_B = np.array([1, 2, 3, 0, 0, 1, 2, 3], dtype=np.intp)

_LUT_FLAT = np.array([int(a) for tris in TRI_LUT for a in tris], dtype=np.intp)
_LUT_COUNT = np.array([len(tris) for tris in TRI_LUT], dtype=np.intp)
_LUT_START = np.concatenate([[0], np.cumsum(_LUT_COUNT)[:-1]]).astype(np.intp)


def triangles_for_case(case: int) -> list[Tuple[Anchor, Anchor, Anchor]]:
    tris = TRI_LUT[case]
    return [(tris[i], tris[i + 1], tris[i + 2]) for i in range(0, len(tris), 3)]


def case_index(corners: Sequence[float], threshold: float) -> int:
    """Raw 4-bit case of ``corners`` = (top_left, top_right, bot_right, bot_left)."""
    tl, tr, br, bl = (np.float32(c) for c in corners)
    t = np.float32(threshold)
    return (int(tl > t) << 3) | (int(tr > t) << 2) | (int(br > t) << 1) | int(bl > t)


def resolve_case(case: int, corners: Sequence[float], threshold: float) -> int:
    """Apply the saddle rule to cases 5 and 10."""
    if case not in SPLIT_CASES:
        return case
    tl, tr, br, bl = (np.float32(c) for c in corners)
    avg = (tl + tr + br + bl) / np.float32(4.0)
    return case if avg > np.float32(threshold) else SPLIT_CASES[case]


def case_indices(data: ChunkData, threshold: float) -> np.ndarray:
    """Resolved case of every cell, as a (height, width) array indexed [y, x]."""
    g = data.as_grid()
    t = np.float32(threshold)
    tl = g[:-1, :-1]
    tr = g[:-1, 1:]
    br = g[1:, 1:]
    bl = g[1:, :-1]

    idx = ((tl > t).astype(np.intp) << 3) | ((tr > t).astype(np.intp) << 2) | ((br > t).astype(np.intp) << 1) | (bl > t).astype(np.intp)

    connected = ((tl + tr + br + bl) / np.float32(4.0)) > t
    idx = np.where((idx == 5) & ~connected, 16, idx)
    idx = np.where((idx == 10) & ~connected, 17, idx)
    return idx


def _edge_t(wa: np.ndarray, wb: np.ndarray, threshold: float, interpolate: bool) -> np.ndarray:
    if not interpolate:
        return np.full(np.shape(wa), 0.5)
    wa = np.asarray(wa, dtype=np.float64)
    wb = np.asarray(wb, dtype=np.float64)
    denom = wb - wa
    safe = np.where(denom == 0.0, 1.0, denom)
    t = np.where(denom == 0.0, 0.5, (float(threshold) - wa) / safe)
    return np.clip(t, 0.0, 1.0)


def anchor_point(
    anchor: Anchor,
    corners: Sequence[float],
    cell_size: CellSize,
    threshold: float,
    *,
    interpolate: bool = False,
) -> Tuple[float, float]:
    """Cell-local position of one anchor."""
    scale = np.array([cell_size.width, cell_size.height], dtype=np.float64)
    a = int(_ANCHOR_A[anchor])
    b = int(_ANCHOR_B[anchor])
    pa = _CORNER_UNIT[a] * scale
    pb = _CORNER_UNIT[b] * scale
    if a == b:
        return float(pa[0]), float(pa[1])
    t = float(_edge_t(np.float32(corners[a]), np.float32(corners[b]), threshold, interpolate))
    p = pa + (pb - pa) * t
    return float(p[0]), float(p[1])


def marching_squares(
    data: ChunkData,
    chunk_size: ChunkSize,
    cell_size: CellSize,
    threshold: float,
    *,
    interpolate: bool = False,
) -> ChunkMeshData:
    """Contour ``data`` at ``threshold`` into a chunk-local triangle list."""
    if data.size != chunk_size:
        raise ValueError(f"chunk data is {data.size.width}x{data.size.height}, expected {chunk_size.width}x{chunk_size.height}")

    w, h = chunk_size.width, chunk_size.height
    cw, ch = cell_size.width, cell_size.height

    # x-major ordering of cells
    cases = case_indices(data, threshold).T.reshape(-1)
    cell_x, cell_y = np.meshgrid(np.arange(w), np.arange(h), indexing="ij")
    cell_x = cell_x.reshape(-1)
    cell_y = cell_y.reshape(-1)

    counts = _LUT_COUNT[cases]
    total = int(counts.sum())
    if total == 0:
        return ChunkMeshData.empty()

    cell = np.repeat(np.arange(cases.size), counts)
    first = np.repeat(np.cumsum(counts) - counts, counts)
    k = np.arange(total) - first
    anchors = _LUT_FLAT[_LUT_START[cases[cell]] + k]

    a = _ANCHOR_A[anchors]
    b = _ANCHOR_B[anchors]
    scale = np.array([cw, ch], dtype=np.float64)
    pa = _CORNER_UNIT[a] * scale
    pb = _CORNER_UNIT[b] * scale

    g = data.as_grid()
    vx = cell_x[cell]
    vy = cell_y[cell]
    # [top_left, top_right, bot_right, bot_left] samples of each vertex's cell
    corner_vals = np.stack([g[vy, vx], g[vy, vx + 1], g[vy + 1, vx + 1], g[vy + 1, vx]], axis=1)
    wa = corner_vals[np.arange(total), a]
    wb = corner_vals[np.arange(total), b]
    t = _edge_t(wa, wb, threshold, interpolate)

    local = pa + (pb - pa) * t[:, None]
    offset = np.stack([vx * cw, -(vy * ch)], axis=1).astype(np.float64)

    vertices = (local + offset).astype(np.float32)
    indices = np.arange(total, dtype=np.uint32)
    return ChunkMeshData(vertices, indices)
