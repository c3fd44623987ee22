from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import moderngl
import numpy as np

from terrain2d.config import BACKGROUND_COLOR, TERRAIN_COLOR
from terrain2d.render.shaders import shader_sources
from terrain2d.util.math import ortho
from terrain2d.world.chunk import ChunkMeshData


@dataclass
class ChunkGPU:
    corner: tuple[float, float]
    triangle_count: int
    vao: Optional[moderngl.VertexArray] = None
    vbo: Optional[moderngl.Buffer] = None
    ibo: Optional[moderngl.Buffer] = None


class Renderer:
    def __init__(self, ctx: moderngl.Context, width: int, height: int) -> None:
        self.ctx = ctx
        self.width = width
        self.height = height

        vert, frag = shader_sources(ctx.version_code)
        self.prog = self.ctx.program(vertex_shader=vert, fragment_shader=frag)
        self.prog["u_color"].value = tuple(float(c) for c in TERRAIN_COLOR)

        self._proj = np.eye(4, dtype=np.float32)
        self.prog["u_proj"].write(self._proj.tobytes())

        self.ctx.disable(moderngl.DEPTH_TEST)
        self.ctx.disable(moderngl.CULL_FACE)

    @property
    def proj(self) -> np.ndarray:
        return self._proj

    def release(self) -> None:
        self.prog.release()

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.ctx.viewport = (0, 0, width, height)

    def begin_frame(self) -> None:
        r, g, b = BACKGROUND_COLOR
        self.ctx.clear(r, g, b, 1.0)

    def set_view(self, cam_x: float, cam_y: float, half_height: float) -> None:
        half_width = half_height * (self.width / max(1, self.height))
        self._proj = ortho(cam_x - half_width, cam_x + half_width, cam_y - half_height, cam_y + half_height)
        self.prog["u_proj"].write(self._proj.tobytes())
        if "u_cam_pos" in self.prog:
            self.prog["u_cam_pos"].value = (float(cam_x), float(cam_y))

    def set_fade(self, start: float, end: float) -> None:
        if "u_fade_start" in self.prog:
            self.prog["u_fade_start"].value = float(start)
            self.prog["u_fade_end"].value = float(end)

    def upload_chunk(self, corner: tuple[float, float], mesh: ChunkMeshData) -> ChunkGPU:
        """Create GPU buffers for one chunk mesh; empty meshes get no buffers."""
        gpu = ChunkGPU(corner=(float(corner[0]), float(corner[1])), triangle_count=mesh.triangle_count)
        if mesh.triangle_count == 0:
            return gpu
        gpu.vbo = self.ctx.buffer(mesh.vertices.tobytes())
        gpu.ibo = self.ctx.buffer(mesh.indices.tobytes())
        gpu.vao = self.ctx.vertex_array(self.prog, [(gpu.vbo, "2f", "in_pos")], gpu.ibo, index_element_size=4)
        return gpu

    def release_chunk(self, gpu: ChunkGPU) -> None:
        for obj in (gpu.vao, gpu.vbo, gpu.ibo):
            if obj is not None:
                obj.release()
        gpu.vao = gpu.vbo = gpu.ibo = None

    def draw_chunk(self, gpu: ChunkGPU) -> None:
        if gpu.vao is None:
            return
        self.prog["u_offset"].value = gpu.corner
        gpu.vao.render(mode=moderngl.TRIANGLES)
