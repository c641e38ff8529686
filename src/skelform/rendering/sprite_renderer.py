"""
Sprite Renderer

Draws emitted bone primitives as textured, tinted quads or meshes in
screen space.
"""

from __future__ import annotations

import logging
import math
from typing import List, Sequence, Tuple

import moderngl
import numpy as np
from pyrr import Matrix44

from .emitter import DrawPrimitive


logger = logging.getLogger(__name__)

# x, y, u, v, r, g, b, a
FLOATS_PER_VERTEX = 8

# Two triangles: 0-1-2, 0-2-3
QUAD_INDICES = np.array([0, 1, 2, 0, 2, 3], dtype='i4')


def build_quad_vertices(primitive: DrawPrimitive, atlas_size: Tuple[int, int]) -> np.ndarray:
    """
    Build the four corners for one sprite primitive.

    The sprite is centered on the bone, scaled, then rotated about the
    bone position. Draw with :data:`QUAD_INDICES`.

    Args:
        primitive: Primitive to draw
        atlas_size: Pixel size of the atlas the region lives in

    Returns:
        Array of 4 vertices (x, y, u, v, r, g, b, a) as float32
    """
    width, height = primitive.region.size
    half_w = width * 0.5 * float(primitive.scale[0])
    half_h = height * 0.5 * float(primitive.scale[1])

    c = math.cos(primitive.rotation)
    s = math.sin(primitive.rotation)
    px, py = float(primitive.position[0]), float(primitive.position[1])

    atlas_w = float(atlas_size[0]) or 1.0
    atlas_h = float(atlas_size[1]) or 1.0
    u0 = primitive.region.offset[0] / atlas_w
    v0 = primitive.region.offset[1] / atlas_h
    u1 = (primitive.region.offset[0] + width) / atlas_w
    v1 = (primitive.region.offset[1] + height) / atlas_h

    corners = [
        (-half_w, -half_h, u0, v0),
        (half_w, -half_h, u1, v0),
        (half_w, half_h, u1, v1),
        (-half_w, half_h, u0, v1),
    ]

    vertices = []
    for cx, cy, u, v in corners:
        x = px + c * cx - s * cy
        y = py + s * cx + c * cy
        vertices.append((x, y, u, v, *primitive.tint))

    return np.array(vertices, dtype='f4')


def build_mesh_vertices(primitive: DrawPrimitive, atlas_size: Tuple[int, int]) -> np.ndarray:
    """
    Build vertices for a mesh primitive.

    Positions are already in world space. Mesh UVs span the texture
    region, so they are mapped into the region's part of the atlas.

    Args:
        primitive: Primitive with ``vertices`` and ``mesh`` set
        atlas_size: Pixel size of the atlas the region lives in

    Returns:
        Array of N vertices (x, y, u, v, r, g, b, a) as float32
    """
    region = primitive.region
    atlas_w = float(atlas_size[0]) or 1.0
    atlas_h = float(atlas_size[1]) or 1.0
    uvs = primitive.mesh.uvs

    vertices = np.empty((len(primitive.vertices), FLOATS_PER_VERTEX), dtype='f4')
    vertices[:, 0:2] = primitive.vertices
    vertices[:, 2] = (region.offset[0] + region.size[0] * uvs[:, 0]) / atlas_w
    vertices[:, 3] = (region.offset[1] + region.size[1] * uvs[:, 1]) / atlas_h
    vertices[:, 4:8] = primitive.tint
    return vertices


def build_geometry(primitive: DrawPrimitive, atlas_size: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
    """Vertices and triangle indices for a primitive, mesh or quad."""
    if primitive.vertices is not None and primitive.mesh is not None:
        return build_mesh_vertices(primitive, atlas_size), primitive.mesh.indices
    return build_quad_vertices(primitive, atlas_size), QUAD_INDICES


def batch_by_atlas(primitives: Sequence[DrawPrimitive]) -> List[Tuple[object, List[DrawPrimitive]]]:
    """
    Group consecutive primitives sharing an atlas.

    Only neighbours are merged so draw order is preserved.
    """
    batches: List[Tuple[object, List[DrawPrimitive]]] = []
    for primitive in primitives:
        if primitive.atlas is None:
            continue
        if batches and batches[-1][0] is primitive.atlas:
            batches[-1][1].append(primitive)
        else:
            batches.append((primitive.atlas, [primitive]))
    return batches


class SpriteRenderer:
    """Render bone sprites with an orthographic projection."""

    VERTEX_SHADER = """
    #version 330

    in vec2 in_position;
    in vec2 in_uv;
    in vec4 in_color;

    uniform mat4 projection;

    out vec2 v_uv;
    out vec4 v_color;

    void main() {
        v_uv = in_uv;
        v_color = in_color;
        gl_Position = projection * vec4(in_position, 0.0, 1.0);
    }
    """

    FRAGMENT_SHADER = """
    #version 330

    in vec2 v_uv;
    in vec4 v_color;

    uniform sampler2D sprite_texture;

    out vec4 out_color;

    void main() {
        out_color = texture(sprite_texture, v_uv) * v_color;
    }
    """

    def __init__(self, ctx: moderngl.Context, screen_size: Tuple[int, int]):
        """
        Initialize sprite renderer.

        Args:
            ctx: ModernGL context
            screen_size: Framebuffer size (width, height)
        """
        self.ctx = ctx
        self.program = self.ctx.program(
            vertex_shader=self.VERTEX_SHADER,
            fragment_shader=self.FRAGMENT_SHADER,
        )
        self.resize(screen_size)

    def resize(self, screen_size: Tuple[int, int]):
        width, height = screen_size
        self.screen_size = (width, height)
        projection = Matrix44.orthogonal_projection(0, width, height, 0, -1, 1)
        self.program["projection"].write(projection.astype('f4').tobytes())

    def render(self, primitives: Sequence[DrawPrimitive]):
        """
        Draw primitives in the given order.

        Args:
            primitives: Output of draw(), already sorted
        """
        batches = batch_by_atlas(primitives)
        if not batches:
            return

        self._setup_state()
        for atlas, group in batches:
            if atlas.texture is None:
                logger.debug("Atlas '%s' has no GPU texture; skipping %d sprites", atlas.filename, len(group))
                continue
            vertices, indices = self._build_batch(group, atlas.size)
            self._render_batch(atlas.texture, vertices, indices)
        self._restore_state()

    def _build_batch(self, group: Sequence[DrawPrimitive],
                     atlas_size: Tuple[int, int]) -> Tuple[np.ndarray, np.ndarray]:
        vertex_parts = []
        index_parts = []
        base = 0
        for primitive in group:
            vertices, indices = build_geometry(primitive, atlas_size)
            vertex_parts.append(vertices)
            index_parts.append(indices + base)
            base += len(vertices)
        return np.concatenate(vertex_parts), np.concatenate(index_parts).astype('i4')

    def _render_batch(self, texture: moderngl.Texture, vertices: np.ndarray, indices: np.ndarray):
        vbo = self.ctx.buffer(vertices.tobytes())
        ibo = self.ctx.buffer(indices.tobytes())
        vao = self.ctx.vertex_array(
            self.program,
            [
                (vbo, "2f 2f 4f", "in_position", "in_uv", "in_color"),
            ],
            index_buffer=ibo,
        )

        texture.use(location=0)
        self.program["sprite_texture"].value = 0
        vao.render(moderngl.TRIANGLES)

        vao.release()
        vbo.release()
        ibo.release()

    def _setup_state(self):
        self.ctx.enable(moderngl.BLEND)
        self.ctx.blend_func = moderngl.SRC_ALPHA, moderngl.ONE_MINUS_SRC_ALPHA
        self.ctx.disable(moderngl.DEPTH_TEST)
        self.ctx.disable(moderngl.CULL_FACE)

    def _restore_state(self):
        self.ctx.enable(moderngl.DEPTH_TEST)
        self.ctx.enable(moderngl.CULL_FACE)
        self.ctx.disable(moderngl.BLEND)

    def release(self):
        self.program.release()
