"""Style resolution, draw emission and sprite rendering."""

from .style import ResolvedStyle, Style, StyleOverride, TextureRegion, resolve_style
from .emitter import DrawPrimitive, draw
from .sprite_renderer import SpriteRenderer, batch_by_atlas, build_geometry, build_mesh_vertices, build_quad_vertices

__all__ = [
    'ResolvedStyle',
    'Style',
    'StyleOverride',
    'TextureRegion',
    'resolve_style',
    'DrawPrimitive',
    'draw',
    'SpriteRenderer',
    'batch_by_atlas',
    'build_geometry',
    'build_mesh_vertices',
    'build_quad_vertices',
]
