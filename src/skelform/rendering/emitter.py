"""
Emitter

Turns resolved bones into ordered draw primitives for a renderer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

import numpy as np

from .style import Style, TextureRegion, resolve_style

if TYPE_CHECKING:
    from ..animation.construct import ResolvedBone
    from ..animation.skeleton import Mesh
    from ..loaders.armature_loader import AtlasTexture


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawPrimitive:
    """
    One textured, tinted sprite to submit to the renderer.

    Mesh bones set ``vertices`` (world positions) and ``mesh`` (UVs and
    triangle indices); everything else is drawn as a quad.
    """

    bone_id: int
    position: np.ndarray
    rotation: float
    scale: np.ndarray
    region: TextureRegion
    atlas: Optional["AtlasTexture"]
    tint: Tuple[float, float, float, float]
    zindex: float
    vertices: Optional[np.ndarray] = None
    mesh: Optional["Mesh"] = None


def draw(resolved_bones: Sequence["ResolvedBone"], textures: Sequence["AtlasTexture"],
         styles: Sequence[Style], renderer=None) -> List[DrawPrimitive]:
    """
    Build draw primitives for resolved bones and optionally submit them.

    Bones are emitted in ascending z-index order (ties keep the armature's
    order). Bones whose texture cannot be resolved through ``styles`` are
    skipped. ``resolved_bones`` is only read.

    Args:
        resolved_bones: Output of construct()
        textures: Atlas textures indexed by TextureRegion.atlas_index
        styles: Active styles, later entries override earlier ones
        renderer: Object with ``render(primitives)`` (e.g. SpriteRenderer)

    Returns:
        Primitives in draw order
    """
    entries = []
    for bone in resolved_bones:
        style = resolve_style(bone.bone_id, bone.texture, bone.tint, bone.zindex, styles)
        if style.region is None:
            if bone.texture is not None:
                logger.debug("No style provides texture '%s' for bone '%s'", bone.texture, bone.name)
            continue

        atlas = None
        if 0 <= style.region.atlas_index < len(textures):
            atlas = textures[style.region.atlas_index]
        elif textures:
            logger.warning(
                "Texture '%s' points at missing atlas %d", style.region.name, style.region.atlas_index
            )

        entries.append(DrawPrimitive(
            bone_id=bone.bone_id,
            position=bone.position.copy(),
            rotation=bone.rotation,
            scale=bone.scale.copy(),
            region=style.region,
            atlas=atlas,
            tint=style.tint,
            zindex=style.zindex,
            vertices=None if bone.vertices is None else bone.vertices.copy(),
            mesh=bone.mesh,
        ))

    # sorted() is stable, so equal z-index keeps authored order
    primitives = sorted(entries, key=lambda primitive: primitive.zindex)

    if renderer is not None:
        renderer.render(primitives)

    return primitives
