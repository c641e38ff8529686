"""
Construct

Resolves local bone transforms into world-space transforms.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from pyrr import Matrix44

from .skeleton import Armature, Bone, Mesh, Transform2D


@dataclass
class ConstructOptions:
    """
    Global placement applied to the whole armature.

    Defaults leave the armature untouched.

    Attributes:
        position: World-space offset added to every bone
        scale: Per-axis multiplier applied at the root
        flip_x: Mirror horizontally
        flip_y: Mirror vertically
        y_up: Convert from y-up asset space to y-down screen space
    """

    position: Tuple[float, float] = (0.0, 0.0)
    scale: Tuple[float, float] = (1.0, 1.0)
    flip_x: bool = False
    flip_y: bool = False
    y_up: bool = False

    def effective_scale(self) -> np.ndarray:
        sx = -self.scale[0] if self.flip_x else self.scale[0]
        sy = -self.scale[1] if self.flip_y else self.scale[1]
        return np.array([sx, sy], dtype='f4')


@dataclass
class ResolvedBone:
    """
    World-space transform of one bone, ready for drawing.

    Bones with a mesh also carry its vertex positions in world space.
    """

    bone_id: int
    name: str
    parent_id: Optional[int]
    position: np.ndarray
    rotation: float
    scale: np.ndarray
    texture: Optional[str] = None
    zindex: float = 0.0
    tint: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    vertices: Optional[np.ndarray] = None
    mesh: Optional[Mesh] = None

    def model_matrix(self) -> Matrix44:
        """
        Build the row-major model matrix (scale, then rotate, then translate).

        Returns:
            4x4 matrix for ``vertex @ matrix`` style transforms
        """
        c = math.cos(self.rotation)
        s = math.sin(self.rotation)
        sx, sy = float(self.scale[0]), float(self.scale[1])
        x, y = float(self.position[0]), float(self.position[1])
        return Matrix44(np.array([
            [sx * c, sx * s, 0.0, 0.0],
            [-sy * s, sy * c, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.0],
            [x, y, 0.0, 1.0],
        ], dtype='f4'))


def rotate(vector: np.ndarray, angle: float) -> np.ndarray:
    """Rotate a 2D vector counter-clockwise by ``angle`` radians."""
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([
        c * vector[0] - s * vector[1],
        s * vector[0] + c * vector[1],
    ], dtype='f4')


def transform_points(world: Transform2D, points: np.ndarray) -> np.ndarray:
    """
    Map bone-space points into world space.

    Same order as :func:`compose`: scale, rotate, then translate.

    Args:
        world: The bone's world transform
        points: (N, 2) array of bone-space positions

    Returns:
        (N, 2) float32 array of world positions
    """
    c = math.cos(world.rotation)
    s = math.sin(world.rotation)
    scaled = points * world.scale
    result = np.empty_like(scaled, dtype='f4')
    result[:, 0] = world.position[0] + c * scaled[:, 0] - s * scaled[:, 1]
    result[:, 1] = world.position[1] + s * scaled[:, 0] + c * scaled[:, 1]
    return result


def is_mirrored(scale: np.ndarray) -> bool:
    return float(scale[0]) * float(scale[1]) < 0.0


def compose(parent: Transform2D, child: Transform2D) -> Transform2D:
    """
    Place ``child`` (relative to ``parent``) into the parent's space.

    Scale is applied first, then rotation, then translation. Parent scale
    and rotation carry over multiplicatively; a mirroring parent scale
    reverses the child's rotation direction.
    """
    position = parent.position + rotate(parent.scale * child.position, parent.rotation)
    direction = -1.0 if is_mirrored(parent.scale) else 1.0
    rotation = parent.rotation + direction * child.rotation
    scale = parent.scale * child.scale
    return Transform2D(position, rotation, scale)


def root_parent(options: ConstructOptions) -> Transform2D:
    """
    Transform the roots are composed onto.

    ``y_up`` adds a vertical mirror so y-up asset space lands in y-down
    screen space; the mirror is removed again from reported scales.
    """
    scale = options.effective_scale()
    if options.y_up:
        scale[1] = -scale[1]
    return Transform2D(options.position, 0.0, scale)


def _resolve(bone: Bone, world: Transform2D, options: ConstructOptions) -> ResolvedBone:
    scale = world.scale.copy()
    if options.y_up:
        scale[1] = -scale[1]
    # Vertices keep the y-up mirror; only the reported scale drops it
    vertices = None
    if bone.mesh is not None:
        vertices = transform_points(world, bone.mesh.positions)
    return ResolvedBone(
        bone_id=bone.id,
        name=bone.name,
        parent_id=bone.parent_id,
        position=world.position,
        rotation=world.rotation,
        scale=scale,
        texture=bone.texture,
        zindex=bone.zindex,
        tint=bone.tint,
        vertices=vertices,
        mesh=bone.mesh,
    )


def construct(armature: Armature, options: Optional[ConstructOptions] = None) -> List[ResolvedBone]:
    """
    Resolve every bone's world transform.

    Walks bones parents-first. Roots are composed onto the options
    transform; every other bone onto its parent's world transform. Mesh
    vertices follow their bone. Nothing is cached between calls, and
    bone transforms are only read.

    An armature that was never validated, or whose bone list changed
    since, is validated first so the visiting order is current.

    Args:
        armature: Armature whose local transforms are current
        options: Global placement (defaults to no offset, unit scale, no flip)

    Returns:
        Resolved bones in the armature's stored bone order

    Raises:
        DataIntegrityError: If validating the armature fails
    """
    if options is None:
        options = ConstructOptions()

    if len(armature.bone_order) != len(armature.bones):
        armature.validate()

    placement = root_parent(options)
    order = armature.bone_order
    world: List[Optional[Transform2D]] = [None] * len(armature.bones)
    resolved: List[Optional[ResolvedBone]] = [None] * len(armature.bones)

    for index in order:
        bone = armature.bones[index]
        parent = placement if bone.parent_id is None else world[bone.parent_id]
        world[index] = compose(parent, bone.local)
        resolved[index] = _resolve(bone, world[index], options)

    return resolved
