"""
Skeleton

Represents a hierarchical 2D bone structure stored as a flat array.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple, Union

import numpy as np

from ..config.settings import DEFAULT_TINT, DEFAULT_ZINDEX
from ..errors import ContractViolationError, DataIntegrityError

if TYPE_CHECKING:
    from .animation import Animation
    from ..loaders.armature_loader import AtlasTexture
    from ..rendering.style import Style


def _vec2(value, fallback: Tuple[float, float]) -> np.ndarray:
    """Coerce a 2-component sequence into a float32 vector."""

    if value is None:
        value = fallback
    if len(value) != 2:
        raise ValueError(f"Expected 2 components, got {value}")
    return np.array([float(value[0]), float(value[1])], dtype='f4')


class Transform2D:
    """
    Position, rotation and scale of a bone.

    Rotation is stored in radians. Position and scale are float32 vectors.
    """

    __slots__ = ("position", "rotation", "scale")

    def __init__(self, position=None, rotation: float = 0.0, scale=None):
        self.position = _vec2(position, (0.0, 0.0))
        self.rotation = float(rotation)
        self.scale = _vec2(scale, (1.0, 1.0))

    def copy(self) -> "Transform2D":
        return Transform2D(self.position.copy(), self.rotation, self.scale.copy())

    def __eq__(self, other):
        if not isinstance(other, Transform2D):
            return NotImplemented
        return (
            np.array_equal(self.position, other.position)
            and self.rotation == other.rotation
            and np.array_equal(self.scale, other.scale)
        )

    def __repr__(self):
        return (
            f"Transform2D(pos=({self.position[0]:.3f}, {self.position[1]:.3f}), "
            f"rot={self.rotation:.3f}, scale=({self.scale[0]:.3f}, {self.scale[1]:.3f}))"
        )


class Mesh:
    """
    Triangle mesh drawn in place of a bone's sprite quad.

    Positions are in the bone's local space. UVs run from 0 to 1 across
    the bone's texture region. Indices list triangles, three per face.
    """

    def __init__(self, positions, uvs, indices):
        self.positions = np.asarray(positions, dtype='f4').reshape(-1, 2)
        self.uvs = np.asarray(uvs, dtype='f4').reshape(-1, 2)
        self.indices = np.asarray(indices, dtype='i4').reshape(-1)

    @property
    def vertex_count(self) -> int:
        return len(self.positions)

    def validate(self, bone_name: str):
        """
        Raises:
            DataIntegrityError: On mismatched UVs, partial triangles or
                indices outside the vertex list
        """
        if len(self.uvs) != len(self.positions):
            raise DataIntegrityError(
                f"Mesh on bone '{bone_name}' has {len(self.positions)} vertices but {len(self.uvs)} UVs"
            )
        if len(self.indices) % 3:
            raise DataIntegrityError(
                f"Mesh on bone '{bone_name}' has {len(self.indices)} indices, not whole triangles"
            )
        if len(self.indices) and (self.indices.min() < 0 or self.indices.max() >= self.vertex_count):
            raise DataIntegrityError(
                f"Mesh on bone '{bone_name}' indexes outside its {self.vertex_count} vertices"
            )

    def __repr__(self):
        return f"Mesh(vertices={self.vertex_count}, triangles={len(self.indices) // 3})"


class Bone:
    """
    Single bone in an armature.

    Each bone has:
    - Rest transform (as loaded, relative to parent)
    - Local transform (rest pose with animation applied, written by animate)
    - Parent index into the owning armature's bone list (None for roots)
    - Default texture name, draw order and tint
    - Optional mesh, drawn instead of a plain sprite
    """

    def __init__(
        self,
        bone_id: int,
        name: str,
        parent_id: Optional[int] = None,
        rest: Optional[Transform2D] = None,
        texture: Optional[str] = None,
        zindex: float = DEFAULT_ZINDEX,
        tint: Tuple[float, float, float, float] = DEFAULT_TINT,
        mesh: Optional[Mesh] = None,
    ):
        """
        Initialize a bone.

        Args:
            bone_id: Index of this bone in the armature
            name: Bone name (for debugging and lookups)
            parent_id: Index of the parent bone (None for root)
            rest: Rest pose transform relative to the parent
            texture: Default texture name looked up in styles
            zindex: Draw order, lower draws first
            tint: Default RGBA tint
            mesh: Textured mesh in bone space (None draws a sprite quad)
        """
        self.id = bone_id
        self.name = name
        self.parent_id = parent_id
        self.rest = rest if rest is not None else Transform2D()
        self.local = self.rest.copy()
        self.texture = texture
        self.zindex = float(zindex)
        self.tint = tuple(float(c) for c in tint)
        self.mesh = mesh

    def reset(self):
        """Restore the local transform to the rest pose."""
        self.local = self.rest.copy()

    def __repr__(self):
        return f"Bone(id={self.id}, name='{self.name}', parent={self.parent_id})"


@dataclass
class Armature:
    """
    Complete skeletal asset: bones, animations, styles and atlas handles.

    Bones are addressed by their index in ``bones``. Call :meth:`validate`
    after building an armature by hand; the loader does it for you.
    """

    bones: List[Bone] = field(default_factory=list)
    animations: List["Animation"] = field(default_factory=list)
    styles: List["Style"] = field(default_factory=list)
    atlases: List["AtlasTexture"] = field(default_factory=list)
    bone_order: List[int] = field(default_factory=list)

    def validate(self) -> "Armature":
        """
        Check bone and animation invariants and compute the visiting order.

        Raises:
            DataIntegrityError: On invalid ids, out-of-range or cyclic parents, bad meshes,
                decreasing keyframes, or tracks for unknown bones

        Returns:
            self, for chaining
        """
        count = len(self.bones)
        for index, bone in enumerate(self.bones):
            if bone.id != index:
                raise DataIntegrityError(
                    f"Bone '{bone.name}' has id {bone.id} but sits at index {index}"
                )
            if bone.mesh is not None:
                bone.mesh.validate(bone.name)
            if bone.parent_id is None:
                continue
            if not 0 <= bone.parent_id < count:
                raise DataIntegrityError(
                    f"Bone '{bone.name}' references missing parent {bone.parent_id}"
                )
            if bone.parent_id == index:
                raise DataIntegrityError(f"Bone '{bone.name}' is its own parent")

        self.bone_order = self._topological_order()

        for animation in self.animations:
            animation.validate(count)

        return self

    def _topological_order(self) -> List[int]:
        """Order bone indices so every parent precedes its children."""
        children: Dict[Optional[int], List[int]] = {}
        for bone in self.bones:
            children.setdefault(bone.parent_id, []).append(bone.id)

        # Stored order already works for most exports; keep it when it does
        seen = set()
        in_order = True
        for bone in self.bones:
            if bone.parent_id is not None and bone.parent_id not in seen:
                in_order = False
                break
            seen.add(bone.id)
        if in_order:
            return [bone.id for bone in self.bones]

        order: List[int] = []
        stack = list(reversed(children.get(None, [])))
        while stack:
            index = stack.pop()
            order.append(index)
            stack.extend(reversed(children.get(index, [])))

        if len(order) != len(self.bones):
            orphaned = sorted(set(range(len(self.bones))) - set(order))
            names = [self.bones[i].name for i in orphaned]
            raise DataIntegrityError(f"Cyclic parent chain between bones {names}")

        return order

    def get_animation(self, key: Union[int, str]) -> "Animation":
        """
        Look up an animation by index or name.

        Raises:
            ContractViolationError: If no such animation exists
        """
        if isinstance(key, str):
            for animation in self.animations:
                if animation.name == key:
                    return animation
            raise ContractViolationError(f"Unknown animation '{key}'")

        if not 0 <= key < len(self.animations):
            raise ContractViolationError(
                f"Animation index {key} out of range ({len(self.animations)} animations)"
            )
        return self.animations[key]

    def reset_pose(self):
        """Reset all bones to their rest pose."""
        for bone in self.bones:
            bone.reset()

    def __repr__(self):
        return (
            f"Armature(bones={len(self.bones)}, animations={len(self.animations)}, "
            f"styles={len(self.styles)})"
        )
