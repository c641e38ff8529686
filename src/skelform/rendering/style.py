"""
Style

Named texture sets and per-bone visual overrides.
Includes lightweight descriptors for data-driven armature loading.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from ..errors import DataIntegrityError


def number_from_json(value, what: str, cast=float):
    """Coerce a JSON scalar with ``cast``, reporting bad data as an integrity error."""

    try:
        return cast(value)
    except (TypeError, ValueError):
        raise DataIntegrityError(f"{what} must be a number, got {value!r}") from None


def vec2_from_json(value, fallback: Tuple[float, float]) -> Tuple[float, float]:
    """Coerce a JSON ``{"x": .., "y": ..}`` object or 2-list into a tuple."""

    if value is None:
        return fallback
    try:
        if isinstance(value, dict):
            return float(value.get("x", fallback[0])), float(value.get("y", fallback[1]))
        x, y = value
        return float(x), float(y)
    except (TypeError, ValueError):
        raise DataIntegrityError(f"Expected a 2D vector, got {value!r}") from None


def rgba_from_json(value) -> Optional[Tuple[float, float, float, float]]:
    if value is None:
        return None
    if isinstance(value, dict):
        value = [value.get("r", 1.0), value.get("g", 1.0), value.get("b", 1.0), value.get("a", 1.0)]
    try:
        channels = [float(c) for c in value]
    except (TypeError, ValueError):
        raise DataIntegrityError(f"Expected RGB or RGBA color, got {value!r}") from None
    if len(channels) == 3:
        channels.append(1.0)
    if len(channels) != 4:
        raise DataIntegrityError(f"Expected RGB or RGBA color, got {value!r}")
    return tuple(channels)


@dataclass(frozen=True)
class TextureRegion:
    """Sub-rectangle of an atlas image, in pixels."""

    name: str
    atlas_index: int = 0
    offset: Tuple[float, float] = (0.0, 0.0)
    size: Tuple[float, float] = (0.0, 0.0)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextureRegion":
        if "name" not in data:
            raise DataIntegrityError(f"Texture entry is missing 'name': {data}")
        return cls(
            name=str(data["name"]),
            atlas_index=number_from_json(data.get("atlas_idx", data.get("atlas_index", 0)), "atlas_idx", int),
            offset=vec2_from_json(data.get("offset"), (0.0, 0.0)),
            size=vec2_from_json(data.get("size"), (0.0, 0.0)),
        )


@dataclass(frozen=True)
class StyleOverride:
    """Optional per-bone overrides; ``None`` means "leave as is"."""

    texture: Optional[str] = None
    tint: Optional[Tuple[float, float, float, float]] = None
    zindex: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StyleOverride":
        zindex = data.get("zindex")
        return cls(
            texture=data.get("tex", data.get("texture")),
            tint=rgba_from_json(data.get("tint")),
            zindex=None if zindex is None else number_from_json(zindex, "Style override zindex"),
        )


@dataclass(frozen=True)
class Style:
    """
    Named set of textures and per-bone overrides.

    Styles are layered by callers at draw time; they are never modified
    after loading.
    """

    name: str
    textures: Dict[str, TextureRegion] = field(default_factory=dict)
    overrides: Dict[int, StyleOverride] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Style":
        """Create a style from JSON data."""

        textures = {}
        for entry in data.get("textures", []):
            region = TextureRegion.from_dict(entry)
            textures[region.name] = region

        overrides = {}
        for entry in data.get("overrides", []):
            if "bone_id" not in entry:
                raise DataIntegrityError(f"Style override is missing 'bone_id': {entry}")
            bone_id = number_from_json(entry["bone_id"], "Style override bone_id", int)
            overrides[bone_id] = StyleOverride.from_dict(entry)

        return cls(name=str(data.get("name", "Style")), textures=textures, overrides=overrides)


@dataclass(frozen=True)
class ResolvedStyle:
    """Result of layering styles for one bone."""

    region: Optional[TextureRegion]
    tint: Tuple[float, float, float, float]
    zindex: float


def resolve_style(bone_id: int, texture: Optional[str], tint: Tuple[float, float, float, float],
                  zindex: float, styles: Sequence[Style]) -> ResolvedStyle:
    """
    Layer styles left to right for one bone.

    Per field, the last style that sets a value wins. The texture name is
    then looked up in the last style whose texture table has it.

    Args:
        bone_id: Bone being drawn
        texture: The bone's default texture name
        tint: The bone's default tint
        zindex: The bone's default draw order
        styles: Active styles, lowest priority first

    Returns:
        Effective texture region, tint and draw order
    """
    for style in styles:
        override = style.overrides.get(bone_id)
        if override is None:
            continue
        if override.texture is not None:
            texture = override.texture
        if override.tint is not None:
            tint = override.tint
        if override.zindex is not None:
            zindex = override.zindex

    region = None
    if texture is not None:
        for style in reversed(styles):
            region = style.textures.get(texture)
            if region is not None:
                break

    return ResolvedStyle(region=region, tint=tint, zindex=zindex)
