"""
Armature Loader

Loads SkelForm exports: a zip holding ``armature.json`` and atlas PNG files,
or a bare ``armature.json`` without textures.
"""

from __future__ import annotations

import json
import logging
import zipfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import moderngl
from PIL import Image

from ..animation.animation import Animation, AnimationTarget, InterpolationType
from ..animation.skeleton import Armature, Bone, Mesh, Transform2D
from ..config.settings import ARMATURE_FILENAME, DEFAULT_FPS, DEFAULT_TINT, DEFAULT_ZINDEX, NO_PARENT
from ..errors import DataIntegrityError
from ..rendering.style import Style, number_from_json, rgba_from_json, vec2_from_json


logger = logging.getLogger(__name__)

_ELEMENTS = {target.value: target for target in AnimationTarget}
_TRANSITIONS = {kind.value.lower(): kind for kind in InterpolationType}


@dataclass
class AtlasTexture:
    """
    Decoded atlas image plus its GPU texture, when one was created.

    The GPU texture belongs to the moderngl context that created it.
    """

    filename: str
    size: Tuple[int, int]
    image: Optional[Image.Image] = None
    texture: Optional[moderngl.Texture] = None

    def release(self):
        if self.texture is not None:
            self.texture.release()
            self.texture = None


def _remap(bone_ids: Dict[int, int], raw_id, what: str) -> int:
    try:
        return bone_ids[int(raw_id)]
    except (KeyError, TypeError, ValueError):
        raise DataIntegrityError(f"{what} references unknown bone id {raw_id!r}") from None


def _records(data: Dict[str, Any], key: str, what: str) -> List[Dict[str, Any]]:
    entries = data.get(key) or []
    if not isinstance(entries, list) or not all(isinstance(entry, dict) for entry in entries):
        raise DataIntegrityError(f"{what} must be a list of objects, got {entries!r}")
    return entries


def _parse_mesh(data: Dict[str, Any], bone_name: str) -> Optional[Mesh]:
    vertices = _records(data, "vertices", f"Bone '{bone_name}' vertices")
    if not vertices:
        return None

    indices = data.get("indices") or []
    if not isinstance(indices, list):
        raise DataIntegrityError(f"Bone '{bone_name}' indices must be a list, got {indices!r}")

    return Mesh(
        positions=[vec2_from_json(vertex.get("pos"), (0.0, 0.0)) for vertex in vertices],
        uvs=[vec2_from_json(vertex.get("uv"), (0.0, 0.0)) for vertex in vertices],
        indices=[number_from_json(index, f"Bone '{bone_name}' mesh index", int) for index in indices],
    )


def _parse_bones(entries: List[Dict[str, Any]]) -> Tuple[List[Bone], Dict[int, int]]:
    # Exports may use arbitrary ids; bones are addressed by list index at runtime
    bone_ids: Dict[int, int] = {}
    for index, data in enumerate(entries):
        raw_id = number_from_json(data.get("id", index), f"Bone {index} id", int)
        if raw_id in bone_ids:
            raise DataIntegrityError(f"Duplicate bone id {raw_id}")
        bone_ids[raw_id] = index

    bones = []
    for index, data in enumerate(entries):
        name = str(data.get("name", f"Bone_{index}"))
        raw_parent = data.get("parent_id", NO_PARENT)
        parent_id = None
        if raw_parent is not None and number_from_json(raw_parent, f"Bone '{name}' parent_id", int) != NO_PARENT:
            parent_id = _remap(bone_ids, raw_parent, f"Bone '{name}' parent")

        rest = Transform2D(
            position=vec2_from_json(data.get("pos"), (0.0, 0.0)),
            rotation=number_from_json(data.get("rot", 0.0), f"Bone '{name}' rot"),
            scale=vec2_from_json(data.get("scale"), (1.0, 1.0)),
        )
        bones.append(Bone(
            bone_id=index,
            name=name,
            parent_id=parent_id,
            rest=rest,
            texture=data.get("tex") or None,
            zindex=number_from_json(data.get("zindex", DEFAULT_ZINDEX), f"Bone '{name}' zindex"),
            tint=rgba_from_json(data.get("tint")) or DEFAULT_TINT,
            mesh=_parse_mesh(data, name),
        ))
    return bones, bone_ids


def _parse_animation(data: Dict[str, Any], index: int, bone_ids: Dict[int, int]) -> Animation:
    name = str(data.get("name") or f"Animation_{index}")
    length = data.get("length")
    animation = Animation(
        name,
        fps=number_from_json(data.get("fps", DEFAULT_FPS), f"Animation '{name}' fps"),
        length=None if length is None else number_from_json(length, f"Animation '{name}' length"),
    )

    for keyframe in _records(data, "keyframes", f"Animation '{name}' keyframes"):
        element = keyframe.get("element")
        target = _ELEMENTS.get(element) if isinstance(element, str) else None
        if target is None:
            logger.warning("Skipping keyframe with unknown element '%s' in '%s'", element, name)
            continue

        transition = str(keyframe.get("transition", "Linear")).lower()
        interpolation = _TRANSITIONS.get(transition)
        if interpolation is None:
            logger.warning("Unknown transition '%s' in '%s', using Linear", transition, name)
            interpolation = InterpolationType.LINEAR

        if "frame" not in keyframe or "value" not in keyframe:
            raise DataIntegrityError(f"Keyframe in '{name}' needs 'frame' and 'value': {keyframe}")

        bone_id = _remap(bone_ids, keyframe.get("bone_id"), f"Keyframe in '{name}'")
        animation.add_keyframe(
            bone_id,
            target,
            number_from_json(keyframe["frame"], f"Keyframe frame in '{name}'"),
            number_from_json(keyframe["value"], f"Keyframe value in '{name}'"),
            interpolation,
        )

    return animation


def _parse_styles(entries: List[Dict[str, Any]], bone_ids: Dict[int, int]) -> List[Style]:
    styles = []
    for data in entries:
        name = data.get("name")
        textures = _records(data, "textures", f"Style '{name}' textures")
        overrides = []
        for override in _records(data, "overrides", f"Style '{name}' overrides"):
            remapped = dict(override)
            remapped["bone_id"] = _remap(bone_ids, override.get("bone_id"), "Style override")
            overrides.append(remapped)
        styles.append(Style.from_dict({**data, "textures": textures, "overrides": overrides}))
    return styles


def _parse_atlas(entry: Dict[str, Any]) -> AtlasTexture:
    if "filename" not in entry:
        raise DataIntegrityError(f"Atlas entry is missing 'filename': {entry}")
    width, height = vec2_from_json(entry.get("size"), (0.0, 0.0))
    return AtlasTexture(filename=str(entry["filename"]), size=(int(width), int(height)))


def armature_from_dict(payload: Dict[str, Any]) -> Armature:
    """
    Build and validate an armature from parsed ``armature.json`` data.

    Atlas entries are recorded without image data; use :func:`load` to
    decode them.

    Raises:
        DataIntegrityError: If the data breaks an armature invariant or a
            field has the wrong type
    """
    if not isinstance(payload, dict):
        raise DataIntegrityError("Armature data must be a JSON object")

    bones, bone_ids = _parse_bones(_records(payload, "bones", "bones"))
    animations = [
        _parse_animation(data, index, bone_ids)
        for index, data in enumerate(_records(payload, "animations", "animations"))
    ]
    styles = _parse_styles(_records(payload, "styles", "styles"), bone_ids)
    atlases = [_parse_atlas(entry) for entry in _records(payload, "atlases", "atlases")]

    armature = Armature(bones=bones, animations=animations, styles=styles, atlases=atlases)
    return armature.validate()


def _decode_atlas(atlas: AtlasTexture, data: bytes, ctx: Optional[moderngl.Context]) -> AtlasTexture:
    try:
        img = Image.open(BytesIO(data)).convert('RGBA')
    except OSError as exc:
        raise DataIntegrityError(f"Atlas '{atlas.filename}' is not a readable image: {exc}") from exc
    atlas.image = img
    atlas.size = img.size

    if ctx is not None:
        tex = ctx.texture(img.size, 4, img.tobytes())
        tex.filter = (moderngl.LINEAR, moderngl.LINEAR)
        atlas.texture = tex

    return atlas


def load(path: Path | str, ctx: Optional[moderngl.Context] = None) -> Tuple[Armature, List[AtlasTexture]]:
    """
    Load a SkelForm export.

    Args:
        path: Export zip or bare armature.json
        ctx: ModernGL context; when given, atlases are uploaded to the GPU

    Returns:
        (armature, atlas textures)

    Raises:
        FileNotFoundError: If the file or an atlas inside the zip is missing
        DataIntegrityError: If the armature data or an atlas image is malformed
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"Armature file not found: {file_path}")

    if not zipfile.is_zipfile(file_path):
        armature = armature_from_dict(_parse_json(file_path.read_bytes(), file_path))
        logger.info("Loaded %s: %r (no atlases)", file_path.name, armature)
        return armature, []

    with zipfile.ZipFile(file_path) as archive:
        try:
            raw = archive.read(ARMATURE_FILENAME)
        except KeyError:
            raise DataIntegrityError(f"{file_path} has no {ARMATURE_FILENAME}") from None

        armature = armature_from_dict(_parse_json(raw, file_path))

        for atlas in armature.atlases:
            try:
                data = archive.read(atlas.filename)
            except KeyError:
                raise FileNotFoundError(f"Atlas '{atlas.filename}' missing from {file_path}") from None
            _decode_atlas(atlas, data, ctx)

    logger.info("Loaded %s: %r", file_path.name, armature)
    return armature, list(armature.atlases)


def _parse_json(raw: bytes, source: Path) -> Dict[str, Any]:
    try:
        return json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise DataIntegrityError(f"{source} is not UTF-8 text: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise DataIntegrityError(f"{source} is not valid JSON: {exc}") from exc
