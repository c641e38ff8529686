#!/usr/bin/env python3
"""
Print the contents of a SkelForm export.

Lists bones (with parents and rest pose), animations (fps, length,
tracks) and styles. Loads without a GL context, so atlases are decoded
but not uploaded.
"""

from __future__ import annotations

import argparse
import math
from pathlib import Path
import sys
from typing import List, Sequence

ROOT = Path(__file__).resolve().parents[1]

SRC_DIR = ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


def describe(armature) -> List[str]:
    lines = [f"Bones ({len(armature.bones)}):"]
    for bone in armature.bones:
        parent = armature.bones[bone.parent_id].name if bone.parent_id is not None else "-"
        pos = bone.rest.position
        mesh = f" mesh={bone.mesh.vertex_count}v" if bone.mesh is not None else ""
        lines.append(
            f"  [{bone.id}] {bone.name:<16} parent={parent:<12} "
            f"pos=({pos[0]:.1f}, {pos[1]:.1f}) rot={math.degrees(bone.rest.rotation):.1f}deg "
            f"tex={bone.texture or '-'} z={bone.zindex:g}{mesh}"
        )

    lines.append(f"Animations ({len(armature.animations)}):")
    for animation in armature.animations:
        seconds = animation.length / animation.fps
        lines.append(
            f"  {animation.name:<16} {animation.length:g} frames @ {animation.fps:g} fps "
            f"({seconds:.2f}s), {len(animation.tracks)} tracks"
        )

    lines.append(f"Styles ({len(armature.styles)}):")
    for style in armature.styles:
        lines.append(
            f"  {style.name:<16} {len(style.textures)} textures, {len(style.overrides)} overrides"
        )
    return lines


def cli(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Summarize the bones, animations and styles of a SkelForm export.",
    )
    parser.add_argument("path", help="Export zip or armature.json to inspect.")
    args = parser.parse_args(argv)

    from skelform import SkelformError, load

    try:
        armature, textures = load(args.path)
    except FileNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except SkelformError as exc:
        print(f"error: invalid armature: {exc}", file=sys.stderr)
        return 2

    for line in describe(armature):
        print(line)
    for atlas in textures:
        print(f"Atlas {atlas.filename}: {atlas.size[0]}x{atlas.size[1]}")
    return 0


if __name__ == "__main__":
    raise SystemExit(cli())
