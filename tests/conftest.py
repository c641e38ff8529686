"""Shared fixtures for armature tests"""

import math

import pytest

from skelform import armature_from_dict


def chain_payload():
    """root -> child -> grandchild, each offset one unit along x"""
    return {
        "bones": [
            {"id": 0, "name": "root", "parent_id": -1, "pos": {"x": 0, "y": 0}, "tex": "body", "zindex": 1},
            {"id": 1, "name": "child", "parent_id": 0, "pos": {"x": 1, "y": 0}, "tex": "arm", "zindex": 0},
            {"id": 2, "name": "grandchild", "parent_id": 1, "pos": {"x": 1, "y": 0}, "tex": "hand", "zindex": 2},
        ],
        "animations": [
            {
                "name": "wave",
                "fps": 20,
                "keyframes": [
                    {"frame": 0, "bone_id": 1, "element": "Rotation", "value": 0.0},
                    {"frame": 10, "bone_id": 1, "element": "Rotation", "value": math.pi / 2},
                ],
            },
        ],
        "styles": [
            {
                "name": "default",
                "textures": [
                    {"name": "body", "offset": {"x": 0, "y": 0}, "size": {"x": 32, "y": 64}, "atlas_idx": 0},
                    {"name": "arm", "offset": {"x": 32, "y": 0}, "size": {"x": 16, "y": 32}, "atlas_idx": 0},
                    {"name": "hand", "offset": {"x": 48, "y": 0}, "size": {"x": 16, "y": 16}, "atlas_idx": 0},
                ],
            },
        ],
    }


def slide_payload():
    """root + child with a translation track moving child from x=0 to x=10"""
    return {
        "bones": [
            {"id": 0, "name": "root", "parent_id": -1, "pos": {"x": 5, "y": 5}},
            {"id": 1, "name": "child", "parent_id": 0},
        ],
        "animations": [
            {
                "name": "A",
                "fps": 20,
                "keyframes": [
                    {"frame": 0, "bone_id": 1, "element": "PositionX", "value": 0},
                    {"frame": 10, "bone_id": 1, "element": "PositionX", "value": 10},
                    {"frame": 0, "bone_id": 1, "element": "PositionY", "value": 0},
                    {"frame": 10, "bone_id": 1, "element": "PositionY", "value": 0},
                ],
            },
        ],
    }


@pytest.fixture
def chain_armature():
    return armature_from_dict(chain_payload())


@pytest.fixture
def slide_armature():
    return armature_from_dict(slide_payload())
