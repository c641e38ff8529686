"""
SkelForm - 2D Skeletal Animation Runtime

Loads SkelForm armatures, blends their animations, resolves the bone
hierarchy and draws the result with ModernGL.

Per frame: time_frame -> animate -> construct -> draw.
"""

# Configuration
from .config.settings import *

# Errors
from .errors import ContractViolationError, DataIntegrityError, SkelformError

# Animation
from .animation import (
    Animation,
    AnimationPlayer,
    AnimationTarget,
    Armature,
    Bone,
    ConstructOptions,
    InterpolationType,
    Keyframe,
    Mesh,
    PlaybackLayer,
    ResolvedBone,
    Track,
    Transform2D,
    animate,
    blend_weight,
    construct,
    evaluate,
    time_frame,
)

# Loaders
from .loaders import AtlasTexture, armature_from_dict, load

# Rendering
from .rendering import DrawPrimitive, SpriteRenderer, Style, StyleOverride, TextureRegion, draw

__version__ = "0.1.0"
__all__ = [
    # Config (exported via *)
    # Errors
    "SkelformError",
    "DataIntegrityError",
    "ContractViolationError",
    # Animation
    "Animation",
    "AnimationPlayer",
    "AnimationTarget",
    "Armature",
    "Bone",
    "ConstructOptions",
    "InterpolationType",
    "Keyframe",
    "Mesh",
    "PlaybackLayer",
    "ResolvedBone",
    "Track",
    "Transform2D",
    "animate",
    "blend_weight",
    "construct",
    "evaluate",
    "time_frame",
    # Loaders
    "AtlasTexture",
    "armature_from_dict",
    "load",
    # Rendering
    "DrawPrimitive",
    "SpriteRenderer",
    "Style",
    "StyleOverride",
    "TextureRegion",
    "draw",
]
