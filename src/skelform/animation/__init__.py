"""
Animation System

Provides 2D skeletal animation: sampling, blending and hierarchy resolution.
"""

from .skeleton import Armature, Bone, Mesh, Transform2D
from .animation import Animation, AnimationTarget, InterpolationType, Keyframe, Track, evaluate, shortest_angle
from .timing import blend_weight, time_frame
from .blending import animate, blend_channel
from .construct import ConstructOptions, ResolvedBone, compose, construct, transform_points
from .player import AnimationPlayer, PlaybackLayer

__all__ = [
    'Armature',
    'Bone',
    'Mesh',
    'Transform2D',
    'Animation',
    'AnimationTarget',
    'InterpolationType',
    'Keyframe',
    'Track',
    'evaluate',
    'shortest_angle',
    'time_frame',
    'blend_weight',
    'animate',
    'blend_channel',
    'ConstructOptions',
    'ResolvedBone',
    'compose',
    'construct',
    'transform_points',
    'AnimationPlayer',
    'PlaybackLayer',
]
