"""
Animation

Keyframe tracks and per-frame sampling.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ..config.settings import DEFAULT_FPS
from ..errors import DataIntegrityError


class InterpolationType(Enum):
    """Keyframe interpolation types."""
    LINEAR = "Linear"
    STEP = "Step"


class AnimationTarget(Enum):
    """Bone channels a track can drive."""
    POSITION_X = "PositionX"
    POSITION_Y = "PositionY"
    ROTATION = "Rotation"
    SCALE_X = "ScaleX"
    SCALE_Y = "ScaleY"


def shortest_angle(from_angle: float, to_angle: float) -> float:
    """
    Signed difference between two angles along the shortest arc.

    Args:
        from_angle: Start angle in radians
        to_angle: End angle in radians

    Returns:
        Delta in [-pi, pi) such that from_angle + delta is equivalent to to_angle
    """
    return (to_angle - from_angle + math.pi) % (2.0 * math.pi) - math.pi


class Keyframe:
    """
    Single keyframe in a track.

    Stores frame position, scalar value and how to interpolate towards
    the following keyframe.
    """

    __slots__ = ("frame", "value", "interpolation")

    def __init__(self, frame: float, value: float,
                 interpolation: InterpolationType = InterpolationType.LINEAR):
        self.frame = float(frame)
        self.value = float(value)
        self.interpolation = interpolation

    def __repr__(self):
        return f"Keyframe(f={self.frame:.2f}, v={self.value:.4f}, {self.interpolation.value})"


class Track:
    """
    Keyframe sequence driving one channel of one bone.

    Keyframes must be added in non-decreasing frame order.
    """

    def __init__(self, bone_id: int, target: AnimationTarget):
        """
        Initialize track.

        Args:
            bone_id: Index of the bone this track animates
            target: Channel to animate
        """
        self.bone_id = bone_id
        self.target = target
        self.keyframes: List[Keyframe] = []
        self._frames: List[float] = []

    def add_keyframe(self, frame: float, value: float,
                     interpolation: InterpolationType = InterpolationType.LINEAR):
        """Append a keyframe to this track."""
        keyframe = Keyframe(frame, value, interpolation)
        self.keyframes.append(keyframe)
        self._frames.append(keyframe.frame)

    @property
    def is_rotation(self) -> bool:
        return self.target == AnimationTarget.ROTATION

    def validate(self):
        """
        Raises:
            DataIntegrityError: If keyframe positions ever decrease
        """
        for previous, current in zip(self.keyframes, self.keyframes[1:]):
            if current.frame < previous.frame:
                raise DataIntegrityError(
                    f"Keyframes for bone {self.bone_id} {self.target.value} go backwards "
                    f"({previous.frame} -> {current.frame})"
                )

    def evaluate(self, frame: float) -> Optional[float]:
        """
        Sample the track at a frame position.

        Holds the first/last value outside the keyed range and returns
        exact keyframe values on exact hits.

        Args:
            frame: Frame position

        Returns:
            Interpolated value, or None for a track without keyframes
        """
        if not self.keyframes:
            return None

        index = bisect_right(self._frames, frame) - 1
        if index < 0:
            return self.keyframes[0].value
        k0 = self.keyframes[index]
        if k0.frame == frame or index == len(self.keyframes) - 1:
            return k0.value

        if k0.interpolation == InterpolationType.STEP:
            return k0.value

        k1 = self.keyframes[index + 1]
        t = (frame - k0.frame) / (k1.frame - k0.frame)

        if self.is_rotation:
            return k0.value + shortest_angle(k0.value, k1.value) * t
        return k0.value * (1.0 - t) + k1.value * t

    def __repr__(self):
        return f"Track(bone={self.bone_id}, target={self.target.value}, keyframes={len(self.keyframes)})"


def evaluate(track: Track, frame: float) -> Optional[float]:
    """Sample ``track`` at ``frame``; see :meth:`Track.evaluate`."""
    return track.evaluate(frame)


class Animation:
    """
    Named animation made of per-bone, per-channel tracks.

    Length is measured in frames. When not given explicitly it is taken
    from the last keyframe of any track.
    """

    def __init__(self, name: str, fps: float = DEFAULT_FPS, length: Optional[float] = None):
        """
        Initialize animation.

        Args:
            name: Animation name
            fps: Playback rate used to convert seconds into frames
            length: Frame length (computed from keyframes if None)
        """
        self.name = name
        self.fps = float(fps)
        self.tracks: Dict[Tuple[int, AnimationTarget], Track] = {}
        self._explicit_length = None if length is None else float(length)
        self._keyed_length = 0.0

    @property
    def length(self) -> float:
        if self._explicit_length is not None:
            return self._explicit_length
        return self._keyed_length

    def get_track(self, bone_id: int, target: AnimationTarget) -> Optional[Track]:
        return self.tracks.get((bone_id, target))

    def track_for(self, bone_id: int, target: AnimationTarget) -> Track:
        """Get the track for a bone channel, creating it if needed."""
        key = (bone_id, target)
        track = self.tracks.get(key)
        if track is None:
            track = Track(bone_id, target)
            self.tracks[key] = track
        return track

    def add_keyframe(self, bone_id: int, target: AnimationTarget, frame: float, value: float,
                     interpolation: InterpolationType = InterpolationType.LINEAR):
        """Append a keyframe to the matching track."""
        self.track_for(bone_id, target).add_keyframe(frame, value, interpolation)
        self._keyed_length = max(self._keyed_length, float(frame))

    def validate(self, bone_count: int):
        """
        Raises:
            DataIntegrityError: On tracks for unknown bones, decreasing
                keyframes or an invalid length/fps
        """
        if self.length < 0:
            raise DataIntegrityError(f"Animation '{self.name}' has negative length {self.length}")
        if not self.fps > 0:
            raise DataIntegrityError(f"Animation '{self.name}' has non-positive fps {self.fps}")
        for (bone_id, _), track in self.tracks.items():
            if not 0 <= bone_id < bone_count:
                raise DataIntegrityError(
                    f"Animation '{self.name}' animates missing bone {bone_id}"
                )
            track.validate()

    def sample_all(self, frame: float) -> Dict[Tuple[int, AnimationTarget], float]:
        """
        Sample every track at a frame position.

        Returns:
            Dictionary mapping (bone_id, target) -> value
        """
        results = {}
        for key, track in self.tracks.items():
            value = track.evaluate(frame)
            if value is not None:
                results[key] = value
        return results

    def __repr__(self):
        return f"Animation(name='{self.name}', length={self.length:.1f}f, fps={self.fps:g}, tracks={len(self.tracks)})"
