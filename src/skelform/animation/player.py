"""
Animation Player

Manages animation layers and drives the per-frame pipeline.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from ..config.settings import DEFAULT_BLEND_FRAMES, DEFAULT_PLAYBACK_SPEED
from .animation import Animation
from .blending import animate
from .construct import ConstructOptions, ResolvedBone, construct
from .skeleton import Armature
from .timing import blend_weight, time_frame


logger = logging.getLogger(__name__)


@dataclass
class PlaybackLayer:
    """One playing animation and how to play it."""

    animation: Animation
    start_time: float
    loop: bool = True
    ping_pong: bool = False
    speed: float = DEFAULT_PLAYBACK_SPEED
    weight: float = 1.0
    blend_frames: float = DEFAULT_BLEND_FRAMES

    def frame_at(self, now: float) -> float:
        return time_frame(now - self.start_time, self.animation, self.loop, self.ping_pong, self.speed)

    def weight_at(self, now: float) -> float:
        # Fade-in counts frames actually played, not the looped position
        played = max(now - self.start_time, 0.0) * self.speed * self.animation.fps
        return self.weight * blend_weight(played, self.blend_frames)


class AnimationPlayer:
    """
    Plays animations on an armature.

    Manages:
    - Active playback layers (any number, blended together)
    - Start times against a monotonic clock
    - Running time_frame -> animate -> construct for each update
    """

    def __init__(self, armature: Armature, clock: Callable[[], float] = time.perf_counter):
        """
        Initialize animation player.

        Args:
            armature: Armature to animate
            clock: Monotonic time source in seconds
        """
        self.armature = armature
        self.clock = clock
        self.layers: List[PlaybackLayer] = []
        self.options = ConstructOptions()

    def play(self, animation: Union[int, str], loop: bool = True, ping_pong: bool = False,
             speed: float = DEFAULT_PLAYBACK_SPEED, weight: float = 1.0,
             blend_frames: float = DEFAULT_BLEND_FRAMES, start_time: Optional[float] = None) -> PlaybackLayer:
        """
        Start playing an animation on a new layer.

        Args:
            animation: Animation index or name
            loop: Whether to loop the animation
            ping_pong: Play back and forth when looping
            speed: Playback speed multiplier
            weight: Mixing weight once fully blended in
            blend_frames: Frames to fade the layer in over
            start_time: Clock time playback starts at (now if None)

        Returns:
            The new layer
        """
        layer = PlaybackLayer(
            animation=self.armature.get_animation(animation),
            start_time=self.clock() if start_time is None else start_time,
            loop=loop,
            ping_pong=ping_pong,
            speed=speed,
            weight=weight,
            blend_frames=blend_frames,
        )
        self.layers.append(layer)
        logger.debug("Playing '%s' (loop=%s, ping_pong=%s)", layer.animation.name, loop, ping_pong)
        return layer

    def stop(self, animation: Union[int, str]):
        """Remove every layer playing the given animation."""
        target = self.armature.get_animation(animation)
        self.layers = [layer for layer in self.layers if layer.animation is not target]

    def clear(self):
        """Stop everything and reset the armature to its rest pose."""
        self.layers.clear()
        self.armature.reset_pose()

    def update(self, now: Optional[float] = None) -> List[ResolvedBone]:
        """
        Advance all layers and resolve the armature.

        Args:
            now: Clock time to evaluate at (reads the clock if None)

        Returns:
            Resolved bones for drawing
        """
        if now is None:
            now = self.clock()

        animations = [layer.animation for layer in self.layers]
        frames = [layer.frame_at(now) for layer in self.layers]
        weights = [layer.weight_at(now) for layer in self.layers]

        animate(self.armature.bones, animations, frames, weights)
        return construct(self.armature, self.options)

    def __repr__(self):
        names = ", ".join(layer.animation.name for layer in self.layers) or "None"
        return f"AnimationPlayer(layers=[{names}])"
