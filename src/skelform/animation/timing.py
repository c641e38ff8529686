"""
Timing

Maps elapsed playback time onto an animation's frame range.
"""

from __future__ import annotations

from ..config.settings import DEFAULT_PLAYBACK_SPEED
from .animation import Animation


def time_frame(elapsed: float, animation: Animation, loop: bool, ping_pong: bool,
               speed: float = DEFAULT_PLAYBACK_SPEED) -> float:
    """
    Convert elapsed seconds into a frame position.

    Args:
        elapsed: Seconds since playback started (negative scaled time counts as 0)
        animation: Animation providing fps and frame length
        loop: Wrap around at the end instead of holding the last frame
        ping_pong: When looping, play forwards then backwards
        speed: Playback speed multiplier

    Returns:
        Frame position within [0, animation.length]
    """
    length = animation.length
    if length <= 0:
        return 0.0

    raw = max(elapsed * speed, 0.0) * animation.fps

    if not loop:
        return min(raw, length)

    if not ping_pong:
        return raw % length

    # Triangle wave: forwards over [0, length], then back down
    phase = raw % (2.0 * length)
    if phase <= length:
        return phase
    return 2.0 * length - phase


def blend_weight(frame: float, blend_frames: float) -> float:
    """
    Fade-in weight for an animation that has been playing for ``frame`` frames.

    Ramps linearly from 0 to 1 over ``blend_frames``; returns 1 when
    blending is disabled.
    """
    if blend_frames <= 0:
        return 1.0
    return min(max(frame, 0.0) / blend_frames, 1.0)
