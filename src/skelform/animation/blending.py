"""
Blending

Combines any number of concurrently playing animations into each bone's
local transform.

Blend policy, per bone channel:

- Every animation with a track for the channel contributes its sampled
  value ``v_i`` with weight ``w_i``; ``W`` is the sum of those weights.
- The target ``T`` is the normalized weighted average ``sum(w_i * v_i) / W``.
  Rotations are averaged along the shortest arc around their weighted
  circular mean, and land within half a turn of the rest rotation when
  more than one animation contributes.
- ``W >= 1``: the channel becomes ``T``.
- ``0 < W < 1``: the channel moves ``W`` of the way from the rest pose
  towards ``T``.
- No contributor, or ``W == 0``: the channel keeps its rest value.

The result does not depend on the order animations are listed in.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from ..errors import ContractViolationError
from .animation import Animation, AnimationTarget, shortest_angle
from .skeleton import Bone, Transform2D

_CHANNELS = (
    AnimationTarget.POSITION_X,
    AnimationTarget.POSITION_Y,
    AnimationTarget.ROTATION,
    AnimationTarget.SCALE_X,
    AnimationTarget.SCALE_Y,
)


def _read_channel(transform: Transform2D, target: AnimationTarget) -> float:
    if target == AnimationTarget.POSITION_X:
        return float(transform.position[0])
    if target == AnimationTarget.POSITION_Y:
        return float(transform.position[1])
    if target == AnimationTarget.ROTATION:
        return transform.rotation
    if target == AnimationTarget.SCALE_X:
        return float(transform.scale[0])
    return float(transform.scale[1])


def _write_channel(transform: Transform2D, target: AnimationTarget, value: float):
    if target == AnimationTarget.POSITION_X:
        transform.position[0] = value
    elif target == AnimationTarget.POSITION_Y:
        transform.position[1] = value
    elif target == AnimationTarget.ROTATION:
        transform.rotation = value
    elif target == AnimationTarget.SCALE_X:
        transform.scale[0] = value
    else:
        transform.scale[1] = value


def _check_inputs(animations: Sequence[Animation], frames: Sequence[float],
                  weights: Optional[Sequence[float]]) -> List[float]:
    if len(animations) != len(frames):
        raise ContractViolationError(
            f"animate() got {len(animations)} animations but {len(frames)} frame positions"
        )
    if weights is None:
        return [1.0] * len(animations)
    if len(weights) != len(animations):
        raise ContractViolationError(
            f"animate() got {len(animations)} animations but {len(weights)} weights"
        )
    checked = []
    for weight in weights:
        weight = float(weight)
        if not math.isfinite(weight) or weight < 0.0:
            raise ContractViolationError(f"Blend weights must be finite and >= 0, got {weight}")
        checked.append(weight)
    return checked


def _mean_angle(rest: float, samples: Sequence[float], weights: Sequence[float], total: float) -> float:
    if len(samples) == 1:
        return samples[0]

    # Anchor on the weighted circular mean so list order cannot pick the branch
    sin_sum = math.fsum(w * math.sin(v) for v, w in zip(samples, weights))
    cos_sum = math.fsum(w * math.cos(v) for v, w in zip(samples, weights))
    reference = math.atan2(sin_sum, cos_sum) if (sin_sum or cos_sum) else rest

    offset = math.fsum(w * shortest_angle(reference, v) for v, w in zip(samples, weights)) / total
    return rest + shortest_angle(rest, reference + offset)


def blend_channel(rest: float, samples: Sequence[float], weights: Sequence[float],
                  is_rotation: bool = False) -> float:
    """
    Blend sampled channel values with the rest value.

    Args:
        rest: Rest pose value for the channel
        samples: One sampled value per contributing animation
        weights: Matching non-negative weights
        is_rotation: Average along the shortest arc

    Returns:
        Blended channel value
    """
    total = math.fsum(weights)
    if not samples or total <= 0.0:
        return rest

    if is_rotation:
        target = _mean_angle(rest, samples, weights, total)
        if total >= 1.0:
            return target
        return rest + shortest_angle(rest, target) * total

    target = math.fsum(w * v for v, w in zip(samples, weights)) / total
    if total >= 1.0:
        return target
    return rest + (target - rest) * total


def animate(bones: Sequence[Bone], animations: Sequence[Animation], frames: Sequence[float],
            weights: Optional[Sequence[float]] = None):
    """
    Write blended local transforms into ``bones``.

    Args:
        bones: Armature bones, updated in place
        animations: Active animations
        frames: Frame position for each animation (see time_frame)
        weights: Mixing weight for each animation (defaults to 1.0 each)

    Raises:
        ContractViolationError: If the lists differ in length or a weight
            is negative; no bone is modified in that case
    """
    weights = _check_inputs(animations, frames, weights)

    # Sample each animation once per call
    sampled = [animation.sample_all(frame) for animation, frame in zip(animations, frames)]

    for bone in bones:
        local = bone.rest.copy()
        for target in _CHANNELS:
            samples = []
            channel_weights = []
            for values, weight in zip(sampled, weights):
                value = values.get((bone.id, target))
                if value is None:
                    continue
                samples.append(value)
                channel_weights.append(weight)

            if samples:
                rest_value = _read_channel(bone.rest, target)
                blended = blend_channel(
                    rest_value, samples, channel_weights,
                    is_rotation=target == AnimationTarget.ROTATION,
                )
                _write_channel(local, target, blended)

        bone.local = local
