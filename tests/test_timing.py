"""Tests for time_frame and blend_weight"""

import pytest

from skelform import Animation, time_frame
from skelform.animation.timing import blend_weight


def make_animation(length=10.0, fps=20.0):
    return Animation("test", fps=fps, length=length)


def test_time_frame_converts_seconds_to_frames():
    """0.5s at 20fps is frame 10"""
    anim = make_animation(length=40.0)
    assert time_frame(0.5, anim, False, False) == pytest.approx(10.0)


def test_time_frame_clamps_without_loop():
    """Non-looping playback is monotonic and stops exactly at the last frame"""
    anim = make_animation()
    previous = -1.0
    for step in range(40):
        frame = time_frame(step * 0.05, anim, False, False)
        assert frame >= previous
        assert frame <= anim.length
        previous = frame

    assert time_frame(100.0, anim, False, False) == anim.length


def test_time_frame_ignores_ping_pong_without_loop():
    anim = make_animation()
    assert time_frame(5.0, anim, False, True) == anim.length


def test_time_frame_loop_is_periodic():
    """Looping wraps: t and t + one animation length map to the same frame"""
    anim = make_animation(length=10.0, fps=20.0)
    period = anim.length / anim.fps
    for t in (0.0, 0.1, 0.23, 0.37, 0.49):
        assert time_frame(t, anim, True, False) == pytest.approx(
            time_frame(t + period, anim, True, False), abs=1e-9
        )


def test_time_frame_loop_wraps_to_start():
    anim = make_animation(length=10.0, fps=20.0)
    assert time_frame(0.6, anim, True, False) == pytest.approx(2.0)


def test_time_frame_ping_pong_triangle_wave():
    """Ping-pong rises to length then comes back down symmetrically"""
    anim = make_animation(length=10.0, fps=1.0)

    assert time_frame(0.0, anim, True, True) == pytest.approx(0.0)
    assert time_frame(4.0, anim, True, True) == pytest.approx(4.0)
    assert time_frame(10.0, anim, True, True) == pytest.approx(10.0)
    assert time_frame(14.0, anim, True, True) == pytest.approx(6.0)
    assert time_frame(20.0, anim, True, True) == pytest.approx(0.0)

    for offset in (1.0, 3.5, 7.0, 9.0):
        rising = time_frame(10.0 - offset, anim, True, True)
        falling = time_frame(10.0 + offset, anim, True, True)
        assert rising == pytest.approx(falling)
        assert 0.0 <= rising <= anim.length


def test_time_frame_zero_length_is_zero():
    anim = make_animation(length=0.0)
    for loop, ping_pong in ((False, False), (True, False), (True, True)):
        assert time_frame(3.0, anim, loop, ping_pong) == 0.0


def test_time_frame_speed_scales_time():
    anim = make_animation(length=100.0, fps=10.0)
    assert time_frame(1.0, anim, False, False, speed=2.0) == pytest.approx(20.0)
    assert time_frame(1.0, anim, False, False, speed=0.5) == pytest.approx(5.0)


def test_time_frame_negative_time_starts_at_zero():
    anim = make_animation()
    assert time_frame(-1.0, anim, True, False) == 0.0


def test_blend_weight_ramps_to_one():
    assert blend_weight(0.0, 10) == 0.0
    assert blend_weight(5.0, 10) == pytest.approx(0.5)
    assert blend_weight(25.0, 10) == 1.0
    assert blend_weight(3.0, 0) == 1.0
