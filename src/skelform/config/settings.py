"""
Runtime Configuration Settings

All configuration constants for the animation runtime.
Modify these values to change playback and rendering defaults.
"""

# ============================================================================
# Asset Format
# ============================================================================

ARMATURE_FILENAME = "armature.json"  # Entry inside a SkelForm export zip
NO_PARENT = -1                       # parent_id used for root bones in exports

# ============================================================================
# Playback Settings
# ============================================================================

DEFAULT_FPS = 60                # Frames per second when an animation omits "fps"
DEFAULT_PLAYBACK_SPEED = 1.0    # Multiplier applied to elapsed time
DEFAULT_BLEND_FRAMES = 0        # Frames to fade a newly played animation in (0 = instant)

# ============================================================================
# Rendering Settings
# ============================================================================

DEFAULT_TINT = (1.0, 1.0, 1.0, 1.0)  # RGBA, 0.0 to 1.0
DEFAULT_ZINDEX = 0.0

# Demo window (examples/basic.py)
WINDOW_SIZE = (1280, 720)
WINDOW_TITLE = "SkelForm - ModernGL Demo"
GL_VERSION = (3, 3)
CLEAR_COLOR = (0.5, 0.5, 0.5)
