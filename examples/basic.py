#!/usr/bin/env python3
"""
Basic Playback Example

Loads a SkelForm export and plays its first animation back and forth,
centered in the window.

Usage:
    python examples/basic.py --armature path/to/export.skf

Controls:
    Arrow keys - Move the root bone
    WASD       - Move the second bone
    ESC        - Quit
"""

import logging

import moderngl_window as mglw

from skelform import (
    CLEAR_COLOR, GL_VERSION, WINDOW_SIZE, WINDOW_TITLE,
    ConstructOptions, SpriteRenderer, animate, construct, draw, load, time_frame,
)

logger = logging.getLogger(__name__)

ARMATURE_NIL = "Armature not found! Pass --armature with a SkelForm export."
MOVE_SPEED = 10.0


class BasicDemo(mglw.WindowConfig):
    """Single-armature playback demo"""

    gl_version = GL_VERSION
    title = WINDOW_TITLE
    window_size = WINDOW_SIZE
    aspect_ratio = None
    resizable = True

    @classmethod
    def add_arguments(cls, parser):
        parser.add_argument("--armature", default="untitled.skf", help="SkelForm export to play")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        self.armature = None
        self.textures = []
        try:
            self.armature, self.textures = load(self.argv.armature, ctx=self.ctx)
        except FileNotFoundError as exc:
            logger.error("%s (%s)", ARMATURE_NIL, exc)

        self.renderer = SpriteRenderer(self.ctx, self.wnd.buffer_size)
        self.held_keys = set()

    def on_render(self, time, frametime):
        """
        Render a frame.

        Args:
            time: Total elapsed time (seconds)
            frametime: Time since last frame (seconds)
        """
        self.ctx.clear(*CLEAR_COLOR)
        if self.armature is None or not self.armature.bones:
            return

        self._move_bones()

        if self.armature.animations:
            animation = self.armature.animations[0]
            frame = time_frame(time, animation, True, True)
            animate(self.armature.bones, [animation], [frame])

        width, height = self.wnd.buffer_size
        options = ConstructOptions(
            position=(width / 2.0, height / 2.0),
            scale=(0.25, 0.25),
            y_up=True,
        )
        resolved = construct(self.armature, options)
        styles = self.armature.styles[:1]
        draw(resolved, self.textures, styles, renderer=self.renderer)

    def _move_bones(self):
        keys = self.wnd.keys
        bindings = [
            (0, keys.UP, (0.0, MOVE_SPEED)),
            (0, keys.DOWN, (0.0, -MOVE_SPEED)),
            (0, keys.RIGHT, (MOVE_SPEED, 0.0)),
            (0, keys.LEFT, (-MOVE_SPEED, 0.0)),
            (1, keys.W, (0.0, MOVE_SPEED)),
            (1, keys.S, (0.0, -MOVE_SPEED)),
            (1, keys.D, (MOVE_SPEED, 0.0)),
            (1, keys.A, (-MOVE_SPEED, 0.0)),
        ]
        for bone_index, key, (dx, dy) in bindings:
            if key in self.held_keys and bone_index < len(self.armature.bones):
                # Rest pose is what animate() starts from each frame
                rest = self.armature.bones[bone_index].rest
                rest.position[0] += dx
                rest.position[1] += dy

    def on_resize(self, width: int, height: int):
        self.renderer.resize((width, height))

    def on_key_event(self, key, action, modifiers):
        keys = self.wnd.keys
        if action == keys.ACTION_PRESS:
            self.held_keys.add(key)
        elif action == keys.ACTION_RELEASE:
            self.held_keys.discard(key)

    def on_close(self):
        for atlas in self.textures:
            atlas.release()
        self.renderer.release()


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    BasicDemo.run()
