"""
pyglet host for the OSL runtime: a window to draw on, audio playback,
joystick polling and input event forwarding.

The window is pumped from the asyncio frame loop (``present`` dispatches
pending events and flips), so ``pyglet.app.run`` is never used.
"""

import logging
from io import BytesIO
from typing import Any, List, Optional

import pyglet

from .lang.runtime.host import GamepadButton, GamepadSource, GamepadState
from .lang.runtime.loaders import SoundHandle
from .surface import Surface, parse_color

logger = logging.getLogger(__name__)


class PygletSurface(Surface):
    """
    Surface backed by a pyglet window.

    Canvas coordinates (origin top left) are flipped into pyglet's
    bottom-left convention when drawing.
    """

    def __init__(self, width: int = 640, height: int = 360,
                 caption: str = "OSL", visible: bool = True):
        super().__init__(width, height)
        self.caption = caption
        self.visible = visible
        self._window = None
        self._batch = pyglet.graphics.Batch()
        self._drawables: List[Any] = []

    @property
    def window(self) -> pyglet.window.Window:
        if self._window is None:
            self._window = pyglet.window.Window(
                self.width, self.height, caption=self.caption,
                visible=self.visible)
        return self._window

    def is_available(self) -> bool:
        try:
            self.window
        except Exception as e:
            logger.warning("no pyglet window available: %s", e)
            return False
        return True

    def resize(self, width: int, height: int) -> None:
        super().resize(width, height)
        self.window.set_size(self.width, self.height)

    def clear(self) -> None:
        self._batch = pyglet.graphics.Batch()
        self._drawables = []

    def draw_image(self, handle, x, y, w, h) -> None:
        ox, oy = self.origin
        sprite = pyglet.sprite.Sprite(handle, batch=self._batch)
        sprite.x = x + ox
        sprite.y = self.height - (y + oy) - h
        if handle.width and handle.height:
            sprite.scale_x = w / handle.width
            sprite.scale_y = h / handle.height
        self._drawables.append(sprite)

    def draw_text(self, content, x, y, size, color) -> None:
        ox, oy = self.origin
        # dpi=72 makes font_size a pixel size, as on a canvas
        label = pyglet.text.Label(content,
                                  font_name='Arial',
                                  font_size=size,
                                  dpi=72,
                                  x=x + ox,
                                  y=self.height - (y + oy),
                                  anchor_x='left',
                                  anchor_y='baseline',
                                  color=parse_color(color),
                                  batch=self._batch)
        self._drawables.append(label)

    def present(self) -> None:
        super().present()
        window = self.window
        window.switch_to()
        window.dispatch_events()
        window.clear()
        self._batch.draw()
        window.flip()

    def decode_image(self, data: bytes, name: str) -> Any:
        return pyglet.image.load(name, file=BytesIO(data))

    def close(self) -> None:
        if self._window is not None:
            self._window.close()
            self._window = None


class PygletSound(SoundHandle):
    """A fully decoded sound, replayed on a fresh player on each restart."""

    def __init__(self, source: pyglet.media.Source):
        self.source = source
        self._player: Optional[pyglet.media.Player] = None
        self._volume = 1.0

    @classmethod
    def from_bytes(cls, data: bytes, name: str) -> "PygletSound":
        return cls(pyglet.media.load(name, file=BytesIO(data), streaming=False))

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value
        if self._player is not None:
            self._player.volume = value

    def restart(self, volume: float = 1.0) -> None:
        if self._player is not None:
            self._player.pause()
            self._player.delete()
        self._volume = volume
        self._player = pyglet.media.Player()
        self._player.queue(self.source)
        self._player.volume = volume
        self._player.play()


class JoystickGamepads(GamepadSource):
    """Gamepads polled from pyglet joysticks, opened once at construction."""

    def __init__(self):
        self.joysticks = []
        for joystick in pyglet.input.get_joysticks():
            try:
                joystick.open()
            except pyglet.input.DeviceOpenException as e:
                logger.warning("cannot open joystick %s: %s", joystick.device.name, e)
                continue
            self.joysticks.append(joystick)

    def snapshot(self) -> List[Optional[GamepadState]]:
        pads = []
        for joystick in self.joysticks:
            buttons = [GamepadButton(bool(b), 1.0 if b else 0.0) for b in joystick.buttons]
            pads.append(GamepadState(
                id=joystick.device.name or "joystick",
                axes=[joystick.x, joystick.y, joystick.rx, joystick.ry],
                buttons=buttons,
            ))
        return pads


def bind_input(surface: PygletSurface, runtime) -> None:
    """Forward window mouse and keyboard events to ``runtime``."""
    window = surface.window

    def on_mouse_motion(x, y, dx, dy):
        runtime.pointer_moved(x, surface.height - y)

    def on_mouse_drag(x, y, dx, dy, buttons, modifiers):
        runtime.pointer_moved(x, surface.height - y)

    def on_mouse_press(x, y, button, modifiers):
        runtime.pointer_pressed()

    def on_mouse_release(x, y, button, modifiers):
        runtime.pointer_released()

    def on_key_press(symbol, modifiers):
        runtime.key_pressed(pyglet.window.key.symbol_string(symbol))

    def on_key_release(symbol, modifiers):
        runtime.key_released(pyglet.window.key.symbol_string(symbol))

    def on_close():
        # the host closes the window once the frame loop has stopped
        runtime.stop()
        return pyglet.event.EVENT_HANDLED

    window.push_handlers(on_mouse_motion, on_mouse_drag, on_mouse_press,
                         on_mouse_release, on_key_press, on_key_release,
                         on_close)
