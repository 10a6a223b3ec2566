"""
Built-in command registry for the OSL runtime.

Maps command names to implementations. Arguments arrive as tokens; most
commands evaluate each token on its own, ``text`` evaluates the whole list
as one expression. No command raises: bad input falls back to defaults and
resource or storage failures are logged or ignored.
"""

import json
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from ..tokens import Token
from ..errors import ResourceLoadError
from .host import gamepads_to_value
from .render import ImageElement, TextElement
from .values import Value, is_number, is_truthy, to_display, to_number

if TYPE_CHECKING:
    from .interpreter import Runtime

CommandImpl = Callable[["Runtime", List[Value], List[Token], Optional[str]], Awaitable[Value]]


@dataclass
class BuiltinCommand:
    """A built-in command with its implementation."""
    name: str
    implementation: CommandImpl
    doc: str = ""


def _arg(args: List[Value], i: int) -> Value:
    return args[i] if i < len(args) else None


def _join_args(args: List[Value]) -> str:
    return ",".join("" if a is None else to_display(a) for a in args)


def _size(v: Value, default: int) -> Value:
    n = to_number(v or default)
    return n if math.isfinite(n) else default


# --- Drawing ---

async def _color(rt, args, tokens, style):
    color = _arg(args, 0)
    rt.store['_current_color'] = '#fff' if color is None else to_display(color)


async def _window(rt, args, tokens, style):
    key = _arg(args, 0)
    if not isinstance(key, str):
        return None
    window = rt.store['window']
    if not isinstance(window, dict):
        window = {}
        rt.store['window'] = window
    if key == 'dimensions':
        w = _size(_arg(args, 1), 640)
        h = _size(_arg(args, 2), 360)
        window['width'] = w
        window['height'] = h
        rt.surface.resize(w, h)
    else:
        window[key] = _arg(args, 1)


async def _image(rt, args, tokens, style):
    url = to_display(args[0]) if args else ''
    w = to_number(args[1]) if len(args) > 1 else 0
    h = to_number(args[2]) if len(args) > 2 else 0
    try:
        handle = await rt.loader.load_image(url)
    except ResourceLoadError as e:
        rt.log(f"image load failed: {url}")
        rt.logger.debug("%s", e)
        return None
    rt.queue.append(ImageElement(
        handle=handle,
        url=url,
        x=0,
        y=0,
        w=w or getattr(handle, 'width', 0),
        h=h or getattr(handle, 'height', 0),
    ))


async def _text(rt, args, tokens, style):
    content = rt.evaluator.evaluate(tokens) if tokens else ''
    size = _arg(args, 1)
    color = rt.store['_current_color']
    rt.queue.append(TextElement(
        content=to_display(content),
        size=size if is_number(size) else 16,
        color=color if is_truthy(color) else '#fff',
    ))


# --- Sound ---

async def _sound(rt, args, tokens, style):
    first = _arg(args, 0)
    sound_id = to_display(first) if is_truthy(first) else ''
    second = _arg(args, 1)
    action = to_display(second) if is_truthy(second) else 'load'
    volume = _arg(args, 2)
    volume = 1 if volume is None else to_number(volume)

    if action == 'load':
        try:
            await rt.loader.load_sound(sound_id)
        except ResourceLoadError as e:
            rt.log(f"sound load failed: {sound_id}")
            rt.logger.debug("%s", e)
    elif action == 'start':
        sound = rt.loader.sounds.get(sound_id)
        if sound is not None:
            sound.restart(volume)
        else:
            rt.log(f"sound not loaded: {sound_id}")
    elif action == 'volume':
        sound = rt.loader.sounds.get(sound_id)
        if sound is not None:
            sound.volume = volume


# --- Persistence ---

async def _save(rt, args, tokens, style):
    first = _arg(args, 0)
    what = to_display(first) if is_truthy(first) else ''
    second = _arg(args, 1)
    action = to_display(second) if is_truthy(second) else ''
    directory = rt.store['_save_dir']
    key = f"{to_display(directory) if is_truthy(directory) else ''}/{what}"

    if action == 'set_directory':
        rt.store['_save_dir'] = what
    elif action == 'set':
        value = _arg(args, 2)
        try:
            rt.storage.set(key, json.dumps('' if value is None else value, allow_nan=False))
        except (OSError, ValueError, TypeError) as e:
            rt.logger.debug("save %s ignored: %s", key, e)
    elif action == 'get':
        try:
            raw = rt.storage.get(key)
            rt.store[what] = json.loads(raw) if raw else None
        except (OSError, ValueError, TypeError) as e:
            rt.logger.debug("load %s ignored: %s", key, e)


# --- Math and input ---

async def _random(rt, args, tokens, style):
    a = _arg(args, 0)
    b = _arg(args, 1)
    a = 0 if a is None else to_number(a)
    b = 1 if b is None else to_number(b)
    value = rt.random.random() * (b - a + 1)
    if not math.isfinite(value):
        return math.nan
    return math.floor(value) + a


async def _dist(rt, args, tokens, style):
    x1, y1, x2, y2 = (to_number(_arg(args, i)) for i in range(4))
    return math.hypot(x1 - x2, y1 - y2)


async def _get_gamepads(rt, args, tokens, style):
    return gamepads_to_value(rt.gamepads.snapshot())


async def _rotur(rt, args, tokens, style):
    rt.log(f"rotur {_join_args(args)}")


class BuiltinRegistry:
    """
    Registry of built-in commands.

    Hosts may register extra commands; a registered name shadows a builtin.
    """

    def __init__(self):
        self._commands: Dict[str, BuiltinCommand] = {}
        self._register_all()

    def get(self, name: str) -> Optional[BuiltinCommand]:
        return self._commands.get(name)

    def register(self, command: BuiltinCommand) -> None:
        self._commands[command.name] = command

    def names(self) -> List[str]:
        return sorted(self._commands)

    def _register_all(self) -> None:
        builtins = [
            ("c", _color, "c <color>: set the text color"),
            ("window", _window, "window dimensions <w> <h> | window <key> <value>"),
            ("image", _image, "image <url> [w] [h]: draw an image at the origin"),
            ("text", _text, "text <expr...> [size]: draw text"),
            ("sound", _sound, "sound <id|url> load|start|volume [volume]"),
            ("save", _save, "save <key> set_directory|set|get [value]"),
            ("random", _random, "random <a> <b>: integer in [a, b]"),
            ("dist", _dist, "dist <x1> <y1> <x2> <y2>: euclidean distance"),
            ("getGamepads", _get_gamepads, "getGamepads: snapshot of connected gamepads"),
            ("rotur", _rotur, "rotur ...: log the arguments"),
        ]
        for name, impl, doc in builtins:
            self.register(BuiltinCommand(name, impl, doc))


_default_registry: Optional[BuiltinRegistry] = None


def get_builtin_registry() -> BuiltinRegistry:
    """Get the shared default registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = BuiltinRegistry()
    return _default_registry


async def call_builtin(rt: "Runtime", name: str, tokens: List[Token],
                       style: Optional[str] = None) -> Any:
    """
    Dispatch a command line.

    Each argument token is evaluated on its own. Unknown commands are
    logged and otherwise ignored.
    """
    args = [rt.evaluator.evaluate([t]) for t in tokens]
    command = rt.builtins.get(name)
    if command is None:
        rt.log(f"unhandled call: {name}({_join_args(args)})")
        return None
    return await command.implementation(rt, args, tokens, style)
