"""
Drawing surfaces for the OSL runtime.

``Surface`` is the renderer boundary: the runtime clears it, translates it by
the frame's origin offset, and draws the queued images and text. Coordinates
are canvas style: origin at the top left, y grows downward.

``RecordingSurface`` keeps every drawing call in memory; it backs the
headless CLI mode and the test suite.
"""

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Tuple

# canvas-style names accepted by the ``c`` command
NAMED_COLORS = {
    'white': (255, 255, 255, 255),
    'black': (0, 0, 0, 255),
    'red': (255, 0, 0, 255),
    'green': (0, 128, 0, 255),
    'lime': (0, 255, 0, 255),
    'blue': (0, 0, 255, 255),
    'yellow': (255, 255, 0, 255),
    'cyan': (0, 255, 255, 255),
    'magenta': (255, 0, 255, 255),
    'orange': (255, 165, 0, 255),
    'purple': (128, 0, 128, 255),
    'gray': (128, 128, 128, 255),
    'grey': (128, 128, 128, 255),
    'transparent': (0, 0, 0, 0),
}

DEFAULT_COLOR = (255, 255, 255, 255)


def parse_color(color: Any) -> Tuple[int, int, int, int]:
    """
    Convert ``#rgb``, ``#rgba``, ``#rrggbb``, ``#rrggbbaa`` or a color name
    into an RGBA byte tuple. Anything unrecognized is white.
    """
    if not isinstance(color, str):
        return DEFAULT_COLOR
    text = color.strip().lower()
    if text in NAMED_COLORS:
        return NAMED_COLORS[text]
    if not text.startswith('#'):
        return DEFAULT_COLOR
    digits = text[1:]
    try:
        if len(digits) in (3, 4):
            channels = [int(ch * 2, 16) for ch in digits]
        elif len(digits) in (6, 8):
            channels = [int(digits[i:i + 2], 16) for i in range(0, len(digits), 2)]
        else:
            return DEFAULT_COLOR
    except ValueError:
        return DEFAULT_COLOR
    if len(channels) == 3:
        channels.append(255)
    return tuple(channels)


class Surface(ABC):
    """Base class for OSL drawing surfaces"""

    def __init__(self, width: int = 640, height: int = 360):
        self.width = width
        self.height = height
        self.origin = (0.0, 0.0)

    def is_available(self) -> bool:
        """False when there is nothing to draw on; the runtime refuses to start."""
        return True

    def resize(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)

    def translate(self, x: float, y: float) -> None:
        """Set the origin that subsequent draw calls are relative to."""
        self.origin = (x, y)

    def present(self) -> None:
        """Called once the frame's queue has been drawn."""
        self.origin = (0.0, 0.0)

    @abstractmethod
    def clear(self) -> None:
        ...

    @abstractmethod
    def draw_image(self, handle: Any, x: float, y: float, w: float, h: float) -> None:
        ...

    @abstractmethod
    def draw_text(self, content: str, x: float, y: float, size: float, color: str) -> None:
        ...

    @abstractmethod
    def decode_image(self, data: bytes, name: str) -> Any:
        """Turn fetched bytes into an image handle with ``width``/``height``."""
        ...


@dataclass
class RecordedImage:
    """Image handle produced by RecordingSurface.decode_image."""
    name: str
    width: int = 0
    height: int = 0
    size: int = 0


def sniff_image_size(data: bytes) -> Tuple[int, int]:
    """Read pixel dimensions from a PNG or GIF header; (0, 0) when unknown."""
    if data[:8] == b'\x89PNG\r\n\x1a\n' and len(data) >= 24:
        return struct.unpack('>II', data[16:24])
    if data[:6] in (b'GIF87a', b'GIF89a') and len(data) >= 10:
        return struct.unpack('<HH', data[6:10])
    return (0, 0)


@dataclass
class RecordingSurface(Surface):
    """
    Headless surface that records drawing calls.

    ``ops`` holds the calls since the last ``present``; ``frames`` holds one
    op list per presented frame. Draw coordinates are recorded with the
    current origin applied.
    """
    width: int = 640
    height: int = 360
    available: bool = True
    ops: List[tuple] = field(default_factory=list)
    frames: List[List[tuple]] = field(default_factory=list)
    origin: Tuple[float, float] = (0.0, 0.0)

    def is_available(self) -> bool:
        return self.available

    def resize(self, width: int, height: int) -> None:
        super().resize(width, height)
        self.ops.append(('resize', self.width, self.height))

    def clear(self) -> None:
        self.ops.append(('clear',))

    def translate(self, x: float, y: float) -> None:
        super().translate(x, y)
        self.ops.append(('translate', x, y))

    def draw_image(self, handle, x, y, w, h) -> None:
        ox, oy = self.origin
        self.ops.append(('image', getattr(handle, 'name', handle), x + ox, y + oy, w, h))

    def draw_text(self, content, x, y, size, color) -> None:
        ox, oy = self.origin
        self.ops.append(('text', content, x + ox, y + oy, size, color))

    def present(self) -> None:
        super().present()
        self.frames.append(self.ops)
        self.ops = []

    def decode_image(self, data: bytes, name: str) -> RecordedImage:
        width, height = sniff_image_size(data)
        return RecordedImage(name, width, height, len(data))

    @property
    def last_frame(self) -> List[tuple]:
        return self.frames[-1] if self.frames else []

    def drawn(self, kind: str) -> List[tuple]:
        """Ops of one kind ('image' or 'text') from the last presented frame."""
        return [op for op in self.last_frame if op[0] == kind]
