"""
Render queue elements and the renderer bridge.

Builtin commands append elements to the runtime's render queue during a
frame's statement pass; ``render_queue`` draws the whole queue onto a
surface, translated by the frame's origin offset.
"""

from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from ...surface import Surface

# where text lands when a script gives no position
DEFAULT_TEXT_POSITION = (10.0, 20.0)


@dataclass
class ImageElement:
    handle: Any
    url: str
    x: float
    y: float
    w: float
    h: float


@dataclass
class TextElement:
    content: str
    size: float
    color: str
    x: float = DEFAULT_TEXT_POSITION[0]
    y: float = DEFAULT_TEXT_POSITION[1]


RenderElement = Union[ImageElement, TextElement]


def render_queue(surface: Surface, queue: List[RenderElement],
                 offset: Tuple[float, float]) -> None:
    """Clear the surface and draw every queued element at ``offset``."""
    surface.clear()
    surface.translate(*offset)
    for element in queue:
        if isinstance(element, ImageElement):
            if element.handle is not None:
                surface.draw_image(element.handle, element.x, element.y,
                                   element.w, element.h)
        elif isinstance(element, TextElement):
            surface.draw_text(element.content,
                              element.x or DEFAULT_TEXT_POSITION[0],
                              element.y or DEFAULT_TEXT_POSITION[1],
                              element.size or 16, element.color or '#fff')
        else:
            raise TypeError(f"Unknown render element: {type(element).__name__}")
    surface.present()
