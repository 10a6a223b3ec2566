"""
oslcanvas: a frame-driven runtime for OSL scripts drawn on a 2D canvas.

- oslcanvas.lang: lexer, parser and runtime
- oslcanvas.surface: the drawing surface boundary and a recording surface
- oslcanvas.pyglet_surface: a pyglet window host
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("oslcanvas")
except PackageNotFoundError:  # pragma: no cover - handled when package not installed
    __version__ = "unknown"
