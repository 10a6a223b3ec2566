"""
Frame-driven interpreter for OSL programs.

A ``Runtime`` owns the variable store, the resource caches and the render
queue. Once started it runs the whole statement list once per frame, then
draws whatever the pass queued and schedules the next frame.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set, Tuple

from ...surface import Surface
from ..ast import Assign, Call, Goto, If, Import, Label, Program, Statement
from ..errors import SurfaceUnavailableError
from ..lexer import tokenize
from ..parser import parse
from .builtins import BuiltinRegistry, call_builtin, get_builtin_registry
from .evaluator import Evaluator
from .host import (
    AsyncioFrameTimer, FrameTimer, GamepadSource, MemoryStorage,
    StaticGamepads, Storage, gamepads_to_value,
)
from .loaders import HttpResourceFetcher, ResourceFetcher, ResourceLoader
from .render import RenderElement, render_queue
from .store import VariableStore
from .values import is_truthy, or_zero, to_number

logger = logging.getLogger(__name__)

# longest frame step reported to scripts, in ms
MAX_FRAME_DELTA = 50.0


@dataclass
class RunnerOptions:
    """Construction options for a Runtime."""
    debug: bool = False
    on_log: Optional[Callable[[str], None]] = None
    image_cross_origin: Optional[str] = "anonymous"


class Runtime:
    """
    Runs an OSL program against a drawing surface.

    Host capabilities are injected; anything left out gets an in-process
    default (asyncio frame timer, in-memory storage, no gamepads, httpx
    fetcher decoding images through the surface).

    Usage:
        runtime = Runtime(surface, source)
        runtime.start()            # inside a running event loop
        ...
        runtime.stop()
    """

    def __init__(self,
                 surface: Surface,
                 source: str = "",
                 options: Optional[RunnerOptions] = None,
                 timer: Optional[FrameTimer] = None,
                 storage: Optional[Storage] = None,
                 fetcher: Optional[ResourceFetcher] = None,
                 gamepads: Optional[GamepadSource] = None,
                 builtins: Optional[BuiltinRegistry] = None,
                 rng: Optional[random.Random] = None):
        if surface is None or not surface.is_available():
            raise SurfaceUnavailableError()
        self.surface = surface
        self.options = options or RunnerOptions()
        self.timer = timer or AsyncioFrameTimer()
        self.storage = storage or MemoryStorage()
        self.fetcher = fetcher or HttpResourceFetcher(
            surface.decode_image, cross_origin=self.options.image_cross_origin)
        self.loader = ResourceLoader(self.fetcher)
        self.gamepads = gamepads or StaticGamepads()
        self.builtins = builtins or get_builtin_registry()
        self.random = rng or random.Random()
        self.logger = logger

        self.store = VariableStore()
        self.evaluator = Evaluator(self.store)
        self.queue: List[RenderElement] = []
        self.offset: Tuple[float, float] = (0, 0)
        self.keys: Set[str] = set()
        self.delta_ms = 0.0
        self.frame_count = 0
        self.running = False
        self._last_time = 0.0
        self._frame_handle: Any = None

        self.source = source
        self.program = Program()
        self.rebuild()

    @property
    def statements(self) -> List[Statement]:
        return self.program.statements

    @property
    def labels(self):
        return self.program.labels

    def rebuild(self) -> None:
        """Re-lex and re-parse ``source``. Store and caches are kept."""
        self.program = parse(tokenize(self.source))
        logger.debug("built %d statements, %d labels",
                     len(self.program.statements), len(self.program.labels))

    def log(self, message: str) -> None:
        if self.options.on_log is not None:
            self.options.on_log(message)
        elif self.options.debug:
            logger.info("[OSL] %s", message)
        else:
            logger.debug("[OSL] %s", message)

    # =========================================================================
    # Scheduling
    # =========================================================================

    def start(self) -> None:
        """Size the surface from the store and begin ticking."""
        if self.running:
            return
        self.running = True
        width = _finite(self.store.get('window.width')) or self.surface.width
        height = _finite(self.store.get('window.height')) or self.surface.height
        self.surface.resize(width, height)
        self._last_time = self.timer.now()
        self._frame_handle = self.timer.request_frame(self.tick)

    def stop(self) -> None:
        self.running = False
        self.timer.cancel(self._frame_handle)
        self._frame_handle = None

    async def tick(self, time: float) -> None:
        """One frame: statement pass, gamepad refresh, render, reschedule."""
        if not self.running:
            return
        self.delta_ms = min(MAX_FRAME_DELTA, time - self._last_time)
        self._last_time = time

        self.queue = []
        try:
            await self.run_statements()
            self.store['gamepads'] = gamepads_to_value(self.gamepads.snapshot())
            self.render()
            self.frame_count += 1
        finally:
            # a failed frame still schedules the next one
            if self.running:
                self._frame_handle = self.timer.request_frame(self.tick)

    def render(self) -> None:
        """Draw the queued elements at the current offset and empty the queue."""
        render_queue(self.surface, self.queue, self.offset)
        self.queue = []

    # =========================================================================
    # Execution
    # =========================================================================

    async def run_statements(self) -> None:
        """Execute every statement once, top to bottom."""
        for stmt in self.program.statements:
            await self.execute(stmt)

    async def execute(self, stmt: Statement) -> None:
        if isinstance(stmt, Assign):
            self.store.set(stmt.path, self.evaluator.evaluate(stmt.expr))
        elif isinstance(stmt, Call):
            await call_builtin(self, stmt.name, stmt.args, stmt.style)
        elif isinstance(stmt, If):
            if is_truthy(self.evaluator.evaluate(stmt.cond)):
                await self._execute_body(stmt.then_statements)
            elif stmt.else_body is not None:
                await self._execute_body(stmt.else_statements)
        elif isinstance(stmt, Goto):
            self.offset = self._goto_offset(stmt.parts)
        elif isinstance(stmt, (Import, Label)):
            pass
        else:
            raise TypeError(f"Unknown statement type: {type(stmt).__name__}")

    async def _execute_body(self, statements: List[Statement]) -> None:
        # only assignments and commands run inside if bodies
        for stmt in statements:
            if isinstance(stmt, (Assign, Call)):
                await self.execute(stmt)

    def _goto_offset(self, parts) -> Tuple[float, float]:
        half = max(1, len(parts) // 2)
        x = self.evaluator.evaluate(parts[:half])
        y = self.evaluator.evaluate(parts[half:])
        return (or_zero(to_number(x)), or_zero(to_number(y)))

    # =========================================================================
    # Input
    # =========================================================================

    def pointer_moved(self, x: float, y: float) -> None:
        self.store['mouse_x'] = x
        self.store['mouse_y'] = y

    def pointer_pressed(self) -> None:
        self.store['mouse_down'] = True

    def pointer_released(self) -> None:
        self.store['mouse_down'] = False

    def key_pressed(self, name: str) -> None:
        self.keys.add(name.lower())

    def key_released(self, name: str) -> None:
        self.keys.discard(name.lower())

    async def aclose(self) -> None:
        """Stop ticking and release the fetcher's connections."""
        self.stop()
        await self.fetcher.aclose()


def _finite(v) -> float:
    n = to_number(v)
    return n if math.isfinite(n) else 0
