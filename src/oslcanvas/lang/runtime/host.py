"""
Host capabilities injected into the OSL runtime.

The runtime never reaches for ambient globals: frame timing, persistent
storage and gamepads are objects handed to it at construction. Each
capability has a production implementation and an in-memory one.
"""

import asyncio
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], Awaitable[None]]


# =============================================================================
# Frame timing
# =============================================================================

class FrameTimer(ABC):
    """Schedules one frame callback at a time. Times are in milliseconds."""

    @abstractmethod
    def now(self) -> float:
        ...

    @abstractmethod
    def request_frame(self, callback: FrameCallback) -> Any:
        """Arrange for ``callback(time_ms)`` to be awaited on the next frame."""
        ...

    @abstractmethod
    def cancel(self, handle: Any) -> None:
        ...


class AsyncioFrameTimer(FrameTimer):
    """Frame timer on the running asyncio loop, at a fixed frame rate."""

    def __init__(self, fps: float = 60.0):
        self.interval = 1.0 / fps
        self._task: Optional[asyncio.Task] = None

    def now(self) -> float:
        return time.perf_counter() * 1000.0

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(self.interval, self._fire, loop, callback)

    def _fire(self, loop: asyncio.AbstractEventLoop, callback: FrameCallback) -> None:
        self._task = loop.create_task(callback(self.now()))
        self._task.add_done_callback(_report_frame_error)

    def cancel(self, handle: Any) -> None:
        if handle is not None:
            handle.cancel()


def _report_frame_error(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error("frame callback failed", exc_info=task.exception())


class ManualFrameTimer(FrameTimer):
    """
    Frame timer driven explicitly, for tests and headless stepping.

    Usage:
        timer = ManualFrameTimer()
        runtime = Runtime(surface, source, timer=timer)
        runtime.start()
        await timer.advance()   # runs one frame
    """

    def __init__(self, frame_ms: float = 1000.0 / 60.0):
        self.frame_ms = frame_ms
        self.time = 0.0
        self.pending: Optional[FrameCallback] = None
        self._handle = 0

    def now(self) -> float:
        return self.time

    def request_frame(self, callback: FrameCallback) -> int:
        self.pending = callback
        self._handle += 1
        return self._handle

    def cancel(self, handle: Any) -> None:
        if handle == self._handle:
            self.pending = None

    async def advance(self, frames: int = 1, ms: Optional[float] = None) -> int:
        """Run up to ``frames`` pending frames; returns how many ran."""
        ran = 0
        for _ in range(frames):
            if self.pending is None:
                break
            callback, self.pending = self.pending, None
            self.time += self.frame_ms if ms is None else ms
            await callback(self.time)
            ran += 1
        return ran


# =============================================================================
# Persistent storage
# =============================================================================

class Storage(ABC):
    """Synchronous key/value store of JSON text."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...


class MemoryStorage(Storage):
    """Storage that lives as long as the process."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items: Dict[str, str] = dict(items or {})

    def get(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set(self, key: str, value: str) -> None:
        self.items[key] = value


class JsonFileStorage(Storage):
    """
    Storage persisted as one JSON object on disk.

    The file is re-read on every ``get`` and rewritten on every ``set``, so
    several runtimes may share it. A missing file reads as empty.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text())
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, sort_keys=True))


# =============================================================================
# Gamepads
# =============================================================================

@dataclass
class GamepadButton:
    pressed: bool = False
    value: float = 0.0


@dataclass
class GamepadState:
    """One connected gamepad at the moment it was polled."""
    id: str
    axes: List[float] = field(default_factory=list)
    buttons: List[GamepadButton] = field(default_factory=list)

    def to_value(self) -> Dict[str, Any]:
        """Simplified form stored for scripts: id, axes, buttons."""
        return {
            "id": self.id,
            "axes": list(self.axes),
            "buttons": [{"pressed": bool(b.pressed), "value": b.value} for b in self.buttons],
        }


class GamepadSource(ABC):
    """Polls connected gamepads. Empty slots are None."""

    @abstractmethod
    def snapshot(self) -> List[Optional[GamepadState]]:
        ...


class StaticGamepads(GamepadSource):
    """Gamepad source returning a fixed, editable list (no devices by default)."""

    def __init__(self, pads: Optional[List[Optional[GamepadState]]] = None):
        self.pads = list(pads or [])

    def snapshot(self) -> List[Optional[GamepadState]]:
        return list(self.pads)


def gamepads_to_value(pads: List[Optional[GamepadState]]) -> List[Optional[Dict[str, Any]]]:
    return [pad.to_value() if pad is not None else None for pad in pads]
