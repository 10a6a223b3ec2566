"""
Shared fixtures for the OSL runtime tests.
"""

import asyncio
import random

import pytest

from oslcanvas.lang import RunnerOptions, Runtime, ResourceLoadError, tokenize
from oslcanvas.lang.runtime import (
    ManualFrameTimer, MemoryStorage, RecordedSound, ResourceFetcher,
)
from oslcanvas.surface import RecordedImage, RecordingSurface


class CountingFetcher(ResourceFetcher):
    """Fetcher that records every request and serves fixed-size images."""

    def __init__(self, fail=(), size=(32, 16)):
        self.fail = set(fail)
        self.size = size
        self.image_calls = []
        self.sound_calls = []

    async def fetch_image(self, url):
        self.image_calls.append(url)
        if url in self.fail:
            raise ResourceLoadError(url, "not found")
        return RecordedImage(url, *self.size)

    async def fetch_sound(self, url):
        self.sound_calls.append(url)
        if url in self.fail:
            raise ResourceLoadError(url, "not found")
        return RecordedSound(url)


def arg_tokens(source):
    """Tokens of a single line, without its NEWLINE."""
    return [t for t in tokenize(source) if t.kind.name != 'NEWLINE']


def run_frames(runtime, frames=1, ms=None):
    """Start the runtime if needed and run ``frames`` frames."""
    if not runtime.running:
        runtime.start()
    return asyncio.run(runtime.timer.advance(frames, ms))


@pytest.fixture
def make_runtime():
    """Build a Runtime on in-memory doubles; ``runtime.logs`` collects log lines."""
    def factory(source="", **kwargs):
        logs = []
        kwargs.setdefault('options', RunnerOptions(on_log=logs.append))
        kwargs.setdefault('timer', ManualFrameTimer(frame_ms=16))
        kwargs.setdefault('storage', MemoryStorage())
        kwargs.setdefault('fetcher', CountingFetcher())
        kwargs.setdefault('rng', random.Random(0))
        surface = kwargs.pop('surface', None) or RecordingSurface()
        runtime = Runtime(surface, source, **kwargs)
        runtime.logs = logs
        return runtime
    return factory
