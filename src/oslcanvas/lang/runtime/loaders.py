"""
Resource loaders for the OSL runtime.

Images and sounds are fetched asynchronously and cached by URL for the
lifetime of the runtime: each distinct key is fetched at most once. Failed
loads are not cached, so a later frame retries them.

Fetching is delegated to a ``ResourceFetcher``. ``HttpResourceFetcher``
reads http(s) URLs with httpx and anything else as a path relative to a
base directory; decoding is delegated to the host (the drawing surface for
images, the audio backend for sounds).
"""

import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import httpx

from ..errors import ResourceLoadError

logger = logging.getLogger(__name__)

URL_RE = re.compile(r'^https?://')


def is_remote(url: str) -> bool:
    return bool(URL_RE.match(url))


class SoundHandle(ABC):
    """A playable, decoded sound."""

    @property
    @abstractmethod
    def volume(self) -> float:
        ...

    @volume.setter
    @abstractmethod
    def volume(self, value: float) -> None:
        ...

    @abstractmethod
    def restart(self, volume: float = 1.0) -> None:
        """Stop any current playback and play from the start."""
        ...


class RecordedSound(SoundHandle):
    """Sound handle that only counts plays; used headless."""

    def __init__(self, name: str, data: bytes = b""):
        self.name = name
        self.size = len(data)
        self.plays = 0
        self._volume = 1.0

    @classmethod
    def from_bytes(cls, data: bytes, name: str) -> "RecordedSound":
        return cls(name, data)

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = value

    def restart(self, volume: float = 1.0) -> None:
        self._volume = volume
        self.plays += 1


class ResourceFetcher(ABC):
    """Fetches and decodes resources. Failures raise ResourceLoadError."""

    @abstractmethod
    async def fetch_image(self, url: str) -> Any:
        ...

    @abstractmethod
    async def fetch_sound(self, url: str) -> SoundHandle:
        ...

    async def aclose(self) -> None:
        pass


class HttpResourceFetcher(ResourceFetcher):
    """
    Fetch over HTTP(S) with httpx, or from disk for relative paths.

    Args:
        decode_image: callable(data, name) -> image handle
        decode_sound: callable(data, name) -> SoundHandle
        base_dir: directory that non-URL resource names are relative to
        timeout: per-request timeout in seconds
        cross_origin: 'anonymous' sends no cookies, 'use-credentials' keeps
            them, None makes plain same-origin style requests
    """

    def __init__(self,
                 decode_image: Callable[[bytes, str], Any],
                 decode_sound: Optional[Callable[[bytes, str], SoundHandle]] = None,
                 base_dir=".",
                 timeout: float = 10.0,
                 cross_origin: Optional[str] = "anonymous",
                 client: Optional[httpx.AsyncClient] = None):
        self.decode_image = decode_image
        self.decode_sound = decode_sound or RecordedSound.from_bytes
        self.base_dir = Path(base_dir)
        self.timeout = timeout
        self.cross_origin = cross_origin
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, follow_redirects=True)
        return self._client

    def _headers(self) -> Dict[str, str]:
        if self.cross_origin is None:
            return {}
        return {"Sec-Fetch-Mode": "cors"}

    async def read(self, url: str) -> bytes:
        if is_remote(url):
            if self.cross_origin == "anonymous":
                self.client.cookies.clear()
            try:
                response = await self.client.get(url, headers=self._headers())
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise ResourceLoadError(url, str(e)) from e
            return response.content
        try:
            return (self.base_dir / url).read_bytes()
        except OSError as e:
            raise ResourceLoadError(url, e.strerror) from e

    async def fetch_image(self, url: str) -> Any:
        data = await self.read(url)
        try:
            return self.decode_image(data, url)
        except Exception as e:
            raise ResourceLoadError(url, f"cannot decode image: {e}") from e

    async def fetch_sound(self, url: str) -> SoundHandle:
        data = await self.read(url)
        try:
            return self.decode_sound(data, url)
        except Exception as e:
            raise ResourceLoadError(url, f"cannot decode sound: {e}") from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class ResourceLoader:
    """Load-once caches of images (by URL) and sounds (by id or URL)."""

    def __init__(self, fetcher: ResourceFetcher):
        self.fetcher = fetcher
        self.images: Dict[str, Any] = {}
        self.sounds: Dict[str, SoundHandle] = {}

    async def load_image(self, url: str) -> Any:
        """Return the cached image for ``url``, fetching it the first time."""
        if url in self.images:
            return self.images[url]
        image = await self.fetcher.fetch_image(url)
        self.images[url] = image
        logger.debug("loaded image %s", url)
        return image

    async def load_sound(self, id_or_url: str) -> Optional[SoundHandle]:
        """
        Return the cached sound, fetching it when the key is an http(s) URL.

        Any other key that is not cached yet is an alias with nothing behind
        it, and yields None.
        """
        if id_or_url in self.sounds:
            return self.sounds[id_or_url]
        if not is_remote(id_or_url):
            return None
        sound = await self.fetcher.fetch_sound(id_or_url)
        self.sounds[id_or_url] = sound
        logger.debug("loaded sound %s", id_or_url)
        return sound
