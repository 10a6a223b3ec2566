"""
Tests for resource fetching and the load-once caches.
"""

import asyncio
import struct

import httpx
import pytest

from conftest import CountingFetcher
from oslcanvas.lang import ResourceLoadError
from oslcanvas.lang.runtime import HttpResourceFetcher, RecordedSound, ResourceLoader
from oslcanvas.lang.runtime.loaders import is_remote
from oslcanvas.surface import RecordingSurface

PNG_2x3 = b'\x89PNG\r\n\x1a\n' + b'\x00\x00\x00\rIHDR' + struct.pack('>II', 2, 3)


def fetch(fetcher, method, url):
    """Run one fetch and close the fetcher's client afterwards."""
    async def go():
        try:
            return await getattr(fetcher, method)(url)
        finally:
            await fetcher.aclose()
    return asyncio.run(go())


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestResourceLoader:
    """Test caching behavior."""

    def test_image_loaded_once(self):
        fetcher = CountingFetcher()
        loader = ResourceLoader(fetcher)

        async def go():
            first = await loader.load_image('a.png')
            second = await loader.load_image('a.png')
            return first, second

        first, second = asyncio.run(go())
        assert first is second
        assert fetcher.image_calls == ['a.png']

    def test_failed_image_not_cached(self):
        fetcher = CountingFetcher(fail={'bad.png'})
        loader = ResourceLoader(fetcher)
        for _ in range(2):
            with pytest.raises(ResourceLoadError):
                asyncio.run(loader.load_image('bad.png'))
        assert fetcher.image_calls == ['bad.png', 'bad.png']
        assert loader.images == {}

    def test_sound_alias_without_url(self):
        fetcher = CountingFetcher()
        loader = ResourceLoader(fetcher)
        assert asyncio.run(loader.load_sound('jump')) is None
        assert fetcher.sound_calls == []

    def test_sound_loaded_once(self):
        fetcher = CountingFetcher()
        loader = ResourceLoader(fetcher)
        url = 'http://example.com/a.ogg'
        asyncio.run(loader.load_sound(url))
        asyncio.run(loader.load_sound(url))
        assert fetcher.sound_calls == [url]

    def test_is_remote(self):
        assert is_remote('https://example.com/a.png')
        assert is_remote('http://example.com/a.png')
        assert not is_remote('assets/a.png')
        assert not is_remote('ftp://example.com/a.png')


class TestHttpResourceFetcher:
    """Test the httpx-backed fetcher."""

    def test_remote_image(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=PNG_2x3)

        surface = RecordingSurface()
        fetcher = HttpResourceFetcher(surface.decode_image, client=mock_client(handler))
        image = fetch(fetcher, 'fetch_image', 'https://example.com/a.png')
        assert (image.name, image.width, image.height) == ('https://example.com/a.png', 2, 3)
        assert seen[0].headers['Sec-Fetch-Mode'] == 'cors'

    def test_no_cross_origin_header(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b'data')

        fetcher = HttpResourceFetcher(RecordingSurface().decode_image, cross_origin=None,
                                      client=mock_client(handler))
        fetch(fetcher, 'fetch_image', 'https://example.com/a.png')
        assert 'Sec-Fetch-Mode' not in seen[0].headers

    def test_http_error(self):
        fetcher = HttpResourceFetcher(RecordingSurface().decode_image,
                                      client=mock_client(lambda request: httpx.Response(404)))
        with pytest.raises(ResourceLoadError) as exc_info:
            fetch(fetcher, 'fetch_image', 'https://example.com/missing.png')
        assert exc_info.value.url == 'https://example.com/missing.png'

    def test_local_file(self, tmp_path):
        (tmp_path / 'img.png').write_bytes(PNG_2x3)
        fetcher = HttpResourceFetcher(RecordingSurface().decode_image, base_dir=tmp_path)
        image = fetch(fetcher, 'fetch_image', 'img.png')
        assert (image.width, image.height) == (2, 3)

    def test_missing_local_file(self, tmp_path):
        fetcher = HttpResourceFetcher(RecordingSurface().decode_image, base_dir=tmp_path)
        with pytest.raises(ResourceLoadError, match='failed to load nope.png'):
            fetch(fetcher, 'fetch_image', 'nope.png')

    def test_decode_error(self, tmp_path):
        (tmp_path / 'img.png').write_bytes(b'not an image')

        def broken(data, name):
            raise ValueError('unsupported format')

        fetcher = HttpResourceFetcher(broken, base_dir=tmp_path)
        with pytest.raises(ResourceLoadError, match='cannot decode image'):
            fetch(fetcher, 'fetch_image', 'img.png')

    def test_default_sound_decoder(self, tmp_path):
        (tmp_path / 'a.wav').write_bytes(b'RIFF0000')
        fetcher = HttpResourceFetcher(RecordingSurface().decode_image, base_dir=tmp_path)
        sound = fetch(fetcher, 'fetch_sound', 'a.wav')
        assert isinstance(sound, RecordedSound)
        assert sound.size == 8
        sound.restart(0.5)
        assert (sound.plays, sound.volume) == (1, 0.5)
