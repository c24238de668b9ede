"""Tests for remote manifest resolution."""

import asyncio
import json

import httpx
import pytest

from common.exceptions import InvalidPeerAddressError, NetworkFailureError
from remote.resolver import RemoteListingResolver, is_file_link, normalize_base_url

BASE = 'http://192.168.1.20:8000'

LISTING = """<html><body><ul>
<li><a href="../">Parent</a></li>
<li><a href="a.txt">a.txt</a> <span>10 bytes</span></li>
<li><a href="b.bin">b.bin</a></li>
</ul></body></html>
"""


def make_resolver(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RemoteListingResolver(client=client, **kwargs)


def listing_handler(html, head_sizes=None, api=None):
    """Build a mock peer that serves html at / and optional /api/files JSON."""
    head_sizes = head_sizes or {}

    def handler(request):
        if request.url.path == '/api/files':
            if api is None:
                return httpx.Response(404, text='Not Found')
            return api(request)
        if request.url.path == '/':
            return httpx.Response(200, html=html)
        if request.method == 'HEAD':
            name = request.url.path.lstrip('/')
            if name in head_sizes:
                return httpx.Response(200, headers={'Content-Length': str(head_sizes[name])})
            return httpx.Response(404)
        return httpx.Response(404)

    return handler


def test_normalize_base_url():
    assert normalize_base_url('192.168.1.20:8000/') == BASE
    assert normalize_base_url(' https://peer.local/ ') == 'https://peer.local'
    assert normalize_base_url(BASE) == BASE


@pytest.mark.parametrize('href,expected', [
    (None, False),
    ('', False),
    ('../', False),
    ('docs/', False),
    ('?C=N;O=D', False),
    ('a.txt', True),
    ('my%20file.txt', True),
])
def test_is_file_link(href, expected):
    assert is_file_link(href) is expected


@pytest.mark.asyncio
async def test_directory_listing_with_head_probe():
    resolver = make_resolver(listing_handler(LISTING, head_sizes={'b.bin': 4096}))

    manifest = await resolver.resolve(BASE)

    assert manifest.has_api is False
    assert manifest.base_url == BASE
    assert [(f.name, f.size, f.url) for f in manifest.files] == [
        ('a.txt', 10, '/a.txt'),
        ('b.bin', 4096, '/b.bin'),
    ]


@pytest.mark.asyncio
async def test_failed_head_probe_gives_zero_size():
    resolver = make_resolver(listing_handler(LISTING))

    manifest = await resolver.resolve(BASE)

    assert {f.name: f.size for f in manifest.files} == {'a.txt': 10, 'b.bin': 0}


@pytest.mark.asyncio
async def test_head_without_content_length_gives_zero_size():
    def handler(request):
        if request.url.path == '/':
            return httpx.Response(200, html='<a href="c.iso">c.iso</a>')
        if request.method == 'HEAD':
            return httpx.Response(200)
        return httpx.Response(404)

    manifest = await make_resolver(handler).resolve(BASE)

    assert manifest.files[0].size == 0


@pytest.mark.asyncio
async def test_names_are_decoded_and_urls_encoded():
    html = '<a href="my%20file.txt?download=1">my file.txt</a>'
    resolver = make_resolver(listing_handler(html, head_sizes={'my file.txt': 2048}))

    manifest = await resolver.resolve(BASE)

    record = manifest.files[0]
    assert record.name == 'my file.txt'
    assert record.url == '/my%20file.txt'
    assert record.size == 2048


@pytest.mark.asyncio
async def test_structured_api_is_preferred():
    entries = [
        {'name': 'song.mp3', 'size': 5000, 'modified': '2024-01-01T00:00:00Z', 'url': '/files/song.mp3'},
        {'name': 'b.txt', 'size': 3, 'modified': '2024-01-02T00:00:00Z', 'url': '/files/b.txt'},
    ]
    resolver = make_resolver(listing_handler(LISTING, api=lambda request: httpx.Response(200, json=entries)))

    first = await resolver.resolve(BASE)
    second = await resolver.resolve(BASE)

    assert first.has_api is True
    assert [f.name for f in first.files] == ['song.mp3', 'b.txt']
    assert first.files[0].url == '/files/song.mp3'
    assert first.files[0].modified_at.year == 2024
    assert first == second


@pytest.mark.asyncio
async def test_structured_api_with_empty_manifest():
    resolver = make_resolver(listing_handler(LISTING, api=lambda request: httpx.Response(200, json=[])))

    manifest = await resolver.resolve(BASE)

    assert manifest.has_api is True
    assert manifest.files == []


@pytest.mark.asyncio
async def test_unexpected_json_shape_falls_back_to_listing():
    api = lambda request: httpx.Response(200, json={'files': ['a.txt']})
    resolver = make_resolver(listing_handler(LISTING, head_sizes={'b.bin': 4096}, api=api))

    manifest = await resolver.resolve(BASE)

    assert manifest.has_api is False
    assert len(manifest.files) == 2


@pytest.mark.asyncio
async def test_non_json_api_response_falls_back_to_listing():
    api = lambda request: httpx.Response(200, html='<html>a single page app</html>')
    resolver = make_resolver(listing_handler(LISTING, api=api))

    manifest = await resolver.resolve(BASE)

    assert manifest.has_api is False


@pytest.mark.asyncio
async def test_structured_probe_sends_no_cache():
    seen = []

    def api(request):
        seen.append(request.headers.get('cache-control'))
        return httpx.Response(200, content=json.dumps([]).encode(), headers={'Content-Type': 'application/json'})

    await make_resolver(listing_handler(LISTING, api=api)).resolve(BASE)

    assert seen == ['no-cache']


@pytest.mark.asyncio
async def test_unreachable_peer():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    with pytest.raises(NetworkFailureError):
        await make_resolver(handler).resolve(BASE)


@pytest.mark.asyncio
@pytest.mark.parametrize('target', ['192.168.1.5:abc', 'http://peer.local:abc/', 'ftp://peer.local', '  '])
async def test_malformed_address_is_rejected(target):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[])

    with pytest.raises(InvalidPeerAddressError):
        await make_resolver(handler).resolve(target)
    assert requests == []


def test_malformed_address_is_a_network_failure():
    assert issubclass(InvalidPeerAddressError, NetworkFailureError)


@pytest.mark.asyncio
async def test_listing_page_error_status():
    def handler(request):
        return httpx.Response(500)

    with pytest.raises(NetworkFailureError):
        await make_resolver(handler).resolve(BASE)


@pytest.mark.asyncio
async def test_page_without_file_links():
    html = '<a href="../">../</a><a href="docs/">docs/</a><a href="?C=M">sort</a>'

    manifest = await make_resolver(listing_handler(html)).resolve(BASE)

    assert manifest.files == []
    assert manifest.has_api is False


@pytest.mark.asyncio
async def test_head_probes_are_bounded():
    in_flight = 0
    peak = 0

    class SlowHeadTransport(httpx.AsyncBaseTransport):
        async def handle_async_request(self, request):
            nonlocal in_flight, peak
            if request.url.path == '/':
                links = ''.join(f'<a href="f{i}.bin">f{i}.bin</a>\n' for i in range(10))
                return httpx.Response(200, html=links)
            if request.method == 'HEAD':
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return httpx.Response(200, headers={'Content-Length': '100'})
            return httpx.Response(404)

    client = httpx.AsyncClient(transport=SlowHeadTransport())
    resolver = RemoteListingResolver(client=client, max_concurrent_probes=2)

    manifest = await resolver.resolve(BASE)

    assert len(manifest.files) == 10
    assert all(f.size == 100 for f in manifest.files)
    assert peak <= 2


@pytest.mark.asyncio
async def test_owned_client_is_closed():
    async with RemoteListingResolver(timeout=1.0) as resolver:
        client = resolver._client
    assert client.is_closed


@pytest.mark.asyncio
async def test_injected_client_is_not_closed():
    client = httpx.AsyncClient(transport=httpx.MockTransport(listing_handler(LISTING)))
    async with RemoteListingResolver(client=client):
        pass
    assert not client.is_closed
    await client.aclose()
