"""Unit tests for PeerClient."""

import io
import zipfile

import httpx
import pytest

from cli.peer_client import REMOTE_ARCHIVE_NAME, PeerClient

API_PEER = 'http://192.168.1.30:8000'

API_FILES = [
    {'name': 'song.mp3', 'size': 5000, 'modified': '2024-01-01T00:00:00Z', 'url': '/files/song.mp3'},
    {'name': 'notes.txt', 'size': 12, 'modified': '2024-01-02T00:00:00Z', 'url': '/files/notes.txt'},
]


def zip_bytes():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w') as archive:
        archive.writestr('song.mp3', b'x' * 5000)
    return buffer.getvalue()


@pytest.fixture
def api_transport():
    """Mock transport for a peer running the PyShare API."""
    def handler(request):
        if request.url.path == '/api/files':
            return httpx.Response(200, json=API_FILES)
        elif request.url.path == '/files/song.mp3':
            return httpx.Response(200, content=b'x' * 5000)
        elif request.url.path == '/files/notes.txt':
            return httpx.Response(503, text='Sharing is currently inactive')
        elif request.url.path == '/api/download-all':
            return httpx.Response(200, content=zip_bytes(), headers={
                'Content-Type': 'application/zip',
                'Content-Disposition': 'attachment; filename="PyShare-2024-01-02.zip"',
            })
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def listing_transport():
    """Mock transport for a plain directory-listing server."""
    def handler(request):
        if request.url.path == '/':
            return httpx.Response(200, html='<pre><a href="../">../</a>\n<a href="a.txt">a.txt</a>  01-Jan-2024 10:00  500\n</pre>')
        elif request.url.path == '/a.txt':
            return httpx.Response(200, content=b'a' * 500)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


@pytest.fixture
def api_client(temp_config, api_transport):
    client = PeerClient(temp_config, transport=api_transport)
    yield client
    client.close()


@pytest.fixture
def listing_client(temp_config, listing_transport):
    client = PeerClient(temp_config, transport=listing_transport)
    yield client
    client.close()


class TestBuildBaseUrl:

    def test_bare_ip_uses_default_port(self, temp_config):
        client = PeerClient(temp_config)
        assert client.build_base_url('192.168.1.30') == 'http://192.168.1.30:8000'

    def test_explicit_port(self, temp_config):
        client = PeerClient(temp_config)
        assert client.build_base_url('192.168.1.30', 9000) == 'http://192.168.1.30:9000'

    def test_host_with_port(self, temp_config):
        client = PeerClient(temp_config)
        assert client.build_base_url('peer.local:8080') == 'http://peer.local:8080'

    def test_full_url_is_kept(self, temp_config):
        client = PeerClient(temp_config)
        assert client.build_base_url('https://peer.local/share/') == 'https://peer.local/share'


def test_not_connected_messages(api_client):
    assert 'Not connected' in api_client.list_files()
    assert 'Not connected' in api_client.refresh()
    assert 'Not connected' in api_client.download('song.mp3')
    assert 'Not connected' in api_client.download_all()
    assert api_client.file_names() == []


def test_connect_to_api_peer(api_client, temp_config):
    result = api_client.connect('192.168.1.30')

    assert f'Connected to {API_PEER}' in result
    assert 'Found 2 file(s) via API' in result
    assert 'song.mp3' in result
    assert 'download-all' in result
    assert api_client.file_names() == ['song.mp3', 'notes.txt']
    assert temp_config.get_last_peer() == API_PEER


def test_connect_to_listing_peer(listing_client):
    result = listing_client.connect('192.168.1.40', 8080)

    assert 'Found 1 file(s) via directory listing' in result
    assert 'a.txt' in result
    assert 'download-all' not in result


def test_connect_failure(temp_config):
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    client = PeerClient(temp_config, transport=httpx.MockTransport(handler))
    result = client.connect('192.168.1.99')

    assert result.startswith('Connection failed')
    assert client.manifest is None
    assert temp_config.get_last_peer() is None


def test_empty_peer(temp_config):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
    client = PeerClient(temp_config, transport=transport)

    result = client.connect('192.168.1.30')

    assert 'No files available on this device' in result


def test_unknown_size_is_shown(temp_config):
    def handler(request):
        if request.url.path == '/':
            return httpx.Response(200, html='<a href="big.iso">big.iso</a>')
        return httpx.Response(404)

    client = PeerClient(temp_config, transport=httpx.MockTransport(handler))

    assert 'unknown size' in client.connect('192.168.1.30')


def test_refresh_resolves_again(api_client):
    api_client.connect('192.168.1.30')
    result = api_client.refresh()
    assert 'Found 2 file(s)' in result


def test_download_file(api_client, temp_config):
    api_client.connect('192.168.1.30')

    result = api_client.download('song.mp3')

    saved = temp_config.get_download_dir() / 'song.mp3'
    assert 'Downloaded: song.mp3' in result
    assert saved.read_bytes() == b'x' * 5000


def test_download_to_output_path(api_client, tmp_path):
    api_client.connect('192.168.1.30')
    target = tmp_path / 'out' / 'track.mp3'

    result = api_client.download('song.mp3', str(target))

    assert str(target.absolute()) in result
    assert target.stat().st_size == 5000


def test_download_from_listing_peer(listing_client, temp_config):
    listing_client.connect('192.168.1.40', 8080)

    listing_client.download('a.txt')

    assert (temp_config.get_download_dir() / 'a.txt').read_bytes() == b'a' * 500


def test_download_unknown_file(api_client):
    api_client.connect('192.168.1.30')
    result = api_client.download('missing.txt')
    assert result == f'Error: missing.txt is not shared by {API_PEER}'


def test_download_refused_by_peer(api_client, temp_config):
    api_client.connect('192.168.1.30')

    result = api_client.download('notes.txt')

    assert 'HTTP 503' in result
    assert not (temp_config.get_download_dir() / 'notes.txt').exists()


def test_download_all_from_api_peer(api_client, temp_config):
    api_client.connect('192.168.1.30')

    result = api_client.download_all()

    saved = temp_config.get_download_dir() / 'PyShare-2024-01-02.zip'
    assert 'Downloaded: all files' in result
    with zipfile.ZipFile(saved) as archive:
        assert archive.namelist() == ['song.mp3']


def test_download_all_default_name(temp_config):
    def handler(request):
        if request.url.path == '/api/files':
            return httpx.Response(200, json=API_FILES)
        if request.url.path == '/api/download-all':
            return httpx.Response(200, content=zip_bytes())
        return httpx.Response(404)

    client = PeerClient(temp_config, transport=httpx.MockTransport(handler))
    client.connect('192.168.1.30')

    client.download_all()

    assert (temp_config.get_download_dir() / REMOTE_ARCHIVE_NAME).exists()


def test_download_all_requires_api(listing_client):
    listing_client.connect('192.168.1.40', 8080)
    result = listing_client.download_all()
    assert result.startswith('Error: This device only offers a directory listing')


def test_connect_malformed_address(temp_config):
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json=[])

    client = PeerClient(temp_config, transport=httpx.MockTransport(handler))
    result = client.connect('192.168.1.5:abc')

    assert result.startswith('Connection failed: Invalid peer address')
    assert client.manifest is None
    assert requests == []


def peer_with_file_url(url):
    """Mock API peer sharing one file at the given url."""
    requested_hosts = []

    def handler(request):
        requested_hosts.append(request.url.host)
        if request.url.path == '/api/files':
            return httpx.Response(200, json=[
                {'name': 'x.bin', 'size': 3, 'modified': '2024-01-01T00:00:00Z', 'url': url}
            ])
        if request.url.path == '/files/x.bin':
            return httpx.Response(200, content=b'abc')
        return httpx.Response(404)

    return httpx.MockTransport(handler), requested_hosts


def test_download_refuses_url_on_other_host(temp_config):
    transport, requested_hosts = peer_with_file_url('http://evil.example/files/x.bin')
    client = PeerClient(temp_config, transport=transport)
    client.connect('192.168.1.30')

    result = client.download('x.bin')

    assert result == f'Error: x.bin points outside {API_PEER}'
    assert 'evil.example' not in requested_hosts
    assert not (temp_config.get_download_dir() / 'x.bin').exists()


def test_download_accepts_absolute_url_on_same_peer(temp_config):
    transport, requested_hosts = peer_with_file_url(f'{API_PEER}/files/x.bin')
    client = PeerClient(temp_config, transport=transport)
    client.connect('192.168.1.30')

    client.download('x.bin')

    assert (temp_config.get_download_dir() / 'x.bin').read_bytes() == b'abc'
