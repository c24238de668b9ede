"""HTTP client for browsing and downloading from another device's shared folder."""

import asyncio
import re
import sys
from pathlib import Path
from typing import Optional

import httpx

from cli.config import Config
from cli.constants import GREEN, RESET
from cli.utils import format_age, format_file_size
from common.exceptions import NetworkFailureError
from common.logging_config import get_logger
from common.types import RemoteFileRecord
from remote.resolver import RemoteListingResolver, ResolvedManifest

logger = get_logger(__name__)

REMOTE_ARCHIVE_NAME = "PyShare-remote-files.zip"

_DISPOSITION_FILENAME = re.compile(r'filename="?([^";]+)"?')


class PeerClient:
    """Resolves a peer's manifest and downloads files from it."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize peer client.

        Args:
            config: Configuration instance
            transport: Optional transport shared by the download session and
                the resolver (tests pass an httpx.MockTransport)
        """
        self.config = config
        self._transport = transport
        self.session = httpx.Client(
            timeout=config.get_timeout(),
            follow_redirects=True,
            transport=transport,
        )
        self.manifest: Optional[ResolvedManifest] = None

    def build_base_url(self, target: str, port: Optional[int] = None) -> str:
        """
        Turn user input into a peer base URL.

        A bare IP or hostname gets the given port, or the configured default.
        """
        target = target.strip().rstrip("/")
        if "://" in target:
            return target
        if ":" in target and port is None:
            return f"http://{target}"
        return f"http://{target}:{port or self.config.get_default_port()}"

    async def _resolve(self, base_url: str) -> ResolvedManifest:
        async with httpx.AsyncClient(
            timeout=self.config.get_timeout(),
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            resolver = RemoteListingResolver(
                client=client,
                max_concurrent_probes=self.config.get_max_concurrent_probes(),
            )
            return await resolver.resolve(base_url)

    def connect(self, target: str, port: Optional[int] = None) -> str:
        """
        Resolve a peer's manifest and make it the current peer.

        Returns:
            The formatted manifest, or an error message
        """
        base_url = self.build_base_url(target, port)
        logger.info(f"Connecting to {base_url}")
        try:
            self.manifest = asyncio.run(self._resolve(base_url))
        except NetworkFailureError as e:
            logger.error(f"Connection to {base_url} failed: {e}")
            return f"Connection failed: {e}"

        self.config.set_last_peer(self.manifest.base_url)
        return f"Connected to {self.manifest.base_url}\n{self.list_files()}"

    def refresh(self) -> str:
        if self.manifest is None:
            return "Not connected. Use: connect <ip|url> [port]"
        return self.connect(self.manifest.base_url)

    def list_files(self) -> str:
        """
        Format the current manifest for display.
        """
        if self.manifest is None:
            return "Not connected. Use: connect <ip|url> [port]"
        if not self.manifest.files:
            return "No files available on this device"

        source = "API" if self.manifest.has_api else "directory listing"
        lines = [f"Found {len(self.manifest.files)} file(s) via {source}:"]
        for record in self.manifest.files:
            size = format_file_size(record.size) if record.size else "unknown size"
            if self.manifest.has_api:
                lines.append(f"  {record.name}  ({size}, {format_age(record.modified_at)})")
            else:
                lines.append(f"  {record.name}  ({size})")
        if self.manifest.has_api and len(self.manifest.files) > 1:
            lines.append("Use 'download-all' to fetch everything as a zip.")
        return "\n".join(lines)

    def file_names(self) -> list[str]:
        if self.manifest is None:
            return []
        return [record.name for record in self.manifest.files]

    def _find(self, filename: str) -> Optional[RemoteFileRecord]:
        for record in self.manifest.files:
            if record.name == filename:
                return record
        return None

    def _record_url(self, record: RemoteFileRecord) -> Optional[str]:
        """
        Build the download URL of a record.

        Returns:
            The URL, or None if it points away from the connected peer
        """
        if "://" not in record.url:
            path = record.url if record.url.startswith("/") else f"/{record.url}"
            return f"{self.manifest.base_url}{path}"
        try:
            url = httpx.URL(record.url)
        except httpx.InvalidURL:
            return None
        base = httpx.URL(self.manifest.base_url)
        if (url.scheme, url.host, url.port) != (base.scheme, base.host, base.port):
            return None
        return record.url

    def _output_file(self, output_path: Optional[str], filename: str) -> Path:
        local_name = Path(filename).name or "download"
        if output_path:
            output_file = Path(output_path)
            if output_file.is_dir():
                output_file = output_file / local_name
        else:
            output_file = self.config.get_download_dir() / local_name
        output_file.parent.mkdir(parents=True, exist_ok=True)
        return output_file

    def _stream_to_file(self, url: str, label: str, output_path: Optional[str], default_name: str) -> str:
        with self.session.stream('GET', url) as response:
            if not response.is_success:
                response.read()
                return f"Error: {label} failed with HTTP {response.status_code}"

            filename = default_name
            match = _DISPOSITION_FILENAME.search(response.headers.get('content-disposition', ''))
            if match and not output_path:
                filename = match.group(1)
            output_file = self._output_file(output_path, filename)

            total_size = int(response.headers.get('Content-Length', 0) or 0)
            downloaded = 0
            with open(output_file, 'wb') as f:
                for chunk in response.iter_bytes(chunk_size=8192):
                    f.write(chunk)
                    downloaded += len(chunk)
                    if total_size > 0:
                        progress = (downloaded / total_size) * 100
                        sys.stdout.write(
                            f"\rDownloading {label}: {format_file_size(downloaded)} / "
                            f"{format_file_size(total_size)} ({GREEN}{progress:.1f}%{RESET})"
                        )
                    else:
                        sys.stdout.write(f"\rDownloading {label}: {format_file_size(downloaded)}")
                    sys.stdout.flush()

            sys.stdout.write('\n')
            sys.stdout.flush()

        logger.info(f"Downloaded {label} ({downloaded} bytes) to {output_file}")
        return f"Downloaded: {label} ({format_file_size(downloaded)})\nSaved to: {output_file.absolute()}"

    def download(self, filename: str, output_path: Optional[str] = None) -> str:
        """
        Download one file of the current peer.

        Args:
            filename: Name as shown by 'ls'
            output_path: Optional file or directory to save to

        Returns:
            Success message with download details, or an error message
        """
        if self.manifest is None:
            return "Not connected. Use: connect <ip|url> [port]"
        record = self._find(filename)
        if record is None:
            return f"Error: {filename} is not shared by {self.manifest.base_url}"
        url = self._record_url(record)
        if url is None:
            logger.warning(f"Refusing download of {filename} from {record.url}")
            return f"Error: {filename} points outside {self.manifest.base_url}"

        try:
            return self._stream_to_file(url, filename, output_path, filename)
        except httpx.HTTPError as e:
            logger.error(f"Download of {filename} failed: {e}")
            return f"Error: Download failed: {e}"
        except OSError as e:
            return f"Error writing file: {e}"

    def download_all(self, output_path: Optional[str] = None) -> str:
        """
        Download every file of the current peer as one zip.

        Only offered for peers with the structured API.
        """
        if self.manifest is None:
            return "Not connected. Use: connect <ip|url> [port]"
        if not self.manifest.has_api:
            return "Error: This device only offers a directory listing; download files one by one."

        url = f"{self.manifest.base_url}/api/download-all"
        try:
            return self._stream_to_file(url, "all files", output_path, REMOTE_ARCHIVE_NAME)
        except httpx.HTTPError as e:
            logger.error(f"Archive download failed: {e}")
            return f"Error: Download failed: {e}"
        except OSError as e:
            return f"Error writing file: {e}"

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
