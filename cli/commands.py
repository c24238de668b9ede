"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.config import Config
from cli.models import (
    ConnectCommand,
    DownloadAllCommand,
    DownloadCommand,
    ListCommand,
    RefreshCommand,
)
from cli.peer_client import PeerClient

logger = get_logger(__name__)


_client: Optional[PeerClient] = None


def get_client() -> PeerClient:
    """
    Get or create global PeerClient instance.

    Returns:
        PeerClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new PeerClient instance")
        config = Config(Path.home() / '.pyshare' / 'config.json')
        _client = PeerClient(config)
    return _client


def handle_connect(cmd: ConnectCommand, client: Optional[PeerClient] = None) -> str:
    """
    Handle 'connect' command.

    Args:
        cmd: ConnectCommand with target and optional port
        client: Optional PeerClient for dependency injection (testing)

    Returns:
        Formatted manifest or error message
    """
    logger.info(f"Executing connect command: target={cmd.target} port={cmd.port}")
    if client is None:
        client = get_client()
    return client.connect(cmd.target, cmd.port)


def handle_list(cmd: ListCommand, client: Optional[PeerClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.list_files()


def handle_refresh(cmd: RefreshCommand, client: Optional[PeerClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.refresh()


def handle_download(cmd: DownloadCommand, client: Optional[PeerClient] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with filename and optional output_path
        client: Optional PeerClient for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    logger.info(f"Executing download command: filename={cmd.filename} output_path={cmd.output_path}")
    if client is None:
        client = get_client()
    result = client.download(cmd.filename, cmd.output_path)
    logger.debug("Download command completed")
    return result


def handle_download_all(cmd: DownloadAllCommand, client: Optional[PeerClient] = None) -> str:
    """
    Handle 'download-all' command.

    Args:
        cmd: DownloadAllCommand with optional output_path
        client: Optional PeerClient for dependency injection (testing)

    Returns:
        Success or error message with download results
    """
    if client is None:
        client = get_client()
    return client.download_all(cmd.output_path)
