"""Shared pytest fixtures for all tests."""

import pytest
from fastapi.testclient import TestClient

from cli.config import Config
from server.connection_log import ConnectionLog
from server.context import AppContext
from server.file_store import FileManifestStore
from server.main import create_app
from server.sharing_session import SharingSession


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .pyshare directory
    """
    config_dir = tmp_path / '.pyshare'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir, tmp_path):
    """
    Create temporary config instance downloading into tmp_path.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    config = Config(temp_config_dir / 'config.json')
    config.data['download_dir'] = str(tmp_path / 'downloads')
    return config


@pytest.fixture
def shared_dir(tmp_path):
    """Empty shared-storage root."""
    path = tmp_path / 'shared_files'
    path.mkdir()
    return path


@pytest.fixture
def store(shared_dir):
    return FileManifestStore(shared_dir)


@pytest.fixture
def connection_log():
    return ConnectionLog()


@pytest.fixture
def session(store, connection_log):
    return SharingSession(store, connection_log)


@pytest.fixture
def app_context(store, connection_log, session):
    return AppContext(store=store, connection_log=connection_log, session=session)


@pytest.fixture
def client(app_context):
    """Create FastAPI test client over a temporary shared folder."""
    return TestClient(create_app(app_context))
