"""Owned server state shared with request handlers through app.state."""

from dataclasses import dataclass
from pathlib import Path

from fastapi import Request

from server.connection_log import ConnectionLog
from server.file_store import FileManifestStore
from server.sharing_session import SharingSession


@dataclass
class AppContext:
    """
    The serving side's mutable state.

    Handlers mutate it only through the store, log and session operations.
    """
    store: FileManifestStore
    connection_log: ConnectionLog
    session: SharingSession


def create_context(shared_dir: str, log_capacity: int) -> AppContext:
    """
    Build a fresh, inactive context over the given shared folder.
    """
    store = FileManifestStore(Path(shared_dir))
    connection_log = ConnectionLog(capacity=log_capacity)
    session = SharingSession(store, connection_log)
    return AppContext(store=store, connection_log=connection_log, session=session)


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the application's context."""
    return request.app.state.context
