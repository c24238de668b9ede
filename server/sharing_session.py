"""Sharing session state machine gating external access to shared files."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from common.logging_config import get_logger
from common.types import ConnectionLogEntry
from server.connection_log import ConnectionLog
from server.file_store import FileManifestStore

logger = get_logger(__name__)

LOOPBACK_HOSTS = frozenset({"127.0.0.1", "::1", "::ffff:127.0.0.1", "localhost"})


class SessionState(str, Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class SharingSession:
    """
    Two-state session: INACTIVE (initial) and ACTIVE.

    Deactivation is authoritative: it purges the shared folder and the
    connection log before recording the transition.
    """

    def __init__(self, store: FileManifestStore, connection_log: ConnectionLog):
        self.store = store
        self.connection_log = connection_log
        self.state = SessionState.INACTIVE

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def toggle(self) -> SessionState:
        """
        Flip the session state and apply the transition's side effects.

        Returns:
            The new state
        """
        if self.is_active:
            self.state = SessionState.INACTIVE
            deleted = self.store.purge()
            logger.info(f"Cleared {len(deleted)} shared file(s)")
            self.connection_log.clear()
        else:
            self.state = SessionState.ACTIVE

        status = self.status_message()
        self.connection_log.record(ConnectionLogEntry(
            ip="SYSTEM",
            path="/system",
            method="SYSTEM",
            timestamp=datetime.now(timezone.utc),
            user_agent=status,
        ))
        logger.info(status)
        return self.state

    def status_message(self) -> str:
        return "Sharing activated" if self.is_active else "Sharing deactivated"

    def allows_file_access(self, client_host: Optional[str], referer: Optional[str] = None) -> bool:
        """
        Decide whether a request may read file content.

        Loopback clients and requests carrying a referer (the local web
        interface) are always allowed; anyone else only while active.
        """
        if self.is_active:
            return True
        if client_host in LOOPBACK_HOSTS:
            return True
        return bool(referer)
