"""Configuration management for the PyShare peer browser."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from common.constants import DEFAULT_PORT, REMOTE_PROBE_CONCURRENCY, REMOTE_PROBE_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "default_port": int(os.environ.get("PYSHARE_PORT", str(DEFAULT_PORT))),
        "timeout": REMOTE_PROBE_TIMEOUT_SECONDS,
        "max_concurrent_probes": REMOTE_PROBE_CONCURRENCY,
        "download_dir": "downloads",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.pyshare/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.pyshare' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, OSError) as e:
                logger.warning(f"Unreadable config {self.config_path}, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError:
                    pass
                return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not write default config {self.config_path}: {e}")
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except OSError as e:
            logger.warning(f"Could not save config {self.config_path}: {e}")

    def get_default_port(self) -> int:
        return int(self.data.get('default_port', DEFAULT_PORT))

    def get_timeout(self) -> float:
        """
        Get per-request timeout in seconds.
        """
        return float(self.data.get('timeout', REMOTE_PROBE_TIMEOUT_SECONDS))

    def get_max_concurrent_probes(self) -> int:
        """
        Get the cap on simultaneous HEAD probes while resolving a listing.
        """
        return int(self.data.get('max_concurrent_probes', REMOTE_PROBE_CONCURRENCY))

    def get_download_dir(self) -> Path:
        return Path(self.data.get('download_dir', 'downloads'))

    def set_last_peer(self, base_url: str) -> None:
        """
        Remember the last peer connected to and save to file.
        """
        self.data['last_peer'] = base_url
        self.save()

    def get_last_peer(self):
        return self.data.get('last_peer')
