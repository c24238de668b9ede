"""Configuration settings for the PyShare server."""

import os
from common.constants import (
    CONNECTION_LOG_CAPACITY,
    DEFAULT_PORT,
    DEFAULT_SHARED_DIR,
    REMOTE_PROBE_CONCURRENCY,
    REMOTE_PROBE_TIMEOUT_SECONDS,
)


SHARED_DIR = os.environ.get("PYSHARE_SHARED_DIR", DEFAULT_SHARED_DIR)

SERVER_HOST = os.environ.get("PYSHARE_HOST", "0.0.0.0")

SERVER_PORT = int(os.environ.get("PYSHARE_PORT", str(DEFAULT_PORT)))

SERVER_RELOAD = os.environ.get("PYSHARE_RELOAD", "false").lower() in ("1", "true", "yes")

LOG_CAPACITY = int(os.environ.get("PYSHARE_LOG_CAPACITY", str(CONNECTION_LOG_CAPACITY)))

PROBE_CONCURRENCY = int(os.environ.get("PYSHARE_PROBE_CONCURRENCY", str(REMOTE_PROBE_CONCURRENCY)))

PROBE_TIMEOUT_SECONDS = float(os.environ.get("PYSHARE_PROBE_TIMEOUT", str(REMOTE_PROBE_TIMEOUT_SECONDS)))
