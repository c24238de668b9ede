"""Project-wide constants (default port, log capacity, tracked paths)."""

DEFAULT_PORT: int = 8000
DEFAULT_SHARED_DIR: str = "./shared_files"

CONNECTION_LOG_CAPACITY: int = 50
TRACKED_PATH_PREFIXES: tuple = ("/api/", "/files/")

ARCHIVE_NAME_PREFIX: str = "PyShare"
STREAM_PIECE_SIZE_BYTES: int = 64 * 1024

REMOTE_PROBE_TIMEOUT_SECONDS: float = 10.0
REMOTE_PROBE_CONCURRENCY: int = 8
