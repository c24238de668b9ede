"""Custom exception classes shared by the server and the peer client."""


class PyShareError(Exception):
    """
    Base exception class for all PyShare errors.
    """
    pass


class NotFoundError(PyShareError):
    """
    Raised when a requested file does not exist in the shared folder.
    """
    pass


class EmptyManifestError(NotFoundError):
    """
    Raised when exporting an archive while no files are shared.
    """
    pass


class InvalidFileNameError(PyShareError):
    """
    Raised when an uploaded file name cannot be stored safely.
    """
    pass


class StorageIOError(PyShareError):
    """
    Raised when reading or writing the shared folder fails.
    """
    pass


class SharingInactiveError(PyShareError):
    """
    Raised when a non-local peer requests file content while sharing is off.
    """
    pass


class NetworkFailureError(PyShareError):
    """
    Raised when a peer is unreachable or answers with a non-2xx status.
    """
    pass


class ParseFailureError(PyShareError):
    """
    Raised when a peer's listing page cannot be parsed.
    """
    pass


class InvalidPeerAddressError(NetworkFailureError):
    """
    Raised when a peer address cannot be turned into a usable URL.
    """
    pass
