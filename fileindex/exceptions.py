"""Application-level exception types.

Convention:
- ``FileSystemError``: the root directory cannot be walked. Subtree and
  per-entry failures never raise; the walker logs and skips them.
- ``StorageError``: the index database cannot be opened, cleared, written
  or queried. Always fatal to the operation that hit it.
- ``RebuildInProgressError``: a rebuild was requested while another one is
  still running.

Malformed pagination parameters are not errors; ``SearchParams`` normalizes
them to their defaults.
"""

from __future__ import annotations


class FileIndexError(Exception):
    """Base class for file index failures surfaced to callers."""


class FileSystemError(FileIndexError):
    """Raised when the configured root cannot be listed."""


class StorageError(FileIndexError):
    """Raised when the index store fails.

    The global exception handler in ``fileindex/main.py`` logs the underlying
    cause and returns HTTP 500 with a generic detail.
    """


class RebuildInProgressError(FileIndexError):
    """Raised when a rebuild is requested while another one is running."""
