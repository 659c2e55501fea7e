"""Coarse file type classification by extension."""

from __future__ import annotations

import os

DIRECTORY_LABEL = "directory"
UNKNOWN_LABEL = "unknown"
OTHER_LABEL = "other"

_TYPE_MAP: dict[str, str] = {
    # Code
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    # Structured and plain text
    ".json": "json",
    ".txt": "text",
    ".log": "text",
    # Markup
    ".md": "markdown",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    # Media
    ".png": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".gif": "image",
    ".svg": "image",
    ".webp": "image",
    ".bmp": "image",
    ".ico": "image",
    ".mp4": "video",
    ".avi": "video",
    ".mkv": "video",
    ".mov": "video",
    ".webm": "video",
    ".mp3": "audio",
    ".wav": "audio",
    ".flac": "audio",
    ".ogg": "audio",
    # Documents
    ".pdf": "document",
    ".doc": "document",
    ".docx": "document",
    # Archives
    ".zip": "archive",
    ".rar": "archive",
    ".7z": "archive",
    ".tar": "archive",
    ".gz": "archive",
    ".bz2": "archive",
    ".xz": "archive",
}


def get_extension(name: str) -> str:
    """Return the lowercase final extension of a file name, including the dot.

    Names without a dot, and dotfiles such as ``.bashrc``, have no extension.
    """
    return os.path.splitext(name)[1].lower()


def classify(name: str) -> str:
    """Map a file name to a coarse type label.

    >>> classify("report.docx")
    'document'
    >>> classify("README")
    'unknown'
    """
    ext = get_extension(name)
    if not ext:
        return UNKNOWN_LABEL
    return _TYPE_MAP.get(ext, OTHER_LABEL)


def known_labels() -> list[str]:
    """All labels the classifier can assign to a file, sorted."""
    return sorted({*_TYPE_MAP.values(), UNKNOWN_LABEL, OTHER_LABEL})
