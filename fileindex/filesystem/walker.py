"""Recursive directory walker producing index entry records."""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from fileindex.exceptions import FileSystemError
from fileindex.filesystem.classifier import DIRECTORY_LABEL, classify

if TYPE_CHECKING:
    from collections.abc import Collection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryRecord:
    """Metadata for one file or directory discovered during a walk."""

    full_path: str
    name: str
    size_bytes: int
    type_label: str
    is_directory: bool
    relative_path: str
    modified_at: int

    def to_row(self) -> dict[str, Any]:
        """Column mapping for the index table."""
        return asdict(self)


def _make_record(entry: os.DirEntry[str], root: Path) -> EntryRecord:
    """Build a record from a directory entry.

    Raises OSError if it cannot be stat'ed and UnicodeEncodeError if its path
    is not valid UTF-8.
    """
    # Undecodable bytes surface as lone surrogates that SQLite cannot store.
    entry.path.encode("utf-8")
    # Symlinks are recorded as links and never followed.
    st = entry.stat(follow_symlinks=False)
    is_dir = entry.is_dir(follow_symlinks=False)
    full_path = Path(entry.path)
    return EntryRecord(
        full_path=str(full_path),
        name=entry.name,
        size_bytes=0 if is_dir else st.st_size,
        type_label=DIRECTORY_LABEL if is_dir else classify(entry.name),
        is_directory=is_dir,
        relative_path=full_path.relative_to(root).as_posix(),
        modified_at=int(st.st_mtime),
    )


def _list_dir(dir_path: Path) -> list[os.DirEntry[str]]:
    with os.scandir(dir_path) as it:
        return sorted(it, key=lambda e: e.name)


def _collect(
    entries: list[os.DirEntry[str]],
    root: Path,
    excluded_names: Collection[str],
    records: list[EntryRecord],
) -> None:
    for entry in entries:
        if entry.name in excluded_names:
            continue
        try:
            record = _make_record(entry, root)
        except UnicodeEncodeError:
            logger.warning("Skipping %r: path is not valid UTF-8", entry.path)
            continue
        except OSError as exc:
            logger.warning("Skipping %s: cannot read metadata: %s", entry.path, exc)
            continue
        records.append(record)
        if not record.is_directory:
            continue
        try:
            children = _list_dir(Path(entry.path))
        except OSError as exc:
            logger.error("Skipping subtree %s: cannot list directory: %s", entry.path, exc)
            continue
        _collect(children, root, excluded_names, records)


def walk_tree(root: Path, excluded_names: Collection[str] = ()) -> list[EntryRecord]:
    """Recursively collect records for everything under ``root``.

    Entries are emitted in pre-order: within a directory children are visited
    in name order, and each subdirectory is followed immediately by its own
    descendants. Names in ``excluded_names`` are skipped at every depth.

    Unreadable entries, entries whose path is not valid UTF-8 and unlistable
    subdirectories are logged and skipped.
    Raises FileSystemError if the root itself cannot be listed.
    """
    root = Path(root).absolute()
    try:
        entries = _list_dir(root)
    except OSError as exc:
        raise FileSystemError(f"Cannot list root directory {root}: {exc}") from exc

    records: list[EntryRecord] = []
    _collect(entries, root, excluded_names, records)
    return records
