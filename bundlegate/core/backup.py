"""
Bundle Gates - Backup/Restore

Timestamped byte-for-byte copies of an artifact, taken before any write.
Backups live next to the artifact as ``<path>.backup.<epoch-ms>``.
"""

import shutil
import time
from pathlib import Path

from .gates import GateError

BACKUP_INFIX = ".backup."


class BackupError(GateError):
    """Raised when a backup copy cannot be created."""

    pass


class WriteError(GateError):
    """Raised when the patched artifact cannot be written."""

    pass


def backup_path_for(path: Path, timestamp_ms: int) -> Path:
    return path.with_name(f"{path.name}{BACKUP_INFIX}{timestamp_ms}")


def create_backup(path: Path) -> Path:
    """
    Copy the artifact to a new timestamped backup.

    Never overwrites an existing backup; a name taken within the same
    millisecond moves the timestamp forward.

    Args:
        path: Artifact to back up

    Returns:
        Path of the new backup

    Raises:
        BackupError: If the copy fails
    """
    timestamp = int(time.time() * 1000)
    backup_path = backup_path_for(path, timestamp)
    while backup_path.exists():
        timestamp += 1
        backup_path = backup_path_for(path, timestamp)

    try:
        shutil.copyfile(path, backup_path)
    except OSError as e:
        raise BackupError(f"Could not create backup of {path}: {e}") from e
    return backup_path


def _timestamp(backup: Path, prefix: str) -> int | None:
    suffix = backup.name[len(prefix):]
    # isdigit() alone accepts non-ASCII digits that int() rejects
    return int(suffix) if suffix.isascii() and suffix.isdigit() else None


def list_backups(path: Path) -> list[Path]:
    """
    List backups of an artifact, newest first.

    Args:
        path: Artifact path

    Returns:
        Backup paths sorted by timestamp, descending; empty if the
        directory cannot be read
    """
    prefix = f"{path.name}{BACKUP_INFIX}"
    try:
        entries = list(path.parent.iterdir())
    except OSError:
        return []

    stamped = []
    for entry in entries:
        if not entry.name.startswith(prefix):
            continue
        stamp = _timestamp(entry, prefix)
        if stamp is not None:
            stamped.append((stamp, entry))

    return [entry for _, entry in sorted(stamped, reverse=True)]


def find_latest_backup(path: Path) -> Path | None:
    backups = list_backups(path)
    return backups[0] if backups else None


def restore_backup(path: Path, backup_path: Path) -> None:
    """
    Copy a backup over the artifact verbatim.

    Raises:
        OSError: If the copy fails
    """
    shutil.copyfile(backup_path, path)


def write_with_rollback(path: Path, data: bytes, backup_path: Path | None) -> None:
    """
    Write new artifact bytes, restoring the backup if the write fails.

    Args:
        path: Artifact path
        data: Complete new file contents
        backup_path: Backup taken before this write, if any

    Raises:
        WriteError: If the write fails; the message also reports whether
            the restore succeeded
    """
    try:
        path.write_bytes(data)
    except OSError as e:
        message = f"Could not write patched file {path}: {e}"
        if backup_path is not None:
            try:
                restore_backup(path, backup_path)
            except OSError as restore_error:
                message += f"; restoring {backup_path} also failed: {restore_error}"
            else:
                message += f"; restored from {backup_path}"
        raise WriteError(message) from e
