"""
Bundle Gates - Text-Mode Patcher

Enables and disables gates in a plain script bundle. Replacements have no
length constraint, so each patched fragment carries the full marker.

Every operation re-reads the artifact before acting; a BundleInfo from an
earlier call is only used for its path and encoding.
"""

from pathlib import Path

from .backup import (
    BackupError,
    WriteError,
    create_backup,
    find_latest_backup,
    list_backups,
    restore_backup,
    write_with_rollback,
)
from .bundle import BundleInfo, read_bundle
from .gates import FeatureGate, PaddingMismatchError, find_patchable_gate, list_patchable
from .results import (
    ErrorKind,
    GateStatus,
    PatchOutcome,
    artifact_not_found,
    signature_not_found,
    unknown_gate,
)


def _enabled(gate: FeatureGate) -> GateStatus:
    return GateStatus.for_gate(gate, detected=True, enabled=True)


def commit(bundle: BundleInfo, data: bytes, backup: bool, changed: list[GateStatus]) -> PatchOutcome:
    """
    Back up the artifact, then write the new bytes.

    Args:
        bundle: Bundle being replaced
        data: Complete new file contents
        backup: Whether to take a backup first
        changed: Gate statuses to report on success

    Returns:
        Success with the backup path, or a BACKUP_FAILED / WRITE_FAILED outcome
    """
    backup_path = None
    if backup:
        try:
            backup_path = create_backup(bundle.path)
        except BackupError as e:
            return PatchOutcome.failure(ErrorKind.BACKUP_FAILED, str(e))

    try:
        write_with_rollback(bundle.path, data, backup_path)
    except WriteError as e:
        return PatchOutcome.failure(ErrorKind.WRITE_FAILED, str(e))

    return PatchOutcome.ok(changed, backup_path)


def enable_gate(name_or_codename: str, bundle: BundleInfo, backup: bool = True) -> PatchOutcome:
    """
    Enable a single gate in a script bundle.

    Idempotent: if the gate's marker is already present nothing is written.

    Args:
        name_or_codename: Flag name or codename of a patchable gate
        bundle: Resolved bundle to patch
        backup: Copy the artifact aside before writing

    Returns:
        Outcome of the operation
    """
    gate = find_patchable_gate(name_or_codename)
    if gate is None:
        return unknown_gate(name_or_codename)

    try:
        current = read_bundle(bundle.path, bundle.encoding)
    except OSError:
        return artifact_not_found()

    if gate.is_marked(current.content):
        return PatchOutcome.ok([_enabled(gate)])

    match = gate.match(current.content)
    if match is None:
        return signature_not_found(gate)

    patched = gate.patch(current.content, match)
    return commit(current, current.encoding.encode(patched), backup, [_enabled(gate)])


def enable_all_gates(bundle: BundleInfo, backup: bool = True) -> PatchOutcome:
    """
    Enable every patchable gate the bundle contains.

    Gates whose signature does not match are skipped, since the registry
    may list gates this artifact version does not have. One backup covers
    the whole batch, and the file is written once.

    Args:
        bundle: Resolved bundle to patch
        backup: Copy the artifact aside before writing

    Returns:
        Outcome listing every gate that is now enabled
    """
    try:
        current = read_bundle(bundle.path, bundle.encoding)
    except OSError:
        return artifact_not_found()

    content = current.content
    changed = []
    for gate in list_patchable():
        if gate.is_marked(content):
            changed.append(_enabled(gate))
            continue

        match = gate.match(content)
        if match is not None:
            content = gate.patch(content, match)
            changed.append(_enabled(gate))

    if content == current.content:
        return PatchOutcome.ok(changed)

    return commit(current, current.encoding.encode(content), backup, changed)


def _find_clean_backup(bundle: BundleInfo, gate: FeatureGate) -> Path | None:
    # Newest backup that predates this gate's patch
    for backup_path in list_backups(bundle.path):
        try:
            content = bundle.encoding.decode(backup_path.read_bytes())
        except OSError:
            continue
        if not gate.is_marked(content):
            return backup_path
    return None


def disable_gate(name_or_codename: str, bundle: BundleInfo) -> PatchOutcome:
    """
    Disable a gate by restoring the artifact from a backup.

    Works for both encodings: restores are byte copies, and the fallback
    unpatch never changes the content length.

    Args:
        name_or_codename: Flag name or codename of a patchable gate
        bundle: Resolved bundle

    Returns:
        Outcome of the operation; BACKUP_NOT_FOUND when the gate is still
        enabled because no clean backup exists
    """
    gate = find_patchable_gate(name_or_codename)
    if gate is None:
        return unknown_gate(name_or_codename)

    try:
        current = read_bundle(bundle.path, bundle.encoding)
    except OSError:
        return artifact_not_found()

    if not gate.is_marked(current.content):
        detected = gate.match(current.content) is not None
        return PatchOutcome.ok([GateStatus.for_gate(gate, detected=detected, enabled=False)])

    clean_backup = _find_clean_backup(current, gate)
    if clean_backup is not None:
        try:
            restore_backup(current.path, clean_backup)
        except OSError as e:
            return PatchOutcome.failure(
                ErrorKind.WRITE_FAILED, f"Could not restore from backup {clean_backup}: {e}"
            )
        return PatchOutcome.ok(
            [GateStatus.for_gate(gate, detected=True, enabled=False)], clean_backup
        )

    unpatched = gate.unpatch(current.content)
    if current.is_binary_target and len(unpatched) != len(current.content):
        raise PaddingMismatchError(
            f"Unpatch of '{gate.codename}' changed binary length "
            f"({len(current.content)} -> {len(unpatched)})"
        )

    if unpatched != current.content:
        try:
            write_with_rollback(current.path, current.encoding.encode(unpatched), None)
        except WriteError as e:
            return PatchOutcome.failure(ErrorKind.WRITE_FAILED, str(e))

    if gate.is_marked(unpatched):
        return PatchOutcome.failure(
            ErrorKind.BACKUP_NOT_FOUND,
            f'No backup without the "{gate.codename}" patch was found; cannot disable it.',
        )

    return PatchOutcome.ok([GateStatus.for_gate(gate, detected=True, enabled=False)])


def reset_gates(bundle: BundleInfo) -> PatchOutcome:
    """
    Restore the artifact from its most recent backup.

    Returns:
        Outcome carrying the backup that was restored
    """
    latest = find_latest_backup(bundle.path)
    if latest is None:
        return PatchOutcome.failure(
            ErrorKind.BACKUP_NOT_FOUND, "No backup found. Cannot reset gates."
        )

    try:
        restore_backup(bundle.path, latest)
    except OSError as e:
        return PatchOutcome.failure(
            ErrorKind.WRITE_FAILED, f"Could not restore from backup {latest}: {e}"
        )
    return PatchOutcome.ok(backup_path=latest)
