"""
Bundle Gates - Operation Results

Status and outcome values returned by detection and patching operations,
plus the configuration shared by every mutating operation.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .gates import FeatureGate


class ErrorKind(Enum):
    """Classification of a failed operation."""

    ARTIFACT_NOT_FOUND = "artifact_not_found"
    UNKNOWN_GATE = "unknown_gate"
    SIGNATURE_NOT_FOUND = "signature_not_found"
    REPLACEMENT_TOO_LONG = "replacement_too_long"
    BACKUP_FAILED = "backup_failed"
    BACKUP_NOT_FOUND = "backup_not_found"
    WRITE_FAILED = "write_failed"


@dataclass
class GatePatchConfig:
    """
    Options for mutating operations.

    Attributes:
        cli_path: Explicit artifact path; the installation locator is used
            when omitted
        backup: Copy the artifact aside before writing
    """

    cli_path: str | None = None
    backup: bool = True


@dataclass(frozen=True)
class GateStatus:
    """Runtime state of one gate in one artifact."""

    name: str
    codename: str
    detected: bool
    enabled: bool
    env_override: str | None = None

    @classmethod
    def for_gate(cls, gate: FeatureGate, detected: bool, enabled: bool) -> "GateStatus":
        return cls(
            name=gate.name,
            codename=gate.codename,
            detected=detected,
            enabled=enabled,
            env_override=gate.env_override,
        )


@dataclass
class PatchOutcome:
    """Uniform result of every mutating operation."""

    success: bool
    backup_path: Path | None = None
    gates_changed: list[GateStatus] = field(default_factory=list)
    error: str | None = None
    error_kind: ErrorKind | None = None

    @classmethod
    def ok(
        cls,
        gates_changed: list[GateStatus] | None = None,
        backup_path: Path | None = None,
    ) -> "PatchOutcome":
        return cls(success=True, backup_path=backup_path, gates_changed=gates_changed or [])

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "PatchOutcome":
        return cls(success=False, error=message, error_kind=kind)


def artifact_not_found() -> PatchOutcome:
    return PatchOutcome.failure(
        ErrorKind.ARTIFACT_NOT_FOUND,
        "Could not find the target artifact. Pass an explicit path.",
    )


def unknown_gate(name_or_codename: str) -> PatchOutcome:
    return PatchOutcome.failure(
        ErrorKind.UNKNOWN_GATE,
        f'Unknown or unpatchable gate: "{name_or_codename}". '
        f"Use --list to see available gates.",
    )


def signature_not_found(gate: FeatureGate, binary: bool = False) -> PatchOutcome:
    message = f'Gate pattern for "{gate.codename}" not found in this version of the artifact.'
    if binary:
        # Spaces-only padding leaves neither marker nor signature behind
        message += (
            " If it was enabled earlier with too little room for a marker,"
            " it may already be patched; use reset to restore the original."
        )
    return PatchOutcome.failure(ErrorKind.SIGNATURE_NOT_FOUND, message)
