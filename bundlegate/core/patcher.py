"""
Bundle Gates - Patch Dispatch

Public entry points for mutating operations. Each call resolves the
artifact afresh and routes to the text-mode or byte-mode patcher based on
the bundle's encoding.

There is no file locking: callers must ensure only one process mutates a
given artifact at a time.
"""

from . import binary_patcher, text_patcher
from .bundle import resolve_bundle
from .gates import find_patchable_gate
from .results import GatePatchConfig, PatchOutcome, artifact_not_found, unknown_gate


def enable_gate(name_or_codename: str, config: GatePatchConfig | None = None) -> PatchOutcome:
    """
    Enable a single gate by flag name or codename.

    Args:
        name_or_codename: e.g. 'workout-v2', 'tengu_workout2', 'swarm-mode'
        config: Artifact path and backup options

    Returns:
        Outcome of the operation
    """
    if find_patchable_gate(name_or_codename) is None:
        return unknown_gate(name_or_codename)

    config = config or GatePatchConfig()
    bundle = resolve_bundle(config.cli_path)
    if bundle is None:
        return artifact_not_found()

    if bundle.is_binary_target:
        return binary_patcher.enable_gate(name_or_codename, bundle, config.backup)
    return text_patcher.enable_gate(name_or_codename, bundle, config.backup)


def enable_all_gates(config: GatePatchConfig | None = None) -> PatchOutcome:
    """Enable every patchable gate present in the artifact."""
    config = config or GatePatchConfig()
    bundle = resolve_bundle(config.cli_path)
    if bundle is None:
        return artifact_not_found()

    if bundle.is_binary_target:
        return binary_patcher.enable_all_gates(bundle, config.backup)
    return text_patcher.enable_all_gates(bundle, config.backup)


def disable_gate(name_or_codename: str, config: GatePatchConfig | None = None) -> PatchOutcome:
    """
    Disable a gate, preferring a restore from the newest clean backup.

    Restores are byte copies, so the same path serves both modes.
    """
    if find_patchable_gate(name_or_codename) is None:
        return unknown_gate(name_or_codename)

    config = config or GatePatchConfig()
    bundle = resolve_bundle(config.cli_path)
    if bundle is None:
        return artifact_not_found()
    return text_patcher.disable_gate(name_or_codename, bundle)


def reset_gates(config: GatePatchConfig | None = None) -> PatchOutcome:
    """Restore the artifact from its most recent backup."""
    config = config or GatePatchConfig()
    bundle = resolve_bundle(config.cli_path)
    if bundle is None:
        return artifact_not_found()
    return text_patcher.reset_gates(bundle)
