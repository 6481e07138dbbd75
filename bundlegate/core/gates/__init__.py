"""
Feature Gate Registry.

This package provides a declarative catalog of feature gates found in the
minified bundle. Gates are static data: detection signatures plus a patch
strategy, queried by flag name or codename.

Usage:
    from bundlegate.core.gates import find_patchable_gate, list_all

    gate = find_patchable_gate("workout-v2")
    match = gate.match(content)
    if match is not None:
        content = gate.patch(content, match)
"""

from .base import (
    BINARY_PATCH_MARKER,
    GATE_PATCH_MARKER,
    FeatureGate,
    GateCategory,
    GateError,
    PaddingMismatchError,
    ReplacementTooLongError,
    Signature,
)
from .catalog import DETECTION_ONLY_GATES, PATCHABLE_GATES
from .strategies import DetectionOnly, PatchStrategy, ReplaceFragment, ReturnConstant

# Combined list of all registered gates
ALL_GATES: list[FeatureGate] = PATCHABLE_GATES + DETECTION_ONLY_GATES

# Flag names share this prefix; codenames map onto it with - -> _
FLAG_PREFIX = "tengu_"


def _matches(gate: FeatureGate, name_or_codename: str) -> bool:
    lower = name_or_codename.lower()
    return (
        gate.name == lower
        or gate.codename == lower
        or gate.name == FLAG_PREFIX + lower.replace("-", "_")
    )


def list_all() -> list[FeatureGate]:
    """Return every registered gate, patchable gates first."""
    return list(ALL_GATES)


def list_patchable(binary: bool = False) -> list[FeatureGate]:
    """
    Return gates with a viable patch strategy.

    Args:
        binary: Only include gates that can be patched in byte mode

    Returns:
        List of patchable gates in registry order
    """
    if binary:
        return [gate for gate in PATCHABLE_GATES if gate.supports_binary]
    return list(PATCHABLE_GATES)


def find_gate(name_or_codename: str) -> FeatureGate | None:
    """
    Look up a gate by flag name or codename.

    Args:
        name_or_codename: Flag identifier (tengu_*), codename, or a codename
            whose hyphenated form maps onto the flag name

    Returns:
        The first matching gate, or None
    """
    return next((g for g in ALL_GATES if _matches(g, name_or_codename)), None)


def find_patchable_gate(name_or_codename: str, binary: bool = False) -> FeatureGate | None:
    """Look up a gate among the patchable ones only."""
    return next(
        (g for g in list_patchable(binary) if _matches(g, name_or_codename)), None
    )


def gates_by_category(category: GateCategory) -> list[FeatureGate]:
    return [gate for gate in ALL_GATES if gate.category == category]


def is_patchable(name_or_codename: str) -> bool:
    return find_patchable_gate(name_or_codename) is not None


__all__ = [
    "ALL_GATES",
    "BINARY_PATCH_MARKER",
    "DETECTION_ONLY_GATES",
    "DetectionOnly",
    "FLAG_PREFIX",
    "FeatureGate",
    "GATE_PATCH_MARKER",
    "GateCategory",
    "GateError",
    "PATCHABLE_GATES",
    "PaddingMismatchError",
    "PatchStrategy",
    "ReplaceFragment",
    "ReplacementTooLongError",
    "ReturnConstant",
    "Signature",
    "find_gate",
    "find_patchable_gate",
    "gates_by_category",
    "is_patchable",
    "list_all",
    "list_patchable",
]
