"""
Bundle Gates - Gate Detector

Reports the state of registered gates in a resolved bundle, and scans for
flags that the registry does not know about yet.

A gate is detected when its signature matches or when a previous patch
left its marker behind; it is enabled only when the marker is present.
Detection therefore keeps working after the original code shape has been
replaced by a patch.
"""

import re

from .bundle import BundleInfo
from .gates import FLAG_PREFIX, FeatureGate, find_gate, list_all, list_patchable
from .results import GateStatus

RAW_FLAG_PATTERN = re.compile(re.escape(FLAG_PREFIX) + r"[a-z0-9_]+")


def detect_gate_in_content(content: str, gate: FeatureGate) -> GateStatus:
    """
    Detect one gate in decoded content.

    Args:
        content: Decoded bundle content
        gate: Gate to look for

    Returns:
        Status of the gate
    """
    marked = gate.is_marked(content)
    matched = gate.match(content) is not None
    return GateStatus.for_gate(gate, detected=matched or marked, enabled=marked)


def detect_all(bundle: BundleInfo) -> list[GateStatus]:
    """Detect every registered gate, in registry order."""
    return [detect_gate_in_content(bundle.content, gate) for gate in list_all()]


def detect_patchable(bundle: BundleInfo) -> list[GateStatus]:
    """Detect the gates the patchers can act on for this bundle's mode."""
    return [
        detect_gate_in_content(bundle.content, gate)
        for gate in list_patchable(binary=bundle.is_binary_target)
    ]


def detect_one(name_or_codename: str, bundle: BundleInfo) -> GateStatus | None:
    """
    Detect a single gate by flag name or codename.

    Returns:
        The gate's status, or None if the gate is not registered
    """
    gate = find_gate(name_or_codename)
    if gate is None:
        return None
    return detect_gate_in_content(bundle.content, gate)


def scan_raw_flags(bundle: BundleInfo) -> list[str]:
    """
    Find every flag following the naming convention, registered or not.

    Returns:
        Deduplicated, sorted flag names
    """
    return sorted(set(RAW_FLAG_PATTERN.findall(bundle.content)))
