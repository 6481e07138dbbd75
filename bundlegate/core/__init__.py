"""
Core gate detection and patching.

This package contains bundle resolution, gate detection, and the text-mode
and byte-mode patchers, plus backup handling around every write.
"""

from .backup import BackupError, WriteError, create_backup, find_latest_backup, restore_backup
from .binary_patcher import BinaryView, build_padded_replacement, patch_one_gate
from .bundle import BundleInfo, Encoding, resolve_bundle
from .detector import detect_all, detect_one, detect_patchable, scan_raw_flags
from .patcher import disable_gate, enable_all_gates, enable_gate, reset_gates
from .results import ErrorKind, GatePatchConfig, GateStatus, PatchOutcome

__all__ = [
    "BackupError",
    "BinaryView",
    "BundleInfo",
    "Encoding",
    "ErrorKind",
    "GatePatchConfig",
    "GateStatus",
    "PatchOutcome",
    "WriteError",
    "build_padded_replacement",
    "create_backup",
    "detect_all",
    "detect_one",
    "detect_patchable",
    "disable_gate",
    "enable_all_gates",
    "enable_gate",
    "find_latest_backup",
    "patch_one_gate",
    "reset_gates",
    "resolve_bundle",
    "scan_raw_flags",
]
