"""
Bundle Gates - Byte-Mode Patcher

Patches gates inside compiled binaries that embed the script as raw bytes.

Key constraint: every replacement must have exactly the byte length of the
fragment it replaces, or every later offset in the binary shifts. The
minimal enabled-form code is padded with a block comment to make up the
difference:

    function qR(){return!0}/*CCP:swarm-mode          */

The binary is decoded as Latin-1, so character offsets reported by regex
matches are byte offsets into the buffer.
"""

from dataclasses import dataclass
from pathlib import Path

from .bundle import BundleInfo, Encoding
from .gates import (
    BINARY_PATCH_MARKER,
    FeatureGate,
    PaddingMismatchError,
    ReplacementTooLongError,
    find_patchable_gate,
    list_patchable,
)
from .results import (
    ErrorKind,
    GateStatus,
    PatchOutcome,
    artifact_not_found,
    signature_not_found,
    unknown_gate,
)
from .text_patcher import commit

COMMENT_OPEN = "/*"
COMMENT_CLOSE = "*/"


def byte_length(text: str) -> int:
    """Length of text in bytes under the single-byte binary encoding."""
    return len(Encoding.LATIN1.encode(text))


def _filler(gap: int, codename: str) -> str:
    # Codename-carrying comment, short tag comment, then bare spaces
    full_prefix = f"{COMMENT_OPEN}{BINARY_PATCH_MARKER}:{codename}"
    full_overhead = byte_length(full_prefix + COMMENT_CLOSE)
    if gap >= full_overhead:
        return full_prefix + " " * (gap - full_overhead) + COMMENT_CLOSE

    short_prefix = f"{COMMENT_OPEN}{BINARY_PATCH_MARKER}"
    short_overhead = byte_length(short_prefix + COMMENT_CLOSE)
    if gap >= short_overhead:
        return short_prefix + " " * (gap - short_overhead) + COMMENT_CLOSE

    return " " * gap


def build_padded_replacement(original: str, minimal_replacement: str, codename: str) -> str:
    """
    Pad a replacement to exactly the byte length of the original match.

    Padding strategy (in order of preference):
        1. Full marker:  ``/*CCP:codename   */``
        2. Short marker: ``/*CCP   */``
        3. Spaces only

    Args:
        original: The matched fragment being replaced
        minimal_replacement: Enabled-form code without marker or padding
        codename: Gate codename for the full marker

    Returns:
        Replacement whose byte length equals the original's

    Raises:
        ReplacementTooLongError: If the replacement is longer than the original
        PaddingMismatchError: If the padded result has the wrong length
    """
    target_len = byte_length(original)
    base_len = byte_length(minimal_replacement)
    gap = target_len - base_len

    if gap < 0:
        raise ReplacementTooLongError(
            f"Replacement is {-gap} bytes longer than original ({base_len} vs {target_len})"
        )

    padded = minimal_replacement if gap == 0 else minimal_replacement + _filler(gap, codename)

    padded_len = byte_length(padded)
    if padded_len != target_len:
        raise PaddingMismatchError(
            f"Binary patch byte mismatch: original {target_len}, padded {padded_len}"
        )
    return padded


def patch_one_gate(buffer: bytearray, content: str, gate: FeatureGate) -> bool:
    """
    Patch a single gate inside a binary buffer, in place.

    Does not re-decode content from the buffer; callers patching several
    gates must do that before the next match (see BinaryView).

    Args:
        buffer: Raw artifact bytes, modified in place
        content: Latin-1 decoding of buffer
        gate: Gate to patch

    Returns:
        True if the buffer was changed

    Raises:
        ReplacementTooLongError: If the enabled form does not fit
    """
    match = gate.match(content)
    if match is None:
        return False

    minimal = gate.semantic_replacement(match)
    if minimal is None:
        return False

    padded = build_padded_replacement(match.group(0), minimal, gate.codename)
    encoded = Encoding.LATIN1.encode(padded)
    start = match.start()
    buffer[start : start + len(encoded)] = encoded
    return True


@dataclass(frozen=True)
class BinaryView:
    """
    A binary buffer together with its decoded content.

    Patching produces a new view whose content is decoded from the mutated
    buffer, so matches never run against stale content.
    """

    buffer: bytearray
    content: str

    @classmethod
    def of(cls, buffer: bytearray) -> "BinaryView":
        return cls(buffer=buffer, content=Encoding.LATIN1.decode(bytes(buffer)))

    @classmethod
    def from_file(cls, path: Path) -> "BinaryView":
        """
        Read an artifact as raw bytes.

        Raises:
            OSError: If the file cannot be read
        """
        return cls.of(bytearray(path.read_bytes()))

    def apply(self, gate: FeatureGate) -> tuple["BinaryView", bool]:
        """
        Patch one gate and return the view to use for the next gate.

        Returns:
            Tuple of (view, changed); the view is self when nothing changed

        Raises:
            ReplacementTooLongError: If the enabled form does not fit
        """
        if not patch_one_gate(self.buffer, self.content, gate):
            return self, False
        return BinaryView.of(self.buffer), True


def _enabled(gate: FeatureGate) -> GateStatus:
    return GateStatus.for_gate(gate, detected=True, enabled=True)


def _commit(bundle: BundleInfo, view: BinaryView, original_size: int, backup: bool, changed: list[GateStatus]) -> PatchOutcome:
    if len(view.buffer) != original_size:
        raise PaddingMismatchError(
            f"Binary size changed from {original_size} to {len(view.buffer)} bytes"
        )
    return commit(bundle, bytes(view.buffer), backup, changed)


def enable_gate(name_or_codename: str, bundle: BundleInfo, backup: bool = True) -> PatchOutcome:
    """
    Enable a single gate in a native binary.

    The patch is built in memory first; a replacement that does not fit
    aborts before any backup or write.

    Args:
        name_or_codename: Flag name or codename of a binary-patchable gate
        bundle: Resolved binary bundle
        backup: Copy the artifact aside before writing

    Returns:
        Outcome of the operation
    """
    gate = find_patchable_gate(name_or_codename, binary=True)
    if gate is None:
        return unknown_gate(name_or_codename)

    try:
        view = BinaryView.from_file(bundle.path)
    except OSError:
        return artifact_not_found()

    if gate.is_marked(view.content):
        return PatchOutcome.ok([_enabled(gate)])

    original_size = len(view.buffer)
    try:
        view, changed = view.apply(gate)
    except ReplacementTooLongError as e:
        return PatchOutcome.failure(
            ErrorKind.REPLACEMENT_TOO_LONG, f'Cannot patch "{gate.codename}": {e}'
        )

    if not changed:
        return signature_not_found(gate, binary=True)

    return _commit(bundle, view, original_size, backup, [_enabled(gate)])


def enable_all_gates(bundle: BundleInfo, backup: bool = True) -> PatchOutcome:
    """
    Enable every binary-patchable gate the binary contains.

    Gates are folded over the buffer one at a time, re-decoding the content
    after each patch. Gates that do not match are skipped; a replacement
    that does not fit aborts the whole batch before anything is written.

    Args:
        bundle: Resolved binary bundle
        backup: Copy the artifact aside before writing

    Returns:
        Outcome listing every gate that is now enabled
    """
    try:
        view = BinaryView.from_file(bundle.path)
    except OSError:
        return artifact_not_found()

    original = bytes(view.buffer)
    changed = []
    for gate in list_patchable(binary=True):
        if gate.is_marked(view.content):
            changed.append(_enabled(gate))
            continue

        try:
            view, patched = view.apply(gate)
        except ReplacementTooLongError as e:
            return PatchOutcome.failure(
                ErrorKind.REPLACEMENT_TOO_LONG, f'Cannot patch "{gate.codename}": {e}'
            )
        if patched:
            changed.append(_enabled(gate))

    if bytes(view.buffer) == original:
        return PatchOutcome.ok(changed)

    return _commit(bundle, view, len(original), backup, changed)
