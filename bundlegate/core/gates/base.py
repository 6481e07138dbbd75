"""
Feature gate base types, markers and exceptions.

Provides the foundation for declarative feature gates: each gate names the
flag it guards, carries one or more signatures that locate its code fragment
in a minified bundle, and a patch strategy describing the enabled form.
"""

import re
from dataclasses import dataclass, field
from enum import Enum

from .strategies import PatchStrategy, DetectionOnly, patch_text, semantic_replacement, supports_binary, unpatch_text

# Marker injected into text-mode patches for identification
GATE_PATCH_MARKER = "CLAUDE-CODE-PATCHER FEATURE GATES"

# Fixed 3-character marker used by byte-mode fillers (saves bytes)
BINARY_PATCH_MARKER = "CCP"


class GateError(Exception):
    """Raised when a gate cannot be patched."""

    pass


class ReplacementTooLongError(GateError):
    """Raised when a minimal replacement does not fit in the original match."""

    pass


class PaddingMismatchError(AssertionError):
    """Raised when a padded replacement does not match the original byte length."""

    pass


class GateCategory(Enum):
    """Classification of a gate. Has no behavioral effect."""

    FEATURE = "feature"
    EXPERIMENT = "experiment"
    TELEMETRY = "telemetry"


@dataclass(frozen=True)
class Signature:
    """
    One registered shape of a gate's code fragment.

    Gates keep one signature per known minification shape, labelled with the
    artifact release it was taken from.
    """

    label: str
    pattern: re.Pattern

    @classmethod
    def compile(cls, label: str, pattern: str) -> "Signature":
        # ASCII \w matches what the minifier can emit, also on Latin-1 views
        return cls(label=label, pattern=re.compile(pattern, re.ASCII))


@dataclass(frozen=True)
class FeatureGate:
    """
    A declarative feature gate rule.

    Attributes:
        name: Flag identifier used by the artifact's feature-flag system
        codename: Short human alias for the gate
        description: Human-readable description of the gated feature
        category: Classification only
        signatures: Ordered signatures; the first one that matches wins
        strategy: How the matched fragment is rewritten when enabled
        env_override: Runtime variable that achieves the same effect, if any
    """

    name: str
    codename: str
    description: str
    category: GateCategory
    signatures: tuple[Signature, ...]
    strategy: PatchStrategy = field(default_factory=DetectionOnly)
    env_override: str | None = None

    @property
    def text_marker(self) -> str:
        """Long-form marker embedded by text-mode patches."""
        return f"{GATE_PATCH_MARKER}:{self.codename}"

    @property
    def binary_marker(self) -> str:
        """Codename-carrying marker embedded by byte-mode fillers."""
        return f"{BINARY_PATCH_MARKER}:{self.codename}"

    @property
    def is_patchable(self) -> bool:
        return not isinstance(self.strategy, DetectionOnly)

    @property
    def supports_binary(self) -> bool:
        """Gates without a semantic replacement are detection-only for binaries."""
        return supports_binary(self.strategy)

    def match(self, content: str) -> re.Match | None:
        """
        Search content for the first registered signature that matches.

        Args:
            content: Decoded bundle content

        Returns:
            The match object, or None if no signature matched
        """
        for signature in self.signatures:
            found = signature.pattern.search(content)
            if found is not None:
                return found
        return None

    def is_marked(self, content: str) -> bool:
        """
        Check whether a previous patch left this gate's marker in content.

        Markers are matched as whole comments, so a codename that prefixes
        another (workout, workout-v2) is not reported as enabled.
        """
        if f"/*{self.text_marker}*/" in content:
            return True
        padded = re.compile(r"/\*" + re.escape(self.binary_marker) + r" *\*/")
        return padded.search(content) is not None

    def patch(self, content: str, match: re.Match) -> str:
        """Rewrite the matched fragment into its enabled form plus marker."""
        return patch_text(self.strategy, content, match, self.text_marker)

    def unpatch(self, content: str) -> str:
        """Best-effort inverse; only a backup restore is guaranteed to work."""
        return unpatch_text(self.strategy, content)

    def semantic_replacement(self, match: re.Match) -> str | None:
        """Minimal enabled-form code for byte mode, or None if unsupported."""
        return semantic_replacement(self.strategy, match)
