"""
Patch strategies for feature gates.

Each gate declares one strategy value instead of carrying its own patch
functions. The dispatcher functions below interpret the strategy, so the
rules about byte-mode support and marker placement live in one place.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class ReturnConstant:
    """
    Replace a whole wrapper function with one returning a constant.

    The gate's signature must capture the function name in group 1.
    The value is emitted verbatim after ``return`` (e.g. ``!0`` or
    ``"promo"``), so it must not need a separating space.
    """

    value: str = "!0"


@dataclass(frozen=True)
class ReplaceFragment:
    """Replace the matched fragment with a fixed code literal."""

    replacement: str


@dataclass(frozen=True)
class DetectionOnly:
    """No patch exists; the gate is only reported."""

    pass


PatchStrategy = ReturnConstant | ReplaceFragment | DetectionOnly


def semantic_replacement(strategy: PatchStrategy, match: re.Match) -> str | None:
    """
    Build the minimal enabled-form code for a matched fragment.

    Args:
        strategy: Gate patch strategy
        match: Signature match in the decoded content

    Returns:
        Replacement code without marker or padding, or None for
        detection-only gates
    """
    if isinstance(strategy, ReturnConstant):
        return f"function {match.group(1)}(){{return{strategy.value}}}"
    if isinstance(strategy, ReplaceFragment):
        return strategy.replacement
    return None


def supports_binary(strategy: PatchStrategy) -> bool:
    return not isinstance(strategy, DetectionOnly)


def patch_text(strategy: PatchStrategy, content: str, match: re.Match, marker: str) -> str:
    """
    Rewrite the matched span of content into its enabled form.

    Text mode has no length constraint, so the replacement is followed by
    the full ``/*marker*/`` comment.

    Args:
        strategy: Gate patch strategy
        content: Decoded bundle content the match was taken from
        match: Signature match
        marker: Long-form marker for the gate

    Returns:
        New content; unchanged for detection-only gates
    """
    replacement = semantic_replacement(strategy, match)
    if replacement is None:
        return content
    start, end = match.span()
    return content[:start] + replacement + f"/*{marker}*/" + content[end:]


def unpatch_text(strategy: PatchStrategy, content: str) -> str:
    # The original fragment is not recoverable from the enabled form
    return content
