"""
Bundle Gates - Bundle Resolver

Produces one consistent view of the target artifact. Script bundles are
decoded as UTF-8; compiled binaries are decoded as Latin-1 so that every
character index in the decoded content is also a byte offset in the file.
Regex match positions are reported in characters, so any other decoding
of a binary would put byte-level writes in the wrong place.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .locator import find_cli

SCRIPT_EXTENSIONS = (".js", ".mjs", ".cjs")

# npm installs ship a launcher next to the real bundle
ADJACENT_BUNDLES = ("cli.js", "cli.mjs", "index.js")


class Encoding(Enum):
    """How an artifact's bytes are mapped to decoded content."""

    # Script bundle, patched as text with no length constraint
    UTF8 = "utf-8"
    # Compiled binary, one character per byte, length preserving
    LATIN1 = "latin-1"

    def decode(self, data: bytes) -> str:
        if self is Encoding.UTF8:
            return data.decode("utf-8", errors="surrogateescape")
        return data.decode("latin-1")

    def encode(self, content: str) -> bytes:
        if self is Encoding.UTF8:
            return content.encode("utf-8", errors="surrogateescape")
        return content.encode("latin-1")


@dataclass(frozen=True)
class BundleInfo:
    """
    Resolved view of one artifact.

    Recomputed on every resolve; any write invalidates it.
    """

    content: str
    path: Path
    encoding: Encoding

    @property
    def is_binary_target(self) -> bool:
        return self.encoding is Encoding.LATIN1


def is_script(path: Path) -> bool:
    return path.suffix.lower() in SCRIPT_EXTENSIONS


def find_script_bundle(cli_path: Path) -> Path | None:
    """
    Find the script bundle for a CLI path.

    Args:
        cli_path: Candidate artifact path

    Returns:
        The path itself if it is an existing script, an adjacent bundle
        for launcher paths, or None when the candidate must be treated
        as a binary (or does not exist)
    """
    if is_script(cli_path):
        return cli_path if cli_path.is_file() else None

    for candidate in ADJACENT_BUNDLES:
        full = cli_path.parent / candidate
        if full.is_file():
            return full

    return None


def read_bundle(path: Path, encoding: Encoding) -> BundleInfo:
    """
    Read an artifact with a fixed encoding.

    Raises:
        OSError: If the file cannot be read
    """
    return BundleInfo(content=encoding.decode(path.read_bytes()), path=path, encoding=encoding)


def resolve_bundle(cli_path: str | Path | None = None) -> BundleInfo | None:
    """
    Resolve the target artifact into a BundleInfo.

    Args:
        cli_path: Explicit artifact path; the installation locator is
            consulted when omitted

    Returns:
        The resolved bundle, or None if nothing could be found or read
    """
    candidate = Path(cli_path) if cli_path is not None else find_cli()
    if candidate is None:
        return None

    script = find_script_bundle(candidate)
    if script is not None:
        try:
            return read_bundle(script, Encoding.UTF8)
        except OSError:
            return None

    # A missing script never falls through to binary mode
    if is_script(candidate) or not candidate.is_file():
        return None

    try:
        return read_bundle(candidate, Encoding.LATIN1)
    except OSError:
        return None
