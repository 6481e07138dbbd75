"""
Bundle Gates - Installation Locator

Finds the installed CLI artifact when no explicit path is given.
Checks local and global npm layouts, the executable on PATH and the
npx cache, in that order.
"""

import os
import shutil
import sys
from pathlib import Path

PACKAGE_PARTS = ("node_modules", "@anthropic-ai", "claude-code", "cli.js")
GLOBAL_PREFIXES = ("/usr/local/lib", "/usr/lib", "/opt/homebrew/lib")
EXECUTABLE_NAME = "claude"


def _is_usable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK | os.W_OK)


def candidate_paths() -> list[Path]:
    """
    Build the ordered list of places the artifact may live.

    Returns:
        Candidate paths, most specific first (not checked for existence)
    """
    home = Path.home()
    candidates = [
        Path.cwd().joinpath(*PACKAGE_PARTS),
        home.joinpath(*PACKAGE_PARTS),
    ]
    candidates.extend(Path(prefix).joinpath(*PACKAGE_PARTS) for prefix in GLOBAL_PREFIXES)

    if sys.platform == "win32":
        app_data = Path(os.environ.get("APPDATA", home / "AppData" / "Roaming"))
        candidates.append(app_data.joinpath("npm", *PACKAGE_PARTS))

    executable = shutil.which(EXECUTABLE_NAME)
    if executable:
        real = Path(executable).resolve()
        # npm global installs link bin/claude to lib/node_modules/.../cli.js
        candidates.append(real.parent.parent.joinpath("lib", *PACKAGE_PARTS))
        candidates.append(real.parent.parent.joinpath(*PACKAGE_PARTS))
        # Native installs: the executable is the artifact itself
        candidates.append(real)

    npx_cache = home / ".npm" / "_npx"
    try:
        entries = sorted(npx_cache.iterdir()) if npx_cache.is_dir() else []
    except OSError:
        entries = []
    candidates.extend(entry.joinpath(*PACKAGE_PARTS) for entry in entries)

    return candidates


def find_cli() -> Path | None:
    """
    Locate the first usable artifact.

    Returns:
        Path to a readable and writable artifact, or None
    """
    for candidate in candidate_paths():
        if _is_usable(candidate):
            return candidate
    return None


def find_all_clis() -> list[Path]:
    """Locate every usable artifact, deduplicated by real path."""
    found = []
    seen = set()
    for candidate in candidate_paths():
        if not _is_usable(candidate):
            continue
        real = candidate.resolve()
        if real not in seen:
            seen.add(real)
            found.append(real)
    return found
