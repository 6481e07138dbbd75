"""Shared pytest fixtures for gate detection and patching tests."""

from pathlib import Path

import pytest

# Minified-bundle fragments, one per registered gate shape
WORKOUT_V2_FRAGMENT = 'function Gt(){return g9("tengu_workout2",!1)}'
OBOE_FRAGMENT = (
    "function hq(){if(AR(process.env.CLAUDE_CODE_DISABLE_AUTO_MEMORY))return!1;"
    'return g9("tengu_oboe",!1)}'
)
SILVER_LANTERN_FRAGMENT = (
    'function v58(){if(!g9("tengu_silver_lantern",!1))return null;'
    'if(xA())return"promo";if(bQ())return"launch-only";return null}'
)
TEAM_MODE_FRAGMENT = "isEnabled(){return!Kp()}"
SWARM_MODE_FRAGMENT = (
    "function qR(){if(AR(process.env.CLAUDE_CODE_AGENT_SWARMS))return!1;"
    'return g9("tengu_brass_pebble",!1)}'
)

SAMPLE_SCRIPT = (
    '#!/usr/bin/env node\r\nvar Zx="café → ok";'
    + WORKOUT_V2_FRAGMENT
    + ";"
    + OBOE_FRAGMENT
    + ";"
    + SILVER_LANTERN_FRAGMENT
    + ";var q={"
    + TEAM_MODE_FRAGMENT
    + '};g9("tengu_marble_anvil",!1);g9("tengu_unregistered_flag",!1);\r\n'
)

# ELF-ish header and high bytes around the embedded script, plus the
# script's own multi-byte UTF-8 sequences
BINARY_PREFIX = b"\x7fELF\x02\x01\x01\x00" + bytes(range(256)) + b"\xc3\xa9\xe2\x86\x92"
BINARY_SUFFIX = b"\x00" * 16 + bytes(range(255, -1, -1))


def make_binary(script: str = SAMPLE_SCRIPT) -> bytes:
    """Build a fake native binary embedding the script as raw UTF-8."""
    return BINARY_PREFIX + script.encode("utf-8") + BINARY_SUFFIX


@pytest.fixture
def script_path(tmp_path) -> Path:
    """Script bundle laid out like an npm install."""
    package_dir = tmp_path / "npm" / "claude-code"
    package_dir.mkdir(parents=True)
    path = package_dir / "cli.js"
    path.write_bytes(SAMPLE_SCRIPT.encode("utf-8"))
    return path


@pytest.fixture
def binary_path(tmp_path) -> Path:
    """Native binary with the script embedded."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    path = bin_dir / "claude"
    path.write_bytes(make_binary())
    return path
