"""Unit tests for locating installed artifacts."""

from pathlib import Path
from unittest import mock

from bundlegate.core import locator
from bundlegate.core.locator import PACKAGE_PARTS, candidate_paths, find_all_clis, find_cli


def _install(root: Path) -> Path:
    path = root.joinpath(*PACKAGE_PARTS)
    path.parent.mkdir(parents=True)
    path.write_text("// cli")
    return path


class TestCandidatePaths:
    def test_cwd_first(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with mock.patch.object(locator.shutil, "which", return_value=None):
            assert candidate_paths()[0] == Path.cwd().joinpath(*PACKAGE_PARTS)

    def test_native_executable_is_candidate(self, tmp_path):
        exe = tmp_path / "bin" / "claude"
        exe.parent.mkdir()
        exe.write_bytes(b"\x7fELF")
        with mock.patch.object(locator.shutil, "which", return_value=str(exe)):
            assert exe.resolve() in candidate_paths()

    def test_npx_cache(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        (tmp_path / ".npm" / "_npx" / "abc123").mkdir(parents=True)
        with mock.patch.object(locator.shutil, "which", return_value=None):
            paths = candidate_paths()
        assert tmp_path.joinpath(".npm", "_npx", "abc123", *PACKAGE_PARTS) in paths


class TestFindCli:
    """Tests for find_cli() and find_all_clis()."""

    def test_finds_local_install(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        installed = _install(tmp_path)
        with mock.patch.object(locator.shutil, "which", return_value=None):
            assert find_cli().resolve() == installed.resolve()

    def test_nothing_installed(self, tmp_path):
        with mock.patch.object(locator, "candidate_paths", return_value=[tmp_path / "x.js"]):
            assert find_cli() is None
            assert find_all_clis() == []

    def test_all_deduplicated(self, tmp_path):
        installed = _install(tmp_path)
        with mock.patch.object(locator, "candidate_paths", return_value=[installed, installed]):
            assert find_all_clis() == [installed.resolve()]
