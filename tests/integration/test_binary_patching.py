"""Integration tests for length-preserving patches to native binaries."""

from unittest import mock

from bundlegate.core import binary_patcher
from bundlegate.core.backup import list_backups
from bundlegate.core.binary_patcher import enable_all_gates, enable_gate
from bundlegate.core.bundle import resolve_bundle
from bundlegate.core.detector import detect_all
from bundlegate.core.gates import ReplacementTooLongError
from bundlegate.core.results import ErrorKind
from bundlegate.core.text_patcher import disable_gate, reset_gates

from conftest import BINARY_PREFIX, BINARY_SUFFIX, WORKOUT_V2_FRAGMENT, make_binary


def _statuses(path):
    return {s.codename: s for s in detect_all(resolve_bundle(path))}


class TestBinaryEnableGate:
    """Tests for enabling one gate in a binary."""

    def test_size_and_offsets_preserved(self, binary_path):
        original = binary_path.read_bytes()

        outcome = enable_gate("workout-v2", resolve_bundle(binary_path))

        assert outcome.success
        assert outcome.backup_path.read_bytes() == original
        data = binary_path.read_bytes()
        assert len(data) == len(original)
        assert data.startswith(BINARY_PREFIX)
        assert data.endswith(BINARY_SUFFIX)

        start = original.index(WORKOUT_V2_FRAGMENT.encode("ascii"))
        end = start + len(WORKOUT_V2_FRAGMENT)
        assert data[:start] == original[:start]
        assert data[end:] == original[end:]
        assert data[start:end] == b"function Gt(){return!0}/*CCP:workout-v2    */"

    def test_detected_as_enabled(self, binary_path):
        enable_gate("workout-v2", resolve_bundle(binary_path))
        status = _statuses(binary_path)["workout-v2"]
        assert status.detected
        assert status.enabled

    def test_idempotent(self, binary_path):
        enable_gate("workout-v2", resolve_bundle(binary_path))
        after_first = binary_path.read_bytes()

        outcome = enable_gate("workout-v2", resolve_bundle(binary_path))

        assert outcome.success
        assert outcome.backup_path is None
        assert binary_path.read_bytes() == after_first
        assert len(list_backups(binary_path)) == 1

    def test_spaces_only_patch(self, binary_path):
        """team-mode has three bytes of slack, too few for any marker."""
        original = binary_path.read_bytes()

        outcome = enable_gate("team-mode", resolve_bundle(binary_path))

        assert outcome.success
        data = binary_path.read_bytes()
        assert len(data) == len(original)
        assert b"isEnabled(){return!0}   }" in data
        assert b"CCP" not in data

    def test_spaces_only_patch_reenable_explains_failure(self, binary_path):
        """An unmarked earlier patch is named as a likely cause."""
        enable_gate("team-mode", resolve_bundle(binary_path))
        after_first = binary_path.read_bytes()

        outcome = enable_gate("team-mode", resolve_bundle(binary_path))

        assert not outcome.success
        assert outcome.error_kind is ErrorKind.SIGNATURE_NOT_FOUND
        assert "may already be patched" in outcome.error
        assert binary_path.read_bytes() == after_first
        assert len(list_backups(binary_path)) == 1

    def test_replacement_too_long_writes_nothing(self, binary_path):
        original = binary_path.read_bytes()
        too_long = ReplacementTooLongError("Replacement is 5 bytes longer than original")

        with mock.patch.object(binary_patcher, "build_padded_replacement", side_effect=too_long):
            outcome = enable_gate("workout-v2", resolve_bundle(binary_path))

        assert not outcome.success
        assert outcome.error_kind is ErrorKind.REPLACEMENT_TOO_LONG
        assert "5 bytes longer" in outcome.error
        assert binary_path.read_bytes() == original
        assert list_backups(binary_path) == []

    def test_signature_not_found(self, tmp_path):
        path = tmp_path / "claude"
        path.write_bytes(BINARY_PREFIX + BINARY_SUFFIX)
        outcome = enable_gate("workout-v2", resolve_bundle(path))
        assert outcome.error_kind is ErrorKind.SIGNATURE_NOT_FOUND
        assert list_backups(path) == []


class TestBinaryEnableAllGates:
    """Tests for folding every gate over one binary buffer."""

    def test_enables_all_present_gates(self, binary_path):
        original = binary_path.read_bytes()

        outcome = enable_all_gates(resolve_bundle(binary_path))

        assert outcome.success
        assert {s.codename for s in outcome.gates_changed} == {
            "team-mode",
            "workout-v2",
            "oboe",
            "silver-lantern",
        }
        assert len(list_backups(binary_path)) == 1

        data = binary_path.read_bytes()
        assert len(data) == len(original)
        assert data.startswith(BINARY_PREFIX)
        assert data.endswith(BINARY_SUFFIX)
        assert b'function v58(){return"promo"}/*CCP:silver-lantern' in data
        assert b"function hq(){return!0}/*CCP:oboe" in data

        statuses = _statuses(binary_path)
        for codename in ("workout-v2", "oboe", "silver-lantern"):
            assert statuses[codename].enabled, codename

    def test_second_run_writes_nothing(self, binary_path):
        enable_all_gates(resolve_bundle(binary_path))
        after_first = binary_path.read_bytes()

        outcome = enable_all_gates(resolve_bundle(binary_path))

        assert outcome.success
        assert outcome.backup_path is None
        assert binary_path.read_bytes() == after_first
        assert len(list_backups(binary_path)) == 1

    def test_too_long_aborts_batch(self, binary_path):
        original = binary_path.read_bytes()
        real_build = binary_patcher.build_padded_replacement

        def fail_on_oboe(original_text, minimal, codename):
            if codename == "oboe":
                raise ReplacementTooLongError("Replacement is 1 bytes longer than original")
            return real_build(original_text, minimal, codename)

        with mock.patch.object(binary_patcher, "build_padded_replacement", side_effect=fail_on_oboe):
            outcome = enable_all_gates(resolve_bundle(binary_path))

        assert outcome.error_kind is ErrorKind.REPLACEMENT_TOO_LONG
        assert "oboe" in outcome.error
        assert binary_path.read_bytes() == original
        assert list_backups(binary_path) == []


class TestBinaryDisableAndReset:
    """Disable and reset restore byte copies in binary mode too."""

    def test_round_trip(self, binary_path):
        original = binary_path.read_bytes()
        enable_gate("silver-lantern", resolve_bundle(binary_path))

        outcome = disable_gate("silver-lantern", resolve_bundle(binary_path))

        assert outcome.success
        assert binary_path.read_bytes() == original

    def test_no_backup_reports_failure(self, binary_path):
        enable_gate("oboe", resolve_bundle(binary_path), backup=False)
        patched = binary_path.read_bytes()

        outcome = disable_gate("oboe", resolve_bundle(binary_path))

        assert outcome.error_kind is ErrorKind.BACKUP_NOT_FOUND
        assert binary_path.read_bytes() == patched

    def test_reset(self, binary_path):
        enable_all_gates(resolve_bundle(binary_path))
        outcome = reset_gates(resolve_bundle(binary_path))
        assert outcome.success
        assert binary_path.read_bytes() == make_binary()
