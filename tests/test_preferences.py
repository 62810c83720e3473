"""Tests for the preference store"""

import pytest

from src.app.preferences import (
    DARK_MODE_KEY,
    PreferenceStore,
    load_dark_mode,
    save_dark_mode,
    system_prefers_dark,
)


class TestPreferenceStore:
    """Best-effort reads and writes"""

    def test_missing_file_reads_none(self, tmp_path):
        store = PreferenceStore(tmp_path / "none.json")
        assert store.read(DARK_MODE_KEY) is None

    def test_write_then_read(self, tmp_path):
        store = PreferenceStore(tmp_path / "nested" / "prefs.json")
        assert store.write(DARK_MODE_KEY, "true")
        assert store.read(DARK_MODE_KEY) == "true"

    def test_corrupt_file_reads_none(self, tmp_path):
        """Garbage on disk is treated as empty"""
        path = tmp_path / "prefs.json"
        path.write_text("{not json")
        store = PreferenceStore(path)

        assert store.read(DARK_MODE_KEY) is None
        assert store.write(DARK_MODE_KEY, "false")
        assert store.read(DARK_MODE_KEY) == "false"

    def test_non_string_value_ignored(self, tmp_path):
        path = tmp_path / "prefs.json"
        path.write_text('{"darkMode:v1": true}')
        assert PreferenceStore(path).read(DARK_MODE_KEY) is None

    def test_unwritable_location(self, tmp_path):
        """Writes under a regular file fail quietly"""
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = PreferenceStore(blocker / "prefs.json")

        assert store.write(DARK_MODE_KEY, "true") is False
        assert store.read(DARK_MODE_KEY) is None


class TestDarkMode:
    """Fallback chain for the theme"""

    def test_round_trip(self, tmp_path):
        store = PreferenceStore(tmp_path / "prefs.json")
        save_dark_mode(store, True)
        assert load_dark_mode(store, lambda: False) is True

    def test_unknown_stored_value_uses_default(self, tmp_path):
        store = PreferenceStore(tmp_path / "prefs.json")
        store.write(DARK_MODE_KEY, "maybe")
        assert load_dark_mode(store, lambda: True) is True

    @pytest.mark.parametrize(
        "value, expected",
        [("15;0", True), ("0;15", False), ("15;default;0", True), ("", False), ("garbage", False)],
    )
    def test_system_prefers_dark(self, value, expected):
        assert system_prefers_dark({"COLORFGBG": value}) is expected

    def test_system_prefers_dark_unset(self):
        assert system_prefers_dark({}) is False
