"""Tests for settings.py: defaults, TOML round trip, corrupt-file fallback."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from document import drop_position
from settings import AppSettings, SettingsManager, get_settings


@pytest.fixture()
def manager(tmp_path):
    sm = SettingsManager()
    sm.settings_dir = tmp_path
    sm.settings_file = tmp_path / "settings.toml"
    sm.settings = AppSettings()
    return sm


class TestDefaults:
    def test_canvas_defaults(self):
        s = AppSettings()
        assert s.canvas.page.default_background == "#ffffff"
        assert s.canvas.page.min_height == 800
        assert s.canvas.elements.min_size == 10.0
        assert s.canvas.elements.duplicate_offset == 20.0
        assert (s.canvas.elements.drop_anchor_x, s.canvas.elements.drop_anchor_y) == (50.0, 25.0)
        assert s.canvas.zoom.wheel_factor == 1.15
        assert s.log_level == "INFO"

    def test_singleton(self):
        assert get_settings() is get_settings()

    def test_workspace_dir(self, manager, tmp_path):
        assert manager.get_workspace_dir() == Path.home() / "Documents" / "PageCanvas"
        manager.settings.workspace_dir = str(tmp_path)
        assert manager.get_workspace_dir() == tmp_path


class TestPersistence:
    def test_roundtrip(self, manager):
        manager.settings.log_level = "DEBUG"
        manager.settings.canvas.page.min_height = 1024
        manager.settings.canvas.elements.drop_anchor_x = 0.0
        manager.save()
        loaded = manager.load()
        assert loaded.log_level == "DEBUG"
        assert loaded.canvas.page.min_height == 1024
        assert loaded.canvas.elements.drop_anchor_x == 0.0

    def test_to_toml_is_valid(self, manager):
        data = tomllib.loads(manager.to_toml())
        assert data["canvas"]["page"]["default_background"] == "#ffffff"
        assert data["general"]["log_level"] == "INFO"

    def test_partial_file_keeps_defaults(self, manager):
        manager.settings_file.write_text('[canvas.zoom]\nwheel_factor = 1.5\n', encoding="utf-8")
        loaded = manager.load()
        assert loaded.canvas.zoom.wheel_factor == 1.5
        assert loaded.canvas.page.min_height == 800

    def test_corrupt_file_falls_back(self, manager):
        manager.settings_file.write_text("this is = = not toml", encoding="utf-8")
        assert manager.load() == AppSettings()

    def test_missing_file(self, manager):
        assert manager.load() == AppSettings()


class TestSettingsDriveBehavior:
    def test_drop_anchor(self):
        get_settings().settings.canvas.elements.drop_anchor_x = 0.0
        pos = drop_position(100, 100)
        assert (pos.x, pos.y) == (100, 75)
