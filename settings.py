"""
settings.py

Persistent settings management for PageCanvas.

One TOML file in the per-user config directory (resolved by platformdirs):
    - Windows: %APPDATA%/pagecanvas/settings.toml
    - macOS: ~/Library/Application Support/pagecanvas/settings.toml
    - Linux: ~/.config/pagecanvas/settings.toml

Every field carries its default inline. A settings.toml that cannot be
read or decoded is ignored and the defaults apply.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "pagecanvas"

log = logging.getLogger(__name__)

_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Process-wide SettingsManager, created on first use."""
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasPageSettings:
    """Page appearance settings.

    Defaults:
        default_background: "#ffffff"
        min_height: 800
        width: 1200
    """
    default_background: str = "#ffffff"  # Default: white
    min_height: int = 800                # Default: 800 pixels (stylesheet min-height)
    width: int = 1200                    # Default: 1200 pixels (canvas surface width)


@dataclass
class CanvasElementSettings:
    """Element placement settings.

    Defaults:
        min_size: 10.0
        duplicate_offset: 20.0
        drop_anchor_x: 50.0
        drop_anchor_y: 25.0
    """
    min_size: float = 10.0          # Default: 10.0 pixels (width and height floor)
    duplicate_offset: float = 20.0  # Default: 20.0 pixels on both axes
    drop_anchor_x: float = 50.0     # Default: 50.0 pixels left of the drop point
    drop_anchor_y: float = 25.0     # Default: 25.0 pixels above the drop point


@dataclass
class CanvasZoomSettings:
    """View zoom step.

    Defaults:
        wheel_factor: 1.15
    """
    wheel_factor: float = 1.15  # Default: 1.15 (15% per scroll step)


@dataclass
class CanvasSettings:
    """Page, element and zoom sections under [canvas]."""
    page: CanvasPageSettings = field(default_factory=CanvasPageSettings)
    elements: CanvasElementSettings = field(default_factory=CanvasElementSettings)
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Top-level settings: [general] plus the nested [canvas] tables.

    Attributes:
        workspace_dir: Directory holding saved templates.
        log_level: Root logging level name.
        canvas: Canvas-related settings.
    """
    # Workspace directory for template save/load (empty = ~/Documents/PageCanvas)
    workspace_dir: str = ""

    # Logging level name understood by the logging module
    log_level: str = "INFO"

    canvas: CanvasSettings = field(default_factory=CanvasSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Owns the AppSettings instance and its settings.toml file.

    A missing file means defaults; the file is written by the first save
    (ensure_file_complete at startup, save again on quit).

    Args:
        app_name: Application name used for the config directory.
    """

    def __init__(self, app_name: str = APP_NAME):
        self.settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()

    def ensure_file_complete(self) -> None:
        """Write settings.toml when it is missing so every section is listed."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Read settings.toml; defaults when it is missing or unreadable."""
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError) as e:
            log.warning("Ignoring unreadable settings file %s: %s", self.settings_file, e)
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Overlay the keys present in *data* on a fresh AppSettings."""
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.workspace_dir = general.get("workspace_dir", settings.workspace_dir)
        settings.log_level = general.get("log_level", settings.log_level)

        # Canvas section
        canvas = data.get("canvas", {})
        if "page" in canvas:
            p = canvas["page"]
            settings.canvas.page.default_background = p.get("default_background", settings.canvas.page.default_background)
            settings.canvas.page.min_height = p.get("min_height", settings.canvas.page.min_height)
            settings.canvas.page.width = p.get("width", settings.canvas.page.width)
        if "elements" in canvas:
            el = canvas["elements"]
            settings.canvas.elements.min_size = el.get("min_size", settings.canvas.elements.min_size)
            settings.canvas.elements.duplicate_offset = el.get("duplicate_offset", settings.canvas.elements.duplicate_offset)
            settings.canvas.elements.drop_anchor_x = el.get("drop_anchor_x", settings.canvas.elements.drop_anchor_x)
            settings.canvas.elements.drop_anchor_y = el.get("drop_anchor_y", settings.canvas.elements.drop_anchor_y)
        if "zoom" in canvas:
            zm = canvas["zoom"]
            settings.canvas.zoom.wheel_factor = zm.get("wheel_factor", settings.canvas.zoom.wheel_factor)

        return settings

    def save(self) -> None:
        """Write settings.toml, creating its directory first."""
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Nested dict mirroring the [general] and [canvas.*] tables."""
        s = self.settings
        return {
            "general": {
                "workspace_dir": s.workspace_dir,
                "log_level": s.log_level,
            },
            "canvas": {
                "page": {
                    "default_background": s.canvas.page.default_background,
                    "min_height": s.canvas.page.min_height,
                    "width": s.canvas.page.width,
                },
                "elements": {
                    "min_size": s.canvas.elements.min_size,
                    "duplicate_offset": s.canvas.elements.duplicate_offset,
                    "drop_anchor_x": s.canvas.elements.drop_anchor_x,
                    "drop_anchor_y": s.canvas.elements.drop_anchor_y,
                },
                "zoom": {
                    "wheel_factor": s.canvas.zoom.wheel_factor,
                },
            },
        }

    def to_toml(self) -> str:
        """Current settings rendered as TOML text."""
        return tomli_w.dumps(self._to_toml_dict())

    def get_workspace_dir(self) -> Path:
        """Directory for templates and exports.

        Returns:
            workspace_dir when set, otherwise ~/Documents/PageCanvas.
        """
        if self.settings.workspace_dir:
            return Path(self.settings.workspace_dir)
        return Path.home() / "Documents" / "PageCanvas"
