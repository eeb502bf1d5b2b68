from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .directives import ProjectionOptions
from .log import get_logger

log = get_logger(__name__)

BROWSERS = ("Vivaldi", "Chrome")

# Profile directory of each browser relative to the per-OS config root.
_PROFILE_DIRS = {
    "Vivaldi": {"linux": "vivaldi", "darwin": "Vivaldi", "win32": "Vivaldi/User Data"},
    "Chrome": {"linux": "google-chrome", "darwin": "Google/Chrome", "win32": "Google/Chrome/User Data"},
}


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


@dataclass
class Settings:
    # Storage
    bookmarks_file: str = ""  # empty => browser default profile
    browser: str = "Vivaldi"  # Vivaldi | Chrome
    backup_before_save: bool = True

    # Projection defaults (code-block directives override these)
    root_folder: str = ""
    editable: bool = False
    big_description: bool = False

    # Logging / UX
    log_level: str = "INFO"
    no_color: bool = False

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        s.bookmarks_file = _env_str("VIVMARKS_BOOKMARKS_FILE", s.bookmarks_file)
        s.browser = _env_str("VIVMARKS_BROWSER", s.browser)
        s.backup_before_save = _env_bool("VIVMARKS_BACKUP", s.backup_before_save)

        s.root_folder = _env_str("VIVMARKS_ROOT_FOLDER", s.root_folder)
        s.editable = _env_bool("VIVMARKS_EDITABLE", s.editable)
        s.big_description = _env_bool("VIVMARKS_BIG_DESCRIPTION", s.big_description)

        s.log_level = _env_str("VIVMARKS_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("VIVMARKS_NO_COLOR", s.no_color)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        s = Settings.from_env()
        for k, v in data.items():
            if hasattr(s, k):
                setattr(s, k, v)
            else:
                log.warning("Ignoring unknown config key %r in %s", k, path)
        return s

    def projection_options(self) -> ProjectionOptions:
        return ProjectionOptions(
            root_folder=self.root_folder or None,
            editable=bool(self.editable),
            big_description=bool(self.big_description),
        )

    def bookmarks_path(self) -> Path:
        if self.bookmarks_file:
            return Path(self.bookmarks_file).expanduser()
        return default_bookmarks_path(self.browser)


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    return Settings.from_env()


def default_bookmarks_path(browser: str, *, platform: Optional[str] = None, home: Optional[Path] = None) -> Path:
    dirs = _PROFILE_DIRS.get(browser)
    if dirs is None:
        raise ValueError(f"Unsupported browser {browser!r} (expected one of {', '.join(BROWSERS)})")
    platform = platform or sys.platform
    home = home or Path.home()

    if platform.startswith("win"):
        base = Path(os.getenv("LOCALAPPDATA") or home / "AppData" / "Local")
        profile = dirs["win32"]
    elif platform == "darwin":
        base = home / "Library" / "Application Support"
        profile = dirs["darwin"]
    else:
        base = Path(os.getenv("XDG_CONFIG_HOME") or home / ".config")
        profile = dirs["linux"]
    return base / profile / "Default" / "Bookmarks"
