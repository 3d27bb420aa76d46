"""
Configuration settings for daykeeper
"""
import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)

# Base paths
DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "daykeeper"
DATA_DIR_ENV = "DAYKEEPER_HOME"

# Data files
TASKS_FILENAME = "tasks.json"
SETTINGS_FILENAME = "settings.json"
LOG_FILENAME = "daykeeper.log"
OUTPUT_DIRNAME = "output"

# Default settings
DEFAULT_SETTINGS = {
    "theme": "dark",

    # Wallpaper size in pixels, match the display
    "width": 1920,
    "height": 1080,

    "font": None,  # path or font name, None picks a system font
    "font_size": 16,
    "separator": "\n",

    # Commit the data directory to git after every change
    "git_history": False,

    "output_filename": "wallpaper-{timestamp}.png",
}


# Theme definitions
THEMES = {
    "dark": {
        "name": "Dark",
        "bg_color": (25, 25, 35),
        "header_color": (45, 45, 60),
        "text_color": (255, 255, 255),
        "text_secondary": (180, 180, 190),
        "empty_color": (38, 38, 50),
        "grid_color": (60, 60, 80),
        "accent": (255, 200, 150),
    },
    "light": {
        "name": "Light",
        "bg_color": (252, 250, 248),
        "header_color": (240, 238, 235),
        "text_color": (50, 45, 40),
        "text_secondary": (120, 115, 110),
        "empty_color": (232, 228, 224),
        "grid_color": (220, 215, 210),
        "accent": (180, 130, 100),
    },
    "minimal": {
        "name": "Minimal",
        "bg_color": (15, 15, 20),
        "header_color": (15, 15, 20),
        "text_color": (255, 255, 255),
        "text_secondary": (140, 140, 145),
        "empty_color": (22, 22, 28),
        "grid_color": (40, 40, 50),
        "accent": (255, 100, 100),
    },
}

# Accepted setting values. Images need at least one pixel row per hour.
MAX_IMAGE_SIDE = 16384
MIN_IMAGE_HEIGHT = 24
FONT_SIZE_RANGE = (4, 256)


# Cell colors by display status
STATUS_COLORS = {
    "overdue": (231, 76, 60),
    "complete": (46, 204, 113),
    "pending": (52, 120, 219),
}


def get_data_dir(override: Optional[Union[str, Path]] = None) -> Path:
    """Data directory: explicit override, then $DAYKEEPER_HOME, then the default"""
    raw = override or os.environ.get(DATA_DIR_ENV) or DEFAULT_DATA_DIR
    return Path(raw).expanduser()


def tasks_file(data_dir: Path) -> Path:
    return data_dir / TASKS_FILENAME


def output_dir(data_dir: Path) -> Path:
    return data_dir / OUTPUT_DIRNAME


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _valid_filename(value) -> bool:
    """A bare file name whose only placeholder is {timestamp}"""
    if not isinstance(value, str):
        return False
    try:
        name = value.format(timestamp="x")
    except (KeyError, IndexError, ValueError, AttributeError):
        return False
    return bool(name) and name not in (".", "..") and Path(name).name == name


_SETTING_CHECKS = {
    "theme": lambda v: isinstance(v, str),
    "width": lambda v: _is_int(v) and 1 <= v <= MAX_IMAGE_SIDE,
    "height": lambda v: _is_int(v) and MIN_IMAGE_HEIGHT <= v <= MAX_IMAGE_SIDE,
    "font": lambda v: v is None or isinstance(v, str),
    "font_size": lambda v: _is_int(v) and FONT_SIZE_RANGE[0] <= v <= FONT_SIZE_RANGE[1],
    "separator": lambda v: isinstance(v, str),
    "git_history": lambda v: isinstance(v, bool),
    "output_filename": _valid_filename,
}


def load_settings(data_dir: Path) -> Dict:
    """Load user settings from file, merged over the defaults"""
    settings_file = data_dir / SETTINGS_FILENAME
    settings = DEFAULT_SETTINGS.copy()
    if not settings_file.exists():
        return settings

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            saved = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", settings_file, e)
        return settings

    if not isinstance(saved, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", settings_file)
        return settings

    unknown = set(saved) - set(DEFAULT_SETTINGS)
    if unknown:
        logger.debug("Unknown settings ignored: %s", ", ".join(sorted(unknown)))

    for key, value in saved.items():
        if key not in DEFAULT_SETTINGS:
            continue
        if not _SETTING_CHECKS[key](value):
            logger.warning("Invalid setting %s=%r in %s, using %r",
                           key, value, settings_file, DEFAULT_SETTINGS[key])
            continue
        settings[key] = value
    return settings


def save_settings(data_dir: Path, settings: Dict) -> None:
    """Save user settings to file"""
    data_dir.mkdir(parents=True, exist_ok=True)
    with open(data_dir / SETTINGS_FILENAME, 'w', encoding='utf-8') as f:
        json.dump(settings, f, indent=2)


def get_theme(theme_name: str) -> Dict:
    """Get theme colors by name"""
    if theme_name not in THEMES:
        logger.warning("Unknown theme %r, using dark", theme_name)
    return THEMES.get(theme_name, THEMES["dark"])
