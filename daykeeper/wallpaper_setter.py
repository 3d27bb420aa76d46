"""
Wallpaper Setter - points the desktop background at a rendered image
"""
import ctypes
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


# Windows API constants
SPI_SETDESKWALLPAPER = 0x0014
SPIF_UPDATEINIFILE = 0x01
SPIF_SENDCHANGE = 0x02


def _windows(abs_path: str) -> bool:
    result = ctypes.windll.user32.SystemParametersInfoW(
        SPI_SETDESKWALLPAPER,
        0,
        abs_path,
        SPIF_UPDATEINIFILE | SPIF_SENDCHANGE
    )
    return bool(result)


def _command_for(abs_path: str, platform: str) -> Optional[List[str]]:
    """Shell command that sets the wallpaper on this platform, if one is known"""
    if platform == "darwin":
        script = f'tell application "System Events" to tell every desktop to set picture to "{abs_path}"'
        return ["osascript", "-e", script]
    if platform.startswith("linux"):
        desktop = os.environ.get("XDG_CURRENT_DESKTOP", "").lower()
        if "gnome" in desktop or "unity" in desktop or "cinnamon" in desktop:
            return ["gsettings", "set", "org.gnome.desktop.background",
                    "picture-uri", Path(abs_path).as_uri()]
        return ["feh", "--bg-fill", abs_path]
    return None


def set_wallpaper(image_path: str, platform: Optional[str] = None) -> bool:
    """
    Set the desktop wallpaper

    Args:
        image_path: Path to the image file
        platform: sys.platform value to act for, defaults to the running one

    Returns:
        True if successful, False otherwise
    """
    platform = platform or sys.platform
    abs_path = str(Path(image_path).absolute())

    if not os.path.exists(abs_path):
        logger.error("Wallpaper file not found: %s", abs_path)
        return False

    if platform == "win32":
        try:
            return _windows(abs_path)
        except (AttributeError, OSError) as e:
            logger.error("Error setting wallpaper: %s", e)
            return False

    command = _command_for(abs_path, platform)
    if command is None:
        logger.error("Don't know how to set the wallpaper on %s", platform)
        return False

    try:
        result = subprocess.run(command, stdout=subprocess.PIPE, stderr=subprocess.PIPE,
                                text=True, check=False)
    except OSError as e:
        logger.error("Error setting wallpaper with %s: %s", command[0], e)
        return False

    if result.returncode != 0:
        logger.error("%s failed: %s", command[0], result.stderr.strip())
        return False
    logger.info("Wallpaper set to %s", abs_path)
    return True
