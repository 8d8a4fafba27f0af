"""Platform detection and cross-platform utilities for PresentBuddy"""

import os
import platform
import sys
from enum import Enum

# Platform detection
IS_WINDOWS = sys.platform == "win32"
IS_LINUX = sys.platform.startswith("linux")
IS_MACOS = sys.platform == "darwin"

# Display system detection (Linux-specific)
IS_X11 = False
IS_WAYLAND = False

if IS_LINUX:
    session_type = os.environ.get("XDG_SESSION_TYPE", "").lower()
    IS_X11 = session_type == "x11" or os.environ.get("DISPLAY") is not None
    IS_WAYLAND = session_type == "wayland"


class Platform(Enum):
    """Operating system families with a dedicated actuator."""

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"


class DesktopEnvironment(Enum):
    """Linux desktop environments with environment-specific commands."""

    GNOME = "gnome"
    KDE = "kde"
    XFCE = "xfce"
    OTHER = "other"


def current_platform() -> Platform:
    """Map the running interpreter to a platform family (Linux for other Unixes)."""
    if IS_WINDOWS:
        return Platform.WINDOWS
    if IS_MACOS:
        return Platform.MACOS
    return Platform.LINUX


def detect_desktop_environment(environ=None) -> DesktopEnvironment:
    """Detect the Linux desktop environment from XDG_CURRENT_DESKTOP.

    The variable may hold a colon-separated list (e.g. "ubuntu:GNOME").
    """
    env = os.environ if environ is None else environ
    value = env.get("XDG_CURRENT_DESKTOP", "").lower()
    # Cinnamon ships its own org.cinnamon.desktop schemas
    if "gnome" in value or "unity" in value:
        return DesktopEnvironment.GNOME
    if "kde" in value or "plasma" in value:
        return DesktopEnvironment.KDE
    if "xfce" in value:
        return DesktopEnvironment.XFCE
    return DesktopEnvironment.OTHER


def get_platform_info() -> dict:
    """Get detailed platform information."""
    info = {
        "system": platform.system(),
        "release": platform.release(),
        "machine": platform.machine(),
        "python_version": platform.python_version(),
        "platform": current_platform().value,
        "is_x11": IS_X11,
        "is_wayland": IS_WAYLAND,
    }
    if IS_LINUX:
        info["desktop_environment"] = detect_desktop_environment().value
    return info


def print_platform_info():
    """Print platform information for debugging."""
    info = get_platform_info()
    print(f"Platform: {info['system']} {info['release']}")
    print(f"Python: {info['python_version']}")
    if IS_LINUX:
        if IS_X11:
            print("Display: X11")
        elif IS_WAYLAND:
            print("Display: Wayland")
        else:
            print("Display: Unknown")
        print(f"Desktop: {info['desktop_environment']}")
