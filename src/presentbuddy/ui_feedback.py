"""Desktop notifications and permission remediation for PresentBuddy"""

import logging
import subprocess

from .platform_utils import IS_LINUX, IS_MACOS, IS_WINDOWS

logger = logging.getLogger(__name__)

ACCESSIBILITY_SETTINGS_URL = (
    "x-apple.systempreferences:com.apple.preference.security?Privacy_Accessibility"
)


def _applescript_quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def notify(title: str, message: str, timeout: int = 2):
    """Show desktop notification"""
    if IS_LINUX:
        args = ["notify-send", "-t", str(timeout * 1000), title, message]
    elif IS_MACOS:
        script = (
            f"display notification {_applescript_quote(message)} "
            f"with title {_applescript_quote(title)}"
        )
        args = ["osascript", "-e", script]
    else:
        print(f"{title}: {message}")
        return

    try:
        subprocess.run(args, timeout=2, capture_output=True)
    except (OSError, subprocess.SubprocessError) as e:
        # Notifications are optional
        logger.debug("Notification failed: %s", e)


def open_privacy_settings():
    """Open the OS panel where accessibility access is granted."""
    if IS_MACOS:
        args = ["open", ACCESSIBILITY_SETTINGS_URL]
    elif IS_WINDOWS:
        args = ["cmd", "/c", "start", "", "ms-settings:privacy"]
    else:
        return

    try:
        subprocess.run(args, timeout=5, capture_output=True)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Could not open privacy settings: %s", e)
