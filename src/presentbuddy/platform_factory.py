"""Actuator and window helper factory for PresentBuddy.

Per-OS branching lives here only. The actuator is chosen once and held for
the process lifetime.

Usage:
    actuator = get_actuator()            # platform default, cached
    actuator = get_actuator("linux")     # forced, not cached

    helper = build_window_helper()       # None when no backend is usable
"""

import logging

from .config import config
from .core.window_helper import WindowManagerHelper
from .platform_utils import IS_WAYLAND, IS_X11, Platform, current_platform
from .platforms.base import BaseActuator

logger = logging.getLogger(__name__)

_cached_actuator: BaseActuator | None = None


def _create_window_backend(platform: Platform):
    """Instantiate the native window backend, or None when it cannot load.

    Backends import their native bindings at module import, so a missing
    binding shows up here as ImportError.
    """
    try:
        if platform is Platform.MACOS:
            from .platforms.window_backend_macos import MacWindowBackend

            return MacWindowBackend()
        if platform is Platform.WINDOWS:
            from .platforms.window_backend_win32 import Win32WindowBackend

            return Win32WindowBackend()
        if IS_WAYLAND and not IS_X11:
            logger.warning("Wayland session: window helper unavailable")
            return None
        from .platforms.window_backend_x11 import X11WindowBackend

        return X11WindowBackend()
    except ImportError as e:
        logger.warning(f"Window backend unavailable: {e}")
        return None


def build_window_helper(
    platform: Platform | None = None,
    prompt_on_denied: bool | None = None,
) -> WindowManagerHelper | None:
    """Build the permission-gated window helper for platform.

    Args:
        platform: Target platform (defaults to the running one)
        prompt_on_denied: Trigger the OS consent prompt on a missing
            permission (defaults to not PRESENTBUDDY_HELPER_NO_DIALOG)
    """
    backend = _create_window_backend(platform or current_platform())
    if backend is None:
        return None
    if prompt_on_denied is None:
        prompt_on_denied = not config.HELPER_NO_DIALOG
    return WindowManagerHelper(backend, prompt_on_denied=prompt_on_denied)


def get_actuator(force_type: str | None = None) -> BaseActuator:
    """Get the OS actuator for the current platform.

    Args:
        force_type: Force a specific actuator for testing.
                    Options: "linux", "macos", "windows"

    Returns:
        Cached actuator for the running platform, or a fresh forced one.
    """
    global _cached_actuator

    if _cached_actuator is not None and force_type is None:
        return _cached_actuator

    if force_type is not None:
        platform = Platform(force_type)
    else:
        platform = current_platform()

    helper = build_window_helper(platform)

    actuator: BaseActuator
    if platform is Platform.MACOS:
        from .platforms.macos import MacActuator

        actuator = MacActuator(window_helper=helper)
    elif platform is Platform.WINDOWS:
        from .platforms.windows import WindowsActuator

        actuator = WindowsActuator(window_helper=helper)
    else:
        from .platforms.linux import LinuxActuator

        actuator = LinuxActuator(window_helper=helper)

    logger.info("Using %s actuator (window helper: %s)", actuator.name, helper is not None)

    if force_type is None:
        _cached_actuator = actuator
    return actuator

