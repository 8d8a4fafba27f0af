"""PresentBuddy - toggle desktop presentation aids and restore them exactly"""

__version__ = "1.0.0"
__description__ = "Toggle desktop icons, windows, wallpaper, audio and notifications for presenting"

__all__ = ["main", "PresentBuddy", "__version__"]


def __getattr__(name: str):
    """Lazy import to avoid triggering pynput initialization on package import.

    This allows importing presentbuddy.core or presentbuddy.config without
    requiring a display, which is needed for CI/headless environments.
    """
    if name == "PresentBuddy":
        from .main import PresentBuddy

        return PresentBuddy
    if name == "main":
        from .main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
