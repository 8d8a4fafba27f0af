"""Configuration for PresentBuddy"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).lower() in ("1", "true", "yes")


class Config:
    """Environment-driven configuration"""

    # Paths
    DATA_DIR = Path(
        os.getenv("PRESENTBUDDY_DATA_DIR", str(Path.home() / ".config" / "presentbuddy"))
    ).expanduser()
    STORAGE_FILE = DATA_DIR / "storage.json"
    LOG_DIR = DATA_DIR / "logs"

    # Wallpaper used when no explicit path or saved setting is given
    DEFAULT_WALLPAPER = os.getenv("PRESENTBUDDY_DEFAULT_WALLPAPER", "")

    # Timeouts (seconds) for shell commands and the window helper
    COMMAND_TIMEOUT = _env_float("PRESENTBUDDY_COMMAND_TIMEOUT", 5.0)
    HELPER_TIMEOUT = _env_float("PRESENTBUDDY_HELPER_TIMEOUT", 8.0)

    # Global toggle-all hotkey, pynput GlobalHotKeys syntax
    HOTKEY = os.getenv("PRESENTBUDDY_HOTKEY", "<ctrl>+<alt>+p")

    # Leave presentation mode from any state
    EXIT_HOTKEY = os.getenv("PRESENTBUDDY_EXIT_HOTKEY", "<ctrl>+<alt>+0")

    # Per-feature toggles, keyed by Feature value; empty disables a binding
    FEATURE_HOTKEYS = {
        "icons": os.getenv("PRESENTBUDDY_HOTKEY_ICONS", "<ctrl>+<alt>+1"),
        "windows": os.getenv("PRESENTBUDDY_HOTKEY_WINDOWS", "<ctrl>+<alt>+2"),
        "wallpaper": os.getenv("PRESENTBUDDY_HOTKEY_WALLPAPER", "<ctrl>+<alt>+3"),
        "audio": os.getenv("PRESENTBUDDY_HOTKEY_AUDIO", "<ctrl>+<alt>+4"),
        "notifications": os.getenv("PRESENTBUDDY_HOTKEY_NOTIFICATIONS", "<ctrl>+<alt>+5"),
    }

    # Suppress the helper's own permission dialog (caller shows its UI)
    HELPER_NO_DIALOG = _env_bool("PRESENTBUDDY_HELPER_NO_DIALOG")

    # Upper bound for the shutdown restore so exit is never blocked
    SHUTDOWN_TIMEOUT = _env_float("PRESENTBUDDY_SHUTDOWN_TIMEOUT", 15.0)

    DEBUG = _env_bool("DEBUG")

    @classmethod
    def create_dirs(cls):
        cls.DATA_DIR.mkdir(parents=True, exist_ok=True)
        cls.LOG_DIR.mkdir(parents=True, exist_ok=True)


config = Config()
