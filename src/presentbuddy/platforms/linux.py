"""Linux actuator for PresentBuddy

Commands depend on the desktop environment (XDG_CURRENT_DESKTOP):
- GNOME: gsettings
- KDE: qdbus / kreadconfig5
- XFCE: xfconf-query
- anything else: feh for wallpaper, dunst for notifications

Audio goes through PulseAudio/PipeWire (pactl) with ALSA (amixer) as fallback.
"""

from __future__ import annotations

import logging
from pathlib import Path
import re
import shlex
from urllib.parse import unquote, urlparse

from ..adapters.shell import has_cmd
from ..core.errors import HelperMissing, PresentBuddyError, UnsupportedDesktopEnvironment
from ..core.models import OperationResult, clamp_volume
from ..platform_utils import DesktopEnvironment, detect_desktop_environment
from .base import BaseActuator

logger = logging.getLogger(__name__)

GNOME_BACKGROUND = "org.gnome.desktop.background"
GNOME_NOTIFICATIONS = "org.gnome.desktop.notifications"
XFCE_LAST_IMAGE = "/backdrop/screen0/monitor0/workspace0/last-image"
KDE_SET_WALLPAPER = (
    "var allDesktops = desktops();"
    "for (i=0;i<allDesktops.length;i++) {{"
    "d = allDesktops[i];"
    "d.wallpaperPlugin = 'org.kde.image';"
    "d.currentConfigGroup = Array('Wallpaper', 'org.kde.image', 'General');"
    "d.writeConfig('Image', 'file://{path}')}}"
)

_PACTL_VOLUME = re.compile(r"(\d+)%")
_AMIXER_VOLUME = re.compile(r"\[(\d+)%\]")


def _js_string_body(text: str) -> str:
    """Escape text for a single-quoted JavaScript string literal."""
    return text.replace("\\", "\\\\").replace("'", "\\'")


def _strip_file_uri(value: str) -> str | None:
    value = value.strip().strip("'\"")
    if not value:
        return None
    if value.startswith("file://"):
        return unquote(urlparse(value).path)
    return value


class LinuxActuator(BaseActuator):
    name = "linux"

    def __init__(self, window_helper=None, runner=None, desktop: DesktopEnvironment | None = None):
        super().__init__(window_helper, runner)
        self.desktop = desktop or detect_desktop_environment()
        logger.debug("Linux desktop environment: %s", self.desktop.value)

    # Desktop icons

    async def hide_icons(self) -> None:
        await self._set_icons_visible(False)

    async def show_icons(self) -> None:
        await self._set_icons_visible(True)

    async def _set_icons_visible(self, visible: bool) -> None:
        if self.desktop is DesktopEnvironment.GNOME:
            await self.run(
                "gsettings", "set", GNOME_BACKGROUND, "show-desktop-icons", str(visible).lower()
            )
        elif self.desktop is DesktopEnvironment.XFCE:
            # 0 = no icons, 2 = file/launcher icons
            await self.run(
                "xfconf-query", "-c", "xfce4-desktop", "-p", "/desktop-icons/style",
                "-s", "2" if visible else "0",
            )
        else:
            raise UnsupportedDesktopEnvironment(self.desktop.value, "desktop icons")

    # Windows

    async def minimize_windows(self) -> OperationResult:
        try:
            return await self.call_helper("minimize_all")
        except HelperMissing:
            logger.info("Window helper unavailable, falling back to wmctrl")
        await self.run("wmctrl", "-k", "on")
        return OperationResult.ok()

    async def restore_windows(self) -> OperationResult:
        try:
            return await self.call_helper("restore_all")
        except HelperMissing:
            logger.info("Window helper unavailable, falling back to wmctrl")
        await self.run("wmctrl", "-k", "off")
        return OperationResult.ok()

    # Wallpaper

    async def read_wallpaper(self) -> str | None:
        if self.desktop is DesktopEnvironment.GNOME:
            result = await self.run("gsettings", "get", GNOME_BACKGROUND, "picture-uri")
            return _strip_file_uri(result.stdout)
        if self.desktop is DesktopEnvironment.KDE:
            result = await self.run(
                "kreadconfig5", "--file", "plasma-org.kde.plasma.desktop-appletsrc",
                "--group", "Containments", "--group", "1", "--group", "Wallpaper",
                "--group", "org.kde.image", "--group", "General", "--key", "Image",
            )
            return _strip_file_uri(result.stdout)
        if self.desktop is DesktopEnvironment.XFCE:
            result = await self.run("xfconf-query", "-c", "xfce4-desktop", "-p", XFCE_LAST_IMAGE)
            return _strip_file_uri(result.stdout)
        return self._read_fehbg()

    def _read_fehbg(self) -> str | None:
        fehbg = Path.home() / ".fehbg"
        try:
            parts = shlex.split(fehbg.read_text(encoding="utf-8").splitlines()[-1])
        except (OSError, IndexError, ValueError):
            return None
        return parts[-1] if parts and not parts[-1].startswith("-") else None

    async def change_wallpaper(self, path: str) -> None:
        if self.desktop is DesktopEnvironment.GNOME:
            uri = Path(path).absolute().as_uri()
            # picture-uri-dark is left untouched: only picture-uri is captured
            await self.run("gsettings", "set", GNOME_BACKGROUND, "picture-uri", uri)
        elif self.desktop is DesktopEnvironment.KDE:
            await self.run(
                "qdbus", "org.kde.plasmashell", "/PlasmaShell",
                "org.kde.PlasmaShell.evaluateScript",
                KDE_SET_WALLPAPER.format(path=_js_string_body(path)),
            )
        elif self.desktop is DesktopEnvironment.XFCE:
            await self.run("xfconf-query", "-c", "xfce4-desktop", "-p", XFCE_LAST_IMAGE, "-s", path)
        elif has_cmd("feh"):
            await self.run("feh", "--bg-scale", path)
        else:
            raise UnsupportedDesktopEnvironment(self.desktop.value, "wallpaper")

    # Audio

    async def read_volume(self) -> int | None:
        try:
            result = await self.run("pactl", "get-sink-volume", "@DEFAULT_SINK@")
            match = _PACTL_VOLUME.search(result.stdout)
        except PresentBuddyError as e:
            logger.debug("pactl unavailable (%s), trying amixer", e.detail)
            result = await self.run("amixer", "get", "Master")
            match = _AMIXER_VOLUME.search(result.stdout)
        return clamp_volume(int(match.group(1))) if match else None

    async def mute_audio(self) -> None:
        try:
            await self.run("pactl", "set-sink-mute", "@DEFAULT_SINK@", "1")
        except PresentBuddyError as e:
            logger.debug("pactl mute failed (%s), trying amixer", e.detail)
            await self.run("amixer", "set", "Master", "mute")

    async def unmute_audio(self, volume_level: int | None) -> None:
        try:
            await self.run("pactl", "set-sink-mute", "@DEFAULT_SINK@", "0")
            if volume_level is not None:
                await self.run("pactl", "set-sink-volume", "@DEFAULT_SINK@", f"{volume_level}%")
        except PresentBuddyError as e:
            logger.debug("pactl unmute failed (%s), trying amixer", e.detail)
            await self.run("amixer", "set", "Master", "unmute")
            if volume_level is not None:
                await self.run("amixer", "set", "Master", f"{volume_level}%")

    # Notifications

    async def disable_notifications(self) -> None:
        await self._set_notifications(False)

    async def enable_notifications(self) -> None:
        await self._set_notifications(True)

    async def _set_notifications(self, enabled: bool) -> None:
        if self.desktop is DesktopEnvironment.GNOME:
            await self.run("gsettings", "set", GNOME_NOTIFICATIONS, "show-banners", str(enabled).lower())
            return
        if not (has_cmd("dunstctl") or has_cmd("dunst")):
            raise UnsupportedDesktopEnvironment(self.desktop.value, "notifications")
        try:
            await self.run("dunstctl", "set-paused", "false" if enabled else "true")
        except PresentBuddyError as e:
            logger.debug("dunstctl failed (%s), signalling dunst", e.detail)
            await self.run("killall", "-SIGUSR2" if enabled else "-SIGUSR1", "dunst")
