"""macOS actuator for PresentBuddy

Finder/NotificationCenter preferences through `defaults`, wallpaper and
volume through AppleScript (osascript). Windows go through the
Accessibility-backed window helper only.
"""

from __future__ import annotations

import logging

from ..core.errors import OperationFailed
from .base import BaseActuator

logger = logging.getLogger(__name__)

NOTIFICATION_CENTER_DOMAIN = "com.apple.notificationcenterui"


def _applescript_string(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


class MacActuator(BaseActuator):
    name = "macos"

    async def osascript(self, script: str) -> str:
        result = await self.run("osascript", "-e", script)
        return result.stdout.strip()

    async def hide_icons(self) -> None:
        await self._set_finder_desktop(False)

    async def show_icons(self) -> None:
        await self._set_finder_desktop(True)

    async def _set_finder_desktop(self, visible: bool) -> None:
        await self.run(
            "defaults", "write", "com.apple.finder", "CreateDesktop", "-bool", str(visible).lower()
        )
        # Finder relaunches automatically; a missing process is fine
        await self.run("killall", "Finder", check=False)

    async def read_wallpaper(self) -> str | None:
        path = await self.osascript(
            'tell application "System Events" to get picture of current desktop'
        )
        return path or None

    async def change_wallpaper(self, path: str) -> None:
        await self.osascript(
            'tell application "System Events" to set picture of current desktop to '
            + _applescript_string(path)
        )

    async def read_volume(self) -> int | None:
        output = await self.osascript("output volume of (get volume settings)")
        try:
            return int(output)
        except ValueError:
            # "missing value" when the output device has no volume control
            logger.debug("Unreadable output volume: %r", output)
            return None

    async def mute_audio(self) -> None:
        await self.osascript("set volume output muted true")

    async def unmute_audio(self, volume_level: int | None) -> None:
        await self.osascript("set volume output muted false")
        if volume_level is not None:
            await self.osascript(f"set volume output volume {int(volume_level)}")

    async def disable_notifications(self) -> None:
        await self._set_do_not_disturb(True)

    async def enable_notifications(self) -> None:
        await self._set_do_not_disturb(False)

    async def _set_do_not_disturb(self, enabled: bool) -> None:
        try:
            await self.run(
                "defaults", "-currentHost", "write", NOTIFICATION_CENTER_DOMAIN,
                "doNotDisturb", "-bool", str(enabled).lower(),
            )
        except OperationFailed as e:
            raise OperationFailed(f"Failed to update Do Not Disturb: {e.detail}") from e
        await self.run("killall", "NotificationCenter", check=False)
