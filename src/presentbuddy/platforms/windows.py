"""Windows actuator for PresentBuddy

- Desktop icons, wallpaper and toast notifications via the HKCU registry
  (reg.exe) plus SystemParametersInfoW for the wallpaper
- Audio via Core Audio (pycaw), nircmd as fallback
- Windows via the Win32 window helper, Shell.Application as fallback
"""

from __future__ import annotations

import asyncio
import ctypes
import logging

from ..core.errors import HelperMissing, OperationFailed, PresentBuddyError
from ..core.models import OperationResult, clamp_volume
from .base import BaseActuator

logger = logging.getLogger(__name__)

EXPLORER_ADVANCED = r"HKCU\Software\Microsoft\Windows\CurrentVersion\Explorer\Advanced"
DESKTOP_KEY = r"HKCU\Control Panel\Desktop"
PUSH_NOTIFICATIONS = r"HKCU\Software\Microsoft\Windows\CurrentVersion\PushNotifications"

SPI_SETDESKWALLPAPER = 0x0014
SPIF_UPDATEINIFILE = 0x01
SPIF_SENDCHANGE = 0x02

# nircmd expresses volume as 0..65535
NIRCMD_VOLUME_SCALE = 655


def _endpoint_volume():
    from comtypes import CLSCTX_ALL
    from pycaw.pycaw import AudioUtilities, IAudioEndpointVolume

    devices = AudioUtilities.GetSpeakers()
    interface = devices.Activate(IAudioEndpointVolume._iid_, CLSCTX_ALL, None)
    return interface.QueryInterface(IAudioEndpointVolume)


def _core_audio_read() -> int:
    return clamp_volume(_endpoint_volume().GetMasterVolumeLevelScalar() * 100)


def _core_audio_set(muted: bool, volume_level: int | None = None) -> None:
    volume = _endpoint_volume()
    if volume_level is not None:
        volume.SetMasterVolumeLevelScalar(volume_level / 100.0, None)
    volume.SetMute(int(muted), None)


def _set_wallpaper(path: str) -> None:
    ok = ctypes.windll.user32.SystemParametersInfoW(
        SPI_SETDESKWALLPAPER, 0, path, SPIF_UPDATEINIFILE | SPIF_SENDCHANGE
    )
    if not ok:
        raise OperationFailed(f"SystemParametersInfoW rejected wallpaper: {path}")


class WindowsActuator(BaseActuator):
    name = "windows"

    async def reg_add(self, key: str, value: str, data: int) -> None:
        await self.run("reg", "add", key, "/v", value, "/t", "REG_DWORD", "/d", str(data), "/f")

    async def restart_explorer(self) -> None:
        await self.run("taskkill", "/f", "/im", "explorer.exe", check=False)
        await self.run("cmd", "/c", "start", "", "explorer.exe")

    # Desktop icons

    async def hide_icons(self) -> None:
        await self.reg_add(EXPLORER_ADVANCED, "HideIcons", 1)
        await self.restart_explorer()

    async def show_icons(self) -> None:
        await self.reg_add(EXPLORER_ADVANCED, "HideIcons", 0)
        await self.restart_explorer()

    # Windows

    async def minimize_windows(self) -> OperationResult:
        try:
            return await self.call_helper("minimize_all")
        except HelperMissing:
            logger.info("Window helper unavailable, falling back to Shell.MinimizeAll")
        await self._shell_application("MinimizeAll")
        return OperationResult.ok()

    async def restore_windows(self) -> OperationResult:
        try:
            return await self.call_helper("restore_all")
        except HelperMissing:
            logger.info("Window helper unavailable, falling back to Shell.UndoMinimizeALL")
        await self._shell_application("UndoMinimizeALL")
        return OperationResult.ok()

    async def _shell_application(self, method: str) -> None:
        await self.run(
            "powershell", "-NoProfile", "-Command",
            f"(New-Object -ComObject Shell.Application).{method}()",
        )

    # Wallpaper

    async def read_wallpaper(self) -> str | None:
        result = await self.run("reg", "query", DESKTOP_KEY, "/v", "Wallpaper")
        for line in result.stdout.splitlines():
            parts = line.split("REG_SZ", 1)
            if len(parts) == 2 and parts[0].strip() == "Wallpaper":
                return parts[1].strip() or None
        return None

    async def change_wallpaper(self, path: str) -> None:
        await asyncio.to_thread(_set_wallpaper, path)

    # Audio

    async def read_volume(self) -> int | None:
        try:
            return await asyncio.to_thread(_core_audio_read)
        except Exception as e:
            # nircmd cannot read the level
            logger.warning("Core Audio volume read failed: %s", e)
            return None

    async def mute_audio(self) -> None:
        try:
            await asyncio.to_thread(_core_audio_set, True)
        except Exception as e:
            logger.debug("Core Audio mute failed (%s), trying nircmd", e)
            await self._nircmd("mutesysvolume", "1")

    async def unmute_audio(self, volume_level: int | None) -> None:
        try:
            await asyncio.to_thread(_core_audio_set, False, volume_level)
        except Exception as e:
            logger.debug("Core Audio unmute failed (%s), trying nircmd", e)
            await self._nircmd("mutesysvolume", "0")
            if volume_level is not None:
                level = str(volume_level * NIRCMD_VOLUME_SCALE)
                await self._nircmd("setsysvolume", level)

    async def _nircmd(self, *args: str) -> None:
        try:
            await self.run("nircmd.exe", *args)
        except PresentBuddyError as e:
            raise OperationFailed(f"Audio control unavailable: {e.detail}") from e

    # Notifications

    async def disable_notifications(self) -> None:
        await self.reg_add(PUSH_NOTIFICATIONS, "ToastEnabled", 0)

    async def enable_notifications(self) -> None:
        await self.reg_add(PUSH_NOTIFICATIONS, "ToastEnabled", 1)
