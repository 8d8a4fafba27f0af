"""Windows window backend for PresentBuddy

Enumerates top-level application windows with pywin32 and groups them by
owning process (psutil for the process name). Win32 has no accessibility
gate, so the permission is always granted.
"""

from dataclasses import dataclass, field
import logging

import psutil
import pywintypes
import win32con
import win32gui
import win32process

from ..core.errors import OperationFailed, PermissionDenied

logger = logging.getLogger(__name__)

# Win32 ERROR_ACCESS_DENIED (UIPI blocks elevated windows)
_ACCESS_DENIED = 5


@dataclass
class Win32App:
    name: str
    pid: int
    windows: list[int] = field(default_factory=list)


def _is_app_window(hwnd: int) -> bool:
    if not win32gui.IsWindowVisible(hwnd) or not win32gui.GetWindowText(hwnd):
        return False
    if win32gui.GetWindow(hwnd, win32con.GW_OWNER):
        return False
    style = win32gui.GetWindowLong(hwnd, win32con.GWL_STYLE)
    ex_style = win32gui.GetWindowLong(hwnd, win32con.GWL_EXSTYLE)
    if ex_style & win32con.WS_EX_TOOLWINDOW or ex_style & win32con.WS_EX_NOACTIVATE:
        return False
    if style & win32con.WS_CHILD:
        return False
    return bool(style & win32con.WS_CAPTION or style & win32con.WS_SYSMENU)


def _process_name(pid: int) -> str:
    try:
        name = psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return "Unknown"
    return name[:-4] if name.lower().endswith(".exe") else name


class Win32WindowBackend:
    """WindowBackend over EnumWindows/ShowWindow."""

    requires_permission = False

    def is_trusted(self) -> bool:
        return True

    def request_trust(self) -> None:
        pass

    def list_apps(self) -> list[Win32App]:
        apps: dict[int, Win32App] = {}

        def enum_windows_callback(hwnd, _):
            try:
                if not _is_app_window(hwnd):
                    return True
                _, pid = win32process.GetWindowThreadProcessId(hwnd)
            except pywintypes.error:
                return True
            if pid == 0:
                return True
            app = apps.get(pid)
            if app is None:
                app = apps[pid] = Win32App(name=_process_name(pid), pid=pid)
            app.windows.append(hwnd)
            return True

        win32gui.EnumWindows(enum_windows_callback, None)
        return list(apps.values())

    def app_name(self, app: Win32App) -> str:
        return app.name

    def list_windows(self, app: Win32App) -> list[int]:
        return [hwnd for hwnd in app.windows if win32gui.IsWindow(hwnd)]

    def is_minimized(self, hwnd: int) -> bool:
        return bool(win32gui.IsIconic(hwnd))

    def set_minimized(self, hwnd: int, minimized: bool) -> None:
        command = win32con.SW_MINIMIZE if minimized else win32con.SW_RESTORE
        try:
            win32gui.ShowWindow(hwnd, command)
        except pywintypes.error as e:
            if e.winerror == _ACCESS_DENIED:
                raise PermissionDenied(f"Access denied for window {hwnd}") from e
            raise OperationFailed(f"ShowWindow failed: {e.strerror}") from e
        if bool(win32gui.IsIconic(hwnd)) != minimized:
            raise OperationFailed(f"Window {hwnd} did not change state")

    def activate(self, app: Win32App) -> None:
        for hwnd in app.windows:
            try:
                win32gui.SetForegroundWindow(hwnd)
                return
            except pywintypes.error as e:
                logger.debug("SetForegroundWindow(%s) failed: %s", hwnd, e)

    def hide(self, app: Win32App) -> None:
        for hwnd in app.windows:
            self.set_minimized(hwnd, True)

    def is_hidden(self, app: Win32App) -> bool:
        return all(win32gui.IsIconic(hwnd) for hwnd in self.list_windows(app))
