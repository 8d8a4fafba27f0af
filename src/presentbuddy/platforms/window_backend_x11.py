"""X11 window backend for PresentBuddy

Drives EWMH-compliant window managers with python-xlib:
- _NET_CLIENT_LIST for managed top-level windows
- _NET_WM_STATE_HIDDEN for the minimized state
- WM_CHANGE_STATE / _NET_ACTIVE_WINDOW client messages to iconify and restore

X11 has no accessibility gate, so the permission is always granted.
"""

from dataclasses import dataclass, field
import logging

from Xlib import X, Xatom, display as xdisplay, error as xerror
from Xlib.protocol import event as xevent

from ..core.errors import OperationFailed

logger = logging.getLogger(__name__)

ICONIC_STATE = 3


@dataclass
class X11App:
    name: str
    pid: int | None
    windows: list = field(default_factory=list)


class X11WindowBackend:
    """WindowBackend grouping client windows by owning process."""

    requires_permission = False

    def __init__(self, display_name: str | None = None):
        self._display_name = display_name
        self._display = None

    def _get_display(self):
        """Get or create X11 display connection (lazy init)."""
        if self._display is None:
            try:
                self._display = xdisplay.Display(self._display_name)
            except (xerror.DisplayError, xerror.ConnectionClosedError) as e:
                raise OperationFailed(f"Cannot open X display: {e}") from e
        return self._display

    def _atom(self, name: str) -> int:
        return self._get_display().intern_atom(name)

    def is_trusted(self) -> bool:
        return True

    def request_trust(self) -> None:
        pass

    def list_apps(self) -> list[X11App]:
        d = self._get_display()
        root = d.screen().root
        prop = root.get_full_property(self._atom("_NET_CLIENT_LIST"), Xatom.WINDOW)
        if prop is None:
            raise OperationFailed("Window manager does not expose _NET_CLIENT_LIST")

        apps: dict[object, X11App] = {}
        for window_id in prop.value:
            window = d.create_resource_object("window", window_id)
            try:
                if not self._is_normal(window):
                    continue
                pid = self._get_window_pid(window)
                name = self._get_wm_class(window)
            except xerror.XError:
                # Window went away during the scan
                continue
            key = pid if pid is not None else name
            app = apps.get(key)
            if app is None:
                app = apps[key] = X11App(name=name or _process_name(pid), pid=pid)
            app.windows.append(window)
        return list(apps.values())

    def app_name(self, app: X11App) -> str:
        return app.name

    def list_windows(self, app: X11App) -> list:
        return list(app.windows)

    def is_minimized(self, window) -> bool:
        prop = window.get_full_property(self._atom("_NET_WM_STATE"), Xatom.ATOM)
        if not prop:
            return False
        return self._atom("_NET_WM_STATE_HIDDEN") in prop.value

    def set_minimized(self, window, minimized: bool) -> None:
        try:
            if minimized:
                self._send(window, "WM_CHANGE_STATE", [ICONIC_STATE, 0, 0, 0, 0])
            else:
                # Source indication 2: request comes from a pager
                self._send(window, "_NET_ACTIVE_WINDOW", [2, X.CurrentTime, 0, 0, 0])
            self._get_display().sync()
        except xerror.XError as e:
            raise OperationFailed(f"X11 request failed: {e}") from e

    def activate(self, app: X11App) -> None:
        if app.windows:
            self.set_minimized(app.windows[0], False)

    def hide(self, app: X11App) -> None:
        # No application-level hide under X11; iconify every window instead
        for window in app.windows:
            self.set_minimized(window, True)

    def is_hidden(self, app: X11App) -> bool:
        return all(self.is_minimized(w) for w in app.windows)

    def _send(self, window, message: str, data: list[int]) -> None:
        d = self._get_display()
        root = d.screen().root
        event = xevent.ClientMessage(
            window=window,
            client_type=self._atom(message),
            data=(32, data),
        )
        root.send_event(event, event_mask=X.SubstructureRedirectMask | X.SubstructureNotifyMask)

    def _is_normal(self, window) -> bool:
        prop = window.get_full_property(self._atom("_NET_WM_WINDOW_TYPE"), Xatom.ATOM)
        if not prop or not prop.value:
            return True
        return self._atom("_NET_WM_WINDOW_TYPE_NORMAL") in prop.value

    def _get_wm_class(self, window) -> str:
        wm_class = window.get_wm_class()
        if wm_class:
            # (instance, class); the class name is the stable one
            return wm_class[1] if len(wm_class) > 1 else wm_class[0]
        return ""

    def _get_window_pid(self, window) -> int | None:
        prop = window.get_full_property(self._atom("_NET_WM_PID"), Xatom.CARDINAL)
        if prop and prop.value:
            return int(prop.value[0])
        return None


def _process_name(pid: int | None) -> str:
    if pid is None:
        return "Unknown"
    import psutil

    try:
        return psutil.Process(pid).name()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return "Unknown"
