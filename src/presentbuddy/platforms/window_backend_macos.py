"""macOS window backend for PresentBuddy

Uses the Accessibility API through PyObjC:
- AppKit NSWorkspace for regular running applications
- ApplicationServices AXUIElement for window enumeration and minimization
"""

import logging

from AppKit import (
    NSApplicationActivateIgnoringOtherApps,
    NSApplicationActivationPolicyRegular,
    NSWorkspace,
)
from ApplicationServices import (
    AXIsProcessTrusted,
    AXIsProcessTrustedWithOptions,
    AXUIElementCopyAttributeValue,
    AXUIElementCreateApplication,
    AXUIElementSetAttributeValue,
    kAXErrorAPIDisabled,
    kAXErrorCannotComplete,
    kAXErrorNoValue,
    kAXErrorSuccess,
    kAXMinimizedAttribute,
    kAXTrustedCheckOptionPrompt,
    kAXWindowsAttribute,
)

from ..core.errors import OperationFailed, PermissionDenied

logger = logging.getLogger(__name__)

# AX error codes that mean the process is not (or no longer) trusted
_PERMISSION_ERRORS = (kAXErrorAPIDisabled, kAXErrorNoValue)


class MacWindowBackend:
    """WindowBackend over NSRunningApplication and AXUIElement."""

    requires_permission = True

    def is_trusted(self) -> bool:
        return bool(AXIsProcessTrusted())

    def request_trust(self) -> None:
        # Shows the system consent dialog and returns immediately
        AXIsProcessTrustedWithOptions({kAXTrustedCheckOptionPrompt: True})

    def list_apps(self) -> list:
        apps = NSWorkspace.sharedWorkspace().runningApplications()
        return [a for a in apps if a.activationPolicy() == NSApplicationActivationPolicyRegular]

    def app_name(self, app) -> str:
        return app.localizedName() or ""

    def list_windows(self, app) -> list:
        element = AXUIElementCreateApplication(app.processIdentifier())
        err, windows = AXUIElementCopyAttributeValue(element, kAXWindowsAttribute, None)
        if err == kAXErrorSuccess:
            return list(windows or [])
        if err in _PERMISSION_ERRORS:
            raise PermissionDenied(f"Accessibility permission denied for app: {self.app_name(app)}")
        if err == kAXErrorCannotComplete:
            # App is busy or has no accessible windows yet
            return []
        raise OperationFailed(f"Failed to read windows of {self.app_name(app)}: AX error {err}")

    def is_minimized(self, window) -> bool:
        err, value = AXUIElementCopyAttributeValue(window, kAXMinimizedAttribute, None)
        if err != kAXErrorSuccess:
            raise OperationFailed(f"Failed to read minimized state: AX error {err}")
        return bool(value)

    def set_minimized(self, window, minimized: bool) -> None:
        err = AXUIElementSetAttributeValue(window, kAXMinimizedAttribute, minimized)
        if err == kAXErrorSuccess:
            return
        if err in _PERMISSION_ERRORS:
            raise PermissionDenied()
        raise OperationFailed(f"AX error {err}")

    def activate(self, app) -> None:
        app.activateWithOptions_(NSApplicationActivateIgnoringOtherApps)

    def hide(self, app) -> None:
        app.hide()

    def is_hidden(self, app) -> bool:
        return bool(app.isHidden())
