"""Error taxonomy shared by actuators, the window helper and the orchestrator.

Every OS or process level failure is caught at the actuator boundary and
re-raised as one of these. The dispatcher and the window helper turn them
into OperationResult values, so nothing crosses the orchestrator unhandled.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Counts


class ErrorKind(Enum):
    PERMISSION_DENIED = "PermissionDenied"
    OPERATION_FAILED = "OperationFailed"
    APP_NOT_FOUND = "AppNotFound"
    NO_WINDOWS_FOUND = "NoWindowsFound"
    HELPER_TIMEOUT = "HelperTimeout"
    HELPER_MISSING = "HelperMissing"
    UNSUPPORTED_DESKTOP_ENVIRONMENT = "UnsupportedDesktopEnvironment"


class PresentBuddyError(Exception):
    """Base class for all typed failures."""

    kind: ErrorKind = ErrorKind.OPERATION_FAILED

    def __init__(self, detail: str, counts: Counts | None = None):
        super().__init__(detail)
        self.detail = detail
        self.counts = counts


class PermissionDenied(PresentBuddyError):
    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, detail: str | None = None, counts: Counts | None = None):
        super().__init__(
            detail
            or "Accessibility permissions are required. Enable them in "
            "System Settings > Privacy & Security > Accessibility.",
            counts,
        )


class OperationFailed(PresentBuddyError):
    kind = ErrorKind.OPERATION_FAILED


class AppNotFound(PresentBuddyError):
    kind = ErrorKind.APP_NOT_FOUND

    def __init__(self, name: str):
        super().__init__(f"Application '{name}' not found.")
        self.name = name


class NoWindowsFound(PresentBuddyError):
    kind = ErrorKind.NO_WINDOWS_FOUND

    def __init__(
        self,
        detail: str = "No windows found to perform the operation.",
        counts: Counts | None = None,
    ):
        super().__init__(detail, counts)


class HelperTimeout(PresentBuddyError):
    kind = ErrorKind.HELPER_TIMEOUT


class HelperMissing(PresentBuddyError):
    kind = ErrorKind.HELPER_MISSING


class UnsupportedDesktopEnvironment(PresentBuddyError):
    kind = ErrorKind.UNSUPPORTED_DESKTOP_ENVIRONMENT

    def __init__(self, desktop: str, action: str):
        super().__init__(f"Desktop environment '{desktop}' not supported for {action}")
        self.desktop = desktop
